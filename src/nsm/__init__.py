"""An asyncio/trio client for the [Non Session Manager](https://new-session-manager.jackaudio.org/api/index.html) (NSM) protocol.

A session server such as `nsmd` launches the application with `NSM_URL` set.
The client announces itself, then answers the server's open and save commands
through the handlers it was configured with.

## Example

```python
import anyio
from nsm import ClientCapability, ClientOptions, ClientSession, ClientState, connect


async def open_project(project_path: str, display_name: str, client_id: str) -> None:
    ...


async def save_project() -> None:
    ...


async def main() -> None:
    options = ClientOptions(
        capabilities=(ClientCapability.DIRTY,),
        open_callback=open_project,
        save_callback=save_project,
    )
    async with connect(ClientSession("My App", options)) as client:
        await client.set_dirty(True)
        while client.state is ClientState.CONNECTED:
            await anyio.sleep(1)


anyio.run(main)
```
"""

from .client.connect import connect
from .client.options import ClientOptions
from .client.session import ClientSession
from .client.settings import NsmSettings
from .shared.exceptions import (
    ConfigurationError,
    ConnectionTimeout,
    HandshakeRejected,
    HandshakeTimeout,
    NsmClientError,
    NsmConnectionError,
    NsmError,
)
from .types import (
    ClientCapability,
    ClientState,
    ErrorCode,
    ErrorData,
    ServerCapability,
)

__all__ = [
    "ClientCapability",
    "ClientOptions",
    "ClientSession",
    "ClientState",
    "ConfigurationError",
    "ConnectionTimeout",
    "ErrorCode",
    "ErrorData",
    "HandshakeRejected",
    "HandshakeTimeout",
    "NsmClientError",
    "NsmConnectionError",
    "NsmError",
    "NsmSettings",
    "ServerCapability",
    "connect",
]
