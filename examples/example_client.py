"""Minimal NSM client.

Run it from an NSM session manager (which sets NSM_URL). On open it creates the
project directory, on save it writes a small text file into it. It exits on
SIGINT/SIGTERM, or when the connection to the server is lost.
"""

import signal
import sys
from pathlib import Path

import anyio

from nsm import ClientCapability, ClientOptions, ClientSession, ClientState, NsmClientError, NsmSettings, connect
from nsm.utilities.logging import configure_logging


class ExampleApp:
    def __init__(self) -> None:
        self.save_path: Path | None = None
        self.client_id = ""

    async def open_project(self, project_path: str, display_name: str, client_id: str) -> None:
        self.save_path = Path(project_path)
        self.client_id = client_id
        await anyio.Path(self.save_path).mkdir(parents=True, exist_ok=True)

    async def save_project(self) -> None:
        if self.save_path is None:
            raise RuntimeError("no project open")
        target = anyio.Path(self.save_path / "test_save_file.txt")
        await target.write_text(f"Hello, World!\nClientID: {self.client_id}\n")


async def watch_signals(scope: anyio.CancelScope) -> None:
    with anyio.open_signal_receiver(signal.SIGINT, signal.SIGTERM) as signals:
        async for _ in signals:
            scope.cancel()
            return


async def main() -> int:
    settings = NsmSettings()
    configure_logging(settings.log_level)

    app = ExampleApp()
    options = ClientOptions(
        capabilities=(ClientCapability.SWITCH,),
        open_callback=app.open_project,
        save_callback=app.save_project,
    )
    try:
        async with connect(ClientSession("NSM Example Client", options), settings=settings) as client:
            async with anyio.create_task_group() as tg:
                tg.start_soon(watch_signals, tg.cancel_scope)
                while client.state is ClientState.CONNECTED:
                    await anyio.sleep(1)
                tg.cancel_scope.cancel()
            if client.state is ClientState.ERROR:
                print(f"ERROR: {client.last_error}", file=sys.stderr)
                return 1
    except NsmClientError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(anyio.run(main))
