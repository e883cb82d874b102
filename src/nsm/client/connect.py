"""Connection and announce handshake.

``connect()`` takes a configured ``ClientSession`` through
INITIALIZING -> CONNECTING -> CONNECTED:

1. validate the configuration
2. resolve the server address from ``NSM_URL``
3. open the transport
4. start the command router in the background
5. wait for the transport to become ready (``connect_timeout``)
6. send ``/nsm/server/announce``
7. wait for the server's reply (``announce_timeout``)

Each failure raises a distinct exception. The transport is closed and the
router stopped before the exception reaches the caller.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import AsyncExitStack, asynccontextmanager

import anyio

import nsm.types as types
from nsm.client._transport import Transport
from nsm.client.router import CommandRouter
from nsm.client.session import ClientSession
from nsm.client.settings import NsmSettings
from nsm.client.udp import UdpTransport
from nsm.shared._exception_utils import open_task_group
from nsm.shared.exceptions import ConnectionTimeout, HandshakeTimeout, NsmConnectionError
from nsm.shared.pending import AnnounceResult, PendingAnnounce

logger = logging.getLogger(__name__)


@asynccontextmanager
async def connect(
    client: ClientSession,
    *,
    settings: NsmSettings | None = None,
    transport: Transport | None = None,
) -> AsyncIterator[ClientSession]:
    """Connect ``client`` to the session server and perform the announce handshake.

    Args:
        client: A session in the INITIALIZING state
        settings: Timeouts and server address; read from the environment when omitted
        transport: Transport to use instead of OSC over UDP to ``NSM_URL``

    Yields:
        The connected client. The command router keeps dispatching server
        commands until the block exits.

    Raises:
        ConfigurationError: A mandatory handler is missing, or NSM_URL is missing or invalid
        NsmConnectionError: The transport could not be opened or was lost during the handshake
        ConnectionTimeout: The transport did not become ready in time
        HandshakeRejected: The server answered the announce message with an error
        HandshakeTimeout: The server did not answer the announce message in time
    """
    if client.state is not types.ClientState.INITIALIZING:
        raise RuntimeError(f"Client {client.name!r} has already been connected")

    client.options.validate()
    settings = settings or NsmSettings()
    if transport is None:
        host, port = settings.server_address()
        transport = UdpTransport(host, port)

    pending_announce = PendingAnnounce()
    router = CommandRouter(client, pending_announce)

    async with AsyncExitStack() as stack:
        try:
            read_stream, write_stream = await stack.enter_async_context(transport)
        except OSError as e:
            error = e if isinstance(e, NsmConnectionError) else NsmConnectionError(f"Could not open transport: {e}")
            client.record_failure(error)
            if error is e:
                raise
            raise error from e

        tg = await stack.enter_async_context(open_task_group())
        client.attach(write_stream)
        try:
            client.transition_to(types.ClientState.CONNECTING)
            tg.start_soon(router.run, read_stream)
            await _wait_until_connected(client, transport, settings)

            client.transition_to(types.ClientState.CONNECTED)
            try:
                await client.send_message(client.announce_message())
            except (anyio.ClosedResourceError, anyio.BrokenResourceError) as e:
                raise NsmConnectionError("Error sending announce message") from e

            result = await _wait_for_announce(pending_announce, settings)
        except Exception as e:
            client.record_failure(e)
            client.detach()
            tg.cancel_scope.cancel()
            raise

        client.complete_handshake(result)
        logger.info(
            f"Announced {client.name!r} to {result.server_name!r} "
            f"(capabilities: {', '.join(sorted(c.value for c in result.capabilities)) or 'none'})"
        )
        try:
            yield client
        finally:
            client.detach()
            tg.cancel_scope.cancel()


async def _wait_until_connected(client: ClientSession, transport: Transport, settings: NsmSettings) -> None:
    try:
        with anyio.fail_after(settings.connect_timeout):
            while True:
                if client.state is types.ClientState.ERROR:
                    raise NsmConnectionError(f"Connection lost: {client.last_error}")
                if transport.connected:
                    return
                await anyio.sleep(settings.poll_interval)
    except TimeoutError as e:
        raise ConnectionTimeout(f"connection failed: not ready after {settings.connect_timeout} seconds") from e


async def _wait_for_announce(pending_announce: PendingAnnounce, settings: NsmSettings) -> AnnounceResult:
    try:
        return await pending_announce.wait(settings.announce_timeout)
    except TimeoutError as e:
        raise HandshakeTimeout(
            f"timeout while waiting for server announce reply after {settings.announce_timeout} seconds"
        ) from e
