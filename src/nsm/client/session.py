from __future__ import annotations

import logging
import os
import sys

import anyio
from anyio.streams.memory import MemoryObjectSendStream

import nsm.types as types
from nsm.client.options import ClientOptions
from nsm.shared.capabilities import encode_capabilities, has_client_capability, has_server_capability
from nsm.shared.exceptions import NsmConnectionError
from nsm.shared.message import Message
from nsm.shared.pending import AnnounceResult

logger = logging.getLogger(__name__)

_TRANSITIONS: dict[types.ClientState, frozenset[types.ClientState]] = {
    types.ClientState.INITIALIZING: frozenset({types.ClientState.CONNECTING, types.ClientState.ERROR}),
    types.ClientState.CONNECTING: frozenset({types.ClientState.CONNECTED, types.ClientState.ERROR}),
    types.ClientState.CONNECTED: frozenset({types.ClientState.ERROR}),
    types.ClientState.ERROR: frozenset(),
}


class ClientSession:
    """An NSM client as seen by the application that owns it.

    The session is created in the INITIALIZING state and is connected with
    ``nsm.connect()``. After the handshake it holds the server's name and
    capabilities. A lost connection moves it to ERROR, which the application
    is expected to poll for:

        async with connect(ClientSession("My App", options)) as client:
            while client.state is ClientState.CONNECTED:
                await anyio.sleep(1)
            print(client.last_error)
    """

    def __init__(
        self,
        name: str,
        options: ClientOptions,
        *,
        executable: str | None = None,
        pid: int | None = None,
    ) -> None:
        self._name = name
        self._options = options
        self._executable = executable if executable is not None else sys.argv[0]
        self._pid = pid if pid is not None else os.getpid()
        self._state = types.ClientState.INITIALIZING
        self._last_error: BaseException | None = None
        self._server_name = ""
        self._server_capabilities: frozenset[types.ServerCapability] = frozenset()
        self._write_stream: MemoryObjectSendStream[Message] | None = None

    @property
    def name(self) -> str:
        return self._name

    @property
    def options(self) -> ClientOptions:
        return self._options

    @property
    def state(self) -> types.ClientState:
        return self._state

    @property
    def last_error(self) -> BaseException | None:
        """The failure that moved the session to ERROR, if any."""
        return self._last_error

    @property
    def server_name(self) -> str:
        return self._server_name

    @property
    def server_capabilities(self) -> frozenset[types.ServerCapability]:
        return self._server_capabilities

    @property
    def client_capabilities(self) -> tuple[types.ClientCapability, ...]:
        return self._options.capabilities

    def has_capability(self, capability: types.ClientCapability) -> bool:
        return has_client_capability(self._options.capabilities, capability)

    def server_has_capability(self, capability: types.ServerCapability) -> bool:
        return has_server_capability(self._server_capabilities, capability)

    def transition_to(self, state: types.ClientState) -> None:
        if state not in _TRANSITIONS[self._state]:
            raise RuntimeError(f"Invalid state transition {self._state.name} -> {state.name}")
        logger.info(f"Client {self._name!r}: {self._state.value} -> {state.value}")
        self._state = state

    def record_failure(self, error: BaseException) -> None:
        """Move to ERROR, keeping the first failure that was recorded."""
        if self._state is types.ClientState.ERROR:
            logger.debug(f"Client {self._name!r} already failed, ignoring {error!r}")
            return
        self._last_error = error
        self.transition_to(types.ClientState.ERROR)

    def attach(self, write_stream: MemoryObjectSendStream[Message]) -> None:
        self._write_stream = write_stream

    def detach(self) -> None:
        self._write_stream = None

    def complete_handshake(self, result: AnnounceResult) -> None:
        self._server_name = result.server_name
        self._server_capabilities = result.capabilities

    def announce_message(self) -> Message:
        return Message(
            types.SERVER_ANNOUNCE,
            (
                self._name,
                encode_capabilities(self._options.capabilities),
                self._executable,
                types.API_VERSION_MAJOR,
                types.API_VERSION_MINOR,
                self._pid,
            ),
        )

    async def send_message(self, message: Message) -> None:
        if self._write_stream is None:
            raise RuntimeError(f"Client {self._name!r} is not connected")
        await self._write_stream.send(message)

    async def _notify(self, message: Message) -> None:
        """Send a notification; a lost connection is recorded, not raised."""
        if self._state is types.ClientState.ERROR:
            logger.debug(f"Client {self._name!r} has failed, not sending {message.address}")
            return
        try:
            await self.send_message(message)
        except (anyio.ClosedResourceError, anyio.BrokenResourceError) as e:
            logger.error(f"Connection to the session server lost while sending {message.address}")
            self.record_failure(NsmConnectionError(f"Connection lost while sending {message.address}: {e!r}"))

    async def set_dirty(self, dirty: bool) -> None:
        """Tell the server whether there are unsaved changes.

        Does nothing unless the dirty capability was declared.
        """
        if not self.has_capability(types.ClientCapability.DIRTY):
            return
        await self._notify(Message(types.CLIENT_IS_DIRTY if dirty else types.CLIENT_IS_CLEAN))

    async def set_progress(self, progress: float) -> None:
        """Report progress of a long open or save, from 0.0 to 1.0."""
        if not self.has_capability(types.ClientCapability.PROGRESS):
            return
        await self._notify(Message(types.CLIENT_PROGRESS, (min(max(float(progress), 0.0), 1.0),)))

    async def send_status_message(self, priority: int, message: str) -> None:
        """Send a status message for the server to display (priority 0 to 3)."""
        if not self.has_capability(types.ClientCapability.MESSAGE):
            return
        await self._notify(Message(types.CLIENT_MESSAGE, (priority, message)))

    async def set_gui_visible(self, visible: bool) -> None:
        """Report whether the optional GUI is currently shown."""
        if not self.has_capability(types.ClientCapability.OPTIONAL_GUI):
            return
        await self._notify(Message(types.CLIENT_GUI_IS_SHOWN if visible else types.CLIENT_GUI_IS_HIDDEN))
