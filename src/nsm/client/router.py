from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any

import anyio
from anyio.streams.memory import MemoryObjectReceiveStream

import nsm.types as types
from nsm.client.session import ClientSession
from nsm.shared.capabilities import decode_capabilities
from nsm.shared.exceptions import HandshakeRejected, NsmConnectionError, error_data_from_exception
from nsm.shared.message import Message
from nsm.shared.pending import AnnounceResult, PendingAnnounce

logger = logging.getLogger(__name__)

RouteHandler = Callable[[Any], Awaitable[None]]


class CommandRouter:
    """Receive loop that dispatches server messages to the session's handlers.

    Messages are handled one at a time, in arrival order. Messages with an
    unknown address or the wrong argument signature are dropped. An exception
    on the read stream, or the end of the stream, means the connection is
    lost: the session moves to ERROR and the loop ends.
    """

    def __init__(self, session: ClientSession, pending_announce: PendingAnnounce) -> None:
        self._session = session
        self._pending_announce = pending_announce
        self._routes: dict[str, tuple[type[types.Arguments], RouteHandler]] = {
            types.REPLY: (types.AnnounceReply, self._handle_reply),
            types.ERROR: (types.ErrorReply, self._handle_error),
            types.CLIENT_OPEN: (types.OpenCommand, self._handle_open),
            types.CLIENT_SAVE: (types.NoArguments, self._handle_save),
            types.CLIENT_SESSION_IS_LOADED: (types.NoArguments, self._handle_session_loaded),
            types.CLIENT_SHOW_OPTIONAL_GUI: (types.NoArguments, self._handle_show_gui),
            types.CLIENT_HIDE_OPTIONAL_GUI: (types.NoArguments, self._handle_hide_gui),
        }

    async def run(self, read_stream: MemoryObjectReceiveStream[Message | Exception]) -> None:
        try:
            async for message in read_stream:
                if isinstance(message, Exception):
                    self._connection_lost(message)
                    return
                await self.dispatch(message)
            self._connection_lost(NsmConnectionError("Connection closed by the server"))
        except (anyio.ClosedResourceError, anyio.BrokenResourceError, OSError) as e:
            self._connection_lost(e)
        finally:
            if not self._pending_announce.done:
                self._pending_announce.reject(NsmConnectionError("Connection closed before the handshake completed"))

    async def dispatch(self, message: Message) -> None:
        route = self._routes.get(message.address)
        if route is None:
            logger.debug(f"Dropping message for unhandled address {message.address}")
            return
        schema, handler = route
        arguments = types.decode_arguments(schema, message.address, message.args)
        if isinstance(arguments, types.ShapeMismatch):
            logger.debug(f"Dropping {arguments.address}: {arguments.reason}")
            return
        await handler(arguments)

    def _connection_lost(self, error: Exception) -> None:
        logger.error(f"Connection to the session server lost: {error}")
        self._session.record_failure(error)
        self._pending_announce.reject(NsmConnectionError(f"Connection lost: {error}"))

    async def _reply_ok(self, path: str) -> None:
        await self._session.send_message(Message(types.REPLY, (path, types.REPLY_OK)))

    async def _reply_error(self, path: str, exc: Exception) -> None:
        error = error_data_from_exception(exc)
        await self._session.send_message(Message(types.ERROR, (path, error.code, error.message)))

    async def _handle_reply(self, reply: types.AnnounceReply) -> None:
        if reply.replied_address != types.SERVER_ANNOUNCE:
            logger.debug(f"Ignoring reply to {reply.replied_address}")
            return
        result = AnnounceResult(
            server_name=reply.server_name,
            message=reply.message,
            capabilities=decode_capabilities(reply.capabilities),
        )
        if not self._pending_announce.resolve(result):
            logger.debug("Ignoring repeated announce reply")

    async def _handle_error(self, reply: types.ErrorReply) -> None:
        if reply.replied_address == types.SERVER_ANNOUNCE:
            error = HandshakeRejected(types.ErrorData(code=reply.code, message=reply.message))
            if not self._pending_announce.reject(error):
                logger.debug("Ignoring announce error after the handshake completed")
            return
        # TODO: hand errors for other addresses to the call that caused them
        logger.warning(f"Server reported error {reply.code} for {reply.replied_address}: {reply.message}")

    async def _handle_open(self, command: types.OpenCommand) -> None:
        callback = self._session.options.open_callback
        assert callback is not None
        logger.info(f"Opening {command.project_path!r} as {command.client_id}")
        try:
            await callback(command.project_path, command.display_name, command.client_id)
        except Exception as e:
            logger.exception(f"Open handler failed for {command.project_path!r}")
            await self._reply_error(types.CLIENT_OPEN, e)
        else:
            await self._reply_ok(types.CLIENT_OPEN)

    async def _handle_save(self, _: types.NoArguments) -> None:
        callback = self._session.options.save_callback
        assert callback is not None
        try:
            await callback()
        except Exception as e:
            logger.exception("Save handler failed")
            await self._reply_error(types.CLIENT_SAVE, e)
        else:
            await self._reply_ok(types.CLIENT_SAVE)

    async def _handle_session_loaded(self, _: types.NoArguments) -> None:
        callback = self._session.options.session_loaded_callback
        if callback is None:
            return
        try:
            await callback()
        except Exception:
            logger.exception("Session loaded handler failed")

    async def _handle_show_gui(self, _: types.NoArguments) -> None:
        await self._show_gui(True)

    async def _handle_hide_gui(self, _: types.NoArguments) -> None:
        await self._show_gui(False)

    async def _show_gui(self, visible: bool) -> None:
        callback = self._session.options.gui_callback
        if callback is None:
            return
        try:
            await callback(visible)
        except Exception:
            logger.exception("Optional GUI handler failed")
