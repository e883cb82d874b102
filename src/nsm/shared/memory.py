"""In-memory transport, used for tests and for embedding a client in-process."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from types import TracebackType

import anyio
from anyio.streams.memory import MemoryObjectReceiveStream, MemoryObjectSendStream

from nsm.shared.message import Message

ClientStreams = tuple[MemoryObjectReceiveStream[Message | Exception], MemoryObjectSendStream[Message]]
ServerStreams = tuple[MemoryObjectReceiveStream[Message], MemoryObjectSendStream[Message | Exception]]


@asynccontextmanager
async def create_client_server_memory_streams() -> AsyncIterator[tuple[ClientStreams, ServerStreams]]:
    """Create a pair of bidirectional memory streams for a client and a server.

    The server side may push an ``Exception`` to simulate a lost connection.
    """
    server_to_client_send, server_to_client_receive = anyio.create_memory_object_stream[Message | Exception](1)
    client_to_server_send, client_to_server_receive = anyio.create_memory_object_stream[Message](1)

    client_streams = (server_to_client_receive, client_to_server_send)
    server_streams = (client_to_server_receive, server_to_client_send)

    async with (
        server_to_client_receive,
        client_to_server_send,
        client_to_server_receive,
        server_to_client_send,
    ):
        yield client_streams, server_streams


class MemoryTransport:
    """Transport over already-created memory streams.

    ``connected`` reports ``ready`` until the transport is closed, so tests can
    hold the transport back from becoming ready.
    """

    def __init__(self, streams: ClientStreams, *, ready: bool = True) -> None:
        self._read_stream, self._write_stream = streams
        self.ready = ready
        self.closed = False

    @property
    def connected(self) -> bool:
        return self.ready and not self.closed

    async def __aenter__(self) -> ClientStreams:
        return self._read_stream, self._write_stream

    async def __aexit__(
        self, exc_type: type[BaseException] | None, exc_val: BaseException | None, exc_tb: TracebackType | None
    ) -> None:
        self.closed = True
        await self._write_stream.aclose()
        await self._read_stream.aclose()
