"""
OSC over UDP transport

Connects a UDP socket to the session server and moves OSC datagrams between
it and a pair of memory streams. Socket errors on the receive side (for
example ``ECONNREFUSED`` once the server has gone away) are forwarded on the
read stream so the session can record them.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from types import TracebackType

import anyio
import anyio.abc
import anyio.lowlevel
from anyio.streams.memory import MemoryObjectReceiveStream, MemoryObjectSendStream

from nsm.client._transport import TransportStreams
from nsm.shared._exception_utils import open_task_group
from nsm.shared.exceptions import NsmConnectionError
from nsm.shared.message import Message, decode_datagram, encode_message

logger = logging.getLogger(__name__)


class UdpTransport:
    """OSC transport to an NSM server listening on ``host:port``."""

    def __init__(self, host: str, port: int) -> None:
        self.host = host
        self.port = port
        self._reader_running = False
        self._writer_running = False
        self._cm: AbstractAsyncContextManager[TransportStreams] | None = None

    @property
    def connected(self) -> bool:
        return self._reader_running and self._writer_running

    @asynccontextmanager
    async def _connect(self) -> AsyncIterator[TransportStreams]:
        read_stream: MemoryObjectReceiveStream[Message | Exception]
        read_stream_writer: MemoryObjectSendStream[Message | Exception]

        write_stream: MemoryObjectSendStream[Message]
        write_stream_reader: MemoryObjectReceiveStream[Message]

        try:
            sock = await anyio.create_connected_udp_socket(self.host, self.port)
        except OSError as e:
            raise NsmConnectionError(f"Could not connect to {self.host}:{self.port}: {e}") from e

        read_stream_writer, read_stream = anyio.create_memory_object_stream[Message | Exception](0)
        write_stream, write_stream_reader = anyio.create_memory_object_stream[Message](0)

        async def udp_reader(sock: anyio.abc.ConnectedUDPSocket) -> None:
            self._reader_running = True
            try:
                async with read_stream_writer:
                    while True:
                        try:
                            datagram = await sock.receive()
                        except (OSError, anyio.BrokenResourceError) as e:
                            logger.error(f"Error receiving from {self.host}:{self.port}: {e!r}")
                            await read_stream_writer.send(e)
                            return
                        for message in decode_datagram(datagram):
                            logger.debug(f"<<< {message}")
                            await read_stream_writer.send(message)
            except (anyio.ClosedResourceError, anyio.BrokenResourceError):
                await anyio.lowlevel.checkpoint()
            finally:
                self._reader_running = False

        async def udp_writer(sock: anyio.abc.ConnectedUDPSocket) -> None:
            self._writer_running = True
            try:
                async with write_stream_reader:
                    async for message in write_stream_reader:
                        logger.debug(f">>> {message}")
                        await sock.send(encode_message(message))
            except (anyio.ClosedResourceError, anyio.BrokenResourceError):
                await anyio.lowlevel.checkpoint()
            except OSError as e:
                logger.error(f"Error sending to {self.host}:{self.port}: {e}")
                try:
                    await read_stream_writer.send(e)
                except (anyio.ClosedResourceError, anyio.BrokenResourceError):
                    pass
            finally:
                self._writer_running = False

        async with sock, open_task_group() as tg:
            tg.start_soon(udp_reader, sock)
            tg.start_soon(udp_writer, sock)
            try:
                yield read_stream, write_stream
            finally:
                tg.cancel_scope.cancel()
                await read_stream.aclose()
                await write_stream.aclose()

    async def __aenter__(self) -> TransportStreams:
        self._cm = self._connect()
        return await self._cm.__aenter__()

    async def __aexit__(
        self, exc_type: type[BaseException] | None, exc_val: BaseException | None, exc_tb: TracebackType | None
    ) -> bool | None:
        if self._cm is None:
            return None
        cm, self._cm = self._cm, None
        return await cm.__aexit__(exc_type, exc_val, exc_tb)
