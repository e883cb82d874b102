"""Transport protocol for NSM clients."""

from __future__ import annotations

from contextlib import AbstractAsyncContextManager
from typing import Protocol, runtime_checkable

from anyio.streams.memory import MemoryObjectReceiveStream, MemoryObjectSendStream

from nsm.shared.message import Message

TransportStreams = tuple[MemoryObjectReceiveStream[Message | Exception], MemoryObjectSendStream[Message]]


@runtime_checkable
class Transport(AbstractAsyncContextManager[TransportStreams], Protocol):
    """Protocol for NSM transports.

    A transport is an async context manager that yields read and write streams
    for communication with the session server. Exceptions delivered on the
    read stream mean the connection is lost. Leaving the context closes the
    connection.
    """

    @property
    def connected(self) -> bool:
        """Whether the connection is ready to carry messages."""
        ...
