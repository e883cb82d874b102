"""One-shot hand-off of the announce outcome from the receive loop."""

from dataclasses import dataclass

import anyio

from nsm.types import ServerCapability


@dataclass(frozen=True)
class AnnounceResult:
    server_name: str
    message: str
    capabilities: frozenset[ServerCapability]


class PendingAnnounce:
    """The outcome of the announce handshake, not known yet.

    The receive loop resolves or rejects it exactly once; later attempts are
    ignored. Any number of ``wait()`` calls see the same outcome.
    """

    def __init__(self) -> None:
        self._event = anyio.Event()
        self._result: AnnounceResult | None = None
        self._error: Exception | None = None

    @property
    def done(self) -> bool:
        return self._event.is_set()

    def resolve(self, result: AnnounceResult) -> bool:
        if self._event.is_set():
            return False
        self._result = result
        self._event.set()
        return True

    def reject(self, error: Exception) -> bool:
        if self._event.is_set():
            return False
        self._error = error
        self._event.set()
        return True

    async def wait(self, timeout: float | None = None) -> AnnounceResult:
        """Wait for the outcome.

        Raises:
            TimeoutError: If no outcome arrives within ``timeout`` seconds
            Exception: The error the handshake was rejected with
        """
        with anyio.fail_after(timeout):
            await self._event.wait()
        if self._error is not None:
            raise self._error
        assert self._result is not None
        return self._result
