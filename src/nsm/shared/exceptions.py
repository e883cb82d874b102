"""NSM error codes as exceptions, and the failures raised while connecting."""

from nsm.types import ErrorCode, ErrorData


class NsmError(Exception):
    """Exception carrying an NSM error code and message.

    Raise it from an open or save handler to have the code sent verbatim in
    the ``/error`` reply. Any other exception raised by a handler is reported
    with ``ErrorCode.GENERAL``.

    Attributes:
        error: The ErrorData sent to, or received from, the peer
    """

    error: ErrorData

    def __init__(self, error: ErrorData):
        super().__init__(error.message)
        self.error = error

    @classmethod
    def from_code(cls, code: int, message: str | None = None) -> "NsmError":
        """Build an error from a code, defaulting the message to its description."""
        if message is None:
            try:
                message = ErrorCode(code).description
            except ValueError:
                message = f"Unknown error {code}"
        return cls(ErrorData(code=int(code), message=message))

    @property
    def code(self) -> int:
        return self.error.code


class NsmClientError(Exception):
    """Base class for failures raised by the client while connecting."""


class ConfigurationError(NsmClientError, ValueError):
    """The client is misconfigured; raised before any network activity."""


class NsmConnectionError(NsmClientError, ConnectionError):
    """The transport to the session server could not be used."""


class ConnectionTimeout(NsmConnectionError, TimeoutError):
    """The transport did not become ready in time."""


class HandshakeTimeout(NsmClientError, TimeoutError):
    """The server did not answer the announce message in time."""


class HandshakeRejected(NsmError, NsmClientError):
    """The server answered the announce message with an error."""

    def __str__(self) -> str:
        return f"server replied with error {self.error.code}: {self.error.message}"


def error_data_from_exception(exc: Exception) -> ErrorData:
    """Map a handler failure onto the error reply sent back to the server."""
    if isinstance(exc, NsmError):
        return exc.error
    return ErrorData(code=int(ErrorCode.GENERAL), message=str(exc) or type(exc).__name__)
