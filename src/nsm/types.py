"""Wire vocabulary of the NSM client protocol.

Addresses, capability tokens, error codes and the argument signatures the
client expects for every inbound address. Inbound arguments are validated in
strict mode: an OSC string never turns into an int and vice versa.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Annotated, Any, Final, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

API_VERSION_MAJOR: Final = 1
API_VERSION_MINOR: Final = 0

# Outbound to the server
SERVER_ANNOUNCE: Final = "/nsm/server/announce"
CLIENT_IS_DIRTY: Final = "/nsm/client/is_dirty"
CLIENT_IS_CLEAN: Final = "/nsm/client/is_clean"
CLIENT_PROGRESS: Final = "/nsm/client/progress"
CLIENT_MESSAGE: Final = "/nsm/client/message"
CLIENT_GUI_IS_SHOWN: Final = "/nsm/client/gui_is_shown"
CLIENT_GUI_IS_HIDDEN: Final = "/nsm/client/gui_is_hidden"

# Inbound from the server
CLIENT_OPEN: Final = "/nsm/client/open"
CLIENT_SAVE: Final = "/nsm/client/save"
CLIENT_SESSION_IS_LOADED: Final = "/nsm/client/session_is_loaded"
CLIENT_SHOW_OPTIONAL_GUI: Final = "/nsm/client/show_optional_gui"
CLIENT_HIDE_OPTIONAL_GUI: Final = "/nsm/client/hide_optional_gui"

# Both directions
REPLY: Final = "/reply"
ERROR: Final = "/error"

REPLY_OK: Final = "ok"

INT32_MIN: Final = -(2**31)
INT32_MAX: Final = 2**31 - 1

Int32 = Annotated[int, Field(ge=INT32_MIN, le=INT32_MAX)]


class ClientState(Enum):
    INITIALIZING = "initializing"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    ERROR = "error"


class ServerCapability(str, Enum):
    SERVER_CONTROL = "server_control"
    BROADCAST = "broadcast"
    OPTIONAL_GUI = "optional-gui"


class ClientCapability(str, Enum):
    SWITCH = "switch"
    DIRTY = "dirty"
    PROGRESS = "progress"
    MESSAGE = "message"
    OPTIONAL_GUI = "optional-gui"


class ErrorCode(IntEnum):
    """Error codes defined by the NSM API."""

    GENERAL = -1
    INCOMPATIBLE_API = -2
    BLACKLISTED = -3
    LAUNCH_FAILED = -4
    NO_SUCH_FILE = -5
    NO_SESSION_OPEN = -6
    UNSAVED_CHANGES = -7
    NOT_NOW = -8
    BAD_PROJECT = -9
    CREATE_FAILED = -10

    @property
    def description(self) -> str:
        return _ERROR_DESCRIPTIONS[self]


_ERROR_DESCRIPTIONS: dict[ErrorCode, str] = {
    ErrorCode.GENERAL: "General error",
    ErrorCode.INCOMPATIBLE_API: "Incompatible API version",
    ErrorCode.BLACKLISTED: "Client has been blacklisted",
    ErrorCode.LAUNCH_FAILED: "Launch failed",
    ErrorCode.NO_SUCH_FILE: "No such file",
    ErrorCode.NO_SESSION_OPEN: "No session is open",
    ErrorCode.UNSAVED_CHANGES: "Unsaved changes would be lost",
    ErrorCode.NOT_NOW: "Operation cannot be completed at this time",
    ErrorCode.BAD_PROJECT: "Project file is corrupt or invalid",
    ErrorCode.CREATE_FAILED: "Project could not be created",
}


class ErrorData(BaseModel):
    """Error information sent in, or received from, an ``/error`` message."""

    code: Int32
    """The error code, usually one of ``ErrorCode``."""

    message: str
    """A short description of the error."""


class Arguments(BaseModel):
    """Base class for the positional argument signature of an inbound address.

    Field order is the argument order on the wire.
    """

    model_config = ConfigDict(strict=True, frozen=True)


class NoArguments(Arguments):
    pass


class AnnounceReply(Arguments):
    replied_address: str
    message: str
    server_name: str
    capabilities: str


class ErrorReply(Arguments):
    replied_address: str
    code: Int32
    message: str


class OpenCommand(Arguments):
    project_path: str
    display_name: str
    client_id: str


ArgumentsT = TypeVar("ArgumentsT", bound=Arguments)


@dataclass(frozen=True)
class ShapeMismatch:
    """An inbound message whose arguments do not match the expected signature."""

    address: str
    expected: str
    received: tuple[Any, ...]
    reason: str


def decode_arguments(
    schema: type[ArgumentsT], address: str, args: Sequence[Any]
) -> ArgumentsT | ShapeMismatch:
    """Check ``args`` against ``schema`` by arity and by per-position type."""
    fields = list(schema.model_fields)
    if len(args) != len(fields):
        return ShapeMismatch(
            address=address,
            expected=schema.__name__,
            received=tuple(args),
            reason=f"expected {len(fields)} arguments, got {len(args)}",
        )
    try:
        return schema.model_validate(dict(zip(fields, args)))
    except ValidationError as e:
        return ShapeMismatch(
            address=address,
            expected=schema.__name__,
            received=tuple(args),
            reason=f"{e.error_count()} invalid argument(s)",
        )
