"""Tests for the NSM exception classes and the handler failure mapping."""

import pytest

from nsm.shared.exceptions import (
    ConfigurationError,
    ConnectionTimeout,
    HandshakeRejected,
    HandshakeTimeout,
    NsmClientError,
    NsmConnectionError,
    NsmError,
    error_data_from_exception,
)
from nsm.types import ErrorCode, ErrorData


def test_nsm_error_carries_error_data():
    error = NsmError(ErrorData(code=ErrorCode.UNSAVED_CHANGES, message="Save first"))

    assert error.code == -7
    assert str(error) == "Save first"


def test_from_code_defaults_message_to_description():
    error = NsmError.from_code(ErrorCode.NO_SUCH_FILE)

    assert error.error == ErrorData(code=-5, message="No such file")


def test_from_code_with_unknown_code():
    error = NsmError.from_code(-42)

    assert error.code == -42
    assert error.error.message == "Unknown error -42"


def test_protocol_failure_keeps_its_code():
    error = error_data_from_exception(NsmError.from_code(ErrorCode.BAD_PROJECT, "corrupt session file"))

    assert error == ErrorData(code=-9, message="corrupt session file")


@pytest.mark.parametrize(
    ("exc", "message"),
    [
        (OSError("disk full"), "disk full"),
        (ValueError("bad value"), "bad value"),
        (RuntimeError(), "RuntimeError"),
    ],
)
def test_generic_failure_uses_general_code(exc: Exception, message: str):
    assert error_data_from_exception(exc) == ErrorData(code=ErrorCode.GENERAL, message=message)


def test_handshake_rejected_message():
    error = HandshakeRejected(ErrorData(code=-2, message="incompatible"))

    assert str(error) == "server replied with error -2: incompatible"
    assert error.code == ErrorCode.INCOMPATIBLE_API


def test_client_failures_share_a_base_class():
    for cls in (ConfigurationError, NsmConnectionError, ConnectionTimeout, HandshakeTimeout, HandshakeRejected):
        assert issubclass(cls, NsmClientError)
    assert issubclass(ConnectionTimeout, TimeoutError)
    assert issubclass(HandshakeTimeout, TimeoutError)
    assert issubclass(NsmConnectionError, ConnectionError)
    assert issubclass(ConfigurationError, ValueError)
