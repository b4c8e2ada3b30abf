"""Unit tests for faults and the registered exception set."""
import pytest

from src.jsonrpc.faults import (
    Fault,
    InternalError,
    InvalidParams,
    InvalidRequest,
    MethodNotFound,
    ParseError,
    RegisteredExceptions,
    ServerError,
)
from src.jsonrpc.models import ErrorCode
from src.utils.errors import RegistrationError


class QuotaExceeded(Exception):
    pass


@pytest.mark.parametrize("fault_class, code, message", [
    (ParseError, -32700, "Parse error"),
    (InvalidRequest, -32600, "Invalid Request"),
    (MethodNotFound, -32601, "Method not found"),
    (InvalidParams, -32602, "Invalid params"),
    (InternalError, -32603, "Internal error"),
    (ServerError, -32000, "Server error"),
])
def test_builtin_faults(fault_class, code, message):
    fault = fault_class()

    assert isinstance(fault, Fault)
    assert fault.to_dict() == {"code": code, "message": message}


def test_fault_data_is_included_when_present():
    fault = MethodNotFound(data="foo.bar")

    assert fault.to_dict() == {"code": -32601, "message": "Method not found", "data": "foo.bar"}


def test_fault_envelope():
    envelope = InvalidRequest("Missing method name").envelope(12)

    assert envelope.to_dict() == {
        "jsonrpc": "2.0",
        "id": 12,
        "error": {"code": -32600, "message": "Missing method name"},
    }


def test_fault_envelope_keeps_null_id():
    assert ParseError().envelope().to_dict()["id"] is None


def test_code_override_does_not_leak_to_class():
    ServerError(code=-32050)

    assert ServerError().code == -32000


def test_hydrate():
    cause = QuotaExceeded("quota of 10 reached")

    fault = Fault.hydrate(cause)

    assert fault.code == ErrorCode.SERVER_ERROR
    assert fault.message == "quota of 10 reached"
    assert fault.data == {"type": "QuotaExceeded"}
    assert fault.__cause__ is cause


def test_hydrate_without_message():
    assert Fault.hydrate(QuotaExceeded()).message == "QuotaExceeded"


class TestRegisteredExceptions:
    """Test the exception allow-list."""

    def test_register_single(self):
        exceptions = RegisteredExceptions()
        exceptions.register(QuotaExceeded)

        assert QuotaExceeded in exceptions
        assert exceptions.lookup(QuotaExceeded()) == ErrorCode.SERVER_ERROR

    def test_register_list_deduplicates(self):
        exceptions = RegisteredExceptions()
        exceptions.register([QuotaExceeded, KeyError, QuotaExceeded])
        exceptions.register(KeyError)

        assert len(exceptions) == 2

    def test_default_code(self):
        exceptions = RegisteredExceptions(default_code=-32099)
        exceptions.register(QuotaExceeded)

        assert exceptions.hydrate(QuotaExceeded("x")).code == -32099

    def test_unregistered_is_not_hydrated(self):
        exceptions = RegisteredExceptions()
        exceptions.register(KeyError)

        assert exceptions.hydrate(ValueError("x")) is None

    @pytest.mark.parametrize("bad", ["QuotaExceeded", 42, [QuotaExceeded, "KeyError"], int])
    def test_register_rejects_non_exceptions(self, bad):
        exceptions = RegisteredExceptions()

        with pytest.raises(RegistrationError):
            exceptions.register(bad)

        assert len(exceptions) == 0

    def test_register_rejects_non_int_code(self):
        with pytest.raises(RegistrationError):
            RegisteredExceptions().register(KeyError, code="-32000")
