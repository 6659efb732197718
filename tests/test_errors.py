"""
Tests for error normalization.
"""

from types import SimpleNamespace

from sqlalchemy.exc import IntegrityError

from app.utils.errors import ProcedureError, format_error


class TestFormatError:

    def test_string_passes_through(self):
        assert format_error("boom") == "boom"

    def test_none(self):
        assert format_error(None) == "Unknown error"

    def test_exception_message(self):
        assert format_error(ValueError("bad amount")) == "bad amount"

    def test_procedure_error(self):
        assert format_error(ProcedureError("confirm_order", "insufficient stock")) == "insufficient stock"

    def test_driver_error_uses_wrapped_message(self):
        exc = IntegrityError("INSERT ...", {}, Exception("UNIQUE constraint failed: customers.phone"))
        assert format_error(exc) == "UNIQUE constraint failed: customers.phone"

    def test_message_field(self):
        assert format_error({"message": "row violates check"}) == "row violates check"

    def test_error_description(self):
        assert format_error(SimpleNamespace(error_description="token expired")) == "token expired"

    def test_code_status_details_hint(self):
        err = {"code": "23505", "details": "Key (phone) exists", "hint": "use another"}
        assert format_error(err) == "code: 23505 • details: Key (phone) exists • hint: use another"

    def test_json_dump_fallback(self):
        assert format_error({"foo": 1}) == '{"foo": 1}'

    def test_empty_object(self):
        assert format_error(SimpleNamespace()) == "Unknown error"
