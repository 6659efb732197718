"""
Turns any failure into the one-line message shown to the operator.
"""
import json
from collections.abc import Mapping

from sqlalchemy.exc import DBAPIError


class ProcedureError(Exception):
    """A stored procedure call failed; the message is already human-readable."""

    def __init__(self, procedure: str, message: str):
        self.procedure = procedure
        self.message = message
        super().__init__(message)


def _field(e, name):
    if isinstance(e, Mapping):
        return e.get(name)
    return getattr(e, name, None)


def format_error(e) -> str:
    """
    Message first, then code/status/details/hint, then a JSON dump of
    whatever the error object carries.
    """
    if e is None:
        return "Unknown error"
    if isinstance(e, str):
        return e

    # Driver errors: the useful text lives on the wrapped exception
    if isinstance(e, DBAPIError) and e.orig is not None:
        msg = str(e.orig).strip()
        if msg:
            return msg

    message = _field(e, "message")
    if message:
        return str(message)
    if isinstance(e, BaseException) and str(e).strip():
        return str(e).strip()

    description = _field(e, "error_description")
    if description:
        return str(description)

    bits = []
    for name in ("code", "status", "details", "hint"):
        value = _field(e, name)
        if value:
            bits.append(f"{name}: {value}")
    if bits:
        return " • ".join(bits)

    payload = dict(e) if isinstance(e, Mapping) else getattr(e, "__dict__", None)
    if payload:
        return json.dumps(payload, default=str)
    return "Unknown error"
