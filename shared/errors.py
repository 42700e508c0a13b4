"""
Tool Errors — Typed failures for a single tool invocation.

Every error is terminal for its invocation and never carries partial results.
The Dispatch Router renders these into the failure envelope; transports only
see the envelope.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Error taxonomy surfaced to callers."""
    UNKNOWN_TOOL = "unknown_tool"
    INVALID_ARGUMENT = "invalid_argument"
    ARITHMETIC_DOMAIN_ERROR = "arithmetic_domain_error"
    RETRIEVER_ERROR = "retriever_error"


class ToolError(Exception):
    """Base class for all invocation failures."""

    kind: ErrorKind = ErrorKind.INVALID_ARGUMENT

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_payload(self) -> dict[str, str]:
        return {"kind": self.kind.value, "message": self.message}


class UnknownToolError(ToolError):
    kind = ErrorKind.UNKNOWN_TOOL

    def __init__(self, tool_name: str):
        super().__init__(f"Unknown tool: '{sanitize_for_message(tool_name)}'")
        self.tool_name = tool_name


class InvalidArgumentError(ToolError):
    kind = ErrorKind.INVALID_ARGUMENT

    def __init__(self, field: str, message: str):
        super().__init__(f"Invalid {field}: {message}")
        self.field = field


class ArithmeticDomainError(ToolError):
    """A formula precondition (non-zero denominator, result within float range) does not hold."""
    kind = ErrorKind.ARITHMETIC_DOMAIN_ERROR


class RetrieverError(ToolError):
    """The vector-store dependency failed or is not configured."""
    kind = ErrorKind.RETRIEVER_ERROR


_MAX_ECHO_LENGTH = 50
_REPLACED_CHARS = set("\"'`\\<>")


def sanitize_for_message(value: object) -> str:
    """Make caller-supplied text safe to embed in an error message."""
    text = str(value)
    if len(text) > _MAX_ECHO_LENGTH:
        text = text[: _MAX_ECHO_LENGTH - 3] + "..."

    cleaned = []
    for ch in text:
        if ch in "\n\r\t":
            cleaned.append(" ")
        elif ch in _REPLACED_CHARS or not ch.isprintable():
            cleaned.append("?")
        else:
            cleaned.append(ch)
    return "".join(cleaned)
