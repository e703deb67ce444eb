"""
Error taxonomy shared by every mutation and listing entry point.

Storage errors never reach the caller as-is: `map_storage_error` turns a
PostgREST error into an `ActionError` with a short message and a machine code,
and logs the raw details server-side.
"""

import logging
import re
from enum import Enum
from typing import Dict, Optional

from postgrest.exceptions import APIError
from pydantic import ValidationError

logger = logging.getLogger(__name__)


class ErrorCode(str, Enum):
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    DUPLICATE = "DUPLICATE"
    NOT_FOUND = "NOT_FOUND"
    REFERENTIAL_CONFLICT = "REFERENTIAL_CONFLICT"
    STORAGE_UNAVAILABLE = "STORAGE_UNAVAILABLE"


ERROR_MESSAGES = {
    ErrorCode.UNAUTHORIZED: "Unauthorized",
    ErrorCode.FORBIDDEN: "You are not authorized to perform this action.",
    ErrorCode.VALIDATION_FAILED: "Please check your input and try again.",
    ErrorCode.DUPLICATE: "This item already exists.",
    ErrorCode.NOT_FOUND: "The requested resource was not found.",
    ErrorCode.REFERENTIAL_CONFLICT: "This item is still in use.",
    ErrorCode.STORAGE_UNAVAILABLE: "Something went wrong. Please try again.",
}

HTTP_STATUS = {
    ErrorCode.UNAUTHORIZED: 401,
    ErrorCode.FORBIDDEN: 403,
    ErrorCode.VALIDATION_FAILED: 422,
    ErrorCode.DUPLICATE: 409,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.REFERENTIAL_CONFLICT: 409,
    ErrorCode.STORAGE_UNAVAILABLE: 503,
}

# PostgreSQL / PostgREST codes
UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"
INSUFFICIENT_PRIVILEGE = "42501"
NO_ROWS = "PGRST116"

_KEY_PATTERN = re.compile(r"Key \(([^)]+)\)=")


class ActionError(Exception):
    """Raised inside services and gates; converted to a failure result at the boundary."""

    def __init__(self, message: str, code: ErrorCode = ErrorCode.STORAGE_UNAVAILABLE):
        super().__init__(message)
        self.message = message
        self.code = code

    @property
    def status_code(self) -> int:
        return HTTP_STATUS.get(self.code, 500)

    @classmethod
    def of(cls, code: ErrorCode) -> "ActionError":
        return cls(ERROR_MESSAGES[code], code)


def conflicting_field(exc: APIError) -> Optional[str]:
    """Column named in a unique-violation error, e.g. "slug" from "Key (slug)=(x) already exists."."""
    text = " ".join(str(part) for part in (exc.details, exc.message) if part)
    match = _KEY_PATTERN.search(text)
    if match:
        return match.group(1).split(",")[0].strip()
    return None


def map_storage_error(exc: Exception, unique_messages: Optional[Dict[str, str]] = None) -> ActionError:
    if not isinstance(exc, APIError):
        logger.exception("Unexpected storage failure: %s", exc)
        return ActionError.of(ErrorCode.STORAGE_UNAVAILABLE)

    logger.error("Storage error code=%s message=%s details=%s", exc.code, exc.message, exc.details)

    if exc.code == UNIQUE_VIOLATION:
        unique_messages = unique_messages or {}
        field = conflicting_field(exc)
        if field and field in unique_messages:
            return ActionError(unique_messages[field], ErrorCode.DUPLICATE)
        text = f"{exc.message or ''} {exc.details or ''}"
        for column, message in unique_messages.items():
            if column in text:
                return ActionError(message, ErrorCode.DUPLICATE)
        if field:
            return ActionError(f"An item with this {field.replace('_', ' ')} already exists", ErrorCode.DUPLICATE)
        return ActionError.of(ErrorCode.DUPLICATE)
    if exc.code == FOREIGN_KEY_VIOLATION:
        return ActionError("Related record not found.", ErrorCode.NOT_FOUND)
    if exc.code == INSUFFICIENT_PRIVILEGE:
        return ActionError.of(ErrorCode.UNAUTHORIZED)
    if exc.code == NO_ROWS:
        return ActionError.of(ErrorCode.NOT_FOUND)
    return ActionError.of(ErrorCode.STORAGE_UNAVAILABLE)


def _label(field: str) -> str:
    return field.replace("_", " ").capitalize()


def first_validation_message(exc: ValidationError) -> str:
    """Only the first violated rule is reported."""
    errors = exc.errors()
    if not errors:
        return ERROR_MESSAGES[ErrorCode.VALIDATION_FAILED]
    error = errors[0]
    message = error.get("msg", "")
    ctx = error.get("ctx") or {}
    fields = [str(part) for part in error.get("loc", ()) if not isinstance(part, int)]
    kind = error.get("type", "")

    if kind == "value_error" and "not a valid email address" in message:
        return "Invalid email address"
    if kind == "value_error":
        return message.removeprefix("Value error, ")
    if not fields:
        return message
    label = _label(fields[-1])
    if kind == "missing":
        return f"{label} is required"
    if kind == "string_too_short":
        return f"{label} must be at least {ctx.get('min_length')} characters"
    if kind == "string_too_long":
        return f"{label} must be less than {ctx.get('max_length')} characters"
    if kind in ("greater_than_equal", "greater_than"):
        return f"{label} must be at least {ctx.get('ge', ctx.get('gt'))}"
    if kind in ("less_than_equal", "less_than"):
        return f"{label} must be at most {ctx.get('le', ctx.get('lt'))}"
    if kind == "too_short":
        return f"{label} must have at least {ctx.get('min_length')} item(s)"
    return f"{label}: {message}"
