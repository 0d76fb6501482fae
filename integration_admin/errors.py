"""Error taxonomy and user-facing error normalization."""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from typing import Any


class AdminError(Exception):
    """Base exception for integration admin errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class ValidationError(AdminError):
    """A draft failed a local invariant; nothing was sent to the backend."""


class DuplicateObjectRuleError(ValidationError):
    def __init__(self, sobject_name: str, system_api_name: str, developer_name: str = ""):
        self.sobject_name = sobject_name
        self.system_api_name = system_api_name
        rule = f" (rule {developer_name!r})" if developer_name else ""
        super().__init__(
            f"Duplicate Object + System mapping detected for {sobject_name} / "
            f"{system_api_name}{rule}. Only one rule per Object + System combination is allowed."
        )


class DuplicateFieldMappingError(ValidationError):
    def __init__(self, source_field_api: str):
        self.source_field_api = source_field_api
        super().__init__(
            f"Duplicate field mapping detected for {source_field_api!r}. The same source "
            "field cannot be mapped more than once for the selected Object + System."
        )


class InvalidSystemConfigError(ValidationError):
    pass


class FieldValueError(AdminError):
    """A raw edit value could not be coerced to the field's kind."""


class UnknownFieldError(AdminError):
    pass


class ReadOnlyFieldError(AdminError):
    pass


class RowNotFoundError(AdminError):
    pass


class UnknownObjectError(AdminError):
    """Describe was requested for an object that is not registered."""


class GatewayError(AdminError):
    """Transport-level failure talking to the admin backend."""

    def __init__(self, message: str, status_code: int | None = None, body: Any = None):
        self.status_code = status_code
        self.body = body
        super().__init__(message)


def _message_from(body: Any) -> str | None:
    if isinstance(body, str):
        return body or None
    if isinstance(body, Mapping):
        for key in ("message", "detail"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
            if isinstance(value, Sequence) and not isinstance(value, str):
                nested = _message_from(value)
                if nested:
                    return nested
        return None
    if isinstance(body, Sequence) and body:
        first = body[0]
        if isinstance(first, Mapping):
            for key in ("message", "msg"):
                value = first.get(key)
                if isinstance(value, str) and value:
                    return value
    return None


def extract_error(error: Any) -> str:
    """Normalize an arbitrary error shape into one user-facing string.

    Recognized shapes, in order: a ``body`` carrying a ``message`` (or FastAPI
    ``detail``), a ``body`` that is a list of message-bearing entries, the
    same shapes on a bare mapping, and an exception's own message. Anything
    else is serialized verbatim.
    """
    if error is None:
        return "Unknown error"

    body = error.get("body") if isinstance(error, Mapping) else getattr(error, "body", None)
    message = _message_from(body)
    if message:
        return message

    if isinstance(error, Mapping):
        message = _message_from(error)
        if message:
            return message
    elif isinstance(error, BaseException):
        text = str(error)
        if text:
            return text
        return type(error).__name__

    try:
        return json.dumps(error, default=str)
    except (TypeError, ValueError):
        return repr(error)
