"""
Error taxonomy for the Sansay exporter.

FetchError and ParseError end a collection cycle. FieldError and
ProjectionError are confined to the single field that raised them.
"""
from __future__ import annotations

import enum
from typing import Optional


class SansayError(Exception):
    """Base class for every error raised while scraping a Sansay device."""


class FetchErrorKind(enum.Enum):
    URL_MALFORMED = "url_malformed"
    REQUEST_BUILD_FAILED = "request_build_failed"
    TRANSPORT_FAILED = "transport_failed"
    BODY_UNREADABLE = "body_unreadable"


class FetchError(SansayError):
    """The status document could not be retrieved."""

    def __init__(self, kind: FetchErrorKind, target: str, message: str):
        super().__init__(f"{kind.value}: {target}: {message}")
        self.kind = kind
        self.target = target


class ParseError(SansayError):
    """The status document is not well-formed mysqldump XML."""


class FieldErrorKind(enum.Enum):
    NOT_FOUND = "not_found"
    NOT_SETTABLE = "not_settable"
    WRONG_TYPE = "wrong_type"


class FieldError(SansayError):
    """A wire field name could not be mapped onto a record attribute."""

    _MESSAGES = {
        FieldErrorKind.NOT_FOUND: "not a field name: {}",
        FieldErrorKind.NOT_SETTABLE: "cannot set field {}",
        FieldErrorKind.WRONG_TYPE: "{} is not a string field",
    }

    def __init__(self, kind: FieldErrorKind, name: str):
        super().__init__(self._MESSAGES[kind].format(name))
        self.kind = kind
        self.name = name


class ProjectionError(SansayError):
    """A field value could not be turned into a metric."""

    def __init__(self, field: str, value: str, reason: Optional[str] = None):
        msg = f"cannot project field {field}={value!r}"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)
        self.field = field
        self.value = value
