"""Boundary coercion helpers.

Inputs arrive from HTTP bodies and CLI flags as strings; these helpers turn
them into domain values or raise :class:`ValidationError`. Unrecognised enum
values are rejected, never defaulted.
"""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import TypeVar

from grant_liaison.liaison.clock import ensure_utc
from grant_liaison.liaison.errors import ValidationError

E = TypeVar("E", bound=Enum)


def require_text(value: object, field: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field} is required", field=field)
    return value.strip()


def optional_text(value: object, field: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string", field=field)
    return value.strip() or None


def parse_enum(enum_cls: type[E], value: object, field: str) -> E:
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return enum_cls(value.strip())
        except ValueError:
            pass
        allowed = ", ".join(str(m.value) for m in enum_cls)
        raise ValidationError(f"Unknown {field} {value!r}; expected one of: {allowed}", field=field)
    raise ValidationError(f"{field} is required", field=field)


def optional_enum(enum_cls: type[E], value: object, field: str) -> E | None:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return parse_enum(enum_cls, value, field)


def parse_datetime(value: object, field: str) -> datetime:
    if isinstance(value, datetime):
        return ensure_utc(value)
    if isinstance(value, str) and value.strip():
        try:
            parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError as e:
            raise ValidationError(f"{field} is not an ISO-8601 datetime", field=field) from e
        return ensure_utc(parsed)
    raise ValidationError(f"{field} is required", field=field)


def optional_datetime(value: object, field: str) -> datetime | None:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return parse_datetime(value, field)


def optional_date(value: object, field: str) -> date | None:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError as e:
            raise ValidationError(f"{field} is not an ISO-8601 date", field=field) from e
    raise ValidationError(f"{field} must be a date", field=field)


def parse_int(value: object, field: str, *, minimum: int, maximum: int | None = None) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be an integer", field=field)
    if isinstance(value, str):
        try:
            value = int(value.strip())
        except ValueError as e:
            raise ValidationError(f"{field} must be an integer", field=field) from e
    if not isinstance(value, int):
        raise ValidationError(f"{field} must be an integer", field=field)
    if value < minimum or (maximum is not None and value > maximum):
        bounds = f"[{minimum}, {maximum}]" if maximum is not None else f">= {minimum}"
        raise ValidationError(f"{field} must be {bounds}", field=field)
    return value
