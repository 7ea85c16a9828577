"""
Structa Core Primitives — Value Coercion Helpers
==================================================
Shared normalisation used by every record's __post_init__.

Records are frozen, so coerced values are written back with
object.__setattr__ during construction only.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from enum import Enum
from typing import Any, Optional, Type, TypeVar

E = TypeVar("E", bound=Enum)

CENT = Decimal("0.01")


def to_decimal(value: Any, field_name: str) -> Decimal:
    """Normalise int / float / str / Decimal into Decimal."""
    if isinstance(value, bool):
        raise ValueError(f"{field_name} must be numeric, got bool.")
    if isinstance(value, Decimal):
        return value
    if isinstance(value, (int, float, str)):
        try:
            return Decimal(str(value))
        except InvalidOperation:
            raise ValueError(f"{field_name} must be numeric, got {value!r}.") from None
    raise ValueError(f"{field_name} must be numeric, got {type(value).__name__}.")


def to_optional_decimal(value: Any, field_name: str) -> Optional[Decimal]:
    if value is None:
        return None
    return to_decimal(value, field_name)


def to_enum(enum_cls: Type[E], value: Any, field_name: str) -> E:
    """Accept either the enum member or its string value."""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValueError(
            f"{field_name} must be one of [{allowed}], got {value!r}."
        ) from None


def require_text(value: Any, field_name: str) -> None:
    if not value or not isinstance(value, str):
        raise ValueError(f"{field_name} must be non-empty string.")


def require_datetime(value: Any, field_name: str) -> None:
    if not isinstance(value, datetime):
        raise ValueError(f"{field_name} must be datetime.")
    if value.tzinfo is None:
        raise ValueError(f"{field_name} must be timezone-aware.")


def require_optional_datetimes(record: Any, *field_names: str) -> None:
    """Optional date fields: None, or a timezone-aware datetime."""
    for name in field_names:
        value = getattr(record, name)
        if value is not None:
            require_datetime(value, name)


def round_half_up(value: Decimal, exponent: Decimal = Decimal("1")) -> Decimal:
    """Round to `exponent` places with halves going up (not banker's rounding)."""
    return value.quantize(exponent, rounding=ROUND_HALF_UP)


def iso(dt: Optional[datetime]) -> Optional[str]:
    return dt.isoformat() if dt is not None else None


def dec_str(value: Optional[Decimal]) -> Optional[str]:
    return str(value) if value is not None else None


def new_id(prefix: str) -> str:
    """Opaque unique id, e.g. 'mov_3f9c0a1b2c4d'."""
    return f"{prefix}_{uuid.uuid4().hex[:12]}"
