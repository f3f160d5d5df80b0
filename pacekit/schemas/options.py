"""Pydantic models for wrapper options.

Numeric options are normalized rather than rejected: any real number is
truncated toward zero and negatives clamp to 0. Only values that are not
numbers at all fail validation. Strings holding a number are parsed first and
normalized the same way.
"""

from __future__ import annotations

from numbers import Real
from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from pacekit.core.errors import InvalidOptionError
from pacekit.utils.coercion import to_int_non_neg


def _parse_number(text: str) -> Real | str:
    try:
        return int(text)
    except ValueError:
        pass
    try:
        return float(text)
    except ValueError:
        return text


def _coerce_non_neg(value: Any) -> Any:
    if isinstance(value, str):
        value = _parse_number(value.strip())
    if isinstance(value, Real) and not isinstance(value, bool):
        return to_int_non_neg(value)
    # Anything else is left for pydantic to reject with the option name.
    return value


class _Options(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    @classmethod
    def build(cls, **values: Any) -> Self:
        """Validate values, translating pydantic errors into InvalidOptionError."""
        try:
            return cls(**values)
        except ValidationError as exc:
            errors = exc.errors(include_url=False, include_input=False)
            option = ".".join(str(p) for p in errors[0]["loc"]) if errors else ""
            raise InvalidOptionError(
                code="invalid_option",
                message=f"Invalid value for option '{option}'.",
                details={
                    "option": option,
                    "errors": [dict(e) for e in errors],
                    "hint": "Durations and sizes must be numbers.",
                },
            ) from exc


class DebounceOptions(_Options):
    """Normalized configuration of a RateController."""

    wait: int = Field(0, ge=0, description="Quiet period in milliseconds.")
    leading: bool = Field(False, description="Invoke on the leading edge of a window.")
    trailing: bool = Field(True, description="Invoke on the trailing edge of a window.")
    max_wait: int | None = Field(
        None,
        ge=0,
        description="Upper bound in milliseconds between invocations (None = unbounded).",
    )

    @field_validator("wait", "max_wait", mode="before")
    @classmethod
    def _normalize_duration(cls, value: Any) -> Any:
        return _coerce_non_neg(value)


class ThrottleOptions(_Options):
    """Throttle configuration; converted into DebounceOptions with max_wait = wait."""

    wait: int = Field(0, ge=0, description="Window size in milliseconds.")
    leading: bool = True
    trailing: bool = True

    @field_validator("wait", mode="before")
    @classmethod
    def _normalize_duration(cls, value: Any) -> Any:
        return _coerce_non_neg(value)

    def to_debounce(self) -> DebounceOptions:
        return DebounceOptions(
            wait=self.wait,
            leading=self.leading,
            trailing=self.trailing,
            max_wait=self.wait,
        )


class MemoizeOptions(_Options):
    """Bound applied to a memoizer's cache (0 = unbounded)."""

    max_size: int = Field(0, ge=0)

    @field_validator("max_size", mode="before")
    @classmethod
    def _normalize_size(cls, value: Any) -> Any:
        return _coerce_non_neg(value)
