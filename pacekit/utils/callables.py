from typing import Any, Callable

from pacekit.core.errors import InvalidOptionError


def ensure_callable(fn: Any, *, option: str = "fn") -> None:
    """Raise InvalidOptionError unless fn is callable."""
    if not callable(fn):
        raise InvalidOptionError(
            code="not_callable",
            message=f"'{option}' must be callable.",
            details={"option": option, "value": type(fn).__name__},
        )


def function_name(fn: Callable[..., Any]) -> str:
    """Qualified name used in log records."""
    return getattr(fn, "__qualname__", None) or repr(fn)
