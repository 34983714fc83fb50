from collections.abc import Iterable, Mapping
from enum import Enum
from typing import Any, TypeVar

from tracker.core.exceptions import InvalidArgumentError

E = TypeVar("E", bound=Enum)


def coerce_choice(choices: type[E], value: Any, field: str) -> E:
    """
    Return the enum member for `value`.

    Raises:
        InvalidArgumentError: If `value` is not one of the enum's values
    """
    try:
        return choices(value)
    except ValueError:
        allowed = ", ".join(str(member.value) for member in choices)
        raise InvalidArgumentError(f"Invalid {field} '{value}' (allowed: {allowed})") from None


def pick_allowed(changes: Mapping[str, Any], allowed: Iterable[str]) -> dict[str, Any]:
    """Keep only allow-listed, non-null changes."""
    allowed = frozenset(allowed)
    return {field: value for field, value in changes.items() if field in allowed and value is not None}
