"""Validation of raw post submissions.

The rule table is the single source of truth for what a post needs. Rules
run against an untrusted mapping (decoded JSON) and every violation is
collected before failing, so a client sees all of its mistakes at once.
Framework-free so it can be tested on its own.
"""

import re
from collections.abc import Callable, Mapping
from typing import Any

from backend.app.core.errors import PostValidationError, Violation
from backend.app.models.post_schemas import PostDTO

FIELD_RULES: dict[str, tuple[str, ...]] = {
    "title": ("required", "string"),
    "content": ("required", "string"),
    "price": ("required", "integer"),
}

_MISSING = object()
_INT_LITERAL = re.compile(r"[+-]?\d+")

# SQLite INTEGER is a signed 64-bit value.
INT_MIN = -(2**63)
INT_MAX = 2**63 - 1


def is_blank(value: Any) -> bool:
    """Return True for values the ``required`` rule treats as absent."""
    if value is _MISSING or value is None:
        return True
    return isinstance(value, str) and not value.strip()


def coerce_integer(value: Any) -> int | None:
    """Return *value* as an ``int`` or ``None`` if it is not integral.

    Accepts ints, integral floats and integer literal strings. Booleans
    are rejected even though ``bool`` subclasses ``int``. Range is not
    checked here; see :data:`INT_MIN` and :data:`INT_MAX`.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str) and _INT_LITERAL.fullmatch(value.strip()):
        try:
            return int(value.strip())
        except ValueError:  # longer than sys.get_int_max_str_digits()
            return None
    return None


def _check_string(name: str, value: Any) -> tuple[Any, str | None]:
    if isinstance(value, str):
        return value, None
    return value, f"The {name} field must be a string."


def _check_integer(name: str, value: Any) -> tuple[Any, str | None]:
    coerced = coerce_integer(value)
    if coerced is None or not INT_MIN <= coerced <= INT_MAX:
        return value, f"The {name} field must be an integer."
    return coerced, None


_TYPE_CHECKS: dict[str, Callable[[str, Any], tuple[Any, str | None]]] = {
    "string": _check_string,
    "integer": _check_integer,
}


def collect_violations(raw: Any) -> tuple[dict[str, Any], list[Violation]]:
    """Apply :data:`FIELD_RULES` to *raw*.

    Returns ``(clean, violations)``; *clean* holds the checked values of
    every field that passed.
    """
    if not isinstance(raw, Mapping):
        return {}, [
            Violation("body", "object", "The request body must be a JSON object.")
        ]

    clean: dict[str, Any] = {}
    violations: list[Violation] = []
    for name, rules in FIELD_RULES.items():
        value = raw.get(name, _MISSING)
        if "required" in rules and is_blank(value):
            violations.append(
                Violation(name, "required", f"The {name} field is required.")
            )
            continue
        failed = False
        for rule in rules:
            check = _TYPE_CHECKS.get(rule)
            if check is None:
                continue
            value, message = check(name, value)
            if message:
                violations.append(Violation(name, rule, message))
                failed = True
                break
        if not failed:
            clean[name] = value
    return clean, violations


def validate_post_input(raw: Any) -> PostDTO:
    """Validate a decoded request body and build a :class:`PostDTO`.

    Raises :class:`PostValidationError` listing every violation; nothing
    is returned on failure.
    """
    clean, violations = collect_violations(raw)
    if violations:
        raise PostValidationError(violations)
    return PostDTO(**clean)
