"""Equality tests used to decide whether a field still carries its default.

Loose equality follows the coercive comparison of the wire format's reference
implementation: numbers, numeric strings and booleans compare by numeric
value, and ``None`` only equals ``None``. Strict equality additionally
requires both values to have the same type.
"""

from __future__ import annotations

import math
from typing import Any, Callable

_PRIMITIVES = (bool, int, float, str)


def _to_number(value: bool | int | float | str) -> float:
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        try:
            return float(int(text, 0)) if text.lower().startswith(("0x", "0o", "0b")) else float(text)
        except ValueError:
            return math.nan
    return float(value)


def loose_equals(a: Any, b: Any) -> bool:
    """Compare two values with coercive equality.

    Examples:
        >>> loose_equals(0, "")
        True
        >>> loose_equals(False, 0)
        True
        >>> loose_equals("1", 1)
        True
        >>> loose_equals(None, 0)
        False
    """
    if a is b:
        return True
    if a is None or b is None:
        return False
    if isinstance(a, _PRIMITIVES) and isinstance(b, _PRIMITIVES):
        if isinstance(a, str) and isinstance(b, str):
            return a == b
        return _to_number(a) == _to_number(b)
    return bool(a == b)


def strict_equals(a: Any, b: Any) -> bool:
    """Compare two values requiring identical types.

    Examples:
        >>> strict_equals(0, "")
        False
        >>> strict_equals(0, 0)
        True
    """
    return type(a) is type(b) and bool(a == b)


def default_equality(loose: bool) -> Callable[[Any, Any], bool]:
    """Return the comparison matching a ``loose_default_equality`` setting."""
    return loose_equals if loose else strict_equals
