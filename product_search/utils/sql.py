"""
SQL Literal Escaping
====================

Quoting helper for the few values that cannot be bound as parameters
and have to be interpolated into SQL text (label keys inside an
``IN (...)`` list).

Assumes ``standard_conforming_strings = on`` (PostgreSQL default since 9.1),
where a backslash inside a plain ``'...'`` literal has no special meaning.
"""

import re

# C0 control characters and DEL. NUL is rejected by PostgreSQL in text
# literals and the rest have no business in a label key.
_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")


def escape_literal(value: str) -> str:
    """
    Render ``value`` as a quoted SQL string literal.

    Control characters are stripped and single quotes are doubled, so the
    result always parses as exactly one literal.

    Args:
        value: Raw user-supplied string

    Returns:
        Quoted literal, e.g. ``o'brien`` -> ``'o''brien'``

    Raises:
        TypeError: If value is not a string
    """
    if not isinstance(value, str):
        raise TypeError(f"escape_literal expects str, got {type(value).__name__}")

    cleaned = _CONTROL_CHARS.sub("", value)
    return "'" + cleaned.replace("'", "''") + "'"
