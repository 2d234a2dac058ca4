"""Duration strings in the ``300ms`` / ``1.5h`` / ``2h45m`` notation.

Cache TTLs are configured as duration strings; plain numbers (or numeric
strings) are taken as seconds.
"""

from __future__ import annotations

import re

_UNITS: dict[str, float] = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}

_NUMBER = re.compile(r"\d+(?:\.\d*)?|\.\d+")
_COMPONENT = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")


def parse_duration(value: str | float) -> float:
    """Parse *value* into a number of seconds.

    Args:
        value: A duration string such as ``"30s"``, ``"1h30m"`` or ``"-1.5h"``,
            or a number of seconds.

    Returns:
        The duration in seconds.

    Raises:
        ValueError: If *value* is not a valid duration.
    """
    if isinstance(value, bool):
        msg = f"invalid duration {value!r}"
        raise ValueError(msg)
    if isinstance(value, int | float):
        return float(value)

    text = value.strip()
    original = text
    sign = 1.0
    if text[:1] in ("-", "+"):
        sign = -1.0 if text[0] == "-" else 1.0
        text = text[1:]

    if not text:
        msg = f"invalid duration {original!r}"
        raise ValueError(msg)

    if _NUMBER.fullmatch(text):
        return sign * float(text)

    total = 0.0
    pos = 0
    while pos < len(text):
        match = _COMPONENT.match(text, pos)
        if match is None:
            msg = f"invalid duration {original!r}"
            raise ValueError(msg)
        number, unit = match.groups()
        total += float(number) * _UNITS[unit]
        pos = match.end()
    return sign * total
