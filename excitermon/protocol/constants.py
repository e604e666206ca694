"""
SNMP constants for SOCEXCITER exciters.

MIB root OID and default timing values used by the clients, the
configuration layer and the periodic poller.
"""

from __future__ import annotations

import re
from typing import Final


class SnmpConstants:
    """
    SNMP defaults and identifiers.

    Timing values are in seconds.
    """

    # ===== Identifiers =====

    BASE_OID: Final[str] = "1.3.6.1.4.1.25026.7"
    """enterprises.linear.ec710lp (SOCEXCITER MIB root)."""

    # ===== Transport =====

    DEFAULT_PORT: Final[int] = 161
    """Standard SNMP agent UDP port."""

    DEFAULT_TIMEOUT: Final[float] = 5.0
    """Default per-request timeout in seconds."""

    DEFAULT_RETRIES: Final[int] = 1
    """Retransmissions before a request is reported as timed out."""

    # ===== Polling =====

    DEFAULT_POLL_INTERVAL: Final[float] = 30.0
    """Seconds between collection cycles."""

    ACTIVE_ALARM_VALUE: Final[int] = 1
    """Raw integer an alarm OID reports while the alarm is raised."""


_INTEGER_PATTERN: Final = re.compile(r"^\s*[+-]?[0-9]+\s*$")


def parse_integer(raw: str | None) -> int | None:
    """
    Strictly parse a raw SNMP response as a base-10 integer.

    Surrounding whitespace is tolerated. Only ASCII digits count; any other
    character makes the whole value unparseable (``"1x"`` is not ``1``).

    Args:
        raw: Raw response text.

    Returns:
        The integer value, or None if the text is not an integer.

    Example:
        >>> parse_integer(" 8450 ")
        8450
        >>> parse_integer("1x") is None
        True
    """
    if raw is None or not _INTEGER_PATTERN.match(raw):
        return None
    try:
        return int(raw)
    except ValueError:
        # exceeds the interpreter's digit limit for str to int conversion
        return None
