"""
Protocol layer constants and raw-value helpers.
"""

from excitermon.protocol.constants import SnmpConstants, parse_integer

__all__ = [
    "SnmpConstants",
    "parse_integer",
]
