"""
Alarm flag evaluator.

An alarm OID reports 1 while the alarm is raised. Anything else,
including other integers and unparseable text, is inactive.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from excitermon.models.records import AlarmDefinition, AlarmStatus
from excitermon.protocol.constants import SnmpConstants, parse_integer

if TYPE_CHECKING:
    from excitermon.catalog.registry import Catalog


def is_active(raw: str | None) -> bool:
    """
    Check whether a raw alarm response means "raised".

    Example:
        >>> is_active("1"), is_active("2"), is_active("1x")
        (True, False, False)
    """
    return parse_integer(raw) == SnmpConstants.ACTIVE_ALARM_VALUE


def build_status(definition: AlarmDefinition, raw: str | None) -> AlarmStatus:
    """Build an AlarmStatus carrying the definition's metadata."""
    return AlarmStatus(
        key=definition.key,
        active=is_active(raw),
        name=definition.name,
        description=definition.description,
        severity=definition.severity,
        type=definition.type,
    )


def evaluate_alarm(catalog: Catalog, key: str, raw: str | None) -> AlarmStatus | None:
    """
    Evaluate a raw alarm response.

    Args:
        catalog: Catalog to resolve the key against.
        key: Alarm key.
        raw: Raw response text.

    Returns:
        Enriched AlarmStatus, or None if the key is not in the catalog.
    """
    definition = catalog.alarm(key)
    if definition is None:
        return None
    return build_status(definition, raw)
