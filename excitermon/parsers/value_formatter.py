"""
Measurement value formatter.

Applies a measurement's transform rule to a raw SNMP response:

- ScaleRule: strict integer parse, multiply by the factor, render with
  exactly two decimals ("8450" x 0.01 -> "84.50")
- EnumRule: verbatim label lookup, unmapped values pass through
- Unknown keys pass the raw response through unchanged

Scaling uses decimal arithmetic so the rendered digits do not depend on
binary floating point or the process locale.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import TYPE_CHECKING, Final

from excitermon.exceptions import FormatError
from excitermon.models.records import EnumRule, MeasurementDefinition, ScaleRule
from excitermon.protocol.constants import parse_integer

if TYPE_CHECKING:
    from excitermon.catalog.registry import Catalog


TWO_PLACES: Final = Decimal("0.01")


def format_scaled(raw: str, factor: float, *, key: str | None = None) -> str:
    """
    Scale a raw integer response and render it with two decimals.

    Args:
        raw: Raw response text.
        factor: Scale factor.
        key: Measurement key, for error context.

    Returns:
        Fixed-point string with exactly two decimal digits.

    Raises:
        FormatError: If raw is not an integer.

    Example:
        >>> format_scaled("8450", 0.01)
        '84.50'
        >>> format_scaled("-125", 0.1)
        '-12.50'
    """
    value = parse_integer(raw)
    if value is None:
        raise FormatError("Expected an integer response", key=key, raw_data=raw)

    try:
        scaled = (Decimal(value) * Decimal(str(factor))).quantize(
            TWO_PLACES, rounding=ROUND_HALF_UP
        )
    except InvalidOperation as e:
        raise FormatError("Scaled value out of range", key=key, raw_data=raw) from e
    return f"{scaled:f}"


def apply_rule(definition: MeasurementDefinition, raw: str) -> str:
    """
    Apply a definition's transform rule to a raw response.

    Args:
        definition: Measurement definition.
        raw: Raw response text.

    Returns:
        Display value.

    Raises:
        FormatError: If a scale rule receives a non-integer response.
    """
    rule = definition.rule
    if isinstance(rule, ScaleRule):
        return format_scaled(raw, rule.factor, key=definition.key)
    if isinstance(rule, EnumRule):
        return rule.labels.get(raw, raw)
    return raw


def format_value(catalog: Catalog, key: str, raw: str) -> str:
    """
    Format a raw response for a catalog measurement.

    Args:
        catalog: Catalog to resolve the key against.
        key: Measurement key.
        raw: Raw response text.

    Returns:
        Display value, or raw unchanged if the key is not in the catalog.

    Raises:
        FormatError: If the measurement is scaled and raw is not an integer.
    """
    definition = catalog.measurement(key)
    if definition is None:
        return raw
    return apply_rule(definition, raw)
