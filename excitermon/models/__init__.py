"""
Data models for exciter telemetry.

This module contains Pydantic models for:

- Catalog definitions (measurements, alarms, transform rules)
- Semantic enums (measurement/alarm types, severity)
- Per-cycle results (readings, alarm statuses, snapshots)
"""

from excitermon.models.records import (
    AlarmDefinition,
    AlarmStatus,
    AlarmType,
    CatalogEntry,
    CatalogIntrospection,
    DefinitionKind,
    EnumRule,
    MeasurementDefinition,
    MeasurementReading,
    MeasurementType,
    ScaleRule,
    Severity,
    Snapshot,
    TransformRule,
)

__all__ = [
    # Rules
    "ScaleRule",
    "EnumRule",
    "TransformRule",
    # Enums
    "MeasurementType",
    "AlarmType",
    "Severity",
    "DefinitionKind",
    # Definitions
    "MeasurementDefinition",
    "AlarmDefinition",
    "CatalogEntry",
    "CatalogIntrospection",
    # Results
    "MeasurementReading",
    "AlarmStatus",
    "Snapshot",
]
