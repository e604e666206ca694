"""
Pydantic models for exciter telemetry.

Design principles:
- All models are frozen (immutable)
- A measurement carries exactly one transform rule, expressed as a
  discriminated union (ScaleRule | EnumRule)
- Readings and alarm statuses copy their catalog metadata so consumers
  never need to re-join against the catalog
- A Snapshot is assembled once per collection cycle and never mutated
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class MeasurementType(str, Enum):
    """Semantic category of a measurement."""

    POWER = "power"
    TEMPERATURE = "temperature"
    CURRENT = "current"
    VOLTAGE = "voltage"
    SIGNAL = "signal"
    STATUS = "status"


class AlarmType(str, Enum):
    """Semantic category of an alarm."""

    POWER = "power"
    TEMPERATURE = "temperature"
    POWER_SUPPLY = "power_supply"
    VOLTAGE = "voltage"
    SYSTEM = "system"
    COOLING = "cooling"


class Severity(str, Enum):
    """Alarm severity."""

    CRITICAL = "critical"
    """Transmission is affected or about to be."""

    WARNING = "warning"
    """Degraded condition that needs attention."""


class DefinitionKind(str, Enum):
    """Which half of the catalog a key belongs to."""

    MEASUREMENT = "measurement"
    ALARM = "alarm"


class ScaleRule(BaseModel):
    """
    Numeric transform: raw integer multiplied by a scale factor.

    Example:
        >>> ScaleRule(factor=0.01)
        ScaleRule(kind='scale', factor=0.01)
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["scale"] = "scale"
    factor: float = Field(description="Multiplier applied to the raw integer")


class EnumRule(BaseModel):
    """
    Enumerated transform: raw value looked up in a label table.

    Keys are stored as strings because raw responses are compared verbatim.
    Integer keys are accepted and converted.

    Example:
        >>> rule = EnumRule(labels={0: "Unlocked", 1: "Locked"})
        >>> rule.labels["1"]
        'Locked'
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["enum"] = "enum"
    labels: dict[str, str] = Field(description="Raw value to display label")

    @field_validator("labels", mode="before")
    @classmethod
    def stringify_keys(cls, v: Any) -> Any:
        """Accept integer keys for readability in catalog declarations."""
        if isinstance(v, dict):
            return {str(key): label for key, label in v.items()}
        return v


TransformRule = Annotated[Union[ScaleRule, EnumRule], Field(discriminator="kind")]
"""Exactly one transform rule per measurement."""


class MeasurementDefinition(BaseModel):
    """
    Static definition of a measurement OID.
    """

    model_config = ConfigDict(frozen=True)

    key: str = Field(min_length=1, description="Unique catalog key")
    oid: str = Field(pattern=r"^\d+(\.\d+)+$", description="SNMP object identifier")
    name: str = Field(description="Display name")
    unit: str = Field(default="", description="Display unit")
    description: str = Field(default="", description="Free-text description")
    type: MeasurementType = Field(description="Semantic category")
    rule: TransformRule = Field(description="Raw-to-display transform")


class AlarmDefinition(BaseModel):
    """
    Static definition of an alarm flag OID.
    """

    model_config = ConfigDict(frozen=True)

    key: str = Field(min_length=1, description="Unique catalog key")
    oid: str = Field(pattern=r"^\d+(\.\d+)+$", description="SNMP object identifier")
    name: str = Field(description="Display name")
    description: str = Field(default="", description="Free-text description")
    severity: Severity = Field(description="Severity when active")
    type: AlarmType = Field(description="Semantic category")


class CatalogEntry(BaseModel):
    """
    One row of the catalog listing used by introspection.

    Measurements carry unit, alarms carry severity.
    """

    model_config = ConfigDict(frozen=True)

    key: str
    oid: str
    name: str
    type: str
    unit: str | None = None
    severity: Severity | None = None


class CatalogIntrospection(BaseModel):
    """Read-only dump of the catalog for discovery and debugging."""

    model_config = ConfigDict(frozen=True)

    measurements: list[CatalogEntry]
    alarms: list[CatalogEntry]
    critical_measurement_ids: list[str]
    critical_alarm_ids: list[str]


class MeasurementReading(BaseModel):
    """A formatted measurement produced by one collection cycle."""

    model_config = ConfigDict(frozen=True)

    key: str
    value: str = Field(description="Formatted display value")
    unit: str
    name: str
    description: str
    type: MeasurementType
    raw: str = Field(description="Raw SNMP response")


class AlarmStatus(BaseModel):
    """An evaluated alarm produced by one collection cycle."""

    model_config = ConfigDict(frozen=True)

    key: str
    active: bool
    name: str
    description: str
    severity: Severity
    type: AlarmType


class Snapshot(BaseModel):
    """
    Result of a single collection cycle.

    When configured is False, message explains why and the reading,
    alarm and error collections are empty.
    """

    model_config = ConfigDict(frozen=True)

    configured: bool
    message: str | None = None
    measurements: dict[str, MeasurementReading] = Field(default_factory=dict)
    alarms: dict[str, AlarmStatus] = Field(default_factory=dict)
    errors: tuple[str, ...] = ()
    device_address: str | None = None
    community: str | None = None
    timestamp: datetime

    @property
    def active_alarms(self) -> list[AlarmStatus]:
        """Alarms currently raised, in collection order."""
        return [status for status in self.alarms.values() if status.active]

    @property
    def has_critical_alarm(self) -> bool:
        """Check if any critical-severity alarm is active."""
        return any(status.severity == Severity.CRITICAL for status in self.active_alarms)

    def to_dict(self) -> dict[str, Any]:
        """
        Render the snapshot in the dashboard's JSON shape.

        Returns:
            Plain dict ready for json.dumps.
        """
        if not self.configured:
            return {"configured": False, "message": self.message}

        return {
            "configured": True,
            "measurements": {
                key: reading.model_dump(mode="json", exclude={"key"})
                for key, reading in self.measurements.items()
            },
            "alarms": {
                key: status.model_dump(mode="json", exclude={"key"})
                for key, status in self.alarms.items()
            },
            "errors": list(self.errors),
            "equipmentConfig": {
                "ip": self.device_address,
                "community": self.community,
                "lastUpdate": self.timestamp.isoformat(),
            },
        }
