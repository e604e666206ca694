"""
Measurement and alarm catalog.

The catalog maps string keys to MeasurementDefinition and AlarmDefinition
records and marks which keys belong to the critical subset polled on every
collection cycle.

Catalogs are assembled with a CatalogBuilder and frozen by build():

    CatalogBuilder
        ├── register_measurement() / register_alarm()
        ├── mark_critical_measurements() / mark_critical_alarms()
        └── build()  -> Catalog (read-only, integrity-checked)

A built Catalog has no mutating methods and is safe to share between
concurrent collection cycles.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from types import MappingProxyType

from excitermon.exceptions import CatalogError
from excitermon.models.records import (
    AlarmDefinition,
    CatalogEntry,
    CatalogIntrospection,
    DefinitionKind,
    MeasurementDefinition,
)


class Catalog:
    """
    Read-only registry of measurement and alarm definitions.

    Lookups of unknown keys return None rather than raising; callers treat
    absence as "skip this item".

    Example:
        >>> catalog = create_default_catalog()
        >>> catalog.measurement("forwardPower").unit
        'W'
        >>> catalog.measurement("noSuchKey") is None
        True
    """

    def __init__(
        self,
        measurements: Mapping[str, MeasurementDefinition],
        alarms: Mapping[str, AlarmDefinition],
        critical_measurements: Iterable[str] = (),
        critical_alarms: Iterable[str] = (),
    ) -> None:
        """
        Build a catalog and validate its integrity.

        Args:
            measurements: Key to measurement definition, in declaration order.
            alarms: Key to alarm definition, in declaration order.
            critical_measurements: Ordered measurement keys polled every cycle.
            critical_alarms: Ordered alarm keys polled every cycle.

        Raises:
            CatalogError: If a mapping key disagrees with its definition's key,
                a critical key is repeated, or a critical key is undefined.
        """
        self._measurements: Mapping[str, MeasurementDefinition] = MappingProxyType(
            dict(measurements)
        )
        self._alarms: Mapping[str, AlarmDefinition] = MappingProxyType(dict(alarms))
        self._critical_measurements = tuple(critical_measurements)
        self._critical_alarms = tuple(critical_alarms)

        self._validate()

    def _validate(self) -> None:
        for kind, definitions, critical in (
            (DefinitionKind.MEASUREMENT, self._measurements, self._critical_measurements),
            (DefinitionKind.ALARM, self._alarms, self._critical_alarms),
        ):
            for key, definition in definitions.items():
                if key != definition.key:
                    raise CatalogError(
                        f"{kind.value} registered as {key!r} but defines key {definition.key!r}"
                    )

            seen: set[str] = set()
            for key in critical:
                if key in seen:
                    raise CatalogError(f"Critical {kind.value} {key!r} listed twice")
                seen.add(key)

            missing = [key for key in critical if key not in definitions]
            if missing:
                raise CatalogError(
                    f"Critical {kind.value} keys without definition: {', '.join(missing)}"
                )

    @property
    def measurements(self) -> Mapping[str, MeasurementDefinition]:
        """Read-only mapping of all measurement definitions."""
        return self._measurements

    @property
    def alarms(self) -> Mapping[str, AlarmDefinition]:
        """Read-only mapping of all alarm definitions."""
        return self._alarms

    def measurement(self, key: str) -> MeasurementDefinition | None:
        """Get a measurement definition, or None if unknown."""
        return self._measurements.get(key)

    def alarm(self, key: str) -> AlarmDefinition | None:
        """Get an alarm definition, or None if unknown."""
        return self._alarms.get(key)

    def definition(
        self,
        kind: DefinitionKind,
        key: str,
    ) -> MeasurementDefinition | AlarmDefinition | None:
        """
        Look up a definition by kind and key.

        Args:
            kind: Measurement or alarm half of the catalog.
            key: Catalog key.

        Returns:
            The definition, or None if the key is not defined.
        """
        if DefinitionKind(kind) == DefinitionKind.MEASUREMENT:
            return self.measurement(key)
        return self.alarm(key)

    def critical_keys(self, kind: DefinitionKind) -> tuple[str, ...]:
        """
        Get the keys polled on every cycle, in declared order.

        Args:
            kind: Measurement or alarm half of the catalog.
        """
        if DefinitionKind(kind) == DefinitionKind.MEASUREMENT:
            return self._critical_measurements
        return self._critical_alarms

    def all_keys(self, kind: DefinitionKind) -> list[CatalogEntry]:
        """
        List every definition of one kind with its address and metadata.

        Measurements report their unit, alarms their severity.

        Args:
            kind: Measurement or alarm half of the catalog.

        Returns:
            Catalog entries in declaration order.
        """
        if DefinitionKind(kind) == DefinitionKind.MEASUREMENT:
            return [
                CatalogEntry(
                    key=m.key, oid=m.oid, name=m.name, type=m.type.value, unit=m.unit
                )
                for m in self._measurements.values()
            ]
        return [
            CatalogEntry(
                key=a.key, oid=a.oid, name=a.name, type=a.type.value, severity=a.severity
            )
            for a in self._alarms.values()
        ]

    def introspect(self) -> CatalogIntrospection:
        """Dump the catalog for discovery and debugging endpoints."""
        return CatalogIntrospection(
            measurements=self.all_keys(DefinitionKind.MEASUREMENT),
            alarms=self.all_keys(DefinitionKind.ALARM),
            critical_measurement_ids=list(self._critical_measurements),
            critical_alarm_ids=list(self._critical_alarms),
        )

    def __contains__(self, key: object) -> bool:
        return key in self._measurements or key in self._alarms

    def __repr__(self) -> str:
        return (
            f"Catalog("
            f"measurements={len(self._measurements)}, "
            f"alarms={len(self._alarms)}, "
            f"critical={len(self._critical_measurements)}+{len(self._critical_alarms)})"
        )


class CatalogBuilder:
    """
    Mutable staging area for catalog definitions.

    Example:
        >>> builder = CatalogBuilder()
        >>> builder.register_measurement(forward_power)
        >>> builder.mark_critical_measurements("forwardPower")
        >>> catalog = builder.build()
    """

    def __init__(self) -> None:
        """Initialize an empty builder."""
        self._measurements: dict[str, MeasurementDefinition] = {}
        self._alarms: dict[str, AlarmDefinition] = {}
        self._critical_measurements: list[str] = []
        self._critical_alarms: list[str] = []

    def register_measurement(self, definition: MeasurementDefinition) -> CatalogBuilder:
        """
        Register a measurement definition.

        Raises:
            CatalogError: If the key is already registered.
        """
        if definition.key in self._measurements:
            raise CatalogError(f"Duplicate measurement key {definition.key!r}")
        self._measurements[definition.key] = definition
        return self

    def register_alarm(self, definition: AlarmDefinition) -> CatalogBuilder:
        """
        Register an alarm definition.

        Raises:
            CatalogError: If the key is already registered.
        """
        if definition.key in self._alarms:
            raise CatalogError(f"Duplicate alarm key {definition.key!r}")
        self._alarms[definition.key] = definition
        return self

    def mark_critical_measurements(self, *keys: str) -> CatalogBuilder:
        """Append keys to the critical measurement list."""
        self._critical_measurements.extend(keys)
        return self

    def mark_critical_alarms(self, *keys: str) -> CatalogBuilder:
        """Append keys to the critical alarm list."""
        self._critical_alarms.extend(keys)
        return self

    def build(self) -> Catalog:
        """
        Freeze the staged definitions into a Catalog.

        Raises:
            CatalogError: If a critical key has no definition.
        """
        return Catalog(
            measurements=self._measurements,
            alarms=self._alarms,
            critical_measurements=self._critical_measurements,
            critical_alarms=self._critical_alarms,
        )

    def __repr__(self) -> str:
        return (
            f"CatalogBuilder("
            f"measurements={len(self._measurements)}, "
            f"alarms={len(self._alarms)})"
        )


def create_default_catalog() -> Catalog:
    """
    Create the built-in SOCEXCITER catalog.

    Returns:
        A new, validated Catalog instance.
    """
    from excitermon.catalog.socexciter import register_socexciter

    builder = CatalogBuilder()
    register_socexciter(builder)
    return builder.build()
