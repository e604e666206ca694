"""
excitermon - SNMP telemetry for Linear SOCEXCITER broadcast exciters.

This library reads the critical measurements and alarm flags of an exciter
over SNMP, formats them according to a static catalog, and returns one
immutable Snapshot per collection cycle.

Example:
    >>> from excitermon import CollectionPipeline, DeviceConfig, create_default_catalog
    >>> from excitermon.transport import AsyncSnmpClient
    >>>
    >>> async def main():
    ...     config = DeviceConfig(address="192.168.1.50", community="public")
    ...     pipeline = CollectionPipeline(create_default_catalog())
    ...     async with AsyncSnmpClient(config.address) as client:
    ...         snapshot = await pipeline.poll(config, client)
    ...     for status in snapshot.active_alarms:
    ...         print(status.severity.value, status.name)
"""

from excitermon.catalog import Catalog, CatalogBuilder, create_default_catalog
from excitermon.collector import CollectionPipeline, collect
from excitermon.config import ConfigSource, DeviceConfig, JsonConfigStore, StaticConfigSource
from excitermon.exceptions import (
    CatalogError,
    ConfigurationError,
    ExciterMonError,
    FormatError,
    RetrievalError,
    SnmpError,
    TimeoutError,
    TransportError,
)
from excitermon.models.records import (
    AlarmDefinition,
    AlarmStatus,
    AlarmType,
    EnumRule,
    MeasurementDefinition,
    MeasurementReading,
    MeasurementType,
    ScaleRule,
    Severity,
    Snapshot,
)
from excitermon.parsers import evaluate_alarm, format_value
from excitermon.transport import AbstractSnmpClient, AsyncSnmpClient

__version__ = "0.1.0"
__all__ = [
    # Pipeline
    "CollectionPipeline",
    "collect",
    # Catalog
    "Catalog",
    "CatalogBuilder",
    "create_default_catalog",
    "format_value",
    "evaluate_alarm",
    # Configuration
    "DeviceConfig",
    "ConfigSource",
    "JsonConfigStore",
    "StaticConfigSource",
    # Models
    "MeasurementDefinition",
    "AlarmDefinition",
    "ScaleRule",
    "EnumRule",
    "MeasurementType",
    "AlarmType",
    "Severity",
    "MeasurementReading",
    "AlarmStatus",
    "Snapshot",
    # Exceptions
    "ExciterMonError",
    "RetrievalError",
    "TimeoutError",
    "SnmpError",
    "FormatError",
    "CatalogError",
    "ConfigurationError",
    "TransportError",
    # Transport
    "AbstractSnmpClient",
    "AsyncSnmpClient",
    # Version
    "__version__",
]
