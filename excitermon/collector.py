"""
Telemetry collection pipeline.

One collection cycle reads every critical measurement and alarm of the
catalog from a device and folds the results into a single Snapshot:

    collect(address, community, retrieve)
        -> missing address/community: Snapshot(configured=False)
        -> critical measurements: retrieve -> format -> MeasurementReading
        -> critical alarms:       retrieve -> evaluate -> AlarmStatus
        -> Snapshot(readings, statuses, errors, timestamp)

A failed item is recorded in Snapshot.errors and never aborts the cycle.
The Snapshot is only assembled after every item has finished, so a
cancelled cycle publishes nothing.

Example:
    >>> from excitermon import CollectionPipeline, create_default_catalog
    >>> from excitermon.transport import AsyncSnmpClient
    >>>
    >>> async def main():
    ...     pipeline = CollectionPipeline(create_default_catalog())
    ...     async with AsyncSnmpClient("192.168.1.50") as client:
    ...         snapshot = await pipeline.poll(config, client)
    ...     print(snapshot.measurements["forwardPower"].value)
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import AsyncGenerator, Awaitable, Callable, Sequence
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Optional, TypeVar, Union

from excitermon.exceptions import ConfigurationError, ExciterMonError, RetrievalError
from excitermon.models.records import (
    AlarmStatus,
    DefinitionKind,
    MeasurementReading,
    Snapshot,
)
from excitermon.parsers.alarm_evaluator import build_status
from excitermon.parsers.value_formatter import apply_rule
from excitermon.protocol.constants import SnmpConstants
from excitermon.transport.snmp_async import AsyncSnmpClient

if TYPE_CHECKING:
    from excitermon.catalog.registry import Catalog
    from excitermon.config import ConfigSource, DeviceConfig
    from excitermon.transport.abc import AbstractSnmpClient

# Module logger
logger = logging.getLogger(__name__)

T = TypeVar("T")

Retriever = Callable[[str], Union[Optional[str], Awaitable[Optional[str]]]]
"""Reads one OID and returns its raw value, synchronously or as an awaitable."""

ClientFactory = Callable[["DeviceConfig"], "AbstractSnmpClient"]

NOT_CONFIGURED_MESSAGE = "Equipment not configured"
INCOMPLETE_CONFIGURATION_MESSAGE = "Incomplete configuration"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def default_client_factory(config: DeviceConfig) -> AbstractSnmpClient:
    """Build a pysnmp client from a device configuration."""
    return AsyncSnmpClient(
        config.address,
        port=config.port,
        timeout=config.timeout,
        retries=config.retries,
    )


# (value, error) for one catalog item; both None means "skipped"
_ItemResult = tuple[Optional[T], Optional[str]]


class CollectionPipeline:
    """
    Collects critical telemetry from one exciter per call.

    The pipeline holds no per-cycle state. Concurrent collect() calls are
    safe unless the caller's retrieval channel is not; pass a shared
    asyncio.Lock to serialize cycles against the same device.

    Attributes:
        catalog: Read-only catalog shared by every cycle.
        max_concurrency: Maximum in-flight retrievals per phase.
        timeout: Per-request timeout handed to the SNMP client.
    """

    def __init__(
        self,
        catalog: Catalog,
        *,
        max_concurrency: int = 1,
        lock: asyncio.Lock | None = None,
        timeout: float | None = None,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        """
        Initialize the pipeline.

        Args:
            catalog: Catalog built once at startup.
            max_concurrency: Retrievals allowed in flight at once. 1 reads
                items one at a time in catalog order.
            lock: Optional lock held for the whole cycle.
            timeout: Per-request timeout in seconds for poll(). None uses
                the device configuration's timeout.
            clock: Source of snapshot timestamps.

        Raises:
            ValueError: If max_concurrency is less than 1.
        """
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")

        self._catalog = catalog
        self._max_concurrency = max_concurrency
        self._lock = lock
        self._timeout = timeout
        self._clock = clock

    @property
    def catalog(self) -> Catalog:
        """Get the catalog."""
        return self._catalog

    @property
    def max_concurrency(self) -> int:
        """Get the retrieval fan-out limit."""
        return self._max_concurrency

    @property
    def timeout(self) -> float | None:
        """Get the per-request timeout override."""
        return self._timeout

    async def collect(
        self,
        device_address: str | None,
        community: str | None,
        retrieve: Retriever,
    ) -> Snapshot:
        """
        Run one collection cycle.

        Args:
            device_address: Device host, used for reporting.
            community: SNMP community, used for reporting.
            retrieve: Reads one OID from the device.

        Returns:
            A complete Snapshot. Unconfigured devices yield configured=False.
        """
        if not device_address or not community:
            logger.debug("Skipping collection: %s", INCOMPLETE_CONFIGURATION_MESSAGE)
            return self.unconfigured(INCOMPLETE_CONFIGURATION_MESSAGE)

        if self._lock is None:
            return await self._collect(device_address, community, retrieve)

        async with self._lock:
            return await self._collect(device_address, community, retrieve)

    async def poll(
        self,
        config: DeviceConfig | None,
        client: AbstractSnmpClient,
    ) -> Snapshot:
        """
        Run one collection cycle using a device configuration and client.

        Args:
            config: Device configuration, or None if none is stored.
            client: Open SNMP client for the device.

        Returns:
            A complete Snapshot.
        """
        if config is None:
            return self.unconfigured(NOT_CONFIGURED_MESSAGE)

        timeout = self._timeout if self._timeout is not None else config.timeout
        community = config.community

        async def retrieve(oid: str) -> str:
            return await client.get(oid, community, timeout=timeout)

        return await self.collect(config.address, community, retrieve)

    async def stream(
        self,
        source: ConfigSource,
        client_factory: ClientFactory = default_client_factory,
        interval: float = SnmpConstants.DEFAULT_POLL_INTERVAL,
        max_cycles: int | None = None,
    ) -> AsyncGenerator[Snapshot, None]:
        """
        Collect repeatedly at a fixed interval.

        The configuration is reloaded before every cycle, so edits take
        effect on the next cycle. A fresh client is opened per cycle; if it
        cannot be opened, that cycle's Snapshot carries the failure in
        errors and polling continues.

        Args:
            source: Configuration source.
            client_factory: Builds a client for a configuration.
            interval: Seconds between cycle starts.
            max_cycles: Stop after this many cycles. None runs forever.

        Yields:
            One Snapshot per cycle.
        """
        loop = asyncio.get_running_loop()
        cycle = 0
        logger.info("Polling every %.1fs", interval)

        while max_cycles is None or cycle < max_cycles:
            started = loop.time()

            try:
                config = source.load()
            except ConfigurationError as e:
                logger.error("Cannot load configuration: %s", e)
                snapshot = self.unconfigured(str(e))
            else:
                if config is None:
                    snapshot = self.unconfigured(NOT_CONFIGURED_MESSAGE)
                elif not config.is_complete:
                    snapshot = self.unconfigured(INCOMPLETE_CONFIGURATION_MESSAGE)
                else:
                    try:
                        async with client_factory(config) as client:
                            snapshot = await self.poll(config, client)
                    except ExciterMonError as e:
                        logger.error("Collection from %s failed: %s", config.address, e)
                        snapshot = self._failed(config, str(e))

            yield snapshot
            cycle += 1

            if max_cycles is not None and cycle >= max_cycles:
                break

            elapsed = loop.time() - started
            if elapsed > interval:
                logger.warning("Collection overrun: %.1fs > %.1fs", elapsed, interval)
            await asyncio.sleep(max(0.0, interval - elapsed))

    def unconfigured(self, message: str) -> Snapshot:
        """Build the Snapshot reported when no device is configured."""
        return Snapshot(configured=False, message=message, timestamp=self._clock())

    def _failed(self, config: DeviceConfig, message: str) -> Snapshot:
        # configured device whose client could not be used this cycle
        return Snapshot(
            configured=True,
            errors=(f"Collection failed: {message}",),
            device_address=config.address,
            community=config.community,
            timestamp=self._clock(),
        )

    async def _collect(
        self,
        device_address: str,
        community: str,
        retrieve: Retriever,
    ) -> Snapshot:
        measurement_keys = self._catalog.critical_keys(DefinitionKind.MEASUREMENT)
        alarm_keys = self._catalog.critical_keys(DefinitionKind.ALARM)
        logger.info(
            "Collecting %d measurements and %d alarms from %s",
            len(measurement_keys),
            len(alarm_keys),
            device_address,
        )

        measurement_results = await self._run_items(
            measurement_keys, lambda key: self._read_measurement(key, retrieve)
        )
        alarm_results = await self._run_items(
            alarm_keys, lambda key: self._read_alarm(key, retrieve)
        )

        measurements: dict[str, MeasurementReading] = {}
        alarms: dict[str, AlarmStatus] = {}
        errors: list[str] = []

        for reading, error in measurement_results:
            if reading is not None:
                measurements[reading.key] = reading
            if error is not None:
                errors.append(error)

        for status, error in alarm_results:
            if status is not None:
                alarms[status.key] = status
            if error is not None:
                errors.append(error)

        snapshot = Snapshot(
            configured=True,
            measurements=measurements,
            alarms=alarms,
            errors=tuple(errors),
            device_address=device_address,
            community=community,
            timestamp=self._clock(),
        )
        logger.info(
            "Collected %d/%d measurements, %d/%d alarms from %s (%d errors)",
            len(measurements),
            len(measurement_keys),
            len(alarms),
            len(alarm_keys),
            device_address,
            len(errors),
        )
        return snapshot

    async def _run_items(
        self,
        keys: Sequence[str],
        read: Callable[[str], Awaitable[T]],
    ) -> list[T]:
        """
        Read every key, at most max_concurrency at a time.

        Results are returned in key order.
        """
        if self._max_concurrency == 1:
            return [await read(key) for key in keys]

        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def bounded(key: str) -> T:
            async with semaphore:
                return await read(key)

        return list(await asyncio.gather(*(bounded(key) for key in keys)))

    async def _read_measurement(
        self,
        key: str,
        retrieve: Retriever,
    ) -> _ItemResult[MeasurementReading]:
        definition = self._catalog.measurement(key)
        if definition is None:
            logger.debug("Skipping unknown measurement %s", key)
            return None, None

        try:
            raw = await self._retrieve(retrieve, definition.oid)
            value = apply_rule(definition, raw)
        except Exception as e:
            logger.warning("Failed to read %s (%s): %s", key, definition.oid, e)
            return None, f"Failed to read {definition.name}: {e}"

        logger.debug("%s = %s %s (raw %s)", key, value, definition.unit, raw)
        reading = MeasurementReading(
            key=key,
            value=value,
            unit=definition.unit,
            name=definition.name,
            description=definition.description,
            type=definition.type,
            raw=raw,
        )
        return reading, None

    async def _read_alarm(
        self,
        key: str,
        retrieve: Retriever,
    ) -> _ItemResult[AlarmStatus]:
        definition = self._catalog.alarm(key)
        if definition is None:
            logger.debug("Skipping unknown alarm %s", key)
            return None, None

        try:
            raw = await self._retrieve(retrieve, definition.oid)
            status = build_status(definition, raw)
        except Exception as e:
            logger.warning("Failed to read alarm %s (%s): %s", key, definition.oid, e)
            return None, f"Failed to read alarm {definition.name}: {e}"

        if status.active:
            logger.debug("Alarm %s active (%s)", key, definition.severity.value)
        return status, None

    @staticmethod
    async def _retrieve(retrieve: Retriever, oid: str) -> str:
        result = retrieve(oid)
        if inspect.isawaitable(result):
            result = await result
        if result is None:
            raise RetrievalError("No value returned", oid=oid)
        return str(result)

    def __repr__(self) -> str:
        return (
            f"CollectionPipeline({self._catalog!r}, "
            f"max_concurrency={self._max_concurrency}, "
            f"locked={self._lock is not None})"
        )


async def collect(
    catalog: Catalog,
    device_address: str | None,
    community: str | None,
    retrieve: Retriever,
    **options,
) -> Snapshot:
    """
    Run one collection cycle with a throwaway pipeline.

    Args:
        catalog: Catalog built once at startup.
        device_address: Device host.
        community: SNMP community.
        retrieve: Reads one OID from the device.
        **options: Forwarded to CollectionPipeline.

    Returns:
        A complete Snapshot.
    """
    return await CollectionPipeline(catalog, **options).collect(
        device_address, community, retrieve
    )
