"""Tests for the collection pipeline."""

import asyncio
from datetime import datetime, timezone

import pytest

from excitermon.collector import (
    INCOMPLETE_CONFIGURATION_MESSAGE,
    NOT_CONFIGURED_MESSAGE,
    CollectionPipeline,
    collect,
)
from excitermon.config import ConfigSource, DeviceConfig, StaticConfigSource
from excitermon.exceptions import ConfigurationError, TimeoutError, TransportError
from excitermon.models.records import DefinitionKind
from excitermon.transport.mock import MockSnmpClient

ADDRESS = "192.168.1.50"
COMMUNITY = "public"


def _retriever(client, timeout=None):
    async def retrieve(oid):
        return await client.get(oid, COMMUNITY, timeout=timeout)

    return retrieve


class TestUnconfigured:
    """Tests for cycles without a usable configuration."""

    @pytest.fixture
    def pipeline(self, catalog, fixed_clock):
        """Create a pipeline with a fixed clock."""
        return CollectionPipeline(catalog, clock=fixed_clock)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("address,community", [("", COMMUNITY), (ADDRESS, ""), (None, None)])
    async def test_missing_settings(
        self, pipeline, mock_client, fixed_clock, address, community
    ):
        """Test a missing address or community performs no retrieval."""
        snapshot = await pipeline.collect(address, community, _retriever(mock_client))

        assert snapshot.configured is False
        assert snapshot.message == INCOMPLETE_CONFIGURATION_MESSAGE
        assert snapshot.measurements == {}
        assert snapshot.alarms == {}
        assert snapshot.errors == ()
        assert snapshot.timestamp == fixed_clock()
        mock_client.assert_request_count(0)

    @pytest.mark.asyncio
    async def test_poll_without_config(self, pipeline, mock_client):
        """Test polling with no stored configuration."""
        snapshot = await pipeline.poll(None, mock_client)

        assert snapshot.configured is False
        assert snapshot.message == NOT_CONFIGURED_MESSAGE
        mock_client.assert_request_count(0)

    def test_invalid_concurrency(self, catalog):
        """Test max_concurrency must be positive."""
        with pytest.raises(ValueError):
            CollectionPipeline(catalog, max_concurrency=0)


class TestCollect:
    """Tests for a full collection cycle."""

    @pytest.fixture
    def pipeline(self, catalog, fixed_clock):
        """Create a sequential pipeline with a fixed clock."""
        return CollectionPipeline(catalog, clock=fixed_clock)

    @pytest.mark.asyncio
    async def test_all_items_collected(self, pipeline, catalog, mock_client, fixed_clock):
        """Test a healthy device yields every critical item."""
        snapshot = await pipeline.collect(ADDRESS, COMMUNITY, _retriever(mock_client))

        assert snapshot.configured is True
        assert snapshot.errors == ()
        assert list(snapshot.measurements) == list(
            catalog.critical_keys(DefinitionKind.MEASUREMENT)
        )
        assert list(snapshot.alarms) == list(catalog.critical_keys(DefinitionKind.ALARM))
        assert snapshot.device_address == ADDRESS
        assert snapshot.community == COMMUNITY
        assert snapshot.timestamp == fixed_clock()

    @pytest.mark.asyncio
    async def test_values_formatted(self, pipeline, mock_client):
        """Test readings are formatted and keep their raw value."""
        snapshot = await pipeline.collect(ADDRESS, COMMUNITY, _retriever(mock_client))

        forward = snapshot.measurements["forwardPower"]
        assert forward.value == "84.50"
        assert forward.raw == "8450"
        assert forward.unit == "W"
        assert forward.name == "Forward Power"
        assert snapshot.measurements["satelliteTunerStatus"].value == "Locked"

    @pytest.mark.asyncio
    async def test_alarm_states(self, pipeline, mock_client):
        """Test alarm activation from raw flags."""
        snapshot = await pipeline.collect(ADDRESS, COMMUNITY, _retriever(mock_client))

        assert snapshot.alarms["outputPowerZero"].active is True
        assert snapshot.alarms["fpgaCommun"].active is False
        assert [s.key for s in snapshot.active_alarms] == ["outputPowerZero"]
        assert snapshot.has_critical_alarm is True

    @pytest.mark.asyncio
    async def test_requests_in_catalog_order(self, pipeline, catalog, mock_client):
        """Test sequential cycles read measurements first, in order."""
        await pipeline.collect(ADDRESS, COMMUNITY, _retriever(mock_client))

        expected = [
            catalog.measurement(key).oid
            for key in catalog.critical_keys(DefinitionKind.MEASUREMENT)
        ] + [catalog.alarm(key).oid for key in catalog.critical_keys(DefinitionKind.ALARM)]
        assert mock_client.requested_oids == expected

    @pytest.mark.asyncio
    async def test_measurement_failure_isolated(self, pipeline, catalog, mock_client):
        """Test one failed retrieval does not abort the cycle."""
        oid = catalog.measurement("reflectedPower").oid
        mock_client.add_failure(oid, TimeoutError(oid=oid, timeout_seconds=5.0))

        snapshot = await pipeline.collect(ADDRESS, COMMUNITY, _retriever(mock_client))

        total = len(catalog.critical_keys(DefinitionKind.MEASUREMENT))
        assert len(snapshot.measurements) == total - 1
        assert "reflectedPower" not in snapshot.measurements
        assert len(snapshot.errors) == 1
        assert snapshot.errors[0].startswith("Failed to read Reflected Power:")
        assert "timed out" in snapshot.errors[0]

    @pytest.mark.asyncio
    async def test_format_failure_isolated(self, pipeline, catalog, mock_client):
        """Test a non-integer response is recorded as an error."""
        mock_client.add_response(catalog.measurement("paCurrent").oid, "N/A")

        snapshot = await pipeline.collect(ADDRESS, COMMUNITY, _retriever(mock_client))

        assert "paCurrent" not in snapshot.measurements
        assert len(snapshot.errors) == 1
        assert "PA Current" in snapshot.errors[0]
        assert "forwardPower" in snapshot.measurements

    @pytest.mark.asyncio
    async def test_alarm_failure_isolated(self, pipeline, catalog, mock_client):
        """Test a failed alarm read is recorded with the alarm prefix."""
        mock_client.add_failure(
            catalog.alarm("fpgaCommun").oid, ConnectionResetError("connection reset")
        )

        snapshot = await pipeline.collect(ADDRESS, COMMUNITY, _retriever(mock_client))

        assert "fpgaCommun" not in snapshot.alarms
        assert snapshot.errors == (
            f"Failed to read alarm {catalog.alarm('fpgaCommun').name}: connection reset",
        )

    @pytest.mark.asyncio
    async def test_missing_oid_recorded(self, pipeline, catalog, device_responses):
        """Test an OID the agent does not have is recorded as an error."""
        del device_responses[catalog.alarm("v50EqpFail").oid]
        client = MockSnmpClient(responses=device_responses)

        snapshot = await pipeline.collect(ADDRESS, COMMUNITY, _retriever(client))

        assert "v50EqpFail" not in snapshot.alarms
        assert len(snapshot.errors) == 1
        assert "No such object" in snapshot.errors[0]

    @pytest.mark.asyncio
    async def test_deterministic(self, pipeline, mock_client):
        """Test identical responses give identical snapshots."""
        first = await pipeline.collect(ADDRESS, COMMUNITY, _retriever(mock_client))
        second = await pipeline.collect(ADDRESS, COMMUNITY, _retriever(mock_client))

        assert first == second

    @pytest.mark.asyncio
    async def test_sync_retriever(self, catalog, device_responses, fixed_clock):
        """Test a plain function can serve as the retriever."""
        snapshot = await collect(
            catalog, ADDRESS, COMMUNITY, device_responses.get, clock=fixed_clock
        )

        assert snapshot.errors == ()
        assert snapshot.measurements["forwardPower"].value == "84.50"

    @pytest.mark.asyncio
    async def test_none_result_is_error(self, pipeline, catalog, device_responses):
        """Test a retriever returning None is recorded as an error."""
        oid = catalog.measurement("forwardPower").oid
        del device_responses[oid]

        snapshot = await pipeline.collect(ADDRESS, COMMUNITY, device_responses.get)

        assert "forwardPower" not in snapshot.measurements
        assert len(snapshot.errors) == 1
        assert "No value returned" in snapshot.errors[0]

    @pytest.mark.asyncio
    async def test_unknown_key_skipped(self, pipeline, mock_client):
        """Test keys missing from the catalog produce neither reading nor error."""
        result = await pipeline._read_measurement("noSuchKey", _retriever(mock_client))

        assert result == (None, None)
        mock_client.assert_request_count(0)

    @pytest.mark.asyncio
    async def test_oversized_values_recorded(self, pipeline, catalog):
        """Test digit strings past the conversion limit never abort the cycle."""

        async def retrieve(oid):
            return "9" * 5000

        snapshot = await pipeline.collect(ADDRESS, COMMUNITY, retrieve)

        assert snapshot.configured is True
        assert list(snapshot.alarms) == list(catalog.critical_keys(DefinitionKind.ALARM))
        assert snapshot.active_alarms == []
        assert "forwardPower" not in snapshot.measurements
        assert any("Forward Power" in error for error in snapshot.errors)

    @pytest.mark.asyncio
    async def test_timestamp_taken_after_retrievals(self, catalog, device_responses):
        """Test the clock is read once, after the last retrieval."""
        events = []

        def clock():
            events.append("clock")
            return datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)

        def retrieve(oid):
            events.append(oid)
            return device_responses[oid]

        pipeline = CollectionPipeline(catalog, clock=clock)
        await pipeline.collect(ADDRESS, COMMUNITY, retrieve)

        assert events.count("clock") == 1
        assert events[-1] == "clock"
        assert len(events) == len(device_responses) + 1


class TestConcurrency:
    """Tests for fan-out, locking and cancellation."""

    @pytest.mark.asyncio
    async def test_fan_out_preserves_order(self, catalog, device_responses, fixed_clock):
        """Test concurrent retrieval keeps catalog order in the snapshot."""
        client = MockSnmpClient(responses=device_responses, delay=0.01)
        sequential = CollectionPipeline(catalog, clock=fixed_clock)
        concurrent = CollectionPipeline(catalog, max_concurrency=4, clock=fixed_clock)

        expected = await sequential.collect(ADDRESS, COMMUNITY, _retriever(client))
        actual = await concurrent.collect(ADDRESS, COMMUNITY, _retriever(client))

        assert list(actual.measurements) == list(expected.measurements)
        assert list(actual.alarms) == list(expected.alarms)
        assert actual == expected

    @pytest.mark.asyncio
    async def test_fan_out_limit(self, catalog, device_responses):
        """Test no more than max_concurrency retrievals run at once."""
        in_flight = 0
        peak = 0

        async def retrieve(oid):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.005)
            in_flight -= 1
            return device_responses[oid]

        pipeline = CollectionPipeline(catalog, max_concurrency=3)
        snapshot = await pipeline.collect(ADDRESS, COMMUNITY, retrieve)

        assert snapshot.errors == ()
        assert 1 < peak <= 3

    @pytest.mark.asyncio
    async def test_lock_serializes_cycles(self, catalog, mock_client):
        """Test a held lock delays the cycle until released."""
        lock = asyncio.Lock()
        pipeline = CollectionPipeline(catalog, lock=lock)

        await lock.acquire()
        task = asyncio.create_task(
            pipeline.collect(ADDRESS, COMMUNITY, _retriever(mock_client))
        )
        await asyncio.sleep(0.01)

        assert not task.done()
        mock_client.assert_request_count(0)

        lock.release()
        snapshot = await task

        assert snapshot.configured is True
        assert not lock.locked()

    @pytest.mark.asyncio
    async def test_cancellation_propagates(self, catalog, device_responses):
        """Test a cancelled cycle raises instead of returning a partial snapshot."""
        client = MockSnmpClient(responses=device_responses, delay=0.05)
        pipeline = CollectionPipeline(catalog, max_concurrency=2)

        task = asyncio.create_task(pipeline.collect(ADDRESS, COMMUNITY, _retriever(client)))
        await asyncio.sleep(0.01)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task


class TestPoll:
    """Tests for poll() with a device configuration."""

    @pytest.mark.asyncio
    async def test_config_timeout_passed(self, catalog, mock_client):
        """Test the configured timeout reaches every request."""
        pipeline = CollectionPipeline(catalog)
        config = DeviceConfig(address=ADDRESS, community="private", timeout=2.5)

        snapshot = await pipeline.poll(config, mock_client)

        assert snapshot.configured is True
        assert snapshot.community == "private"
        assert {r.timeout for r in mock_client.requests} == {2.5}
        assert {r.community for r in mock_client.requests} == {"private"}

    @pytest.mark.asyncio
    async def test_pipeline_timeout_overrides(self, catalog, mock_client):
        """Test the pipeline timeout takes precedence over the config."""
        pipeline = CollectionPipeline(catalog, timeout=1.0)
        config = DeviceConfig(address=ADDRESS, community=COMMUNITY, timeout=2.5)

        await pipeline.poll(config, mock_client)

        assert {r.timeout for r in mock_client.requests} == {1.0}

    @pytest.mark.asyncio
    async def test_incomplete_config(self, catalog, mock_client):
        """Test a config without community is reported as incomplete."""
        pipeline = CollectionPipeline(catalog)

        snapshot = await pipeline.poll(DeviceConfig(address=ADDRESS), mock_client)

        assert snapshot.configured is False
        assert snapshot.message == INCOMPLETE_CONFIGURATION_MESSAGE


class _BrokenSource(ConfigSource):
    def load(self):
        raise ConfigurationError("Cannot read config.json")


class _UnreachableClient(MockSnmpClient):
    async def open(self):
        raise TransportError("Failed to create SNMP engine: no route")


class TestStream:
    """Tests for periodic collection."""

    @pytest.mark.asyncio
    async def test_single_cycle(self, catalog, mock_client):
        """Test one cycle opens a client and yields a snapshot."""
        pipeline = CollectionPipeline(catalog)
        source = StaticConfigSource(DeviceConfig(address=ADDRESS, community=COMMUNITY))
        built = []

        def factory(config):
            built.append(config)
            return mock_client

        snapshots = [s async for s in pipeline.stream(source, factory, interval=0, max_cycles=1)]

        assert len(snapshots) == 1
        assert snapshots[0].configured is True
        assert built[0].address == ADDRESS
        assert mock_client.is_open is False

    @pytest.mark.asyncio
    async def test_multiple_cycles(self, catalog, mock_client):
        """Test the client is reopened on every cycle."""
        pipeline = CollectionPipeline(catalog)
        source = StaticConfigSource(DeviceConfig(address=ADDRESS, community=COMMUNITY))

        snapshots = [
            s
            async for s in pipeline.stream(
                source, lambda config: mock_client, interval=0, max_cycles=2
            )
        ]

        assert [s.configured for s in snapshots] == [True, True]
        assert len(mock_client.requests) == 2 * (
            len(catalog.critical_keys(DefinitionKind.MEASUREMENT))
            + len(catalog.critical_keys(DefinitionKind.ALARM))
        )

    @pytest.mark.asyncio
    async def test_no_config(self, catalog):
        """Test a missing configuration yields an unconfigured snapshot."""
        pipeline = CollectionPipeline(catalog)

        def factory(config):
            raise AssertionError("client should not be built")

        snapshots = [
            s
            async for s in pipeline.stream(
                StaticConfigSource(None), factory, interval=0, max_cycles=1
            )
        ]

        assert snapshots[0].configured is False
        assert snapshots[0].message == NOT_CONFIGURED_MESSAGE

    @pytest.mark.asyncio
    async def test_broken_config(self, catalog):
        """Test a malformed configuration is reported, not raised."""
        pipeline = CollectionPipeline(catalog)

        snapshots = [
            s
            async for s in pipeline.stream(
                _BrokenSource(), lambda config: None, interval=0, max_cycles=1
            )
        ]

        assert snapshots[0].configured is False
        assert "Cannot read config.json" in snapshots[0].message

    @pytest.mark.asyncio
    async def test_client_failure_continues(self, catalog, mock_client):
        """Test a client that cannot open is reported and polling goes on."""
        pipeline = CollectionPipeline(catalog)
        source = StaticConfigSource(DeviceConfig(address=ADDRESS, community=COMMUNITY))
        clients = iter([_UnreachableClient(), mock_client])

        snapshots = [
            s
            async for s in pipeline.stream(
                source, lambda config: next(clients), interval=0, max_cycles=2
            )
        ]

        assert len(snapshots) == 2
        assert snapshots[0].configured is True
        assert snapshots[0].measurements == {}
        assert snapshots[0].device_address == ADDRESS
        assert len(snapshots[0].errors) == 1
        assert "no route" in snapshots[0].errors[0]
        assert snapshots[1].errors == ()
        assert "forwardPower" in snapshots[1].measurements
