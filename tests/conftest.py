"""Shared fixtures."""

from datetime import datetime, timezone

import pytest

from excitermon.catalog import create_default_catalog
from excitermon.models.records import DefinitionKind, EnumRule
from excitermon.transport.mock import MockSnmpClient

FIXED_TIME = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def catalog():
    """Create the default catalog."""
    return create_default_catalog()


@pytest.fixture
def device_responses(catalog):
    """Raw values for every critical OID of a healthy exciter with one alarm raised."""
    responses = {}
    for key in catalog.critical_keys(DefinitionKind.MEASUREMENT):
        definition = catalog.measurement(key)
        responses[definition.oid] = "1" if isinstance(definition.rule, EnumRule) else "8450"
    for key in catalog.critical_keys(DefinitionKind.ALARM):
        definition = catalog.alarm(key)
        responses[definition.oid] = "1" if key == "outputPowerZero" else "0"
    return responses


@pytest.fixture
def mock_client(device_responses):
    """Create a MockSnmpClient answering every critical OID."""
    return MockSnmpClient(host="192.168.1.50", responses=device_responses)


@pytest.fixture
def fixed_clock():
    """Clock that always returns the same instant."""
    return lambda: FIXED_TIME
