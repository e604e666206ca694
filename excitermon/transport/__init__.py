"""
SNMP clients used by the collection pipeline.

Available clients:
- AsyncSnmpClient: SNMP v2c over UDP using pysnmp
- MockSnmpClient: Canned responses for testing without a device

Example:
    >>> from excitermon.transport import AsyncSnmpClient
    >>> async with AsyncSnmpClient("192.168.1.50") as client:
    ...     raw = await client.get(oid, "public")
"""

from excitermon.transport.abc import AbstractSnmpClient
from excitermon.transport.mock import MockSnmpClient, RecordedRequest
from excitermon.transport.snmp_async import AsyncSnmpClient

__all__ = [
    "AbstractSnmpClient",
    "AsyncSnmpClient",
    "MockSnmpClient",
    "RecordedRequest",
]
