"""
Mock SNMP client for testing.

Responses are configured per OID; failures can be scripted per OID as
exceptions. Every request is recorded for verification.

Example:
    >>> from excitermon.transport import MockSnmpClient
    >>>
    >>> mock = MockSnmpClient()
    >>> mock.add_response("1.3.6.1.4.1.25026.7.1.2.1.2.0", "8450")
    >>> mock.add_failure("1.3.6.1.4.1.25026.7.1.2.1.3.0", TimeoutError())
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Callable

from excitermon.exceptions import RetrievalError, TransportError
from excitermon.transport.abc import AbstractSnmpClient


@dataclass(frozen=True)
class RecordedRequest:
    """A GET request seen by the mock."""

    oid: str
    community: str
    timeout: float | None


class MockSnmpClient(AbstractSnmpClient):
    """
    Mock SNMP client for testing without a device.

    Unknown OIDs raise RetrievalError, like an agent answering noSuchObject.
    The client starts open so it can be used without a context manager.

    Attributes:
        requests: All GET requests in call order.

    Example:
        >>> mock = MockSnmpClient(responses={"1.3.6.1.2.1.1.5.0": "exciter"})
        >>> await mock.get("1.3.6.1.2.1.1.5.0", "public")
        'exciter'
        >>> mock.requested_oids
        ['1.3.6.1.2.1.1.5.0']
    """

    def __init__(
        self,
        host: str = "mock://exciter",
        responses: dict[str, str] | None = None,
        delay: float = 0.0,
    ) -> None:
        """
        Initialize the mock client.

        Args:
            host: Identifier for the mock device.
            responses: Initial OID to raw value mapping.
            delay: Seconds each request sleeps before answering.
        """
        self._host = host
        self._is_open = True
        self._responses: dict[str, str] = dict(responses or {})
        self._failures: dict[str, Exception] = {}
        self._requests: list[RecordedRequest] = []
        self._delay = delay
        self._response_callback: Callable[[str], str | None] | None = None

    @property
    def host(self) -> str:
        """Get the mock device identifier."""
        return self._host

    @property
    def is_open(self) -> bool:
        """Check if the mock client is open."""
        return self._is_open

    @property
    def requests(self) -> list[RecordedRequest]:
        """Get all recorded requests."""
        return self._requests.copy()

    @property
    def requested_oids(self) -> list[str]:
        """Get the OIDs requested, in call order."""
        return [request.oid for request in self._requests]

    def add_response(self, oid: str, raw: str) -> None:
        """
        Set the raw value returned for an OID.

        Clears any failure scripted for the same OID.
        """
        self._failures.pop(oid, None)
        self._responses[oid] = raw

    def add_responses(self, responses: dict[str, str]) -> None:
        """Set raw values for several OIDs."""
        for oid, raw in responses.items():
            self.add_response(oid, raw)

    def add_failure(self, oid: str, error: Exception) -> None:
        """
        Make requests for an OID raise an exception.

        Args:
            oid: Object identifier.
            error: Exception raised on every request for oid.
        """
        self._failures[oid] = error

    def set_response_callback(self, callback: Callable[[str], str | None] | None) -> None:
        """
        Set a callback to generate responses dynamically.

        The callback receives the OID and returns the raw value. If it
        returns None, the configured responses are used instead.
        """
        self._response_callback = callback

    def clear(self) -> None:
        """Clear responses, failures and recorded requests."""
        self._responses.clear()
        self._failures.clear()
        self._requests.clear()

    async def open(self) -> None:
        """Open the mock client."""
        self._is_open = True

    async def close(self) -> None:
        """Close the mock client."""
        self._is_open = False

    async def get(
        self,
        oid: str,
        community: str,
        timeout: float | None = None,
    ) -> str:
        """
        Return the configured value for an OID.

        Raises:
            TransportError: If the client is closed.
            RetrievalError: If the OID has no configured value.
            Exception: Whatever was scripted with add_failure().
        """
        if not self._is_open:
            raise TransportError("Mock client not open")

        self._requests.append(RecordedRequest(oid=oid, community=community, timeout=timeout))

        if self._delay:
            await asyncio.sleep(self._delay)

        if oid in self._failures:
            raise self._failures[oid]

        if self._response_callback:
            generated = self._response_callback(oid)
            if generated is not None:
                return generated

        if oid not in self._responses:
            raise RetrievalError("No such object", oid=oid)
        return self._responses[oid]

    def assert_requested(self, oid: str) -> None:
        """
        Assert that an OID was requested at least once.

        Raises:
            AssertionError: If the OID was never requested.
        """
        if oid not in self.requested_oids:
            raise AssertionError(f"OID {oid} was never requested")

    def assert_request_count(self, expected: int) -> None:
        """
        Assert the number of GET requests.

        Raises:
            AssertionError: If count doesn't match.
        """
        actual = len(self._requests)
        if actual != expected:
            raise AssertionError(f"Request count mismatch: expected {expected}, got {actual}")

    def __repr__(self) -> str:
        return f"MockSnmpClient({self._host!r}, responses={len(self._responses)})"
