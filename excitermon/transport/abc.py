"""
Abstract SNMP client interface.

Clients perform single-value GET requests against one device. The
collection pipeline only depends on this interface, so tests can swap in
MockSnmpClient and deployments use AsyncSnmpClient (pysnmp).

Implementations:
- AsyncSnmpClient: pysnmp asyncio SNMP v2c client
- MockSnmpClient: canned responses for testing
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from types import TracebackType


class AbstractSnmpClient(ABC):
    """
    Abstract base class for SNMP clients.

    Clients support the async context manager protocol:

        async with AsyncSnmpClient("10.0.0.5") as client:
            raw = await client.get(oid, "public")

    Attributes:
        host: Address of the managed device.
        is_open: Whether the client is ready for requests.
    """

    @property
    @abstractmethod
    def host(self) -> str:
        """
        Get the device address this client talks to.

        Returns:
            Host name or IP address.
        """
        ...

    @property
    @abstractmethod
    def is_open(self) -> bool:
        """Check if the client is ready for requests."""
        ...

    @abstractmethod
    async def open(self) -> None:
        """
        Prepare the client for requests.

        Raises:
            TransportError: If the underlying engine cannot be created.
        """
        ...

    @abstractmethod
    async def close(self) -> None:
        """
        Release client resources.

        Safe to call multiple times.
        """
        ...

    @abstractmethod
    async def get(
        self,
        oid: str,
        community: str,
        timeout: float | None = None,
    ) -> str:
        """
        Read a single OID.

        Args:
            oid: Object identifier to read.
            community: SNMP v2c community string.
            timeout: Request timeout in seconds. None uses the client default.

        Returns:
            The value rendered as text.

        Raises:
            TimeoutError: If the device does not answer in time.
            SnmpError: If the device answers with an error status.
            RetrievalError: If the value is missing or the request fails.
            TransportError: If the client is not open.
        """
        ...

    async def __aenter__(self) -> AbstractSnmpClient:
        """Async context manager entry - opens the client."""
        await self.open()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Async context manager exit - closes the client."""
        await self.close()
