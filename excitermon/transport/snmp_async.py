"""
Async SNMP client using pysnmp.

Performs SNMP v2c GET requests over UDP. One SnmpEngine is created per
client on open() and shared by all requests; a transport target is built
per request so that a per-call timeout can override the client default.

Example:
    >>> client = AsyncSnmpClient("192.168.1.50", timeout=2.0)
    >>> async with client:
    ...     raw = await client.get("1.3.6.1.4.1.25026.7.1.2.1.2.0", "public")
"""

from __future__ import annotations

import logging
from typing import Any

from pysnmp.hlapi.v3arch.asyncio import (
    CommunityData,
    ContextData,
    ObjectIdentity,
    ObjectType,
    SnmpEngine,
    UdpTransportTarget,
    get_cmd,
)
from pysnmp.proto import errind
from pysnmp.proto.rfc1905 import EndOfMibView, NoSuchInstance, NoSuchObject

from excitermon.exceptions import RetrievalError, SnmpError, TimeoutError, TransportError
from excitermon.protocol.constants import SnmpConstants
from excitermon.transport.abc import AbstractSnmpClient

logger = logging.getLogger(__name__)

_MISSING_VALUE_TYPES = (NoSuchObject, NoSuchInstance, EndOfMibView)


class AsyncSnmpClient(AbstractSnmpClient):
    """
    SNMP v2c client backed by the pysnmp asyncio API.

    Attributes:
        host: Device address.
        port: Agent UDP port.
        is_open: Whether the SNMP engine is running.
    """

    def __init__(
        self,
        host: str,
        port: int = SnmpConstants.DEFAULT_PORT,
        timeout: float = SnmpConstants.DEFAULT_TIMEOUT,
        retries: int = SnmpConstants.DEFAULT_RETRIES,
    ) -> None:
        """
        Initialize the client.

        Args:
            host: Device host name or IP address.
            port: Agent UDP port (default: 161).
            timeout: Default request timeout in seconds.
            retries: Retransmissions before a request times out.
        """
        self._host = host
        self._port = port
        self._timeout = timeout
        self._retries = retries
        self._engine: SnmpEngine | None = None

    @property
    def host(self) -> str:
        """Get the device address."""
        return self._host

    @property
    def port(self) -> int:
        """Get the agent UDP port."""
        return self._port

    @property
    def is_open(self) -> bool:
        """Check if the SNMP engine is running."""
        return self._engine is not None

    async def open(self) -> None:
        """
        Create the SNMP engine.

        Raises:
            TransportError: If the engine cannot be created.
        """
        if self.is_open:
            return

        try:
            self._engine = SnmpEngine()
        except Exception as e:
            raise TransportError(f"Failed to create SNMP engine: {e}") from e
        logger.debug("SNMP engine ready for %s:%d", self._host, self._port)

    async def close(self) -> None:
        """Shut down the SNMP engine. Safe to call multiple times."""
        if self._engine is None:
            return

        try:
            self._engine.close_dispatcher()
        except Exception:
            logger.debug("Error closing SNMP dispatcher for %s", self._host, exc_info=True)
        finally:
            self._engine = None

    async def get(
        self,
        oid: str,
        community: str,
        timeout: float | None = None,
    ) -> str:
        """
        Read a single OID with SNMP v2c GET.

        Args:
            oid: Object identifier to read.
            community: Read community string.
            timeout: Request timeout in seconds. None uses the client default.

        Returns:
            The value rendered with pysnmp's prettyPrint().

        Raises:
            TimeoutError: If the agent does not answer in time.
            SnmpError: If the agent answers with an error status.
            RetrievalError: If the OID does not exist or the request fails.
            TransportError: If the client is not open.
        """
        if self._engine is None:
            raise TransportError("SNMP client is not open")

        effective_timeout = timeout if timeout is not None else self._timeout

        try:
            target = await UdpTransportTarget.create(
                (self._host, self._port),
                timeout=effective_timeout,
                retries=self._retries,
            )
            error_indication, error_status, error_index, var_binds = await get_cmd(
                self._engine,
                CommunityData(community),
                target,
                ContextData(),
                ObjectType(ObjectIdentity(oid)),
            )
        except Exception as e:
            raise RetrievalError(f"SNMP request failed: {e}", oid=oid) from e

        if error_indication:
            if isinstance(error_indication, errind.RequestTimedOut):
                raise TimeoutError(
                    "No SNMP response received",
                    oid=oid,
                    timeout_seconds=effective_timeout,
                )
            raise RetrievalError(str(error_indication), oid=oid)

        if error_status:
            status = error_status.prettyPrint()
            raise SnmpError(
                f"Agent reported {status}",
                oid=oid,
                error_status=status,
                error_index=int(error_index),
            )

        for _, value in var_binds:
            return self._render(oid, value)

        raise RetrievalError("No varbinds returned", oid=oid)

    @staticmethod
    def _render(oid: str, value: Any) -> str:
        if isinstance(value, _MISSING_VALUE_TYPES):
            raise RetrievalError(f"No such object ({type(value).__name__})", oid=oid)
        return value.prettyPrint()

    def __repr__(self) -> str:
        status = "open" if self.is_open else "closed"
        return f"AsyncSnmpClient({self._host!r}, port={self._port}, {status})"
