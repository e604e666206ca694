"""
Exception hierarchy for excitermon.

All exceptions inherit from ExciterMonError. The hierarchy separates:

1. Retrieval errors (timeouts, SNMP error responses) raised by protocol clients
2. Format errors raised when a raw response does not fit a measurement rule
3. Catalog errors raised while building the static definition catalog
4. Configuration errors raised by configuration stores

Retrieval and format errors are recorded per item by the collection
pipeline and never abort a collection cycle.
"""

from __future__ import annotations


class ExciterMonError(Exception):
    """
    Base exception for all excitermon errors.

    Callers can catch every library-specific error with a single except clause.
    """

    pass


class RetrievalError(ExciterMonError):
    """
    A single OID could not be read from the device.

    Raised by protocol clients when the device is unreachable, answers with
    an error, or returns no usable value.
    """

    def __init__(self, message: str, *, oid: str | None = None) -> None:
        super().__init__(message)
        self.oid = oid

    def __str__(self) -> str:
        base = super().__str__()
        if self.oid:
            return f"{base} (oid={self.oid})"
        return base


class TimeoutError(RetrievalError):  # noqa: A001 - intentionally shadows builtin
    """
    The device did not answer within the configured timeout.
    """

    def __init__(
        self,
        message: str = "SNMP request timed out",
        *,
        oid: str | None = None,
        timeout_seconds: float | None = None,
    ) -> None:
        super().__init__(message, oid=oid)
        self.timeout_seconds = timeout_seconds

    def __str__(self) -> str:
        base = super().__str__()
        if self.timeout_seconds is not None:
            return f"{base} (after {self.timeout_seconds:.1f}s)"
        return base


class SnmpError(RetrievalError):
    """
    The device answered with an SNMP error status.

    The error_status attribute holds the agent-reported status text
    (e.g. "noSuchName") and error_index the offending varbind position.
    """

    def __init__(
        self,
        message: str,
        *,
        oid: str | None = None,
        error_status: str | None = None,
        error_index: int | None = None,
    ) -> None:
        super().__init__(message, oid=oid)
        self.error_status = error_status
        self.error_index = error_index


class FormatError(ExciterMonError):
    """
    A raw response could not be interpreted under a measurement's rule.

    Raised when a scale-factor measurement receives a non-integer response.
    """

    def __init__(
        self,
        message: str,
        *,
        key: str | None = None,
        raw_data: str | None = None,
    ) -> None:
        super().__init__(message)
        self.key = key
        self.raw_data = raw_data

    def __str__(self) -> str:
        parts = [super().__str__()]
        if self.key:
            parts.append(f"key={self.key}")
        if self.raw_data is not None:
            display_data = self.raw_data[:40] + "..." if len(self.raw_data) > 40 else self.raw_data
            parts.append(f"raw={display_data!r}")
        return " ".join(parts) if len(parts) > 1 else parts[0]


class CatalogError(ExciterMonError):
    """
    Catalog integrity violation.

    Raised at catalog construction for duplicate keys or critical keys
    that have no matching definition.
    """

    pass


class ConfigurationError(ExciterMonError):
    """
    Stored device configuration is malformed.
    """

    pass


class TransportError(ExciterMonError):
    """
    Protocol client misuse or engine failure.

    Raised when a client is used before it is opened, or the underlying
    SNMP engine cannot be set up.
    """

    pass
