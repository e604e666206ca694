"""
Device configuration sources.

The collection pipeline never reads configuration itself; callers obtain a
DeviceConfig from a ConfigSource and hand it over. A missing configuration
is reported as an unconfigured Snapshot, not as an error.

JsonConfigStore reads and writes a small JSON document:

    {"ip": "192.168.1.50", "community": "public"}

The legacy key "comunidade" is accepted for the community string.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

from excitermon.exceptions import ConfigurationError
from excitermon.protocol.constants import SnmpConstants

logger = logging.getLogger(__name__)


class DeviceConfig(BaseModel):
    """
    Connection settings for one exciter.

    Example:
        >>> config = DeviceConfig(address="192.168.1.50", community="public")
        >>> config.is_complete
        True
    """

    model_config = ConfigDict(frozen=True)

    address: str = Field(
        default="",
        validation_alias=AliasChoices("address", "ip"),
        serialization_alias="ip",
        description="Device host name or IP address",
    )
    community: str = Field(
        default="",
        validation_alias=AliasChoices("community", "comunidade"),
        description="SNMP v2c read community",
    )
    port: int = Field(default=SnmpConstants.DEFAULT_PORT, ge=1, le=65535)
    timeout: float = Field(default=SnmpConstants.DEFAULT_TIMEOUT, gt=0)
    retries: int = Field(default=SnmpConstants.DEFAULT_RETRIES, ge=0)

    @property
    def is_complete(self) -> bool:
        """Check if both address and community are set."""
        return bool(self.address.strip()) and bool(self.community.strip())

    def __repr__(self) -> str:
        # community is a credential
        return f"DeviceConfig(address={self.address!r}, port={self.port})"


class ConfigSource(ABC):
    """Supplies the device configuration, or None when absent."""

    @abstractmethod
    def load(self) -> DeviceConfig | None:
        """
        Load the current configuration.

        Returns:
            The configuration, or None if none is stored.

        Raises:
            ConfigurationError: If stored configuration is malformed.
        """
        ...


class StaticConfigSource(ConfigSource):
    """Config source returning a fixed value."""

    def __init__(self, config: DeviceConfig | None) -> None:
        self._config = config

    def load(self) -> DeviceConfig | None:
        return self._config


class JsonConfigStore(ConfigSource):
    """
    Config source backed by a JSON file.

    Example:
        >>> store = JsonConfigStore("config.json")
        >>> store.save(DeviceConfig(address="192.168.1.50", community="public"))
        >>> store.load().address
        '192.168.1.50'
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        """Get the backing file path."""
        return self._path

    def exists(self) -> bool:
        """Check if a configuration file is present."""
        return self._path.is_file()

    def load(self) -> DeviceConfig | None:
        """
        Read the configuration file.

        Returns:
            The configuration, or None if the file does not exist.

        Raises:
            ConfigurationError: If the file is not valid JSON or has invalid fields.
        """
        if not self.exists():
            logger.debug("No configuration at %s", self._path)
            return None

        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Cannot read {self._path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"{self._path} must contain a JSON object")

        try:
            return DeviceConfig.model_validate(data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration in {self._path}: {e}") from e

    def save(self, config: DeviceConfig) -> None:
        """
        Write the configuration file, replacing any previous content.

        Raises:
            ConfigurationError: If the file cannot be written.
        """
        payload = config.model_dump(mode="json", by_alias=True)
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        except OSError as e:
            raise ConfigurationError(f"Cannot write {self._path}: {e}") from e
        logger.info("Saved device configuration for %s to %s", config.address, self._path)

    def __repr__(self) -> str:
        return f"JsonConfigStore({str(self._path)!r})"
