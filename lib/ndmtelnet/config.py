"""Configuration management for the NDM telnet client."""

import ipaddress
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from lib.ndmtelnet.exceptions import ConfigurationError
from lib.ndmtelnet.source import MAX_COMMAND_LENGTH

DEFAULT_ADDRESS = "192.168.1.1"
DEFAULT_PORT = 23
DEFAULT_USER = "admin"
DEFAULT_PASSWORD = ""
DEFAULT_TIMEOUT = 10000

# Inclusive bounds of the I/O timeout, milliseconds
MIN_TIMEOUT = 100
MAX_TIMEOUT = 3600000


def is_unicast(address: ipaddress.IPv4Address) -> bool:
    """Check whether an IPv4 address can name a single device.

    Parameters
    ----------
    address : ipaddress.IPv4Address
        Address to check

    Returns
    -------
    bool
        False for 0.0.0.0, 255.255.255.255 and multicast addresses
    """
    value = int(address)
    if value in (0x00000000, 0xFFFFFFFF):
        return False
    return (value & 0xF0000000) != 0xE0000000


class NdmTelnetConfig(BaseSettings):
    """Client configuration, validated before any network activity."""

    model_config = SettingsConfigDict(
        env_prefix="NDMTELNET_",
        case_sensitive=False,
        extra="ignore",
    )

    # Device
    address: str = Field(default=DEFAULT_ADDRESS, description="Device IPv4 address")
    port: int = Field(default=DEFAULT_PORT, ge=0, le=65535, description="Telnet port")
    user: str = Field(default=DEFAULT_USER, description="User name")
    password: str = Field(default=DEFAULT_PASSWORD, description="User password")
    timeout: int = Field(default=DEFAULT_TIMEOUT, description="I/O timeout in milliseconds")

    # Commands
    command: str = Field(default="", description="Command to execute")
    file_name: str = Field(default="", description="File name with a command set")
    show_responses: bool = Field(default=False, description="Show XML responses")

    # Logging
    log_level: str = Field(default="WARNING", description="Logging level")
    log_json: bool = Field(default=False, description="Enable JSON logging")
    log_file: str | None = Field(default=None, description="Log file path")

    @field_validator("address")
    @classmethod
    def _check_address(cls, value: str) -> str:
        try:
            address = ipaddress.IPv4Address(value)
        except ipaddress.AddressValueError as e:
            raise ValueError(f'Invalid IP address: "{value}"') from e

        if not is_unicast(address):
            raise ValueError(f"{address} IP address is not unicast")
        return str(address)

    @field_validator("timeout")
    @classmethod
    def _check_timeout(cls, value: int) -> int:
        if not MIN_TIMEOUT <= value <= MAX_TIMEOUT:
            raise ValueError(
                f"A timeout value should be between [{MIN_TIMEOUT}, {MAX_TIMEOUT}] milliseconds"
            )
        return value

    @field_validator("command")
    @classmethod
    def _check_command(cls, value: str) -> str:
        if "\n" in value.strip():
            raise ValueError("A command must be a single line")
        if len(value.strip()) > MAX_COMMAND_LENGTH:
            raise ValueError(f"A command must not exceed {MAX_COMMAND_LENGTH} characters")
        return value

    @model_validator(mode="after")
    def _check_sources(self) -> "NdmTelnetConfig":
        if self.command and self.file_name:
            raise ValueError("Both a command and a file name specified")
        return self

    @classmethod
    def load_from_yaml(cls, path: str | Path, **overrides: Any) -> "NdmTelnetConfig":
        """Load configuration from YAML file.

        Parameters
        ----------
        path : str | Path
            Path to YAML file
        **overrides : Any
            Values taking precedence over the file

        Returns
        -------
        NdmTelnetConfig
            Loaded configuration

        Raises
        ------
        ConfigurationError
            If the file or its ndmtelnet section is not a mapping
        """
        yaml_path = Path(path)
        with open(yaml_path, "r") as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ConfigurationError(f'"{yaml_path}" must contain a mapping')

        # Extract ndmtelnet section if present
        section = data.get("ndmtelnet", {})
        if not section:
            section = data

        if not isinstance(section, dict):
            raise ConfigurationError(f'"{yaml_path}": ndmtelnet section must be a mapping')

        return cls(**{**section, **overrides})


def load_config(config_file: str | Path | None = None, **overrides: Any) -> NdmTelnetConfig:
    """Load and validate configuration.

    Values come from, in increasing precedence: defaults, environment
    variables, the YAML file, and ``overrides``.

    Parameters
    ----------
    config_file : str | Path | None, optional
        Path to YAML config file, by default None
    **overrides : Any
        Explicit values, usually from the command line

    Returns
    -------
    NdmTelnetConfig
        Validated configuration

    Raises
    ------
    ConfigurationError
        If a value is invalid or the file cannot be read
    """
    try:
        if config_file:
            return NdmTelnetConfig.load_from_yaml(config_file, **overrides)
        return NdmTelnetConfig(**overrides)
    except ValidationError as e:
        raise ConfigurationError(_describe(e)) from e
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f'Unable to load "{config_file}": {e}') from e


def _describe(error: ValidationError) -> str:
    messages = []
    for item in error.errors():
        message = item["msg"].removeprefix("Value error, ")
        field = ".".join(str(part) for part in item["loc"])
        messages.append(f"{field}: {message}" if field else message)
    return "; ".join(messages)
