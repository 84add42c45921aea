"""Centralized application configuration."""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, computed_field

DEFAULT_DATA_DIR = Path.home() / ".local" / "mb-routeros"

API_PORT = 8728
API_TLS_PORT = 8729

# config.toml keys and the types they must have to be picked up
_TOML_KEYS: dict[str, type | tuple[type, ...]] = {
    "address": str,
    "user": str,
    "password": str,
    "use_tls": bool,
    "port": int,
    "timeout": (int, float),
    "probe_timeout": (int, float),
    "verbose": bool,
    "tls_verify": bool,
    "tls_ca_file": str,
}


class Config(BaseModel):
    """Connection parameters and application paths."""

    model_config = ConfigDict(frozen=True)

    data_dir: Path = Field(description="Base directory for config and log files")
    address: str = Field(default="", description="Appliance host name or IP address")
    user: str = Field(default="admin", description="Login name")
    password: str = Field(default="", repr=False, description="Login password")
    use_tls: bool = Field(default=False, description="Connect to the TLS API service")
    port: int | None = Field(default=None, ge=1, le=65535, description="API port (default depends on use_tls)")
    timeout: float | None = Field(default=10.0, gt=0, description="Socket timeout in seconds (None = block)")
    probe_timeout: float = Field(default=2.0, gt=0, description="Deadline for probe() in seconds")
    verbose: bool = Field(default=False, description="Log protocol traffic at INFO instead of DEBUG")
    tls_verify: bool = Field(default=True, description="Verify the appliance TLS certificate")
    tls_ca_file: Path | None = Field(default=None, description="CA bundle used for TLS verification")

    @computed_field(description="TCP port actually used")
    @property
    def api_port(self) -> int:
        """TCP port actually used."""
        if self.port is not None:
            return self.port
        return API_TLS_PORT if self.use_tls else API_PORT

    @computed_field(description="Optional TOML configuration file")
    @property
    def config_path(self) -> Path:
        """Optional TOML configuration file."""
        return self.data_dir / "config.toml"

    @computed_field(description="Log file")
    @property
    def log_path(self) -> Path:
        """Log file."""
        return self.data_dir / "routeros.log"

    @staticmethod
    def build(data_dir: Path | None = None, **overrides: Any) -> Config:  # noqa: ANN401
        """Build a Config from defaults, optional config.toml and explicit overrides.

        Overrides set to None are ignored, so unset CLI options fall through to the file.
        """
        resolved_dir = data_dir if data_dir is not None else DEFAULT_DATA_DIR
        config_path = resolved_dir / "config.toml"

        kwargs: dict[str, Any] = {"data_dir": resolved_dir}
        if config_path.is_file():
            with config_path.open("rb") as f:
                toml_data = tomllib.load(f)
            for key, expected in _TOML_KEYS.items():
                if isinstance(toml_data.get(key), expected):
                    kwargs[key] = toml_data[key]
        kwargs.update({key: value for key, value in overrides.items() if value is not None})

        return Config(**kwargs)
