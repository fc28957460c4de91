"""
System configuration for lupo.

One configuration for the whole tool, loaded from YAML. Lookup order:

1. Explicit path passed to load_system_config()
2. LUPO_CONFIG environment variable
3. lupo.yaml in the application directory (click.get_app_dir("lupo"))
4. Built-in defaults

The portfolio home directory defaults to the application directory and can
be overridden with LUPO_HOME or the CLI --directory option.

Example lupo.yaml:

    home: ~/portfolio
    pricing:
      base_currency: USD
      currencies: [EUR, GBP, CHF]
      max_workers: 8
      timeout_seconds: 10
    valuation:
      stale_after_days: 5
      closed_threshold: 0.01
    logging:
      level: INFO
"""

import os
from pathlib import Path

import click
import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from lupo.errors import ParseError, StoreIOError
from lupo.system.log_system import LoggingConfig

APP_NAME = "lupo"
CONFIG_FILENAME = "lupo.yaml"
CONFIG_ENV = "LUPO_CONFIG"
HOME_ENV = "LUPO_HOME"


class PricingConfig(BaseModel):
    """Quote refresh settings."""

    base_currency: str = Field(default="USD", description="Currency all valuations are normalized to")
    currencies: list[str] = Field(
        default_factory=lambda: ["EUR", "GBP", "CHF", "JPY", "CAD"],
        description="Foreign currencies always refreshed against the base currency",
    )
    max_workers: int = Field(default=8, ge=1, description="Maximum concurrent quote retrievals")
    timeout_seconds: float = Field(default=10.0, gt=0, description="Per-call quote retrieval timeout")
    period: str = Field(default="5d", description="History window requested per symbol")

    @field_validator("base_currency")
    @classmethod
    def validate_base_currency(cls, v: str) -> str:
        """Normalize currency code to upper case."""
        if not v.strip():
            raise ValueError("base_currency cannot be empty")
        return v.strip().upper()

    @field_validator("currencies")
    @classmethod
    def validate_currencies(cls, v: list[str]) -> list[str]:
        """Normalize currency codes to upper case."""
        return [c.strip().upper() for c in v if c.strip()]


class ValuationConfig(BaseModel):
    """Valuation and filtering settings."""

    stale_after_days: int = Field(default=5, ge=0, description="Quotes older than this are flagged stale")
    closed_threshold: float = Field(default=0.01, ge=0, description="|units| below this is a closed position")


class SystemConfig(BaseModel):
    """Complete lupo configuration."""

    home: Path = Field(default_factory=lambda: Path(click.get_app_dir(APP_NAME)))
    pricing: PricingConfig = Field(default_factory=PricingConfig)
    valuation: ValuationConfig = Field(default_factory=ValuationConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("home")
    @classmethod
    def expand_home(cls, v: Path) -> Path:
        """Expand ~ in the home directory."""
        return Path(v).expanduser()

    @classmethod
    def from_yaml(cls, path: Path) -> "SystemConfig":
        """Load configuration from YAML file."""
        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except OSError as e:
            raise StoreIOError(f"Cannot read config file {path}") from e
        except yaml.YAMLError as e:
            raise ParseError("Invalid YAML", path=path) from e

        if not isinstance(data, dict):
            raise ParseError("Config root must be a mapping", path=path)
        try:
            return cls(**data)
        except ValidationError as e:
            raise ParseError("Invalid configuration", path=path) from e


def _resolve_config_path(path: Path | None) -> Path | None:
    if path is not None:
        return path
    env_path = os.environ.get(CONFIG_ENV)
    if env_path:
        return Path(env_path).expanduser()
    default = Path(click.get_app_dir(APP_NAME)) / CONFIG_FILENAME
    if default.exists():
        return default
    return None


def load_system_config(path: Path | None = None) -> SystemConfig:
    """
    Load configuration from the first file found in the lookup order.

    Args:
        path: Optional explicit YAML path

    Returns:
        SystemConfig with LUPO_HOME applied on top of file values
    """
    config_path = _resolve_config_path(path)
    config = SystemConfig.from_yaml(config_path) if config_path is not None else SystemConfig()

    home_override = os.environ.get(HOME_ENV)
    if home_override:
        config = config.model_copy(update={"home": Path(home_override).expanduser()})
    return config
