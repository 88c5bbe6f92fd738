"""
rangeswap Engine Configuration

Settings are layered, later layers winning:
1. Defaults on ``EngineConfig``
2. A YAML file
3. Environment variables (RANGESWAP_*), optionally seeded from a .env file

Example:
    RANGESWAP_LOG_LEVEL=DEBUG
    RANGESWAP_FEE_TIERS=500,3000
"""

import os
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from dotenv import load_dotenv

from .constants import FEE_DENOMINATOR, FEE_TIERS
from .exceptions import ConfigurationError

ENV_PREFIX = "RANGESWAP_"

VALID_ENVIRONMENTS = ("development", "staging", "production", "testnet")
VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class EngineConfig:
    """Engine settings"""
    environment: str = "development"
    log_level: str = "INFO"
    log_file: Optional[str] = None
    fee_tiers: List[int] = field(default_factory=lambda: sorted(FEE_TIERS))
    metrics_enabled: bool = False

    def validate(self):
        """Validate engine configuration"""
        if self.environment not in VALID_ENVIRONMENTS:
            raise ConfigurationError(
                f"Invalid environment: {self.environment}. Must be one of {', '.join(VALID_ENVIRONMENTS)}"
            )
        if not isinstance(self.log_level, str) or self.log_level.upper() not in VALID_LOG_LEVELS:
            raise ConfigurationError(f"Invalid log_level: {self.log_level}")
        if not self.fee_tiers:
            raise ConfigurationError("fee_tiers must not be empty")
        for fee in self.fee_tiers:
            if not isinstance(fee, int) or isinstance(fee, bool) or not 0 < fee < FEE_DENOMINATOR:
                raise ConfigurationError(
                    f"Invalid fee tier: {fee}. Must be an integer in (0, {FEE_DENOMINATOR})"
                )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def load_config(
    path: Optional[Union[str, Path]] = None,
    env_file: Optional[Union[str, Path]] = None,
    environ: Optional[Dict[str, str]] = None,
) -> EngineConfig:
    """
    Build and validate an ``EngineConfig``.

    Args:
        path: YAML file with top-level keys matching ``EngineConfig`` fields
        env_file: .env file loaded into the process environment first
        environ: Environment mapping to read instead of ``os.environ``

    Raises:
        ConfigurationError: On unreadable files, unknown keys or invalid values
    """
    values: Dict[str, Any] = {}

    if path is not None:
        values.update(_load_yaml(Path(path)))

    if env_file is not None:
        load_dotenv(env_file, override=False)

    values.update(_env_overrides(os.environ if environ is None else environ))

    known = {f.name for f in fields(EngineConfig)}
    unknown = sorted(set(values) - known)
    if unknown:
        raise ConfigurationError(f"Unknown configuration keys: {', '.join(unknown)}")

    config = EngineConfig(**values)
    config.log_level = str(config.log_level).upper()
    config.validate()
    return config


def _load_yaml(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Cannot read config file {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping")
    return data


def _env_overrides(environ: Dict[str, str]) -> Dict[str, Any]:
    """Collect RANGESWAP_* variables as config values"""
    overrides: Dict[str, Any] = {}
    for key, value in environ.items():
        if not key.startswith(ENV_PREFIX):
            continue
        name = key[len(ENV_PREFIX):].lower()
        if name == "fee_tiers":
            overrides[name] = _parse_fee_tiers(value)
        elif name == "log_file":
            overrides[name] = value or None
        else:
            overrides[name] = _parse_env_value(value)
    return overrides


def _parse_fee_tiers(value: str) -> List[int]:
    try:
        return [int(part) for part in value.split(",") if part.strip()]
    except ValueError as exc:
        raise ConfigurationError(f"Invalid RANGESWAP_FEE_TIERS: {value}") from exc


def _parse_env_value(value: str) -> Union[str, int, bool]:
    """
    Parse environment variable value to appropriate type

    Args:
        value: String value from environment variable

    Returns:
        Parsed value
    """
    # Boolean
    if value.lower() in ("true", "yes", "on"):
        return True
    if value.lower() in ("false", "no", "off"):
        return False

    # Integer
    try:
        return int(value)
    except ValueError:
        pass

    return value
