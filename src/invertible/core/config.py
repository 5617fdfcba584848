# src/invertible/core/config.py
"""
Settings for inversion and logging.

Uses Pydantic for validation and Dynaconf for multi-source loading.
Settings are frozen (immutable) after construction.

Example YAML:
    logging:
      level: DEBUG
      json_output: true
    inversion:
      unknown_kind: error
      log_elisions: true
"""

import os
import re
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


class LoggingSettings(BaseModel):
    """Logging output configuration (see core.logging)."""

    model_config = {"frozen": True, "extra": "forbid"}

    level: str = Field(default="WARNING", description="Root log level")
    json_output: bool = Field(default=False, description="Emit JSON lines instead of console output")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        normalized = v.upper()
        if normalized not in _LOG_LEVELS:
            raise ValueError(f"Unknown log level '{v}'. Expected one of: {', '.join(sorted(_LOG_LEVELS))}")
        return normalized


class InversionSettings(BaseModel):
    """Inverter behaviour.

    unknown_kind:
    - passthrough: nodes of a kind the inverter does not know are
      returned unchanged, like leaves
    - error: such nodes raise UnsupportedSchemaKindError

    Leaf kinds are returned unchanged under either policy.
    """

    model_config = {"frozen": True, "extra": "forbid"}

    unknown_kind: Literal["passthrough", "error"] = Field(
        default="passthrough",
        description="What to do with nodes of an unrecognised kind",
    )
    log_elisions: bool = Field(
        default=False,
        description="Log a debug event for every elidable effect dropped during inversion",
    )


class InvertibleSettings(BaseModel):
    """Top-level settings document."""

    model_config = {"frozen": True, "extra": "forbid"}

    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    inversion: InversionSettings = Field(default_factory=InversionSettings)


# Regex pattern for ${VAR} or ${VAR:-default} syntax
_ENV_VAR_PATTERN = re.compile(r"\$\{([A-Z_][A-Z0-9_]*)(?::-([^}]*))?\}")


def _expand_env_vars(config: dict[str, Any]) -> dict[str, Any]:
    """Recursively expand ${VAR} and ${VAR:-default} patterns in config values.

    Unset variables without a default are left as-is so validation
    reports them.
    """

    def replacer(match: re.Match[str]) -> str:
        env_value = os.environ.get(match.group(1))
        if env_value is not None:
            return env_value
        default = match.group(2)
        return default if default is not None else match.group(0)

    def _expand_value(value: Any) -> Any:
        if isinstance(value, str):
            return _ENV_VAR_PATTERN.sub(replacer, value)
        elif isinstance(value, dict):
            return {k: _expand_value(v) for k, v in value.items()}
        elif isinstance(value, list):
            return [_expand_value(item) for item in value]
        else:
            return value

    return {k: _expand_value(v) for k, v in config.items()}


def _lower_keys(value: Any) -> Any:
    if isinstance(value, dict):
        return {str(k).lower(): _lower_keys(v) for k, v in value.items()}
    return value


def load_settings(config_path: Path) -> InvertibleSettings:
    """Load settings from a YAML file with environment variable overrides.

    Precedence:
    1. Environment variables (INVERTIBLE_*) - highest priority
    2. Config file
    3. Defaults from the Pydantic models - lowest priority

    Environment variable format: INVERTIBLE_INVERSION__unknown_kind for nested keys
    (nested key names are case-sensitive and match the YAML keys).

    Raises:
        ValidationError: If configuration fails Pydantic validation
        FileNotFoundError: If config file doesn't exist
    """
    from dynaconf import Dynaconf

    # Dynaconf silently accepts missing files
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    dynaconf_settings = Dynaconf(
        envvar_prefix="INVERTIBLE",
        settings_files=[str(config_path)],
        environments=False,
        load_dotenv=False,
        merge_enabled=True,
    )

    # Dynaconf returns uppercase keys; filter out its own bookkeeping
    internal_keys = {"LOAD_DOTENV", "ENVIRONMENTS", "SETTINGS_FILES"}
    raw_config = {k: v for k, v in dynaconf_settings.as_dict().items() if k not in internal_keys}
    raw_config = _lower_keys(raw_config)
    raw_config = _expand_env_vars(raw_config)

    return InvertibleSettings(**raw_config)
