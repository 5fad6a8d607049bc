"""
Configuration loader for the auto builder.

Handles loading configuration from YAML files and environment variables.
"""

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .models import AutoBuilderConfig, ToolchainConfig


class ConfigurationError(Exception):
    """Raised when configuration is invalid."""

    pass


def _merge_toolchain(raw_toolchain: dict[str, Any] | None, environ: Mapping[str, str] | None):
    """Fill toolchain homes missing from the file with the environment values."""
    from_env = ToolchainConfig.from_env(environ).model_dump(exclude_none=True)
    merged = dict(from_env)
    merged.update({k: v for k, v in (raw_toolchain or {}).items() if v is not None})
    return merged


def load_config_from_yaml(
    config_path: Path, environ: Mapping[str, str] | None = None
) -> AutoBuilderConfig:
    """Load configuration from a YAML file."""
    if not config_path.exists():
        raise ConfigurationError(f"Configuration file not found: {config_path}")

    with open(config_path) as f:
        try:
            raw_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in configuration file: {e}")

    if raw_config is None:
        raise ConfigurationError("Configuration file is empty")

    if not isinstance(raw_config, dict):
        raise ConfigurationError("Configuration file must contain a mapping")

    raw_config["toolchain"] = _merge_toolchain(raw_config.get("toolchain"), environ)

    try:
        return AutoBuilderConfig(**raw_config)
    except ValidationError as e:
        raise ConfigurationError(f"Configuration validation failed:\n{e}")


def create_default_config(environ: Mapping[str, str] | None = None) -> AutoBuilderConfig:
    """Create configuration from defaults and environment variables."""
    return AutoBuilderConfig(toolchain=ToolchainConfig.from_env(environ))


def generate_default_config(output_path: Path) -> None:
    """Generate a default configuration file."""
    defaults = AutoBuilderConfig()
    default_config = {
        "toolchain": {
            "java_home": None,
            "java_8_home": None,
            "java_latest_home": None,
            "java_17_home": None,
            "java_11_home": None,
        },
        "repositories": {
            "gradle_cache": str(defaults.repositories.gradle_cache),
            "maven_repository": str(defaults.repositories.maven_repository),
        },
        "gradle": defaults.gradle.model_dump(),
        "maven": defaults.maven.model_dump(),
    }

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        yaml.dump(default_config, f, default_flow_style=False, sort_keys=False)
