"""YAML configuration loader with environment variable overrides.

# ─── CONFIGURATION HIERARCHY ───────────────────────────────────────────
#
# Configuration is loaded in layers (later layers override earlier):
#
#   1. config/config.yaml  - Static tuning defaults checked into the repo
#   2. .env file           - Local developer overrides (not committed)
#   3. Environment vars    - Set at deploy time
#
# load_config() reads the YAML file first, then deep-merges the
# environment-based values from Settings on top:
#   base = {"batch": {"size": 5}}
#   overrides = {"app": {"env": "production"}}
#   result = {"batch": {"size": 5}, "app": {"env": "production"}}
# ──────────────────────────────────────────────────────────────────────
"""

from pathlib import Path

import yaml

from kexplorer.config.settings import Settings
from kexplorer.utils.errors import ConfigurationError


def load_config(path: str = "config/config.yaml", settings: Settings | None = None) -> dict:
    """Load YAML config and merge with environment-based Settings.

    Environment variables (via Settings) override YAML values where keys overlap.

    Args:
        path: Path to the YAML configuration file.  A missing file yields the
              env-derived values only; every consumer has built-in defaults.
        settings: Settings instance to merge.  A fresh one is read from the
                  environment when omitted.

    Returns:
        Fully resolved configuration dictionary.

    Raises:
        ConfigurationError: If the YAML file cannot be parsed or is not a mapping.
    """
    config_path = Path(path)
    if config_path.exists():
        try:
            with open(config_path) as f:
                yaml_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ConfigurationError(message=f"Invalid YAML in {config_path}: {exc}") from exc
        if not isinstance(yaml_config, dict):
            raise ConfigurationError(
                message=f"{config_path} must contain a mapping at the top level"
            )
    else:
        yaml_config = {}

    settings = settings or Settings()
    env_overrides = {
        "app": {
            "env": settings.app_env,
        },
        "api": {
            "base_url": settings.booru_base_url,
            "user_agent": settings.user_agent,
            "timeout_seconds": settings.http_timeout_seconds,
            "probe_timeout_seconds": settings.probe_timeout_seconds,
        },
        "storage": {
            "durable_cache_db_path": settings.durable_cache_db_path,
            "data_source": settings.data_source,
        },
        "logging": {
            "level": settings.log_level,
        },
    }

    _deep_merge(yaml_config, env_overrides)
    return yaml_config


def _deep_merge(base: dict, overrides: dict) -> None:
    """Recursively merge overrides into base dict, mutating base in place."""
    for key, value in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
