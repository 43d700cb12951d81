"""Application settings loaded from environment variables via pydantic-settings.

# ─── HOW SETTINGS WORK ────────────────────────────────────────────────
#
# pydantic-settings reads configuration from TWO sources (in priority order):
#
#   1. **Environment variables** - e.g., BOORU_BASE_URL=https://...
#   2. **.env file** - key=value lines in the project root .env file
#
# Field ``booru_base_url`` maps to env var ``BOORU_BASE_URL``.  Defaults
# below apply when neither source sets a value.
#
# Behavioural tuning (batch size, result cap, selection whitelist) lives in
# config/config.yaml instead; see kexplorer/config/loader.py.
# ──────────────────────────────────────────────────────────────────────
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """kexplorer application settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # === Search API ===
    booru_base_url: str = "https://danbooru.donmai.us"
    user_agent: str = "kexplorer/0.1.0"
    http_timeout_seconds: float = 30.0
    probe_timeout_seconds: float = 10.0

    # === Storage ===
    durable_cache_db_path: str = "data/image_cache.db"
    # Directory or http(s) base URL holding artists.json and friends.
    data_source: str = "data"

    # === App Config ===
    app_env: str = "development"
    log_level: str = "INFO"
