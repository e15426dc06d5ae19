"""
Central configuration for chorebot.
Uses Pydantic BaseSettings for type-safe configuration from environment variables.
"""

import json
import os
from functools import cached_property
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve .env relative to this file (chorebot/config.py → project root)
_ENV_FILE = Path(__file__).parent.parent / ".env"


def _load_env_file() -> None:
    """
    Load .env into os.environ, but only for keys that are currently unset
    or set to empty strings. This ensures .env values win over blank shell
    env vars (e.g. OPENAI_API_KEY='') while still allowing explicit
    non-empty shell overrides.
    """
    if not _ENV_FILE.exists():
        return
    from dotenv import dotenv_values
    for key, value in dotenv_values(_ENV_FILE).items():
        if value and not os.environ.get(key):
            os.environ[key] = value


# Run at import time so Settings() sees the correct values
_load_env_file()


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Slack
    slack_bot_token: str = ""
    slack_signing_secret: str = ""
    slack_command: str = "/chores"
    slack_defer_commands: bool = True
    slack_reminder_channel: str = ""
    slack_api_base: str = "https://slack.com/api"

    # OpenAI-compatible completion provider
    openai_api_key: str = ""
    openai_base_url: str = "https://api.openai.com/v1"
    openai_model: str = "gpt-4o"

    # Google Calendar (service account)
    # Either the raw JSON key in GCP_SERVICE_ACCOUNT or a path to the key file.
    gcp_service_account: str = ""
    gcp_service_account_file: str = ""
    calendar_id: str = "primary"
    calendar_timezone: str = "America/New_York"

    # Chore state
    state_name: str = "chore-state"
    # Bearer token guarding the state write API; empty disables writes
    state_api_token: str = ""

    # Scheduler (cron in scheduler_timezone)
    reminder_cron: str = "0 8,18 * * *"
    scheduler_timezone: str = "America/New_York"

    # Environment
    data_dir: str = "./data"
    host: str = "0.0.0.0"
    port: int = 8080

    # Logging
    log_level: str = "INFO"
    json_logs: bool = False

    # ── Timeouts (seconds) ──────────────────────────────────────────────────────
    openai_timeout: float = 60.0
    slack_timeout: float = 10.0

    # ── Agent loop ──────────────────────────────────────────────────────────────
    max_tool_iterations: int = 5

    @field_validator("max_tool_iterations")
    @classmethod
    def _positive_iterations(cls, v: int) -> int:
        if v < 1:
            raise ValueError("max_tool_iterations must be at least 1")
        return v

    @field_validator("slack_command")
    @classmethod
    def _command_has_slash(cls, v: str) -> str:
        v = v.strip()
        return v if v.startswith("/") else f"/{v}"

    @property
    def db_path(self) -> str:
        return os.path.join(self.data_dir, "chorebot.db")

    @property
    def logs_dir(self) -> str:
        return os.path.join(self.data_dir, "logs")

    @cached_property
    def gcp_service_account_info(self) -> dict | None:
        """
        Parsed service account key, or None when calendar access is not set up.

        The inline JSON wins over the key file when both are present.
        """
        raw = self.gcp_service_account.strip()
        if not raw and self.gcp_service_account_file:
            with open(self.gcp_service_account_file, encoding="utf-8") as f:
                raw = f.read().strip()
        if not raw:
            return None
        return json.loads(raw)

    @property
    def calendar_enabled(self) -> bool:
        return bool(self.gcp_service_account.strip() or self.gcp_service_account_file)


def get_settings() -> "Settings":
    """Return the application settings singleton."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


_settings: Settings | None = None


class _SettingsProxy:
    """Lazy proxy so `from chorebot.config import settings` works without eager init."""
    def __getattr__(self, name):
        return getattr(get_settings(), name)


settings = _SettingsProxy()  # type: ignore[assignment]
