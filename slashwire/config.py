"""Configuration management for slashwire.

Loads ``settings.yaml`` and ``.env`` from a config directory into a
Config object with typed property accessors. Environment variables
take precedence over settings for the Discord credentials.

The library itself never reads configuration implicitly; Config is
used by the ``slashwire-sync`` console script and by applications that
want the same layout.

Key classes:
    Config: Central configuration manager.

Key functions:
    get_config: Accessor for a process-wide Config instance.
"""

import os
import re
from pathlib import Path
from typing import Optional

import structlog
import yaml
from dotenv import load_dotenv

from .client import DEFAULT_API_BASE_URL

logger = structlog.get_logger("slashwire")

_SNOWFLAKE = re.compile(r"^\d{15,25}$")


class Config:
    """Central configuration manager for slashwire.

    Args:
        config_dir: Directory holding settings.yaml and .env. Defaults
            to ``./config`` relative to the working directory.
    """

    def __init__(self, config_dir: Optional[Path] = None):
        if config_dir is None:
            config_dir = Path.cwd() / "config"
        self.config_dir = Path(config_dir)

        env_file = self.config_dir / ".env"
        if env_file.exists():
            load_dotenv(env_file)

        self.settings = self._load_yaml("settings.yaml")

    def _load_yaml(self, filename: str) -> dict:
        """Load a YAML configuration file."""
        filepath = self.config_dir / filename
        if filepath.exists():
            with open(filepath, "r") as f:
                return yaml.safe_load(f) or {}
        return {}

    @property
    def discord_token(self) -> str:
        """Bot token. Only read from the environment (DISCORD_TOKEN)."""
        return os.environ.get("DISCORD_TOKEN", "")

    @property
    def application_id(self) -> str:
        """Application id. Env var DISCORD_APPLICATION_ID takes precedence."""
        configured = os.environ.get("DISCORD_APPLICATION_ID") or self.settings.get("application_id", "")
        return str(configured) if configured else ""

    @property
    def default_guild_id(self) -> str:
        """Guild used for sync when none is given (empty = global)."""
        configured = os.environ.get("DISCORD_GUILD_ID") or self.settings.get("default_guild_id", "")
        return str(configured) if configured else ""

    @property
    def api_base_url(self) -> str:
        return self.settings.get("api_base_url", DEFAULT_API_BASE_URL)

    @property
    def request_timeout(self) -> float:
        """Total REST request timeout in seconds (default 10)."""
        return float(self.settings.get("request_timeout", 10))

    @property
    def log_dir(self) -> Path:
        """Get log directory path."""
        configured = self.settings.get("log_dir")
        if configured:
            return Path(configured).expanduser()
        return Path.cwd() / "logs"

    @property
    def logging_level(self) -> str:
        """Global log level (default INFO). Controls console and combined file."""
        log_config = self.settings.get("logging", {})
        return log_config.get("level", "INFO")

    @property
    def logging_subsystem_levels(self) -> dict:
        """Per-subsystem log level overrides. E.g. {"dispatch": "DEBUG"}."""
        log_config = self.settings.get("logging", {})
        return log_config.get("subsystem_levels", {})

    @property
    def logging_max_file_size_mb(self) -> int:
        """Max size per log file in MB before rotation (default 10)."""
        log_config = self.settings.get("logging", {})
        return log_config.get("max_file_size_mb", 10)

    @property
    def logging_backup_count(self) -> int:
        """Number of rotated log files to keep (default 5)."""
        log_config = self.settings.get("logging", {})
        return log_config.get("backup_count", 5)

    def validate(self) -> None:
        """Check critical settings at startup.

        Logs warnings/errors but does not raise; the console script
        decides what is fatal.
        """
        if not self.discord_token:
            logger.warning("no_discord_token", msg="Publishing commands will fail")

        for key, value in (
            ("application_id", self.application_id),
            ("default_guild_id", self.default_guild_id),
        ):
            if value and not _SNOWFLAKE.match(value):
                logger.error("config_invalid_value", key=key, value=value, valid="snowflake id")

        timeout = self.settings.get("request_timeout")
        if timeout is not None and (
            not isinstance(timeout, (int, float)) or timeout <= 0
        ):
            logger.error("config_invalid_value", key="request_timeout", value=timeout, valid="> 0")


# Global config instance
_config: Optional[Config] = None


def get_config(config_dir: Optional[Path] = None) -> Config:
    """Get or create the global config instance."""
    global _config
    if _config is None:
        _config = Config(config_dir)
    return _config
