"""
Configuration management for PostgreSQL Backup Manager
"""

import os
from pathlib import Path
from typing import Callable, Dict, List, Optional

from dotenv import dotenv_values, load_dotenv
from pydantic import ValidationError

from ..exceptions import ConfigurationError
from .models import Configuration
from ..utils.logger import get_logger
from ..utils.validation import validate_port, validate_retention_days, validate_time_hhmm

logger = get_logger(__name__)

SYSTEM_CONFIG_PATH = Path("/etc/pg_backup_manager.conf")
USER_CONFIG_PATH = Path("~/.config/pg_backup_manager.conf")

# File key -> Configuration field, in the order they are written
CONFIG_KEYS = {
    "DB_NAME": "db_name",
    "DB_USER": "db_user",
    "DB_HOST": "db_host",
    "DB_PORT": "db_port",
    "BACKUP_DIR": "backup_dir",
    "RETENTION_DAYS": "retention_days",
    "CRON_TIME": "cron_time",
}


def is_privileged() -> bool:
    """True when running with an effective uid of 0"""
    return hasattr(os, "geteuid") and os.geteuid() == 0


def default_config_path() -> Path:
    """System-wide path for root, per-user path otherwise"""
    if is_privileged():
        return SYSTEM_CONFIG_PATH
    return USER_CONFIG_PATH.expanduser()


def _time_errors(value: str) -> List[str]:
    if validate_time_hhmm(value):
        return []
    return ["time must be in HH:MM format (for example 02:00)"]


class ConfigManager:
    """Loads, prompts for and saves the key=value configuration file"""

    def __init__(self, config_file: Optional[Path] = None):
        self.config_file = Path(config_file) if config_file else default_config_path()

        # A .env in the working directory may carry PGPASSWORD for the client tools
        load_dotenv()

    def load(self) -> Configuration:
        """Return the defaults overridden by whatever the file defines"""
        config = Configuration()
        if not self.config_file.is_file():
            logger.debug(f"No config file at {self.config_file}, using defaults")
            return config

        values = dotenv_values(self.config_file, interpolate=False)
        overrides = {
            field: values[key]
            for key, field in CONFIG_KEYS.items()
            if values.get(key) is not None
        }

        try:
            return Configuration(**{**config.model_dump(), **overrides})
        except ValidationError as e:
            raise ConfigurationError(f"invalid value in {self.config_file}: {e}") from e

    def save(self, config: Configuration) -> None:
        """Write every field; replaces any previous file"""
        self.config_file.parent.mkdir(parents=True, exist_ok=True)

        lines = ["# pg_backup_manager config"]
        for key, value in self.as_dict(config).items():
            escaped = value.replace("\\", "\\\\").replace('"', '\\"')
            lines.append(f'{key}="{escaped}"')

        self.config_file.write_text("\n".join(lines) + "\n")

        if not is_privileged():
            os.chmod(self.config_file, 0o600)

        logger.debug(f"Configuration saved to {self.config_file}")

    def prompt_and_save(self, config: Configuration, terminal) -> Configuration:
        """
        Ask for each field with the current value as default, then save.

        Empty input keeps the current value. The schedule time, port and
        retention are asked again until the answer is valid.
        """
        terminal.header("Setup")
        terminal.print(f"Config will be saved to: {self.config_file}")

        updated = config.model_copy()
        updated.db_name = terminal.ask("Database name", config.db_name) or config.db_name
        updated.db_user = terminal.ask("Database user", config.db_user) or config.db_user
        updated.db_host = terminal.ask("Host", config.db_host) or config.db_host
        updated.db_port = int(self._ask_until_valid(terminal, "Port", str(config.db_port), validate_port))
        updated.backup_dir = Path(terminal.ask("Backup directory", str(config.backup_dir)) or config.backup_dir)
        updated.retention_days = int(self._ask_until_valid(
            terminal, "Keep backups (days)", str(config.retention_days), validate_retention_days
        ))
        updated.cron_time = self._ask_until_valid(
            terminal, "Daily cron time (HH:MM)", config.cron_time, _time_errors
        )

        self.save(updated)
        terminal.info("configuration saved.")
        return updated

    def _ask_until_valid(
        self,
        terminal,
        label: str,
        current: str,
        validate: Callable[[str], List[str]],
    ) -> str:
        while True:
            value = terminal.ask(label, current) or current
            errors = validate(value)
            if not errors:
                return value
            for error in errors:
                terminal.error(error)

    def render(self) -> str:
        """Text shown by the 'show config' menu entry"""
        if not self.config_file.is_file():
            return "(config not found)"
        return self.config_file.read_text()

    def as_dict(self, config: Configuration) -> Dict[str, str]:
        """The key=value pairs exactly as they are written to the file"""
        return {key: str(getattr(config, field)) for key, field in CONFIG_KEYS.items()}
