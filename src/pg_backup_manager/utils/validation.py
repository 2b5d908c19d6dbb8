"""
Validation utilities for PostgreSQL Backup Manager
"""

import re
import shutil
from typing import List, Tuple

from ..exceptions import MissingDependencyError

TIME_PATTERN = re.compile(r'^([01][0-9]|2[0-3]):([0-5][0-9])$')
DIGITS_PATTERN = re.compile(r'^[0-9]+$')


def validate_time_hhmm(value: str) -> bool:
    """Check a daily schedule time such as 02:00 or 23:59"""
    return TIME_PATTERN.fullmatch(value or "") is not None


def split_time_hhmm(value: str) -> Tuple[str, str]:
    """Split a valid HH:MM string into its hour and minute parts"""
    match = TIME_PATTERN.fullmatch(value or "")
    if match is None:
        raise ValueError(f"Time must be in HH:MM format: {value!r}")
    return match.group(1), match.group(2)


def validate_retention_days(value: str) -> List[str]:
    """Validate retention days typed by the operator"""
    errors = []

    if not DIGITS_PATTERN.fullmatch(value):
        errors.append("Retention days must be a non-negative integer")

    return errors


def validate_port(value: str) -> List[str]:
    """Validate a port typed by the operator"""
    errors = []

    if not DIGITS_PATTERN.fullmatch(value) or not (1 <= int(value) <= 65535):
        errors.append("Database port must be between 1 and 65535")

    return errors


def require_commands(*commands: str) -> None:
    """Fail fast when one of the given programs is not on PATH"""
    missing = [command for command in commands if not shutil.which(command)]

    if missing:
        raise MissingDependencyError(
            f"command not found: {', '.join(missing)}. "
            "Install the PostgreSQL client utilities."
        )
