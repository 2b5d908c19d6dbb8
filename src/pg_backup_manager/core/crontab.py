"""
Crontab access for PostgreSQL Backup Manager
"""

import os
import subprocess
import tempfile
from typing import List

from ..exceptions import ToolFailedError
from ..utils.logger import get_logger

logger = get_logger(__name__)


class CrontabTable:
    """The invoking user's crontab, read and replaced as a whole"""

    def __init__(self, command: str = "crontab"):
        self.command = command

    def read(self) -> List[str]:
        """Return the current entries; a user without a crontab has none"""
        process = subprocess.run(
            [self.command, "-l"],
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            text=True,
        )
        if process.returncode != 0:
            return []
        return process.stdout.splitlines()

    def write(self, lines: List[str]) -> None:
        """Replace the whole table with ``lines``"""
        fd, tmp_path = tempfile.mkstemp(prefix="pg_backup_manager_", suffix=".cron")
        try:
            with os.fdopen(fd, "w") as f:
                for line in lines:
                    f.write(line + "\n")

            process = subprocess.run(
                [self.command, tmp_path],
                stderr=subprocess.PIPE,
                text=True,
            )
            if process.returncode != 0:
                raise ToolFailedError(self.command, (process.stderr or "").strip(), process.returncode)
        finally:
            os.unlink(tmp_path)

        logger.debug(f"Crontab replaced with {len(lines)} line(s)")
