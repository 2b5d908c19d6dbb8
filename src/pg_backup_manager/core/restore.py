"""
Restore operations for PostgreSQL Backup Manager
"""

from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional

from .backup import list_backups
from .database import DatabaseManager
from ..exceptions import InvalidSelectionError
from .models import BackupArtifact, Configuration, RestoreResult
from ..utils.logger import OperationLogger, get_logger
from ..utils.validation import DIGITS_PATTERN, require_commands

logger = get_logger(__name__)


class RestoreManager:
    """Interactive pg_restore of one of the existing dumps"""

    def __init__(
        self,
        database: Optional[DatabaseManager] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.database = database or DatabaseManager()
        self.clock = clock

    def list_backups(self, config: Configuration) -> List[BackupArtifact]:
        return list_backups(config)

    def select_interactive(
        self,
        config: Configuration,
        backups: List[BackupArtifact],
        terminal,
    ) -> Path:
        """
        Show the dumps as a numbered list and return the one picked.

        A single bad answer aborts the restore; there is no second try.
        """
        if not backups:
            raise InvalidSelectionError(
                f"no backups found in {config.backup_dir} matching {config.artifact_glob}"
            )

        terminal.header("Available backups (newest first)")
        for index, artifact in enumerate(backups, start=1):
            terminal.print(
                f"  [{index}] {artifact.path}  "
                f"({artifact.size_pretty}, {artifact.modified_time:%Y-%m-%d %H:%M:%S})"
            )

        answer = terminal.ask_raw("Select the file number to restore")
        if not DIGITS_PATTERN.fullmatch(answer) or not 1 <= int(answer) <= len(backups):
            raise InvalidSelectionError(f"invalid choice: {answer!r}")

        return backups[int(answer) - 1].path

    def ensure_database(self, config: Configuration) -> bool:
        """Create the target database when it is missing; True if it was created"""
        if self.database.database_exists(config):
            return False

        logger.info(f"Database '{config.db_name}' not found. Creating...")
        self.database.create_database(config)
        return True

    def run_restore(self, config: Configuration, terminal) -> RestoreResult:
        """Pick a dump, make sure the database exists and load the dump into it"""
        require_commands("pg_restore")

        backup_file = self.select_interactive(config, self.list_backups(config), terminal)
        created = self.ensure_database(config)

        clean = terminal.confirm("Drop existing objects before restoring? (--clean --if-exists)", default=False)

        start_time = self.clock()
        logger.info(f"START restore: {backup_file} -> db={config.db_name}")
        with OperationLogger(logger, f"pg_restore into {config.db_name}"):
            self.database.restore(config, backup_file, clean=clean)
        logger.info("DONE restore")

        return RestoreResult(
            database=config.db_name,
            backup_file=backup_file,
            clean=clean,
            database_created=created,
            start_time=start_time,
            end_time=self.clock(),
        )
