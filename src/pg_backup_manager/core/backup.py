"""
Backup operations for PostgreSQL Backup Manager
"""

import os
from datetime import datetime, timedelta
from pathlib import Path
from typing import Callable, List, Optional

from .database import DatabaseManager
from .models import BackupArtifact, BackupResult, Configuration
from ..utils.logger import OperationLogger, get_logger, log_to_file
from ..utils.validation import require_commands

logger = get_logger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d_%H-%M-%S"
BACKUP_LOG_NAME = "backup.log"


def list_backups(config: Configuration) -> List[BackupArtifact]:
    """Dump files of the configured database, newest first"""
    backup_dir = Path(config.backup_dir)
    if not backup_dir.is_dir():
        return []

    artifacts = [
        BackupArtifact.from_path(path)
        for path in backup_dir.glob(config.artifact_glob)
        if path.is_file()
    ]
    return sorted(artifacts, key=lambda artifact: artifact.modified_time, reverse=True)


class BackupManager:
    """Runs pg_dump and prunes dumps past their retention period"""

    def __init__(
        self,
        database: Optional[DatabaseManager] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.database = database or DatabaseManager()
        self.clock = clock

    def run_backup(self, config: Configuration) -> BackupResult:
        """Dump the configured database into a new timestamped file"""
        require_commands("pg_dump")

        backup_dir = self.ensure_backup_dir(config)
        start_time = self.clock()
        backup_file = self.get_backup_file_path(config, start_time)

        with log_to_file(logger, backup_dir / BACKUP_LOG_NAME):
            logger.info(f"START backup: db={config.db_name} -> {backup_file}")

            with OperationLogger(logger, f"pg_dump of {config.db_name}"):
                self.database.dump(config, backup_file)

            self._chmod(backup_file, 0o600)

            deleted = self.sweep_retention(config, now=self.clock(), keep=backup_file)

            logger.info("DONE backup")

        return BackupResult(
            database=config.db_name,
            backup_file=backup_file,
            start_time=start_time,
            end_time=self.clock(),
            deleted_files=deleted,
        )

    def ensure_backup_dir(self, config: Configuration) -> Path:
        backup_dir = Path(config.backup_dir)
        backup_dir.mkdir(parents=True, exist_ok=True)
        self._chmod(backup_dir, 0o700)
        return backup_dir

    def get_backup_file_path(self, config: Configuration, timestamp: datetime) -> Path:
        """Generate backup file path"""
        filename = f"{config.db_name}_{timestamp.strftime(TIMESTAMP_FORMAT)}.dump"
        return Path(config.backup_dir) / filename

    def sweep_retention(
        self,
        config: Configuration,
        now: Optional[datetime] = None,
        keep: Optional[Path] = None,
    ) -> List[Path]:
        """
        Delete dumps whose modification time is older than the retention period.

        A dump aged exactly ``retention_days`` is kept, and so is ``keep`` (the
        dump just written) whatever its age. Errors are logged and swallowed
        so a failed sweep never fails the backup that triggered it.
        """
        now = now or self.clock()
        cutoff = now - timedelta(days=config.retention_days)
        deleted: List[Path] = []

        try:
            candidates = sorted(Path(config.backup_dir).glob(config.artifact_glob))
        except OSError as e:
            logger.warning(f"Retention sweep skipped: {e}")
            return deleted

        for backup_file in candidates:
            try:
                if backup_file == keep or not backup_file.is_file():
                    continue
                modified = datetime.fromtimestamp(backup_file.stat().st_mtime)
                if modified < cutoff:
                    backup_file.unlink()
                    deleted.append(backup_file)
                    logger.info(f"Deleted old backup: {backup_file}")
            except OSError as e:
                logger.warning(f"Could not remove {backup_file}: {e}")

        return deleted

    def _chmod(self, path: Path, mode: int) -> None:
        try:
            os.chmod(path, mode)
        except OSError as e:
            logger.debug(f"chmod {oct(mode)} {path} ignored: {e}")
