"""
Data models for PostgreSQL Backup Manager
"""

from datetime import datetime
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class Configuration(BaseModel):
    """Connection, storage and schedule settings for one database"""
    db_name: str = Field("mydb", description="Database name")
    db_user: str = Field("postgres", description="Database username")
    db_host: str = Field("127.0.0.1", description="Database host")
    db_port: int = Field(5432, description="Database port")
    backup_dir: Path = Field(Path("/backups"), description="Directory holding dump files")
    retention_days: int = Field(14, ge=0, description="Delete dumps older than this many days")
    cron_time: str = Field("02:00", description="Daily backup time (HH:MM)")

    model_config = {"validate_assignment": True}

    @field_validator('db_port')
    @classmethod
    def validate_port(cls, v):
        if not 1 <= v <= 65535:
            raise ValueError('Port must be between 1 and 65535')
        return v

    @field_validator('db_name', 'db_user', 'db_host')
    @classmethod
    def validate_not_blank(cls, v):
        if not v.strip():
            raise ValueError('Value must not be empty')
        return v

    @property
    def artifact_glob(self) -> str:
        """Glob matching the dump files of the configured database"""
        return f"{self.db_name}_*.dump"


class BackupArtifact(BaseModel):
    """A dump file found in the backup directory"""
    path: Path = Field(..., description="Dump file path")
    size_bytes: int = Field(0, description="File size in bytes")
    modified_time: datetime = Field(..., description="Last modification time")

    @classmethod
    def from_path(cls, path: Path) -> "BackupArtifact":
        stat = path.stat()
        return cls(
            path=path,
            size_bytes=stat.st_size,
            modified_time=datetime.fromtimestamp(stat.st_mtime),
        )

    @property
    def size_pretty(self) -> str:
        size = float(self.size_bytes)
        for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
            if size < 1024.0:
                return f"{size:.1f} {unit}"
            size /= 1024.0
        return f"{size:.1f} PB"


class BackupResult(BaseModel):
    """Outcome of one backup run"""
    database: str = Field(..., description="Database that was dumped")
    backup_file: Path = Field(..., description="Dump file written")
    start_time: datetime = Field(..., description="Start time")
    end_time: Optional[datetime] = Field(None, description="End time")
    deleted_files: List[Path] = Field(default_factory=list, description="Dumps removed by retention")

    @property
    def duration(self) -> Optional[float]:
        """Backup duration in seconds"""
        if self.end_time and self.start_time:
            return (self.end_time - self.start_time).total_seconds()
        return None


class RestoreResult(BaseModel):
    """Outcome of one restore run"""
    database: str = Field(..., description="Target database")
    backup_file: Path = Field(..., description="Dump file restored")
    clean: bool = Field(False, description="Objects were dropped before restoring")
    database_created: bool = Field(False, description="Target database had to be created")
    start_time: datetime = Field(..., description="Start time")
    end_time: Optional[datetime] = Field(None, description="End time")

    @property
    def duration(self) -> Optional[float]:
        """Restore duration in seconds"""
        if self.end_time and self.start_time:
            return (self.end_time - self.start_time).total_seconds()
        return None
