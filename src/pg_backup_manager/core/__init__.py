"""
PostgreSQL Backup Manager - Core Module
"""

from .backup import BackupManager, list_backups
from .config import ConfigManager, default_config_path
from .crontab import CrontabTable
from .database import DatabaseManager
from .restore import RestoreManager
from .scheduler import BackupScheduler
from .models import BackupArtifact, BackupResult, Configuration, RestoreResult

__all__ = [
    'BackupManager',
    'list_backups',
    'ConfigManager',
    'default_config_path',
    'CrontabTable',
    'DatabaseManager',
    'RestoreManager',
    'BackupScheduler',
    'BackupArtifact',
    'BackupResult',
    'Configuration',
    'RestoreResult'
]
