"""
Database operations for PostgreSQL Backup Manager

``DatabaseManager`` is the only place that talks to PostgreSQL: dump and
restore go through the client binaries, the existence check and database
creation go through psycopg2. Passwords are never passed here; libpq picks
them up from ``PGPASSWORD`` or ``~/.pgpass``.
"""

import os
import subprocess
from pathlib import Path
from typing import List

import psycopg2
from psycopg2 import sql

from ..exceptions import ToolFailedError
from .models import Configuration
from ..utils.logger import get_logger

logger = get_logger(__name__)

MAINTENANCE_DATABASE = "postgres"


class DatabaseManager:
    """Dump, restore and database-level operations for one configuration"""

    def __init__(self, maintenance_database: str = MAINTENANCE_DATABASE):
        self.maintenance_database = maintenance_database

    def _connection_args(self, config: Configuration) -> List[str]:
        return [
            "-h", config.db_host,
            "-p", str(config.db_port),
            "-U", config.db_user,
        ]

    def _run(self, tool: str, cmd: List[str]) -> None:
        logger.debug(f"Running {' '.join(cmd)}")
        process = subprocess.run(
            cmd,
            env=os.environ.copy(),
            stderr=subprocess.PIPE,
            text=True,
        )
        if process.returncode != 0:
            stderr = (process.stderr or "").strip()
            raise ToolFailedError(tool, stderr or f"exit code {process.returncode}", process.returncode)

    def dump(self, config: Configuration, backup_file: Path) -> None:
        """Write a custom-format archive of the configured database"""
        cmd = ["pg_dump", *self._connection_args(config), "-F", "c", "-f", str(backup_file), config.db_name]
        self._run("pg_dump", cmd)

    def restore(self, config: Configuration, backup_file: Path, clean: bool = False) -> None:
        """Load an archive into the configured database"""
        cmd = ["pg_restore", *self._connection_args(config), "-d", config.db_name]
        if clean:
            cmd.extend(["--clean", "--if-exists"])
        cmd.append(str(backup_file))
        self._run("pg_restore", cmd)

    def get_sync_connection(self, config: Configuration):
        """Get a connection to the maintenance database"""
        return psycopg2.connect(
            host=config.db_host,
            port=config.db_port,
            dbname=self.maintenance_database,
            user=config.db_user,
        )

    def database_exists(self, config: Configuration) -> bool:
        """Check whether the configured database exists"""
        try:
            conn = self.get_sync_connection(config)
            try:
                with conn.cursor() as cursor:
                    cursor.execute("SELECT 1 FROM pg_database WHERE datname = %s", (config.db_name,))
                    return cursor.fetchone() is not None
            finally:
                conn.close()
        except psycopg2.Error as e:
            raise ToolFailedError("database lookup", str(e).strip()) from e

    def create_database(self, config: Configuration) -> None:
        """Create the configured database"""
        try:
            conn = self.get_sync_connection(config)
            try:
                # CREATE DATABASE cannot run inside a transaction block
                conn.autocommit = True
                with conn.cursor() as cursor:
                    cursor.execute(sql.SQL("CREATE DATABASE {}").format(sql.Identifier(config.db_name)))
            finally:
                conn.close()
        except psycopg2.Error as e:
            raise ToolFailedError("create database", str(e).strip()) from e

        logger.info(f"Database {config.db_name} created")
