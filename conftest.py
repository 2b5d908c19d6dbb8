"""
Shared fixtures and stand-ins for the PostgreSQL Backup Manager tests
"""

import logging
import sys
from datetime import datetime
from pathlib import Path

import pytest

# Add src to the path so the tests run from a plain checkout
sys.path.insert(0, str(Path(__file__).parent / "src"))

from pg_backup_manager.core import backup, restore, scheduler  # noqa: E402
from pg_backup_manager.core.models import Configuration  # noqa: E402
from pg_backup_manager.exceptions import ToolFailedError  # noqa: E402

FIXED_NOW = datetime(2024, 6, 15, 12, 0, 0)


class FakeDatabase:
    """Records calls instead of running pg_dump/pg_restore/psycopg2"""

    def __init__(self, exists=True, dump_fails=False):
        self.exists = exists
        self.dump_fails = dump_fails
        self.dumps = []
        self.restores = []
        self.created = []

    def dump(self, config, backup_file):
        if self.dump_fails:
            raise ToolFailedError("pg_dump", "connection refused")
        Path(backup_file).write_bytes(b"PGDMP")
        self.dumps.append(Path(backup_file))

    def restore(self, config, backup_file, clean=False):
        self.restores.append((Path(backup_file), clean))

    def database_exists(self, config):
        return self.exists

    def create_database(self, config):
        self.created.append(config.db_name)
        self.exists = True


class FakeCrontab:
    """In-memory job table"""

    def __init__(self, lines=None):
        self.lines = list(lines or [])
        self.writes = 0

    def read(self):
        return list(self.lines)

    def write(self, lines):
        self.lines = list(lines)
        self.writes += 1


class ScriptedTerminal:
    """Answers prompts from a list and keeps everything printed"""

    def __init__(self, answers=None):
        self.answers = list(answers or [])
        self.output = []
        self.errors = []

    def _next(self):
        if not self.answers:
            raise EOFError("no more scripted answers")
        return self.answers.pop(0)

    def ask(self, label, default=""):
        answer = str(self._next()).strip()
        return answer or default

    def ask_raw(self, label):
        return str(self._next()).strip()

    def confirm(self, label, default=False):
        answer = str(self._next()).strip().lower()
        if not answer:
            return default
        return answer in ("y", "yes")

    def print(self, message=""):
        self.output.append(message)

    def info(self, message):
        self.output.append(f"OK: {message}")

    def error(self, message):
        self.errors.append(message)

    def header(self, title):
        self.output.append(f"=== {title} ===")

    @property
    def text(self):
        return "\n".join(self.output)


@pytest.fixture(autouse=True)
def restore_root_logging():
    """cli.main reconfigures the root logger; put it back after each test"""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def config(tmp_path):
    return Configuration(db_name="mydb", backup_dir=tmp_path / "backups", retention_days=14)


@pytest.fixture
def fake_database():
    return FakeDatabase()


@pytest.fixture
def fake_crontab():
    return FakeCrontab()


@pytest.fixture
def tools_available(monkeypatch):
    """Pretend pg_dump, pg_restore and crontab are installed"""
    for module in (backup, restore, scheduler):
        monkeypatch.setattr(module, "require_commands", lambda *commands: None)
