#!/usr/bin/env python3
"""
Tests for pg_dump runs, file naming and the retention sweep
"""

import os
import re
import stat
from datetime import datetime, timedelta
from pathlib import Path

import pytest

from conftest import FIXED_NOW, FakeDatabase
from pg_backup_manager.core.backup import BackupManager, list_backups
from pg_backup_manager.exceptions import MissingDependencyError, ToolFailedError
from pg_backup_manager.utils import validation


def make_dump(directory: Path, name: str, modified: datetime) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / name
    path.write_bytes(b"PGDMP")
    os.utime(path, (modified.timestamp(), modified.timestamp()))
    return path


def test_backup_file_name_uses_fixed_clock(config, fake_database):
    manager = BackupManager(fake_database, clock=lambda: datetime(2024, 3, 5, 7, 8, 9))
    path = manager.get_backup_file_path(config, manager.clock())
    assert path.name == "mydb_2024-03-05_07-08-09.dump"
    assert path.parent == config.backup_dir


def test_run_backup_writes_dump_and_log(config, fake_database, tools_available):
    manager = BackupManager(fake_database, clock=lambda: FIXED_NOW)

    result = manager.run_backup(config)

    assert result.backup_file == config.backup_dir / "mydb_2024-06-15_12-00-00.dump"
    assert re.fullmatch(r"mydb_\d{4}-\d{2}-\d{2}_\d{2}-\d{2}-\d{2}\.dump", result.backup_file.name)
    assert fake_database.dumps == [result.backup_file]
    assert result.backup_file.exists()

    log = (config.backup_dir / "backup.log").read_text()
    assert "START backup: db=mydb" in log
    assert "DONE backup" in log
    assert log.startswith("[")


def test_run_backup_tightens_permissions(config, fake_database, tools_available):
    result = BackupManager(fake_database, clock=lambda: FIXED_NOW).run_backup(config)

    assert stat.S_IMODE(os.stat(config.backup_dir).st_mode) == 0o700
    assert stat.S_IMODE(os.stat(result.backup_file).st_mode) == 0o600


def test_run_backup_appends_to_existing_log(config, fake_database, tools_available):
    ticks = (FIXED_NOW + timedelta(minutes=minute) for minute in range(60))
    manager = BackupManager(fake_database, clock=lambda: next(ticks))

    manager.run_backup(config)
    manager.run_backup(config)

    log = (config.backup_dir / "backup.log").read_text()
    assert log.count("START backup") == 2
    assert log.count("DONE backup") == 2


def test_dump_failure_aborts_backup(config, tools_available):
    manager = BackupManager(FakeDatabase(dump_fails=True), clock=lambda: FIXED_NOW)
    old = make_dump(config.backup_dir, "mydb_2024-01-01_00-00-00.dump", FIXED_NOW - timedelta(days=60))

    with pytest.raises(ToolFailedError):
        manager.run_backup(config)

    log = (config.backup_dir / "backup.log").read_text()
    assert "START backup" in log
    assert "DONE backup" not in log
    # no sweep after a failed dump
    assert old.exists()


def test_missing_pg_dump_fails_fast(config, fake_database, monkeypatch):
    monkeypatch.setattr(validation.shutil, "which", lambda command: None)

    with pytest.raises(MissingDependencyError, match="pg_dump"):
        BackupManager(fake_database).run_backup(config)

    assert fake_database.dumps == []


def test_retention_deletes_only_strictly_older(config, fake_database):
    manager = BackupManager(fake_database, clock=lambda: FIXED_NOW)
    boundary = FIXED_NOW - timedelta(days=14)

    kept_young = make_dump(config.backup_dir, "mydb_a.dump", FIXED_NOW - timedelta(days=13))
    kept_just_inside = make_dump(config.backup_dir, "mydb_b.dump", boundary + timedelta(seconds=1))
    kept_boundary = make_dump(config.backup_dir, "mydb_c.dump", boundary)
    deleted_just_outside = make_dump(config.backup_dir, "mydb_d.dump", boundary - timedelta(seconds=1))
    deleted_old = make_dump(config.backup_dir, "mydb_e.dump", FIXED_NOW - timedelta(days=15))

    deleted = manager.sweep_retention(config)

    assert sorted(deleted) == sorted([deleted_just_outside, deleted_old])
    for path in (kept_young, kept_just_inside, kept_boundary):
        assert path.exists()
    assert not deleted_old.exists()


def test_retention_ignores_other_databases_and_files(config, fake_database):
    manager = BackupManager(fake_database, clock=lambda: FIXED_NOW)
    ancient = FIXED_NOW - timedelta(days=365)

    other_db = make_dump(config.backup_dir, "otherdb_2023-01-01_00-00-00.dump", ancient)
    not_a_dump = make_dump(config.backup_dir, "mydb_notes.txt", ancient)
    log = make_dump(config.backup_dir, "backup.log", ancient)

    assert manager.sweep_retention(config) == []
    assert other_db.exists() and not_a_dump.exists() and log.exists()


def test_retention_sweep_runs_after_backup(config, fake_database, tools_available):
    old = make_dump(config.backup_dir, "mydb_2024-05-01_02-00-00.dump", FIXED_NOW - timedelta(days=45))

    result = BackupManager(fake_database, clock=lambda: FIXED_NOW).run_backup(config)

    assert result.deleted_files == [old]
    assert not old.exists()
    assert f"Deleted old backup: {old}" in (config.backup_dir / "backup.log").read_text()


def test_zero_retention_keeps_the_new_dump(config, fake_database, tools_available):
    config.retention_days = 0
    older = make_dump(config.backup_dir, "mydb_2000-01-01_00-00-00.dump", datetime.now() - timedelta(hours=1))

    result = BackupManager(fake_database).run_backup(config)

    assert result.backup_file.exists()
    assert result.deleted_files == [older]
    assert list_backups(config)[0].path == result.backup_file
    assert f"Deleted old backup: {result.backup_file}" not in (config.backup_dir / "backup.log").read_text()


def test_sweep_skips_the_kept_file(config, fake_database):
    manager = BackupManager(fake_database, clock=lambda: FIXED_NOW)
    ancient = FIXED_NOW - timedelta(days=90)
    current = make_dump(config.backup_dir, "mydb_current.dump", ancient)
    stale = make_dump(config.backup_dir, "mydb_stale.dump", ancient)

    assert manager.sweep_retention(config, keep=current) == [stale]
    assert current.exists()


def test_retention_errors_do_not_fail_backup(config, fake_database, tools_available, monkeypatch):
    old = make_dump(config.backup_dir, "mydb_2024-05-01_02-00-00.dump", FIXED_NOW - timedelta(days=45))

    def refuse(self, *args, **kwargs):
        raise PermissionError("read-only file system")

    monkeypatch.setattr(Path, "unlink", refuse)

    result = BackupManager(fake_database, clock=lambda: FIXED_NOW).run_backup(config)

    assert result.deleted_files == []
    assert old.exists()
    assert "DONE backup" in (config.backup_dir / "backup.log").read_text()


def test_retention_on_missing_directory(config, fake_database):
    assert BackupManager(fake_database, clock=lambda: FIXED_NOW).sweep_retention(config) == []


def test_list_backups_newest_first(config):
    t1 = make_dump(config.backup_dir, "mydb_3.dump", FIXED_NOW - timedelta(days=3))
    t3 = make_dump(config.backup_dir, "mydb_1.dump", FIXED_NOW - timedelta(days=1))
    t2 = make_dump(config.backup_dir, "mydb_2.dump", FIXED_NOW - timedelta(days=2))
    make_dump(config.backup_dir, "otherdb_0.dump", FIXED_NOW)

    listed = [artifact.path for artifact in list_backups(config)]

    assert listed == [t3, t2, t1]
    # a second pass gives the same answer
    assert [artifact.path for artifact in list_backups(config)] == listed


def test_list_backups_without_directory(config):
    assert list_backups(config) == []
    assert not config.backup_dir.exists()
