"""
Backup scheduler for PostgreSQL Backup Manager

The schedule lives in the user's crontab as a single line tagged with
``CRON_MARKER``. Installing again replaces that line instead of adding one.
"""

import shlex
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from croniter import croniter

from .crontab import CrontabTable
from ..exceptions import ConfigurationError
from .models import Configuration
from ..utils.logger import get_logger
from ..utils.validation import require_commands, split_time_hhmm, validate_time_hhmm

logger = get_logger(__name__)

CRON_MARKER = "# pg_backup_manager"
CRON_LOG_NAME = "cron.log"


def default_program(argv0: Optional[str] = None, executable: Optional[str] = None) -> str:
    """
    Command line that starts this tool again the way it was started now.

    A launcher script such as a checkout's ``main.py`` is run by its absolute
    path, since the ``src`` entry it adds to ``sys.path`` is not there under
    cron. Anything else (``-m`` or the installed console script) runs the
    installed package with the current interpreter.
    """
    argv0 = sys.argv[0] if argv0 is None else argv0
    executable = executable or sys.executable

    script = Path(argv0).expanduser().resolve() if argv0 else None
    if script is not None and script.suffix == ".py" and script.name != "__main__.py":
        return f"{shlex.quote(executable)} {shlex.quote(str(script))}"
    return f"{shlex.quote(executable)} -m pg_backup_manager"


def escape_percent(command: str) -> str:
    """cron turns a bare % into a newline"""
    return command.replace("%", "\\%")


class BackupScheduler:
    """Installs and shows the daily backup job"""

    def __init__(
        self,
        crontab: Optional[CrontabTable] = None,
        program: Optional[str] = None,
    ):
        self.crontab = crontab or CrontabTable()
        self.program = program or default_program()

    def cron_expression(self, config: Configuration) -> str:
        if not validate_time_hhmm(config.cron_time):
            raise ConfigurationError(f"CRON_TIME is invalid: {config.cron_time!r}")

        hour, minute = split_time_hhmm(config.cron_time)
        # crontab fields are numbers; "02" becomes "2"
        expression = f"{int(minute)} {int(hour)} * * *"
        if not croniter.is_valid(expression):
            raise ConfigurationError(f"cannot build a cron schedule from {config.cron_time!r}")
        return expression

    def build_job_line(self, config: Configuration, config_path: Path) -> str:
        # cron runs from $HOME, so a relative --config would point elsewhere
        config_path = Path(config_path).expanduser().resolve()
        log_file = Path(config.backup_dir) / CRON_LOG_NAME
        command = (
            f"{self.program} --backup --config {shlex.quote(str(config_path))} "
            f">> {shlex.quote(str(log_file))} 2>&1"
        )
        return f"{self.cron_expression(config)} {escape_percent(command)} {CRON_MARKER}"

    def install_or_update(self, config: Configuration, config_path: Path) -> str:
        """Replace any tagged line in the crontab with one built from ``config``"""
        require_commands("crontab")

        job_line = self.build_job_line(config, config_path)

        lines: List[str] = [line for line in self.crontab.read() if CRON_MARKER not in line]
        lines.append(job_line)
        self.crontab.write(lines)

        logger.info(f"Cron job installed: daily at {config.cron_time}")
        return job_line

    def show(self) -> Optional[str]:
        """The installed tagged line, if any"""
        require_commands("crontab")

        for line in self.crontab.read():
            if CRON_MARKER in line:
                return line
        return None

    def next_run(self, config: Configuration, now: Optional[datetime] = None) -> datetime:
        """When the daily job fires next"""
        return croniter(self.cron_expression(config), now or datetime.now()).get_next(datetime)
