"""
PostgreSQL Backup Manager - command line and interactive menu
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from . import __version__
from .core.backup import BackupManager
from .core.config import ConfigManager
from .core.crontab import CrontabTable
from .core.database import DatabaseManager
from .core.models import Configuration
from .core.restore import RestoreManager
from .core.scheduler import BackupScheduler
from .exceptions import BackupToolError
from .utils.logger import get_logger, setup_logging
from .utils.terminal import Terminal

logger = get_logger(__name__)

MENU = """
1) Configure (keyboard input) and save
2) Back up now
3) Restore from a backup
4) Install/update cron (time from config)
5) Show cron line
6) Show config
0) Exit"""

EPILOG = """
Examples:
  %(prog)s                  # interactive menu
  %(prog)s --setup          # interactive setup + save config
  %(prog)s --backup         # back up now (used by cron)
  %(prog)s --restore        # interactive restore
  %(prog)s --install-cron   # install/update cron from CRON_TIME in the config
  %(prog)s --show-cron      # show the cron line
  %(prog)s --config PATH    # use another config file

Password:
  Use ~/.pgpass or the PGPASSWORD environment variable (a .env file in the
  working directory is read as well). Passwords are never stored in the config.
"""


class ArgumentParser(argparse.ArgumentParser):
    """Reports bad arguments with the usage text and exit status 1"""

    def error(self, message):
        sys.stderr.write(f"ERROR: {message}\n")
        self.print_help(sys.stderr)
        sys.exit(1)


def build_parser() -> ArgumentParser:
    parser = ArgumentParser(
        prog="pg-backup-manager",
        description="PostgreSQL backup, retention, restore and cron scheduling",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=EPILOG,
    )

    parser.add_argument("--version", action="version", version=__version__)
    parser.add_argument("--config", type=Path, help="Configuration file path")

    actions = parser.add_argument_group("actions (the first one given wins)")
    actions.add_argument("--setup", dest="actions", action="append_const", const="setup",
                         help="Interactive setup, then save the config")
    actions.add_argument("--backup", dest="actions", action="append_const", const="backup",
                         help="Run one backup now")
    actions.add_argument("--restore", dest="actions", action="append_const", const="restore",
                         help="Interactive restore")
    actions.add_argument("--install-cron", dest="actions", action="append_const", const="install_cron",
                         help="Install or update the daily cron job")
    actions.add_argument("--show-cron", dest="actions", action="append_const", const="show_cron",
                         help="Show the installed cron line")

    parser.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        default="INFO", help="Log level (default: INFO)")
    parser.add_argument("--log-file", type=Path, help="Also write the log to this file")
    return parser


class BackupApp:
    """Wires the managers together for one configuration file"""

    def __init__(
        self,
        config_manager: ConfigManager,
        terminal: Optional[Terminal] = None,
        database: Optional[DatabaseManager] = None,
        crontab: Optional[CrontabTable] = None,
    ):
        self.config_manager = config_manager
        self.terminal = terminal or Terminal()
        self.backup_manager = BackupManager(database)
        self.restore_manager = RestoreManager(database)
        self.scheduler = BackupScheduler(crontab)
        self.config: Optional[Configuration] = None

    def load(self) -> Configuration:
        self.config = self.config_manager.load()
        return self.config

    def setup(self):
        self.config = self.config_manager.prompt_and_save(self.config, self.terminal)

    def backup(self):
        result = self.backup_manager.run_backup(self.config)
        self.terminal.info(f"backup written: {result.backup_file} ({result.duration:.1f}s)")

    def restore(self):
        result = self.restore_manager.run_restore(self.config, self.terminal)
        self.terminal.info(f"restored {result.backup_file} into {result.database} ({result.duration:.1f}s)")

    def install_cron(self):
        line = self.scheduler.install_or_update(self.config, self.config_manager.config_file)
        self.terminal.info(f"cron installed/updated: daily at {self.config.cron_time}")
        self.terminal.print(line)
        self.terminal.print(f"Next run: {self.scheduler.next_run(self.config):%Y-%m-%d %H:%M}")

    def show_cron(self):
        line = self.scheduler.show()
        if line is None:
            self.terminal.print("(pg_backup_manager line not found in crontab)")
            return
        self.terminal.print(line)

    def show_config(self):
        self.terminal.print("----")
        self.terminal.print(self.config_manager.render().rstrip("\n"))
        self.terminal.print("----")

    def run_action(self, action: str):
        handlers = {
            "setup": self.setup,
            "backup": self.backup,
            "restore": self.restore,
            "install_cron": self.install_cron,
            "show_cron": self.show_cron,
            "show_config": self.show_config,
        }
        handlers[action]()

    def menu(self):
        """Interactive loop; errors are reported and the menu comes back"""
        choices = {
            "1": "setup",
            "2": "backup",
            "3": "restore",
            "4": "install_cron",
            "5": "show_cron",
            "6": "show_config",
        }

        while True:
            self.terminal.print()
            self.terminal.header("pg_backup_manager")
            self.terminal.print(f"Config: {self.config_manager.config_file}")
            self.terminal.print(MENU)
            choice = self.terminal.ask_raw("Choice")

            if choice == "0":
                return
            if choice not in choices:
                self.terminal.print("Invalid choice.")
                continue

            try:
                self.run_action(choices[choice])
            except (BackupToolError, OSError) as e:
                logger.debug(f"Menu action {choices[choice]} failed", exc_info=True)
                self.terminal.error(str(e))


def main(argv: Optional[List[str]] = None, app: Optional[BackupApp] = None):
    """Main entry point"""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(log_level=args.log_level, log_file=args.log_file)

    if app is None:
        app = BackupApp(ConfigManager(args.config))

    try:
        app.load()

        if args.actions:
            app.run_action(args.actions[0])
        else:
            app.menu()

    except BackupToolError as e:
        app.terminal.error(str(e))
        sys.exit(1)
    except OSError as e:
        logger.debug("Filesystem error", exc_info=True)
        app.terminal.error(str(e))
        sys.exit(1)
    except (KeyboardInterrupt, EOFError):
        app.terminal.print()
        sys.exit(130)


if __name__ == "__main__":
    main()
