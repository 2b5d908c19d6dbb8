"""
Error hierarchy for PostgreSQL Backup Manager
"""


class BackupToolError(Exception):
    """Base class for every fatal error reported to the operator."""


class MissingDependencyError(BackupToolError):
    """A required external program is not on PATH."""


class ConfigurationError(BackupToolError):
    """The configuration holds a value that cannot be used."""


class InvalidSelectionError(BackupToolError):
    """The operator picked nothing usable from a list."""


class ToolFailedError(BackupToolError):
    """An external program or database call reported failure."""

    def __init__(self, tool: str, message: str, returncode: int = 1):
        super().__init__(f"{tool} failed: {message}")
        self.tool = tool
        self.returncode = returncode


__all__ = [
    "BackupToolError",
    "MissingDependencyError",
    "ConfigurationError",
    "InvalidSelectionError",
    "ToolFailedError",
]
