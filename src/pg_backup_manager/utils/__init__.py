"""
Utilities for PostgreSQL Backup Manager
"""

from .logger import get_logger, setup_logging, log_to_file, OperationLogger
from .terminal import Terminal
from .validation import validate_time_hhmm, split_time_hhmm, require_commands

__all__ = [
    'get_logger',
    'setup_logging',
    'log_to_file',
    'OperationLogger',
    'Terminal',
    'validate_time_hhmm',
    'split_time_hhmm',
    'require_commands'
]
