"""
PostgreSQL Backup Manager - dump, prune, restore and schedule a database
"""

__version__ = "1.0.0"
