"""
db/errors.py
------------
Exceptions raised by the data access layer.
"""


class HBDError(Exception):
    """Base class for every error surfaced by the HBD savings reader."""


class ConfigurationError(HBDError):
    """Missing or invalid database configuration."""


class DatabaseConnectionError(HBDError, ConnectionError):
    """The connection pool could not be created."""


class QueryExecutionError(HBDError):
    """A query failed to bind or execute. Driver detail is logged, not raised."""

    def __init__(self, message: str = "Failed to execute query."):
        super().__init__(message)
