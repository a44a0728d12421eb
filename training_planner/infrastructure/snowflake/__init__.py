"""
Snowflake persistence: connection management and SQL repositories.
"""

from .client import SnowflakeConnectionError, create_tables, get_snowflake_connection
from .repositories import SnowflakeConfig, SnowflakePeriodRepository, TrainingSessionRepository

__all__ = [
    "SnowflakeConnectionError",
    "create_tables",
    "get_snowflake_connection",
    "SnowflakeConfig",
    "SnowflakePeriodRepository",
    "TrainingSessionRepository",
]
