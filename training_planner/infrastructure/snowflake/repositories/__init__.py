"""
Repository pattern implementations for Snowflake.

Repositories translate between domain models and database representations.
"""

from .periods import SnowflakePeriodRepository
from .sessions import SnowflakeConfig, TrainingSessionRepository

__all__ = ["SnowflakeConfig", "SnowflakePeriodRepository", "TrainingSessionRepository"]
