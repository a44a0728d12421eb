"""
In-memory repositories for local development and tests.

Enabled by SNOWFLAKE_MOCK_MODE; data lives for the life of the process.
"""

from .repositories import InMemoryPeriodRepository, InMemorySessionRepository

__all__ = ["InMemoryPeriodRepository", "InMemorySessionRepository"]
