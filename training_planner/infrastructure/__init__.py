"""
Infrastructure layer - external service integrations.

Each subdirectory wraps a persistence option:
- snowflake: SQL repositories over Snowflake
- memory: in-process repositories for mock mode and tests

These wrappers translate between external formats and our domain models.
"""
