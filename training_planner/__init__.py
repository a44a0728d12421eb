"""
Training Planner - periodization and training-load monitoring for athletes.

This package contains the complete application:
- core: Framework-agnostic planning and load-monitoring logic
- infrastructure: Persistence (Snowflake, in-memory)
- api: FastAPI routes and dependencies
- config: Application configuration
"""

__version__ = "0.1.0"
