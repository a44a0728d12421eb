"""
Core business logic for training planning.

This module is framework-agnostic - it doesn't import FastAPI, Snowflake,
or pydantic. Periodization and load monitoring can be tested in isolation
and driven from any delivery layer.
"""
