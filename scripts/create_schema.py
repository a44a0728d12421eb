#!/usr/bin/env python3
"""
Create the planner's Snowflake tables.

Runs the training_periods DDL against the database configured in .env.
The training_sessions table belongs to the training diary and is only read.

Usage:
    python scripts/create_schema.py [--dry-run]

Requires:
    - .env file with Snowflake credentials
"""

import sys

from dotenv import load_dotenv

# Load environment variables before settings are read
load_dotenv()

from training_planner.config.settings import get_settings
from training_planner.infrastructure.snowflake import (
    SnowflakeConfig,
    SnowflakeConnectionError,
    create_tables,
    get_snowflake_connection,
)
from training_planner.infrastructure.snowflake.repositories.periods import SCHEMA_DDL


def main():
    import argparse

    parser = argparse.ArgumentParser(description='Create training planner tables in Snowflake')
    parser.add_argument('--dry-run', action='store_true', help='Print the DDL, don\'t execute it')
    args = parser.parse_args()

    if args.dry_run:
        print(SCHEMA_DDL)
        sys.exit(0)

    settings = get_settings()
    missing = [f for f in settings.validate_required_fields() if f.startswith('SNOWFLAKE')]
    if settings.snowflake_mock_mode or missing:
        print(f"ERROR: Snowflake is not configured ({', '.join(missing) or 'mock mode'})")
        sys.exit(1)

    config = SnowflakeConfig(
        account=settings.snowflake_account,
        user=settings.snowflake_user,
        password=settings.snowflake_password or None,
        private_key_path=settings.snowflake_private_key_path,
        private_key_base64=settings.snowflake_private_key_base64,
        database=settings.snowflake_database,
        schema=settings.snowflake_schema,
        warehouse=settings.snowflake_warehouse,
        role=settings.snowflake_role,
    )

    print(f"Connecting to Snowflake account: {config.account}")
    try:
        with get_snowflake_connection(config) as conn:
            create_tables(conn)
    except SnowflakeConnectionError as e:
        print(f"ERROR connecting to Snowflake: {e}")
        sys.exit(1)

    print(f"Tables ready in {config.database}.{config.schema}")


if __name__ == '__main__':
    main()
