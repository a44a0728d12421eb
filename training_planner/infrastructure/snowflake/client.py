"""
Snowflake database connection management.

Provides the connection factory and schema bootstrap for the Snowflake
repositories. Most code never touches this module directly - it goes
through the repositories, which translate between domain models and rows.

Mock mode does not come through here at all: the API wires in-memory
repositories instead (see ``infrastructure.memory``).
"""

import base64
import logging
from contextlib import contextmanager
from typing import Generator

from .repositories.periods import SCHEMA_DDL
from .repositories.sessions import SnowflakeConfig, SnowflakeConnection

logger = logging.getLogger(__name__)


class SnowflakeConnectionError(Exception):
    """Raised when Snowflake connection fails."""
    pass


def _der_private_key(pem_bytes: bytes) -> bytes:
    """
    Convert a PEM private key into the DER/PKCS8 bytes Snowflake expects.
    """
    from cryptography.hazmat.backends import default_backend
    from cryptography.hazmat.primitives import serialization

    private_key = serialization.load_pem_private_key(
        pem_bytes,
        password=None,
        backend=default_backend()
    )

    return private_key.private_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption()
    )


def _load_private_key(config: SnowflakeConfig) -> bytes:
    """Read the key from a file path or from its base64-encoded PEM."""
    if config.private_key_path:
        with open(config.private_key_path, 'rb') as key_file:
            return _der_private_key(key_file.read())
    return _der_private_key(base64.b64decode(config.private_key_base64))


@contextmanager
def get_snowflake_connection(config: SnowflakeConfig) -> Generator[SnowflakeConnection, None, None]:
    """
    Provide Snowflake connection with automatic cleanup.

    Supports both password and key-pair authentication:
    - If a private key (path or base64) is set, uses key-pair auth
    - Otherwise, uses password auth

    Usage:
        with get_snowflake_connection(config) as conn:
            repo = SnowflakePeriodRepository(conn)
    """
    import snowflake.connector

    conn = None
    try:
        connect_params = {
            'account': config.account,
            'user': config.user,
            'database': config.database,
            'schema': config.schema,
            'warehouse': config.warehouse,
            'role': config.role,
            'client_session_keep_alive': True,
            'autocommit': False,
        }

        if config.private_key_path or config.private_key_base64:
            logger.info("Using key-pair authentication for Snowflake")
            connect_params['private_key'] = _load_private_key(config)
        elif config.password:
            logger.info("Using password authentication for Snowflake")
            connect_params['password'] = config.password
        else:
            raise SnowflakeConnectionError(
                "Either password or a private key must be provided"
            )

        conn = snowflake.connector.connect(**connect_params)

        logger.debug(
            "Established Snowflake connection",
            extra={
                "account": config.account,
                "database": config.database,
                "schema": config.schema,
            }
        )

    except snowflake.connector.errors.DatabaseError as e:
        logger.error(
            "Snowflake connection failed",
            extra={"error": str(e), "account": config.account}
        )
        raise SnowflakeConnectionError(f"Database connection failed: {e}") from e

    try:
        yield conn
    finally:
        try:
            conn.close()
            logger.debug("Closed Snowflake connection")
        except Exception as e:
            logger.warning(
                "Error closing Snowflake connection",
                extra={"error": str(e)}
            )


def create_tables(conn: SnowflakeConnection) -> None:
    """Create the planner's tables if they do not exist yet."""
    cursor = conn.cursor()
    try:
        cursor.execute(SCHEMA_DDL)
        conn.commit()
        logger.info("Ensured training_periods table exists")
    finally:
        cursor.close()
