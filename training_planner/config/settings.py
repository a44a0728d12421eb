"""
Application configuration using Pydantic settings.

Configuration is loaded from environment variables with sensible defaults.
Using Pydantic's BaseSettings means we get:
- Type validation at startup (fail fast if config is wrong)
- Documentation of what's required vs optional
- Easy testing with different configurations

Mock mode enables local development without a database.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables.
    For lists (like api_keys), use comma-separated values in env.
    """

    # API Configuration
    api_title: str = "Training Planner API"
    api_version: str = "v1"
    api_keys: str = Field(
        default="dev-key-1,dev-key-2",
        description="Comma-separated API keys. Using a list enables key rotation without downtime."
    )

    # Snowflake Configuration
    snowflake_account: str = Field(
        default="",
        description="Snowflake account identifier"
    )
    snowflake_user: str = Field(
        default="",
        description="Snowflake service account username"
    )
    snowflake_password: str = Field(
        default="",
        description="Snowflake service account password"
    )
    snowflake_private_key_path: Optional[str] = Field(
        default=None,
        description="Path to RSA private key file for key-pair authentication"
    )
    snowflake_private_key_base64: Optional[str] = Field(
        default=None,
        description="Base64-encoded private key (for deployment, alternative to file path)"
    )
    snowflake_database: str = Field(
        default="TRAINING",
        description="Snowflake database name"
    )
    snowflake_schema: str = Field(
        default="PLANNING",
        description="Snowflake schema name"
    )
    snowflake_warehouse: str = Field(
        default="COMPUTE_WH",
        description="Snowflake warehouse for query execution"
    )
    snowflake_role: Optional[str] = Field(
        default=None,
        description="Snowflake role to use (optional)"
    )
    snowflake_mock_mode: bool = Field(
        default=False,
        description="Use in-memory repositories instead of Snowflake. Enables local dev without DB."
    )

    # Planning Behavior
    enforce_parent_containment: bool = Field(
        default=False,
        description="Reject child periods that fall outside their parent's range."
    )

    # Load Monitoring Behavior
    default_exertion: int = Field(
        default=5,
        ge=1,
        le=10,
        description="Effort rating substituted for sessions logged without one."
    )
    clamp_risk_percentage: bool = Field(
        default=False,
        description="Clamp the injury risk percentage to 0-100 for extreme ACWR values."
    )
    workload_window_days: int = Field(
        default=28,
        ge=28,
        description="Days of session history fetched per metrics request. Never less than the chronic window."
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    # CORS
    cors_origins: str = Field(
        default="http://localhost:3000",
        description="Comma-separated list of allowed CORS origins. Use * for development only."
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    @property
    def api_keys_list(self) -> list[str]:
        """Parse comma-separated API keys into a list."""
        return [key.strip() for key in self.api_keys.split(",") if key.strip()]

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse comma-separated CORS origins into a list."""
        if self.cors_origins == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    def validate_required_fields(self) -> list[str]:
        """
        Validate that required fields are set based on mock mode settings.

        Returns list of missing required fields.
        This is separate from Pydantic validation because requirements
        depend on whether we're in mock mode.
        """
        missing = []

        if not self.api_keys_list:
            missing.append("API_KEYS")

        if not self.snowflake_mock_mode:
            if not self.snowflake_account:
                missing.append("SNOWFLAKE_ACCOUNT")
            if not self.snowflake_user:
                missing.append("SNOWFLAKE_USER")
            has_key = self.snowflake_private_key_path or self.snowflake_private_key_base64
            if not self.snowflake_password and not has_key:
                missing.append("SNOWFLAKE_PASSWORD or SNOWFLAKE_PRIVATE_KEY_PATH")

        return missing


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Using lru_cache means we only load settings once per process.
    For tests, you can call get_settings.cache_clear() to reset.
    """
    return Settings()
