"""Application configuration with validation."""

from enum import Enum
from pydantic_settings import BaseSettings
from pydantic import Field, field_validator
from typing import List


class Environment(str, Enum):
    """Application environment."""
    DEVELOPMENT = "development"
    PRODUCTION = "production"


class ConfigurationError(Exception):
    """Raised when application configuration is invalid for the environment."""
    pass


# 500 MiB
DEFAULT_STORAGE_LIMIT_BYTES = 524288000


class Settings(BaseSettings):
    """
    Application settings with validation.

    Uses Pydantic for configuration validation, preventing
    common security issues like wildcard CORS.
    """

    # Environment
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment (development/production)"
    )

    # CORS Configuration
    cors_allowed_origins: str = Field(
        default="http://localhost:3000,http://localhost:5173",
        description="Allowed CORS origins (comma-separated)"
    )

    # Database Configuration
    database_url: str = Field(
        default="sqlite:///./vault.db",
        description="Database connection URL"
    )
    # Connection pool tuning (PostgreSQL only; ignored for SQLite).
    db_pool_size: int = Field(
        default=5,
        description="Number of persistent database connections"
    )
    db_max_overflow: int = Field(
        default=10,
        description="Extra connections allowed during traffic bursts"
    )
    db_pool_timeout: int = Field(
        default=30,
        description="Seconds to wait for a connection from the pool before raising"
    )
    db_pool_recycle: int = Field(
        default=1800,
        description="Seconds before a connection is recycled"
    )

    # Vault
    # Applied to vaults at creation time only; existing vaults keep their stored limit.
    default_storage_limit_bytes: int = Field(
        default=DEFAULT_STORAGE_LIMIT_BYTES,
        description="Storage limit in bytes for newly provisioned vaults"
    )
    system_folder_name: str = Field(
        default="AI Outputs",
        description="Name of the reserved root folder created in every vault"
    )

    # Authentication
    # Tokens are issued by the external auth service; this service only verifies them.
    # AUTH_ENABLED: when False, every request acts as the "anonymous" identity (dev mode).
    jwt_secret_key: str = Field(
        default="dev-insecure-key-change-me",
        description="JWT verification secret shared with the auth service"
    )
    jwt_algorithm: str = Field(default="HS256")
    auth_enabled: bool = Field(
        default=False,
        description="Require a bearer token on every vault endpoint"
    )

    # Logging Configuration
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    log_format: str = Field(
        default="json",
        description="Log output format: 'json' for structured, 'text' for human-readable"
    )

    def get_cors_origins(self) -> List[str]:
        """
        Get CORS origins as a list.

        Parses comma-separated string and validates no wildcards.
        """
        origins = [origin.strip() for origin in self.cors_allowed_origins.split(',') if origin.strip()]

        # SECURITY: Prevent wildcard CORS
        if "*" in origins:
            raise ValueError(
                "Wildcard CORS (*) not allowed. "
                "Specify explicit origins in CORS_ALLOWED_ORIGINS"
            )

        return origins

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is one of the standard Python logging levels."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level. Must be one of: {valid_levels}")
        return v_upper

    @field_validator('default_storage_limit_bytes')
    @classmethod
    def validate_storage_limit(cls, v: int) -> int:
        if v < 0:
            raise ValueError("Storage limit cannot be negative")
        if v > 2**63 - 1:
            raise ValueError("Storage limit must fit in a 64-bit signed integer")
        return v

    @field_validator('system_folder_name')
    @classmethod
    def validate_system_folder_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("System folder name cannot be empty")
        return v

    def validate_production_config(self) -> None:
        """Validate configuration for production environment.

        In production, fails startup if security-critical settings use insecure defaults.
        In development, returns silently and main.py logs warnings instead.

        Raises:
            ConfigurationError: If production config is insecure.
        """
        errors: list[str] = []

        if self.jwt_secret_key == "dev-insecure-key-change-me":
            errors.append(
                "JWT_SECRET_KEY is using the default insecure value. "
                "Set it to the secret shared with the auth service."
            )

        if not self.auth_enabled:
            errors.append(
                "AUTH_ENABLED is false. "
                "Authentication must be enabled in production."
            )

        origins = self.get_cors_origins()
        localhost_origins = [o for o in origins if "localhost" in o or "127.0.0.1" in o]
        if localhost_origins:
            errors.append(
                f"CORS allows localhost origins: {localhost_origins}. "
                "Remove localhost origins for production."
            )

        if errors and self.environment == Environment.PRODUCTION:
            raise ConfigurationError(
                "Production configuration is insecure:\n  - " + "\n  - ".join(errors)
            )

    class Config:
        """Pydantic configuration."""
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


# Global settings instance
settings = Settings()
