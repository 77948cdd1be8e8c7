"""
Configuration Settings.

This module defines the application configuration using Pydantic's BaseSettings.
It automatically loads all configuration from environment variables and .env file
without explicit dotenv loading.
"""

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# =====================================================================
# Grouped Configuration Models
# =====================================================================


class ImportConfig(BaseModel):
    """Spreadsheet import pipeline configuration."""

    batch_size: int = Field(
        default=500, ge=1, alias="IMPORT_BATCH_SIZE", description="Number of rows inserted per batch"
    )
    preview_rows: int = Field(
        default=10, ge=1, alias="IMPORT_PREVIEW_ROWS", description="Number of rows returned by an import preview"
    )
    max_reported_errors: int = Field(
        default=20,
        ge=0,
        alias="IMPORT_MAX_REPORTED_ERRORS",
        description="Maximum number of row errors returned in an import result",
    )
    max_logged_errors: int = Field(
        default=100,
        ge=0,
        alias="IMPORT_MAX_LOGGED_ERRORS",
        description="Maximum number of row errors stored in the import history",
    )

    model_config = {"populate_by_name": True}


# =====================================================================
# Main Settings Class
# =====================================================================


class Settings(BaseSettings):
    """
    Application settings model.

    All properties are automatically bound from environment variables and .env file.
    Pydantic's BaseSettings handles dotenv loading automatically via model_config.
    """

    # =====================================================================
    # Pydantic Configuration
    # =====================================================================
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=True,
        populate_by_name=True,
    )

    # =====================================================================
    # Logging Configuration
    # =====================================================================
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
        alias="RENTACAR_LOG_LEVEL",
    )
    log_format: str = Field(
        default="detailed",
        description="Log line format (simple, detailed, json)",
        alias="RENTACAR_LOG_FORMAT",
    )
    log_file_dir: str = Field(
        default="logs",
        description="Directory that receives the log file when file logging is enabled",
        alias="RENTACAR_LOG_FILE_DIR",
    )
    enable_file_logging: bool = Field(
        default=False,
        description="Write DEBUG logs to <log_file_dir>/rentacar_ops.log",
        alias="RENTACAR_ENABLE_FILE_LOGGING",
    )

    # =====================================================================
    # Database Configuration
    # =====================================================================
    database_url: str = Field(
        default="sqlite+aiosqlite:///./rentacar.db",
        description="Async SQLAlchemy connection URL for the application database",
        alias="DATABASE_URL",
    )

    # =====================================================================
    # Import Pipeline Configuration (flat, grouped below)
    # =====================================================================
    import_batch_size: int = Field(default=500, alias="IMPORT_BATCH_SIZE")
    import_preview_rows: int = Field(default=10, alias="IMPORT_PREVIEW_ROWS")
    import_max_reported_errors: int = Field(default=20, alias="IMPORT_MAX_REPORTED_ERRORS")
    import_max_logged_errors: int = Field(default=100, alias="IMPORT_MAX_LOGGED_ERRORS")

    # =====================================================================
    # Computed Properties (Grouped Configurations)
    # =====================================================================

    @property
    def import_(self) -> ImportConfig:
        """Get import pipeline configuration from environment variables."""
        return ImportConfig.model_validate(self.model_dump(by_alias=True))


settings = Settings()
