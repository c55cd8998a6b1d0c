"""
Configuration management using environment variables.
Handles database, server and logging settings with validation and defaults.
"""

from typing import List, Optional
from pathlib import Path

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class CatalogConfig(BaseSettings):
    """
    Configuration class for the book catalog service.
    Uses pydantic BaseSettings for environment variable management.
    """

    # MongoDB Configuration
    mongodb_url: str = "mongodb://localhost:27017"
    mongodb_database: str = Field(
        default="bookshelf",
        validation_alias=AliasChoices("mongodb_database", "db_name"),
    )
    mongodb_collection: str = "books"

    # Atlas-style connection parts; take precedence over mongodb_url when db_host is set
    db_dialect: str = "mongodb"
    db_host: str = ""
    db_username: str = ""
    db_password: str = ""

    # Server Configuration
    host: str = "0.0.0.0"
    port: int = Field(default=8000, validation_alias=AliasChoices("port", "api_port"))
    debug: bool = False

    # CORS Settings
    cors_origins: List[str] = ["*"]

    # Logging Configuration
    log_level: str = "INFO"
    log_format: str = "console"
    log_file: Optional[str] = None

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("port")
    @classmethod
    def validate_port(cls, v):
        """Ensure port is in the valid TCP range."""
        if v < 1 or v > 65535:
            raise ValueError("port must be between 1 and 65535")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Ensure log level is valid."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"log_level must be one of: {valid_levels}")
        return v.upper()

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v):
        """Ensure log format is valid."""
        valid_formats = ["json", "console"]
        if v.lower() not in valid_formats:
            raise ValueError(f"log_format must be one of: {valid_formats}")
        return v.lower()

    def get_mongodb_url(self) -> str:
        """Get the MongoDB connection URL, building it from parts when a host is configured."""
        if self.db_host:
            return f"{self.db_dialect}+srv://{self.db_username}:{self.db_password}@{self.db_host}"
        return self.mongodb_url

    def get_log_file_path(self) -> Optional[Path]:
        """Get log file path as Path object."""
        if self.log_file:
            return Path(self.log_file)
        return None


# Global configuration instance
config = CatalogConfig()
