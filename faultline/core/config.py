"""
Application configuration.

Loads settings from environment variables and .env file.
All configuration is centralized here, with no scattered magic strings.
"""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment.

    Attributes:
        project_name: Display name for the API.
        version: Current API version string.
        debug: Debug mode. Controls stack trace exposure in error
            responses and how unhandled async faults are treated.
            Must be False in production.
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR).
        rate_limit_default: Default rate limit for all endpoints.
        max_upload_size_bytes: Maximum size of a single uploaded file.
        max_upload_files: Maximum number of files per upload request.
        upload_field_name: The only form field accepted for file parts.
        shutdown_grace_seconds: Delay before exiting after an unhandled
            async fault in production.
        expose_examples: Mount the demonstration error routes.
        frontend_origin: Origin allowed by CORS.
        jwt_secret: Key used to verify signed tokens.
        jwt_algorithm: Signing algorithm of accepted tokens.
        database_url: Optional SQLAlchemy URL for the storage collaborator.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    project_name: str = "Faultline"
    version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"
    rate_limit_default: str = "60/minute"
    max_upload_size_bytes: int = 5_242_880  # 5 MB
    max_upload_files: int = 5
    upload_field_name: str = "files"
    shutdown_grace_seconds: float = 1.0
    expose_examples: bool = True
    frontend_origin: str = "http://localhost:3000"
    jwt_secret: str = "change-me-to-a-long-random-secret-value"
    jwt_algorithm: str = "HS256"

    database_url: Optional[str] = None


settings = Settings()
