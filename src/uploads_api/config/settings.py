# src/uploads_api/config/settings.py
from functools import lru_cache
from typing import List, Optional

from pydantic import AliasChoices, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing_extensions import Self

VALID_DEPLOYMENT_MODES = ["local-dev", "aws-mock", "aws-prod"]
MOTO_ENDPOINT_URL = "http://localhost:5000"


class Settings(BaseSettings):
    """
    Single source of truth for all application settings.

    Configuration precedence:
    1. Environment variables (highest priority)
    2. .env file (if exists)
    3. Default values in this class (lowest priority)

    Usage:
        from uploads_api.config.settings import get_settings
        settings = get_settings()
        bucket_name = settings.s3_bucket_name
    """

    # Application Settings
    app_name: str = Field(
        default="uploads-api",
        description="Application name"
    )

    # Deployment Mode
    deployment_mode: str = Field(
        default="local-dev",
        validation_alias=AliasChoices("deployment_mode", "DEPLOYMENT_MODE", "EXEC_MODE"),
        description="Deployment mode: local-dev, aws-mock, or aws-prod"
    )

    # AWS Core Settings
    aws_region: str = Field(
        default="us-east-1",
        alias="AWS_DEFAULT_REGION"
    )

    aws_access_key_id: Optional[str] = Field(
        default=None,
        alias="AWS_ACCESS_KEY_ID"
    )

    aws_secret_access_key: Optional[str] = Field(
        default=None,
        alias="AWS_SECRET_ACCESS_KEY"
    )

    aws_endpoint_url: Optional[str] = Field(
        default=None,
        alias="AWS_ENDPOINT_URL"
    )

    # Blob Storage Configuration
    s3_bucket_name: str = Field(
        default="uploads-api-blobs",
        description="S3 bucket holding uploaded blobs"
    )

    storage_dir: str = Field(
        default="storage",
        description="Local blob directory used in local-dev mode"
    )

    public_base_url: Optional[str] = Field(
        default=None,
        description="Base URL prepended to blob keys when building resolvable URLs"
    )

    # Metadata Store Configuration
    mongodb_uri: Optional[str] = Field(
        default=None,
        alias="MONGODB_URI",
        description="MongoDB connection string; the sqlite document store is used when unset"
    )

    mongodb_database: str = Field(
        default="uploads",
        description="MongoDB database name"
    )

    database_path: str = Field(
        default="uploads.db",
        description="sqlite file for the document store"
    )

    # Remote link fetching
    fetch_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Connect/read timeout applied to each remote link fetch"
    )

    # Pagination
    default_page_size: int = Field(default=10, ge=1)
    max_page_size: int = Field(default=100, ge=1)

    # HTTP
    cors_allow_origins: List[str] = Field(
        default=["http://localhost:3000"],
        description="Origins allowed by the CORS middleware"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level"
    )

    @field_validator("deployment_mode", mode="before")
    @classmethod
    def normalize_deployment_mode(cls, v):
        """Map legacy deployment mode values and reject unknown ones."""
        mode_mapping = {
            "local-mock": "local-dev",
            "cloud": "aws-prod",
        }
        v = mode_mapping.get(v, v)
        if v not in VALID_DEPLOYMENT_MODES:
            raise ValueError(f"Invalid deployment_mode: {v}. Must be one of {VALID_DEPLOYMENT_MODES}")
        return v

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return v.upper()

    @model_validator(mode="after")
    def apply_mode_defaults(self) -> Self:
        """Point aws-mock at the local moto server with mock credentials."""
        if self.deployment_mode == "aws-mock":
            if self.aws_endpoint_url is None:
                self.aws_endpoint_url = MOTO_ENDPOINT_URL
            if self.aws_access_key_id is None:
                self.aws_access_key_id = "mock"
            if self.aws_secret_access_key is None:
                self.aws_secret_access_key = "mock"
        if self.default_page_size > self.max_page_size:
            raise ValueError("default_page_size must not exceed max_page_size")
        return self

    @property
    def blob_backend(self) -> str:
        """`local` in local-dev mode, `s3` otherwise."""
        return "local" if self.deployment_mode == "local-dev" else "s3"

    @property
    def metadata_backend(self) -> str:
        """`mongo` when a MongoDB URI is configured, `sqlite` otherwise."""
        return "mongo" if self.mongodb_uri else "sqlite"

    def get_environment_dict(self) -> dict:
        """Get configuration as a dictionary suitable for docker-compose or subprocess.

        Credentials are never included.
        """
        env_dict = {
            'DEPLOYMENT_MODE': self.deployment_mode,
            'S3_BUCKET_NAME': self.s3_bucket_name,
            'AWS_DEFAULT_REGION': self.aws_region,
            'STORAGE_DIR': self.storage_dir,
            'DATABASE_PATH': self.database_path,
            'MONGODB_DATABASE': self.mongodb_database,
            'FETCH_TIMEOUT_SECONDS': str(self.fetch_timeout_seconds),
            'LOG_LEVEL': self.log_level,
        }
        if self.aws_endpoint_url:
            env_dict['AWS_ENDPOINT_URL'] = self.aws_endpoint_url
        if self.public_base_url:
            env_dict['PUBLIC_BASE_URL'] = self.public_base_url
        return env_dict

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=(".env", ".env.local-dev", ".env.aws-mock", ".env.aws-prod"),
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    This ensures we only create one Settings instance per process.
    """
    return Settings()
