"""
Configuration management for FitFlow Tasks.

This module provides centralized configuration management using environment variables
and default values. Configuration is loaded from environment variables with
fallbacks to sensible defaults for development.

Storage backends and the map renderer are built once from this configuration at
process start and handed to the services that need them.
"""

from typing import Dict, Any, Literal, Optional
from pathlib import Path
from urllib.parse import urlparse

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

from fitflow.const import (
    DEFAULT_FITNESS_MAX_FILE_SIZE,
    DEFAULT_MAP_HEIGHT,
    DEFAULT_MAP_WIDTH,
    DEFAULT_QUOTA_PER_ACCOUNT,
    DEFAULT_TILE_URL,
    DEFAULT_TILE_USER_AGENT,
)
from fitflow.maps import MapRenderer
from fitflow.storage import BlobStorage, LocalFileBlobStorage, S3BlobStorage

from .exceptions import ConfigurationError

# Load .env file from the fitflow-tasks directory
project_root = Path(__file__).parent.parent
env_file = project_root / ".env"
load_dotenv(env_file)

# Also try to load from the current working directory
load_dotenv()


class RabbitMQConfig(BaseSettings):
    """RabbitMQ connection configuration."""

    model_config = SettingsConfigDict(env_prefix="")

    host: str = Field(default="localhost", alias="RABBITMQ_HOST")
    port: int = Field(default=5672, alias="RABBITMQ_PORT")
    username: str = Field(default="admin", alias="RABBITMQ_DEFAULT_USER")
    password: str = Field(default="ChangeMe", alias="RABBITMQ_DEFAULT_PASS")
    vhost: str = Field(default="/", alias="RABBITMQ_VHOST")

    @property
    def broker_url(self) -> str:
        """Get the complete broker URL for Celery."""
        # Root vhost must not produce a double slash
        vhost_part = self.vhost if self.vhost != '/' else ''
        return f"pyamqp://{self.username}:{self.password}@{self.host}:{self.port}/{vhost_part}"

    @property
    def result_backend(self) -> str:
        """Get the result backend URL."""
        return "rpc://"


class DatabaseConfig(BaseSettings):
    """Database connection configuration."""

    model_config = SettingsConfigDict(env_prefix="", extra="allow", env_ignore_empty=True)

    url: str = Field(default="sqlite:///fitflow.db", alias="DATABASE_URL")
    echo: bool = Field(default=False, alias="DATABASE_ECHO")

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format."""
        return {
            'url': self.url,
            'echo': self.echo,
        }


class FitnessStorageConfig(BaseSettings):
    """Fitness file blob storage configuration."""

    model_config = SettingsConfigDict(env_prefix="", env_ignore_empty=True, populate_by_name=True)

    storage_type: Literal["fs", "s3", "object"] = Field(default="fs", alias="FITNESS_STORAGE_TYPE")
    path: str = Field(default="storage/fitness", alias="FITNESS_STORAGE_PATH")
    bucket: Optional[str] = Field(default=None, alias="FITNESS_STORAGE_BUCKET")
    region: Optional[str] = Field(default=None, alias="FITNESS_STORAGE_REGION")
    hostname: Optional[str] = Field(default=None, alias="FITNESS_STORAGE_HOSTNAME")
    prefix: str = Field(default="fitness/", alias="FITNESS_STORAGE_PREFIX")
    max_file_size: int = Field(default=DEFAULT_FITNESS_MAX_FILE_SIZE, alias="FITNESS_STORAGE_MAX_FILE_SIZE")
    quota_per_account: int = Field(default=DEFAULT_QUOTA_PER_ACCOUNT, alias="FITNESS_STORAGE_QUOTA_PER_ACCOUNT")

    @property
    def endpoint_url(self) -> Optional[str]:
        """Endpoint for S3-compatible object storage; bare hostnames get https"""
        if not self.hostname:
            return None
        if urlparse(self.hostname).scheme:
            return self.hostname
        return f"https://{self.hostname}"


class MapConfig(BaseSettings):
    """Route preview rendering configuration."""

    model_config = SettingsConfigDict(env_prefix="", env_ignore_empty=True, populate_by_name=True)

    mapbox_access_token: Optional[str] = Field(default=None, alias="MAPBOX_ACCESS_TOKEN")
    tile_url: str = Field(default=DEFAULT_TILE_URL, alias="MAP_TILE_URL")
    user_agent: str = Field(default=DEFAULT_TILE_USER_AGENT, alias="MAP_TILE_USER_AGENT")
    width: int = Field(default=DEFAULT_MAP_WIDTH, alias="MAP_WIDTH")
    height: int = Field(default=DEFAULT_MAP_HEIGHT, alias="MAP_HEIGHT")
    timeout: float = Field(default=10.0, alias="MAP_HTTP_TIMEOUT")


class ArchiveImportConfig(BaseSettings):
    """Strava archive import configuration."""

    model_config = SettingsConfigDict(env_prefix="", env_ignore_empty=True, populate_by_name=True)

    max_media_attachment_retries: int = Field(default=3, alias="ARCHIVE_IMPORT_MAX_MEDIA_ATTACHMENT_RETRIES")
    max_media_attachments: int = Field(default=4, alias="ARCHIVE_IMPORT_MAX_MEDIA_ATTACHMENTS")
    attachment_name_limit: int = Field(default=150, alias="ARCHIVE_IMPORT_ATTACHMENT_NAME_LIMIT")


class CeleryConfig(BaseSettings):
    """Celery application configuration."""

    model_config = SettingsConfigDict(env_prefix="")

    task_serializer: str = Field(default="json")
    result_serializer: str = Field(default="json")
    accept_content: list[str] = Field(default=["json"])
    timezone: str = Field(default="UTC")
    enable_utc: bool = Field(default=True)

    # Task configuration
    task_always_eager: bool = Field(default=False, alias="CELERY_TASK_ALWAYS_EAGER")
    task_eager_propagates: bool = Field(default=True)
    task_acks_late: bool = Field(default=True)
    worker_prefetch_multiplier: int = Field(default=1)

    # Task time limits
    task_soft_time_limit: int = Field(default=300)  # 5 minutes
    task_time_limit: int = Field(default=600)  # 10 minutes

    # Worker configuration
    worker_concurrency: int = Field(default=4, alias="WORKER_CONCURRENCY")
    worker_log_level: str = Field(default="INFO", alias="WORKER_LOG_LEVEL")

    task_routes: Dict[str, Dict[str, str]] = Field(default={
        "fitflow_tasks.tasks.archive_import.*": {"queue": "archive_import"},
    })

    task_annotations: Dict[str, Dict[str, Any]] = Field(default={
        "fitflow_tasks.tasks.archive_import.import_archive_step": {
            "time_limit": 300,   # 5 minutes
            "soft_time_limit": 240,
        },
    })


class Settings(BaseSettings):
    """Main application settings combining all configuration sections."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="",
        extra="ignore"
    )

    # Environment
    environment: str = Field(default="development", alias="ENVIRONMENT")
    debug: bool = Field(default=False, alias="DEBUG")
    log_format: str = Field(default="console", alias="LOG_FORMAT")

    # Configuration sections
    rabbitmq: RabbitMQConfig = Field(default_factory=RabbitMQConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    fitness_storage: FitnessStorageConfig = Field(default_factory=FitnessStorageConfig)
    map: MapConfig = Field(default_factory=MapConfig)
    archive_import: ArchiveImportConfig = Field(default_factory=ArchiveImportConfig)
    celery: CeleryConfig = Field(default_factory=CeleryConfig)

    def get_celery_config(self) -> Dict[str, Any]:
        """Get complete Celery configuration dictionary."""
        return {
            # Broker settings
            "broker_url": self.rabbitmq.broker_url,
            "result_backend": self.rabbitmq.result_backend,

            # Serialization
            "task_serializer": self.celery.task_serializer,
            "result_serializer": self.celery.result_serializer,
            "accept_content": self.celery.accept_content,

            # Timezone
            "timezone": self.celery.timezone,
            "enable_utc": self.celery.enable_utc,

            # Task configuration
            "task_always_eager": self.celery.task_always_eager,
            "task_eager_propagates": self.celery.task_eager_propagates,
            "task_acks_late": self.celery.task_acks_late,
            "worker_prefetch_multiplier": self.celery.worker_prefetch_multiplier,

            # Time limits
            "task_soft_time_limit": self.celery.task_soft_time_limit,
            "task_time_limit": self.celery.task_time_limit,

            # Task routing
            "task_routes": self.celery.task_routes,
            "task_annotations": self.celery.task_annotations,

            # Result configuration
            "result_expires": 3600,  # 1 hour

            "worker_send_task_events": True,
            "task_send_sent_event": True,

            "include": [
                "fitflow_tasks.tasks.archive_import",
            ],
        }


# Global settings instance
settings = Settings()


def get_rabbitmq_config() -> RabbitMQConfig:
    """Get RabbitMQ configuration."""
    return settings.rabbitmq


def get_database_config() -> Dict[str, Any]:
    """Get database configuration as dictionary."""
    return settings.database.to_dict()


def get_celery_config() -> Dict[str, Any]:
    """Get Celery configuration dictionary."""
    return settings.get_celery_config()


def get_settings() -> Settings:
    """Get complete application settings."""
    return settings


def create_blob_storage(config: FitnessStorageConfig) -> BlobStorage:
    """
    Build the fitness blob storage backend selected by configuration.

    Args:
        config: Fitness storage configuration

    Returns:
        Local filesystem or S3-compatible storage backend

    Raises:
        ConfigurationError: If object storage is selected without a bucket
    """
    if config.storage_type == "fs":
        return LocalFileBlobStorage(config.path)

    if not config.bucket:
        raise ConfigurationError(
            "FITNESS_STORAGE_BUCKET is required for object storage",
            {"storage_type": config.storage_type},
        )

    return S3BlobStorage(
        bucket=config.bucket,
        prefix=config.prefix,
        region=config.region,
        endpoint_url=config.endpoint_url,
    )


def create_map_renderer(config: MapConfig) -> MapRenderer:
    """Build the route preview renderer from configuration."""
    return MapRenderer(
        mapbox_access_token=config.mapbox_access_token,
        tile_url=config.tile_url,
        user_agent=config.user_agent,
        timeout=config.timeout,
    )
