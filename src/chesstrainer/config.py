"""Configuration settings for the puzzle trainer."""
import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

# Load environment variables from .env file
env_file = ".env.test" if os.getenv("ENV") == "test" else ".env"
load_dotenv(env_file)


# Training set limits
MAX_SET_NAME_LENGTH = 100
MIN_SET_SIZE = 5
MAX_SET_SIZE = 1000

# Lichess popularity is a percentile-like score
MIN_POPULARITY = -100
MAX_POPULARITY = 100

STORAGE_BACKENDS = ("memory", "database")
HEALTHY_MIX_STRATEGIES = ("uniform", "theme_balanced")


@dataclass
class StorageSettings:
    """Storage backend settings."""
    backend: str = os.getenv("STORAGE_BACKEND", "memory")
    healthy_mix_strategy: str = os.getenv("HEALTHY_MIX_STRATEGY", "uniform")


@dataclass
class DatabaseSettings:
    """Database configuration settings."""
    url: str = os.getenv("DATABASE_URL", "sqlite:///chesstrainer.db")
    echo: bool = os.getenv("DATABASE_ECHO", "false").lower() == "true"


@dataclass
class LoggingSettings:
    """Logging configuration settings."""
    level: str = os.getenv("LOG_LEVEL", "INFO")
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    dir: Optional[str] = os.getenv("LOG_DIR", None)
    rotation: str = os.getenv("LOG_ROTATION", "midnight")
    interval: int = int(os.getenv("LOG_INTERVAL", "1"))
    backup_count: int = int(os.getenv("LOG_BACKUP_COUNT", "7"))


@dataclass
class ServerSettings:
    """HTTP server settings."""
    host: str = os.getenv("SERVER_HOST", "0.0.0.0")
    port: int = int(os.getenv("SERVER_PORT", "5000"))


@dataclass
class MonitoringSettings:
    """Prometheus metrics settings."""
    enabled: bool = os.getenv("METRICS_ENABLED", "false").lower() == "true"
    port: int = int(os.getenv("METRICS_PORT", "9090"))


def get_storage_settings() -> StorageSettings:
    """Get storage settings."""
    return StorageSettings()


def get_database_settings() -> DatabaseSettings:
    """Get database settings."""
    return DatabaseSettings()


def get_logging_settings() -> LoggingSettings:
    """Get logging settings."""
    return LoggingSettings()


def get_server_settings() -> ServerSettings:
    """Get server settings."""
    return ServerSettings()


def get_monitoring_settings() -> MonitoringSettings:
    """Get monitoring settings."""
    return MonitoringSettings()


@dataclass
class Settings:
    """Main settings class that combines all configuration settings."""
    storage: StorageSettings = field(default_factory=get_storage_settings)
    database: DatabaseSettings = field(default_factory=get_database_settings)
    logging: LoggingSettings = field(default_factory=get_logging_settings)
    server: ServerSettings = field(default_factory=get_server_settings)
    monitoring: MonitoringSettings = field(default_factory=get_monitoring_settings)

    def validate(self) -> None:
        """Validate settings and raise ValueError if invalid."""
        if self.storage.backend not in STORAGE_BACKENDS:
            raise ValueError(f"STORAGE_BACKEND must be one of {', '.join(STORAGE_BACKENDS)}")

        if self.storage.healthy_mix_strategy not in HEALTHY_MIX_STRATEGIES:
            raise ValueError(
                f"HEALTHY_MIX_STRATEGY must be one of {', '.join(HEALTHY_MIX_STRATEGIES)}"
            )

        if not self.database.url:
            raise ValueError("DATABASE_URL is required")

        if not 0 < self.server.port < 65536:
            raise ValueError("SERVER_PORT must be between 1 and 65535")

        if not 0 < self.monitoring.port < 65536:
            raise ValueError("METRICS_PORT must be between 1 and 65535")

        if self.server.port == self.monitoring.port and self.monitoring.enabled:
            raise ValueError("METRICS_PORT cannot be the same as SERVER_PORT")


# Create global settings instance
settings = Settings()
settings.validate()
