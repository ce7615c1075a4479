"""
Configuration Management

Centralized configuration using Pydantic Settings. Every group reads its
values from the environment; a local ``.env`` file is loaded first so
development setups don't need exported variables.
"""

from typing import Annotated, List, Optional
from functools import lru_cache

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

load_dotenv(override=False)

_ENV_CONFIG = SettingsConfigDict(case_sensitive=True, extra="ignore")


class DatabaseSettings(BaseSettings):
    """Database configuration settings"""

    DATABASE_URL: Optional[str] = Field(default=None)

    DB_HOST: str = Field(default="localhost")
    DB_PORT: int = Field(default=5432)
    DB_USER: str = Field(default="ogs")
    DB_PASSWORD: str = Field(default="ogs")
    DB_NAME: str = Field(default="ogs")
    DB_DRIVER: str = Field(default="postgresql+psycopg2")

    # Connection pool settings
    DB_POOL_SIZE: int = Field(default=10)
    DB_MAX_OVERFLOW: int = Field(default=20)
    DB_POOL_RECYCLE: int = Field(default=3600)

    DB_ECHO: bool = Field(default=False)

    model_config = _ENV_CONFIG

    @property
    def database_url(self) -> str:
        """Explicit DATABASE_URL wins over the individual components."""
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return f"{self.DB_DRIVER}://{self.DB_USER}:{self.DB_PASSWORD}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")


class RedisSettings(BaseSettings):
    """Redis configuration settings"""

    REDIS_HOST: str = Field(default="localhost")
    REDIS_PORT: int = Field(default=6379)
    REDIS_PASSWORD: Optional[str] = Field(default=None)
    REDIS_DB: int = Field(default=0)
    REDIS_SSL: bool = Field(default=False)

    model_config = _ENV_CONFIG

    @property
    def redis_url(self) -> str:
        auth = f":{self.REDIS_PASSWORD}@" if self.REDIS_PASSWORD else ""
        protocol = "rediss" if self.REDIS_SSL else "redis"
        return f"{protocol}://{auth}{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"


class SecuritySettings(BaseSettings):
    """Security configuration settings"""

    SECRET_KEY: str = Field(
        default="change-me-in-production-0d8f7a6b5c4e3d2f1a0b9c8d7e6f5a4b",
        min_length=32,
    )
    JWT_ALGORITHM: str = Field(default="HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(default=60)

    CORS_ORIGINS: Annotated[List[str], NoDecode] = Field(default=["http://localhost:3000"])
    CORS_ALLOW_CREDENTIALS: bool = Field(default=True)

    model_config = _ENV_CONFIG

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v


class LoggingSettings(BaseSettings):
    """Logging configuration settings"""

    LOG_LEVEL: str = Field(default="INFO")
    LOG_FORMAT: str = Field(default="json")  # json or text
    LOG_SQL_QUERIES: bool = Field(default=False)

    model_config = _ENV_CONFIG

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v.upper()

    @field_validator("LOG_FORMAT")
    @classmethod
    def validate_log_format(cls, v):
        if v.lower() not in ("json", "text"):
            raise ValueError("Log format must be 'json' or 'text'")
        return v.lower()


class APISettings(BaseSettings):
    """API configuration settings"""

    API_V1_PREFIX: str = Field(default="/api/v1")
    API_VERSION: str = Field(default="1.0.0")
    API_TITLE: str = Field(default="OGS Attendance API")
    API_DESCRIPTION: str = Field(
        default="Room visits, supervision and daily attendance for after-school care"
    )

    model_config = _ENV_CONFIG


class BackgroundTaskSettings(BaseSettings):
    """Background task configuration"""

    TASK_BROKER_URL: Optional[str] = Field(default=None)
    TASK_RESULT_BACKEND: Optional[str] = Field(default=None)
    TASK_TIMEOUT: int = Field(default=300)

    ENABLE_PERIODIC_TASKS: bool = Field(default=True)
    SCHEDULED_CHECKOUT_INTERVAL_SECONDS: int = Field(default=60, ge=5)
    SCHEDULED_CHECKOUT_BATCH_SIZE: int = Field(default=200, ge=1)

    # Running groups without a checkin for this long are ended
    SESSION_IDLE_TIMEOUT_MINUTES: int = Field(default=60, ge=1)
    SESSION_CLEANUP_INTERVAL_MINUTES: int = Field(default=15, ge=1)

    # Local time (HH:MM) at which every group still running is ended
    ENABLE_DAILY_SESSION_END: bool = Field(default=True)
    SESSION_END_TIME: str = Field(default="18:00", pattern=r"^([01]\d|2[0-3]):[0-5]\d$")

    model_config = _ENV_CONFIG


class Settings(BaseSettings):
    """Main application settings"""

    ENVIRONMENT: str = Field(default="development")
    DEBUG: bool = Field(default=False)

    PROJECT_NAME: str = Field(default="OGS Attendance")
    SERVICE_NAME: str = Field(default="ogs-attendance")

    # Local calendar used to decide which attendance day "today" is
    TIMEZONE: str = Field(default="Europe/Berlin")

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    redis: RedisSettings = Field(default_factory=RedisSettings)
    security: SecuritySettings = Field(default_factory=SecuritySettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    api: APISettings = Field(default_factory=APISettings)
    tasks: BackgroundTaskSettings = Field(default_factory=BackgroundTaskSettings)

    model_config = _ENV_CONFIG

    @field_validator("ENVIRONMENT")
    @classmethod
    def validate_environment(cls, v):
        valid_envs = ["development", "staging", "production", "testing"]
        if v not in valid_envs:
            raise ValueError(f"Environment must be one of {valid_envs}")
        return v

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @property
    def broker_url(self) -> str:
        return self.tasks.TASK_BROKER_URL or self.redis.redis_url


@lru_cache()
def get_settings() -> Settings:
    """Get cached application settings"""
    return Settings()


settings = get_settings()
