"""
Settings Module
===============

Pydantic-based configuration with environment variable loading.

Version: 0.1.0
"""

from enum import Enum
from functools import lru_cache

from pydantic import AliasChoices, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Deployment environment."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class StoreBackend(str, Enum):
    """Record store backend."""

    MONGODB = "mongodb"
    MEMORY = "memory"


class EmailMode(str, Enum):
    """Outbound email mode."""

    MOCK = "mock"
    RESEND = "resend"


class MongoSettings(BaseSettings):
    """MongoDB configuration."""

    model_config = SettingsConfigDict(env_prefix="MONGODB_")

    host: str = "localhost"
    port: int = 27017
    user: str = ""
    password: SecretStr = SecretStr("")
    db: str = Field(default="starshield-guarantee", alias="MONGODB_DB")
    uri_override: str = Field(default="", alias="MONGODB_URI")

    @property
    def uri(self) -> str:
        """Generate MongoDB connection URI."""
        if self.uri_override:
            return self.uri_override
        if self.user:
            pwd = self.password.get_secret_value()
            return f"mongodb://{self.user}:{pwd}@{self.host}:{self.port}/{self.db}?authSource=admin"
        return f"mongodb://{self.host}:{self.port}/{self.db}"


class EmailSettings(BaseSettings):
    """Transactional email (Resend) configuration."""

    model_config = SettingsConfigDict(env_prefix="EMAIL_")

    # RESEND_* names are accepted alongside the prefixed ones.
    api_key: SecretStr = Field(
        default=SecretStr(""),
        validation_alias=AliasChoices("EMAIL_API_KEY", "RESEND_API_KEY"),
    )
    from_address: str = Field(
        default="StarShield Garantias <onboarding@resend.dev>",
        validation_alias=AliasChoices("EMAIL_FROM_ADDRESS", "RESEND_FROM_EMAIL"),
    )
    api_url: str = "https://api.resend.com"
    timeout_seconds: float = 10.0
    max_retries: int = 3

    @property
    def mode(self) -> EmailMode:
        """Mock mode unless an API key is configured."""
        if self.api_key.get_secret_value():
            return EmailMode.RESEND
        return EmailMode.MOCK


class WarrantyPolicySettings(BaseSettings):
    """Warranty and claims business policy."""

    model_config = SettingsConfigDict(env_prefix="WARRANTY_")

    term_years: int = Field(default=1, ge=1)
    max_claims: int = Field(default=2, ge=0)
    coverage_type: str = "screen_only"
    insurance_provider: str = "StarShield"
    protocol_prefix: str = "SGR"
    policy_prefix: str = "POL"
    insert_attempts: int = Field(default=3, ge=1)


class CORSSettings(BaseSettings):
    """CORS configuration."""

    model_config = SettingsConfigDict(env_prefix="CORS_")

    origins: str = "http://localhost:5173,https://garantias.usestarshield.com"
    allow_credentials: bool = True

    @property
    def origins_list(self) -> list[str]:
        """Parse origins string into list."""
        return [o.strip() for o in self.origins.split(",") if o.strip()]


class Settings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables with sensible defaults.
    Use the global `settings` singleton or call `get_settings()`.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # General
    environment: Environment = Environment.DEVELOPMENT
    debug: bool = True
    log_level: LogLevel = LogLevel.INFO
    port: int = 3000

    # Storage
    store_backend: StoreBackend = StoreBackend.MONGODB
    mongodb: MongoSettings = Field(default_factory=MongoSettings)

    # Outbound email
    email: EmailSettings = Field(default_factory=EmailSettings)

    # Business policy
    warranty: WarrantyPolicySettings = Field(default_factory=WarrantyPolicySettings)

    # Security
    cors: CORSSettings = Field(default_factory=CORSSettings)

    @field_validator("log_level", mode="before")
    @classmethod
    def uppercase_log_level(cls, v: str | LogLevel) -> LogLevel:
        """Ensure log level is uppercase."""
        if isinstance(v, str):
            return LogLevel(v.upper())
        return v

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == Environment.PRODUCTION


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings: Application settings singleton.
    """
    return Settings()
