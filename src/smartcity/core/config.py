"""Application configuration loaded from environment and config files."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings

DEFAULT_CATEGORIES: list[str] = [
    "ROAD",
    "LIGHTING",
    "WASTE",
    "WATER",
    "SAFETY",
    "GREEN_SPACE",
    "BUILDING",
    "NOISE",
    "PUBLIC_PROPERTY",
    "OTHER",
]


class ComplaintConfig(BaseSettings):
    """Complaint lifecycle configuration."""

    model_config = {"env_prefix": "SMARTCITY_COMPLAINTS_"}

    categories: list[str] = Field(default_factory=lambda: list(DEFAULT_CATEGORIES))
    default_category: str = "OTHER"
    enforce_transition_order: bool = False
    page_size: int = 20
    max_page_size: int = 100


class GeographyConfig(BaseSettings):
    """Geography lookup configuration."""

    model_config = {"env_prefix": "SMARTCITY_GEOGRAPHY_"}

    data_path: str = "config/geography.yml"


class DirectoryConfig(BaseSettings):
    """User and department directory configuration."""

    model_config = {"env_prefix": "SMARTCITY_DIRECTORY_"}

    seed_path: str = "config/directory_seed.yml"


class AuditConfig(BaseSettings):
    """Audit logging configuration."""

    model_config = {"env_prefix": "SMARTCITY_AUDIT_"}

    log_dir: str = "data/audit"


class NotificationConfig(BaseSettings):
    """Notification engine configuration."""

    model_config = {"env_prefix": "SMARTCITY_NOTIFICATION_"}

    templates_path: str = "config/notification_templates.yml"
    default_channel: str = "email"
    admin_recipient: str = "admins"


class AuthConfig(BaseSettings):
    """Authentication configuration."""

    model_config = {"env_prefix": "SMARTCITY_AUTH_"}

    provider: str = "mock"
    fixtures_path: str = "config/auth_fixtures.yml"
    token_expiry_minutes: int = 60


class DatabaseConfig(BaseSettings):
    """Database configuration. An empty URL selects the in-memory stores."""

    model_config = {"env_prefix": "SMARTCITY_DB_"}

    database_url: str = ""
    echo: bool = False
    pool_size: int = 5


class Settings(BaseSettings):
    """Root application settings."""

    model_config = {"env_prefix": "SMARTCITY_"}

    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:3000", "http://localhost:3001"]
    )

    complaints: ComplaintConfig = Field(default_factory=ComplaintConfig)
    geography: GeographyConfig = Field(default_factory=GeographyConfig)
    directory: DirectoryConfig = Field(default_factory=DirectoryConfig)
    audit: AuditConfig = Field(default_factory=AuditConfig)
    notification: NotificationConfig = Field(default_factory=NotificationConfig)
    auth: AuthConfig = Field(default_factory=AuthConfig)
    db: DatabaseConfig = Field(default_factory=DatabaseConfig)
