"""Application configuration management.

This module handles environment-specific configuration loading, parsing, and management
for the application. It includes environment detection, .env file loading, and
configuration value parsing.
"""

import os
from enum import Enum
from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import (
    BaseSettings,
    SettingsConfigDict,
)


# Define environment types
class Environment(str, Enum):
    """Application environment types.

    Defines the possible environments the application can run in:
    development, staging, production, and test.
    """

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TEST = "test"


# Determine environment
def get_environment() -> Environment:
    """Get the current environment.

    Returns:
        Environment: The current environment (development, staging, production, or test)
    """
    match os.getenv("APP_ENV", "development").lower():
        case "production" | "prod":
            return Environment.PRODUCTION
        case "staging" | "stage":
            return Environment.STAGING
        case "test":
            return Environment.TEST
        case _:
            return Environment.DEVELOPMENT


# Load .env file
def load_env_file():
    """Load .env file."""
    if Path(".env").exists():
        load_dotenv(".env")

    # Firebase-specific overrides live in their own file
    firebase_env = ".env.firebase"
    if Path(firebase_env).exists():
        load_dotenv(firebase_env)


# Load environment file
load_env_file()


class Settings(BaseSettings):
    """Application settings.

    This class defines all configuration settings for the application,
    including Firebase access, store timeouts, scheduling and email delivery.
    """

    model_config = SettingsConfigDict(case_sensitive=True, extra="ignore")

    # Application Settings
    APP_ENV: Environment = Field(default_factory=get_environment)
    PROJECT_NAME: str = "SkillSwap"
    VERSION: str = "1.0.0"
    DESCRIPTION: str = "Matching, scheduling and messaging core for SkillSwap"
    API_V1_STR: str = "/api/v1"
    DEBUG: bool = False

    # Firebase
    FIREBASE_PROJECT_ID: str = ""
    FIREBASE_CREDENTIALS_PATH: str = ""
    FIREBASE_STORAGE_BUCKET: str = ""

    # Document store
    STORE_TIMEOUT_SECONDS: float = Field(default=30.0, gt=0)

    # Sessions
    MEETING_BASE_URL: str = "https://meet.jit.si"
    UPCOMING_WINDOW_DAYS: int = Field(default=30, ge=1)

    # Reminder sweep
    REMINDER_LEAD_MINUTES: int = Field(default=60, ge=1)
    SCHEDULER_TOKEN: str = ""

    # Email (Brevo)
    BREVO_API_KEY: str = ""
    BREVO_API_URL: str = "https://api.brevo.com/v3/smtp/email"
    EMAIL_SENDER_NAME: str = "SkillSwap"
    EMAIL_SENDER_ADDRESS: str = "noreply@skillswap.com"
    EMAIL_TIMEOUT_SECONDS: float = 10.0

    # CORS Settings
    ALLOWED_ORIGINS: str = "http://localhost:3000,http://localhost:5000"

    @property
    def ALLOWED_ORIGINS_LIST(self) -> list[str]:
        """Parse ALLOWED_ORIGINS string into a list."""
        origins = [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",") if origin.strip()]
        if not origins:
            return ["*"]
        return origins

    # Logging Configuration
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "console"


settings = Settings()
