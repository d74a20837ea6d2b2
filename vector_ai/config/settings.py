"""
Application Settings and Configuration

Centralizes all environment variable loading and configuration.
Uses Pydantic Settings for validation.
"""

import os
from pathlib import Path
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv


def load_env_file():
    """Load .env file from the project root or its parent."""
    base_path = Path(__file__).parent.parent.parent
    env_paths = [
        base_path / ".env",
        base_path.parent / ".env",
    ]

    env_path = None
    for path in env_paths:
        if path.exists():
            env_path = path
            print(f"📄 Config: Loaded .env from {env_path}")
            break

    if env_path:
        load_dotenv(dotenv_path=env_path, override=True)
    else:
        load_dotenv(override=True)


# Load environment variables first
load_env_file()


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database Configuration - Read connection (introspection, listing)
    MYSQL_HOST: str = "localhost"
    MYSQL_PORT: int = 3306
    MYSQL_USER: str = "root"
    MYSQL_PASSWORD: str = ""
    MYSQL_DATABASE: str = ""
    DB_DRIVER: str = "mysql+pymysql"

    # Full SQLAlchemy URL; takes precedence over the MYSQL_* fields when set
    DATABASE_URL: Optional[str] = None

    # Database Configuration - Update user (for embedding generation routes)
    # Optional: If not provided, falls back to the read connection
    UPDATE_USER: str = ""
    UPDATE_PASSWORD: str = ""

    QUERY_TIMEOUT_SECONDS: int = 60

    # HTTP server
    PORT: int = 4010

    # Embedding Configuration
    OPENAI_API_KEY: Optional[str] = None
    OPENAI_BASE_URL: Optional[str] = None
    EMBEDDING_MODEL: str = "text-embedding-3-small"
    # Pause between row embedding requests to stay under the API rate limit
    EMBEDDING_REQUEST_DELAY_SECONDS: float = 0.15

    # Logging Configuration
    LOG_LEVEL: str = "INFO"  # DEBUG, INFO, WARNING, ERROR
    LOG_DIR: str = "logs"
    LOG_RETENTION_DAYS: int = 30
    LOG_TO_CONSOLE: bool = True
    LOG_TO_FILE: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore"  # Ignore extra fields from environment
    )

    def model_post_init(self, __context):
        """Post-initialization to handle fallbacks and normalization."""
        # Handle OPENAI_API_KEY vs API_KEY fallback
        if not self.OPENAI_API_KEY:
            self.OPENAI_API_KEY = os.environ.get("API_KEY")

        if self.LOG_LEVEL:
            self.LOG_LEVEL = self.LOG_LEVEL.upper()

    @property
    def openai_api_key(self) -> Optional[str]:
        return self.OPENAI_API_KEY

    @property
    def has_update_user(self) -> bool:
        return bool(self.UPDATE_USER and self.UPDATE_PASSWORD)

    def validate_database_config(self):
        """Validate that enough database config is present to build a URL."""
        if self.DATABASE_URL:
            return

        missing = []
        if not self.MYSQL_HOST:
            missing.append("MYSQL_HOST")
        if not self.MYSQL_DATABASE:
            missing.append("MYSQL_DATABASE")
        if not self.MYSQL_USER:
            missing.append("MYSQL_USER")

        if not self.has_update_user:
            print("⚠️  Warning: UPDATE_USER not set. Embedding routes will use the read connection.")

        if missing:
            raise ValueError(
                f"Missing required database environment variables: {', '.join(missing)}. "
                "Please set them in your .env file or environment, or provide DATABASE_URL."
            )


# Global settings instance
settings = Settings()

# Validate on import
settings.validate_database_config()

# Debug output
masked_password = "***" if settings.MYSQL_PASSWORD else "NOT SET"
print(f"🔍 Database Config Loaded:")
if settings.DATABASE_URL:
    print(f"   DATABASE_URL: set (overrides MYSQL_* settings)")
else:
    print(f"   MYSQL_HOST: {settings.MYSQL_HOST}")
    print(f"   MYSQL_PORT: {settings.MYSQL_PORT}")
    print(f"   MYSQL_DATABASE: {settings.MYSQL_DATABASE or 'NOT SET'}")
    print(f"   MYSQL_USER: {settings.MYSQL_USER}")
    print(f"   MYSQL_PASSWORD: {masked_password}")
    print(f"   Update USER: {settings.UPDATE_USER or 'NOT SET (will use read connection)'}")
print(f"🔧 Embedding Model: {settings.EMBEDDING_MODEL}")
