"""
Configuration settings for the Checklist Workflow application.
All values can be overridden from environment variables (CHECKLIST_ prefix).
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    app_name: str = "Checklist Workflow"
    debug: bool = False
    environment: str = "production"
    log_level: str = "INFO"

    # Undo/Redo
    undo_history_size: int = 50

    # Checklist defaults
    default_category_name: str = "General"
    default_category_color: str = "#3B82F6"
    default_category_icon: str = "📋"
    duplicate_title_suffix: str = " (Copy)"

    class Config:
        env_prefix = "CHECKLIST_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get the application settings."""
    return settings
