"""Configuration management using Pydantic."""
from pathlib import Path
from typing import Optional
from functools import lru_cache
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
import yaml

from .constants import (
    DEFAULT_PROJECTS_DIR,
    DEFAULT_LOG_DIR,
    EXPORT_FORMATS,
    LOG_LEVELS,
)


class Settings(BaseSettings):
    """Application settings loaded from environment and config files."""

    model_config = SettingsConfigDict(
        env_prefix="QUILLKIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Storage paths
    projects_dir: Path = Field(
        default=DEFAULT_PROJECTS_DIR,
        description="Directory where new manuscript projects are created"
    )
    log_dir: Path = Field(
        default=DEFAULT_LOG_DIR,
        description="Directory for log files"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )
    console_logging: bool = Field(
        default=False,
        description="Also write log records to the console"
    )

    # Defaults for new projects and exports
    default_author: str = Field(
        default="",
        description="Author used when 'new' is run without --author"
    )
    default_export_format: str = Field(
        default="epub",
        description="Export format used when none is given"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate logging level name."""
        v = v.upper()
        if v not in LOG_LEVELS:
            raise ValueError(f"Log level must be one of: {', '.join(LOG_LEVELS)}")
        return v

    @field_validator('default_export_format')
    @classmethod
    def validate_export_format(cls, v: str) -> str:
        """Validate default export format."""
        v = v.lower()
        if v not in EXPORT_FORMATS:
            raise ValueError(f"Export format must be one of: {', '.join(EXPORT_FORMATS)}")
        return v

    @field_validator('projects_dir')
    @classmethod
    def create_directories(cls, v: Path) -> Path:
        """Ensure directories exist."""
        v = Path(v).expanduser().resolve()
        v.mkdir(parents=True, exist_ok=True)
        return v

    def load_config_file(self, config_path: Path) -> None:
        """Load additional settings from a YAML config file."""
        if config_path.exists():
            with open(config_path, encoding='utf-8') as f:
                config_data = yaml.safe_load(f) or {}

            # Update settings with config file data
            for key, value in config_data.items():
                if key in type(self).model_fields:
                    setattr(self, key, value)

    def save_config_file(self, config_path: Path) -> None:
        """Save current settings to a YAML config file."""
        config_data = {
            'projects_dir': str(self.projects_dir),
            'log_level': self.log_level,
            'console_logging': self.console_logging,
            'default_author': self.default_author,
            'default_export_format': self.default_export_format,
        }

        with open(config_path, 'w', encoding='utf-8') as f:
            yaml.dump(config_data, f, default_flow_style=False, sort_keys=False)


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    settings = Settings()

    # Load user config if it exists
    user_config = Path.home() / '.quillkit' / 'config.yaml'
    if user_config.exists():
        settings.load_config_file(user_config)

    # Load working-directory config if it exists
    local_config = Path('quillkit.yaml')
    if local_config.exists():
        settings.load_config_file(local_config)

    return settings
