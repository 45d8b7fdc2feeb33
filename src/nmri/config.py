"""
Configuration management for NMRI.

Handles loading configuration from environment variables, YAML files,
and provides sensible defaults for all settings.
"""

import logging
import sys
from pathlib import Path
from typing import Literal

import structlog
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="NMRI_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application settings
    app_name: str = "NMRI Command Line Calculator"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING"

    # Expression limits
    max_tokens: int = Field(100, ge=1)  # Token-count ceiling per expression
    max_identifier_length: int = Field(32, ge=2)  # Names must be strictly shorter
    max_variables: int = Field(100, ge=1)  # 'ans' occupies one slot
    max_input_length: int = Field(256, ge=1)

    # Interactive session
    history_size: int = Field(20, ge=1)
    near_zero_epsilon: float = Field(1e-10, ge=0.0)

    # Session log
    log_path: Path = Path("nmri.log")
    logging_enabled: bool = False

    @classmethod
    def from_yaml(cls, path: Path) -> "Settings":
        """Build settings from environment values overlaid with a YAML file."""
        return cls(**load_yaml_config(path))


# Global settings instance
settings = Settings()


def load_yaml_config(path: Path) -> dict:
    """Load configuration from a YAML file."""
    import yaml

    if not path.exists():
        return {}

    with open(path) as f:
        return yaml.safe_load(f) or {}


def configure_logging(level: str = "WARNING") -> None:
    """Route structlog diagnostics to stderr, filtered at the given level."""
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="%H:%M:%S"),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(level.upper())
        ),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )
