"""
Build settings

Settings that apply to every project rather than to one pagepress.yaml.
They come from PAGEPRESS_* environment variables or a .env file in the
working directory, validated by pydantic-settings.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """
    Process-wide build settings.

    Examples:
        PAGEPRESS_CONFIG_FILENAME=site.yaml
        PAGEPRESS_MAX_WORKERS=4
        PAGEPRESS_STRICT_MODE=true
        PAGEPRESS_DEBUG_MODE=1
    """

    model_config = SettingsConfigDict(
        env_prefix="PAGEPRESS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    config_filename: str = Field(
        default="pagepress.yaml",
        description="Project file looked up from the input directory towards the filesystem root",
    )

    max_workers: Optional[int] = Field(
        default=None,
        ge=1,
        description="Build threads; unset leaves the choice to ThreadPoolExecutor",
    )

    strict_mode: bool = Field(
        default=False,
        description="Fail a file on a mismatched HTML closing tag instead of unwinding past it",
    )

    debug_mode: bool = Field(
        default=False,
        description="Log at trace verbosity regardless of -v",
    )


appsettings = AppSettings()
