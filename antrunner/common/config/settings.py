from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseSettings):
    """Process-wide configuration, read from ``ANTRUNNER_*`` variables or ``.env``."""

    model_config = SettingsConfigDict(
        env_prefix="ANTRUNNER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    log_level: str = Field(default="INFO")
    json_logs: bool = Field(default=True, description="Emit operator logs as JSON lines")
    log_dir: Optional[str] = Field(default=None, description="Also write antrunner.log here")

    registry_path: str = Field(
        default="~/.antrunner/installations.json",
        description="JSON file holding the configured Ant installations",
    )
    tools_dir: str = Field(
        default="~/.antrunner/tools",
        description="Where the local node unpacks auto-installed tools",
    )

    ant_download_url_template: str = Field(
        default="https://archive.apache.org/dist/ant/binaries/apache-ant-{version}-bin.zip",
    )
    download_timeout_seconds: int = Field(default=600, ge=1)

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"Unknown log level {v!r}, expected one of {', '.join(LOG_LEVELS)}")
        return level

    @field_validator("ant_download_url_template")
    @classmethod
    def require_version_placeholder(cls, v: str) -> str:
        if "{version}" not in v:
            raise ValueError("Download URL template must contain a {version} placeholder")
        return v


@lru_cache()
def get_settings() -> Settings:
    return Settings()
