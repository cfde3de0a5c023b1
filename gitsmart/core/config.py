from pathlib import Path
from typing import Dict, Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    app_name: str = Field(default="git-smart-http", description="Application name")
    app_version: str = Field(default="0.1.0", description="Application version")
    environment: Literal["development", "staging", "production"] = Field(
        default="development", description="Environment mode"
    )

    api_host: str = Field(default="0.0.0.0", description="API server host")
    api_port: int = Field(default=8000, description="API server port")

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )
    log_format: Literal["json", "console"] = Field(
        default="console", description="Log output format", validate_default=True
    )

    git_binary_path: str = Field(default="git", description="Path to git binary")
    git_timeout_seconds: Optional[float] = Field(
        default=None,
        description="Kill git child processes running longer than this (unset: no limit)",
    )

    repository_path: Optional[Path] = Field(
        default=None, description="Repository served under route_prefix"
    )
    route_prefix: Optional[str] = Field(
        default=None, description="Namespace the repository is served under"
    )
    repositories: Dict[str, Path] = Field(
        default_factory=dict,
        description="Additional repositories keyed by namespace",
    )

    @field_validator("log_format", mode="before")
    @classmethod
    def validate_log_format(cls, v, info):
        if info.data.get("environment") == "production":
            return "json"
        return v

    @field_validator("git_timeout_seconds")
    @classmethod
    def validate_timeout(cls, v):
        if v is not None and v <= 0:
            raise ValueError("git_timeout_seconds must be positive")
        return v

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    def served_repositories(self) -> Dict[Optional[str], Path]:
        """Namespace → repository path for every repository to expose."""
        served: Dict[Optional[str], Path] = {}
        if self.repository_path is not None:
            served[self.route_prefix] = self.repository_path
        for namespace, path in self.repositories.items():
            served[namespace] = path
        return served


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


settings = get_settings()
