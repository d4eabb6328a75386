"""
Configuration Management
========================

Centralized configuration using Pydantic Settings.
Loads from environment variables and .env file.

App descriptors (the per-app JSON files) are not settings; they are
loaded by ``visual_click.runner.loader``.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Shared config that all settings classes use to load .env
_shared_config = SettingsConfigDict(
    env_file=".env",
    env_file_encoding="utf-8",
    env_prefix="",
    extra="ignore",
)


class AppiumSettings(BaseSettings):
    """Appium server and device capability settings."""

    model_config = _shared_config

    # The server should already be running
    appium_host: str = Field(default="127.0.0.1", description="Appium server host")
    appium_port: int = Field(default=4723, description="Appium server port")
    appium_path: str = Field(default="/", description="Appium base path ('/' for Appium 2, '/wd/hub' for 1.x)")
    appium_protocol: Literal["http", "https"] = Field(default="http", description="Appium server protocol")
    request_timeout: float = Field(
        default=120.0,
        description="Total timeout in seconds for a single WebDriver HTTP request",
    )

    device_name: str = Field(default="emulator-5554", description="Device identity passed as appium:deviceName")
    platform_name: str = Field(default="Android", description="Capability platformName")
    automation_name: str = Field(default="UiAutomator2", description="Capability appium:automationName")
    auto_grant_permissions: bool = Field(
        default=True,
        description="Grant all runtime permissions on install",
    )

    def get_server_url(self) -> str:
        """Return the WebDriver base URL without a trailing slash."""
        path = "/" + self.appium_path.strip("/")
        return f"{self.appium_protocol}://{self.appium_host}:{self.appium_port}{path}".rstrip("/")


class PathSettings(BaseSettings):
    """Filesystem layout of a visual-click project."""

    model_config = _shared_config

    project_root: Path = Field(default_factory=Path.cwd, description="Root that relative paths resolve against")
    config_dir: Path = Field(default=Path("configs"), description="Folder with one JSON descriptor per app")
    apps_dir: Path = Field(default=Path("apps"), description="Folder holding the APK files")
    artifacts_dir: Path = Field(default=Path("artifacts"), description="Folder for diagnostic screenshots")

    def resolve(self, path: Path) -> Path:
        """Resolve a possibly-relative path against the project root."""
        return path if path.is_absolute() else self.project_root / path

    @property
    def config_path(self) -> Path:
        return self.resolve(self.config_dir)

    @property
    def apps_path(self) -> Path:
        return self.resolve(self.apps_dir)

    @property
    def artifacts_path(self) -> Path:
        return self.resolve(self.artifacts_dir)


class RunnerSettings(BaseSettings):
    """Runner behaviour and logging settings."""

    model_config = _shared_config

    app: str = Field(default="", description="Run only the descriptor with this file stem (env APP)")
    debug: bool = Field(default=True, description="Console logs when true, JSON logs otherwise")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Log level",
    )

    @field_validator("app")
    @classmethod
    def strip_app(cls, v: str) -> str:
        """Treat whitespace-only APP as unset."""
        return v.strip()


class Settings(BaseSettings):
    """
    Main settings class combining all configuration sections.

    Usage:
        from visual_click.config import get_settings
        settings = get_settings()
        print(settings.appium.get_server_url())
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Nested settings
    appium: AppiumSettings = Field(default_factory=AppiumSettings)
    paths: PathSettings = Field(default_factory=PathSettings)
    runner: RunnerSettings = Field(default_factory=RunnerSettings)


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings: Application settings loaded from environment.
    """
    return Settings()
