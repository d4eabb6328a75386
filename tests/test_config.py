"""
Tests for Settings and Logging Context
======================================
"""

from pathlib import Path

import structlog

from visual_click.config import AppiumSettings, PathSettings, RunnerSettings
from visual_click.utils.logger import LogContext, add_app_context


class TestAppiumSettings:
    def test_default_url(self):
        assert AppiumSettings().get_server_url() == "http://127.0.0.1:4723"

    def test_legacy_base_path(self):
        settings = AppiumSettings(appium_host="grid", appium_port=4444, appium_path="/wd/hub/")
        assert settings.get_server_url() == "http://grid:4444/wd/hub"

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("APPIUM_PORT", "4725")
        monkeypatch.setenv("DEVICE_NAME", "emulator-5556")

        settings = AppiumSettings()

        assert settings.appium_port == 4725
        assert settings.device_name == "emulator-5556"


class TestPathSettings:
    def test_relative_dirs_resolve_against_root(self, tmp_path):
        paths = PathSettings(project_root=tmp_path)

        assert paths.config_path == tmp_path / "configs"
        assert paths.apps_path == tmp_path / "apps"
        assert paths.artifacts_path == tmp_path / "artifacts"

    def test_absolute_dirs_kept(self, tmp_path):
        paths = PathSettings(project_root=Path("/elsewhere"), artifacts_dir=tmp_path)
        assert paths.artifacts_path == tmp_path


class TestRunnerSettings:
    def test_app_from_env(self, monkeypatch):
        monkeypatch.setenv("APP", "  ipswich ")
        assert RunnerSettings().app == "ipswich"

    def test_blank_app_means_all(self, monkeypatch):
        monkeypatch.setenv("APP", "   ")
        assert RunnerSettings().app == ""


class TestLogging:
    def test_app_context_processor(self):
        event = add_app_context(None, "info", {"event": "x"})
        assert event["runner"] == "visual-click"
        assert "version" in event

    def test_log_context_binds_and_unbinds(self):
        with LogContext(app="ipswich"):
            assert structlog.contextvars.get_contextvars()["app"] == "ipswich"
        assert "app" not in structlog.contextvars.get_contextvars()
