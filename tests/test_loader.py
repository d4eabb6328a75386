"""
Tests for the App Descriptor Loader
===================================

Covers:
- Discovery (sorted, case-insensitive .json, missing folder)
- APP selection
- Name defaulting and path resolution
- Every pre-flight rejection
"""

import json

import pytest

from visual_click.config import PathSettings
from visual_click.runner.loader import (
    ConfigError,
    list_config_files,
    load_app_config,
    load_app_configs,
    select_config_files,
)


def _write(project, filename, data):
    path = project / "configs" / filename
    if isinstance(data, str):
        path.write_text(data, encoding="utf-8")
    else:
        path.write_text(json.dumps(data), encoding="utf-8")
    return path


VALID = {"apk": "demo.apk", "homeIcon": "icons/home.png"}


@pytest.fixture
def paths(project):
    return PathSettings(project_root=project)


class TestDiscovery:
    def test_sorted_and_case_insensitive(self, project):
        for name in ("b.json", "A.JSON", "c.txt", "a2.Json"):
            (project / "configs" / name).write_text("{}")
        (project / "configs" / "nested.json").mkdir()

        files = list_config_files(project / "configs")

        assert [f.name for f in files] == ["A.JSON", "a2.Json", "b.json"]

    def test_missing_folder(self, project):
        with pytest.raises(ConfigError, match="Missing folder"):
            list_config_files(project / "nope")

    def test_select_all_when_unset(self, project):
        files = [project / "configs" / "a.json", project / "configs" / "b.json"]
        assert select_config_files(files, None, project / "configs") == files
        assert select_config_files(files, "", project / "configs") == files

    def test_select_one(self, project):
        files = [project / "configs" / "a.json", project / "configs" / "b.json"]
        assert select_config_files(files, "b", project / "configs") == [files[1]]

    def test_select_unknown(self, project):
        with pytest.raises(ConfigError) as exc_info:
            select_config_files([project / "configs" / "a.json"], "zzz", project / "configs")

        message = str(exc_info.value)
        assert message.startswith("APP=zzz not found.")
        assert str(project / "configs" / "zzz.json") in message


class TestLoadAppConfig:
    def test_valid_descriptor(self, project, paths):
        path = _write(
            project,
            "ipswich.json",
            {
                "name": "Ipswich",
                **VALID,
                "imageThreshold": 0.5,
                "retries": 4,
                "newCommandTimeout": 60,
                "steps": [{"type": "tapImage", "png": "icons/a.png"}],
            },
        )

        app = load_app_config(path, paths)

        assert app.name == "Ipswich"
        assert app.apk_path == project / "apps" / "demo.apk"
        assert app.home_icon_path == project / "icons" / "home.png"
        assert app.image_threshold == 0.5
        assert app.retries == 4
        assert app.new_command_timeout == 60
        assert app.steps == ({"type": "tapImage", "png": "icons/a.png"},)

    def test_defaults(self, project, paths):
        app = load_app_config(_write(project, "demo.json", VALID), paths)

        assert app.name == "demo"
        assert app.steps == ()
        assert app.new_command_timeout == 300
        assert app.image_threshold is None

    def test_absolute_paths(self, project, paths):
        data = {"apk": str(project / "apps" / "demo.apk"), "homeIcon": str(project / "icons" / "home.png")}
        app = load_app_config(_write(project, "abs.json", data), paths)

        assert app.apk_path == project / "apps" / "demo.apk"
        assert app.home_icon_path == project / "icons" / "home.png"

    def test_steps_are_not_validated_at_load(self, project, paths):
        data = {**VALID, "steps": [{"type": "swipe"}, "junk"]}
        app = load_app_config(_write(project, "demo.json", data), paths)
        assert len(app.steps) == 2

    @pytest.mark.parametrize(
        "data,message",
        [
            ({"homeIcon": "icons/home.png"}, 'missing "apk"'),
            ({"apk": "missing.apk", "homeIcon": "icons/home.png"}, "APK not found for demo"),
            ({"apk": "demo.apk"}, 'missing "homeIcon"'),
            ({"apk": "demo.apk", "homeIcon": "icons/none.png"}, "Icon PNG not found for demo"),
            ({**VALID, "steps": {"type": "tapImage"}}, '"steps" must be an array'),
            ({**VALID, "imageThreshold": 2}, "is invalid"),
            ({**VALID, "retries": 0}, "is invalid"),
            ([1, 2], "must contain a JSON object"),
        ],
    )
    def test_rejections(self, project, paths, data, message):
        with pytest.raises(ConfigError, match=message):
            load_app_config(_write(project, "demo.json", data), paths)

    def test_invalid_json(self, project, paths):
        with pytest.raises(ConfigError, match="could not be read"):
            load_app_config(_write(project, "demo.json", "{not json"), paths)

    def test_unreadable_home_icon(self, project, paths):
        (project / "icons" / "bad.png").write_bytes(b"not an image")
        data = {"apk": "demo.apk", "homeIcon": "icons/bad.png"}

        with pytest.raises(ConfigError, match="Icon PNG unreadable for demo"):
            load_app_config(_write(project, "demo.json", data), paths)


class TestLoadAppConfigs:
    def test_loads_all_in_order(self, project, paths):
        _write(project, "b.json", VALID)
        _write(project, "a.json", VALID)

        apps = load_app_configs(paths)

        assert [a.name for a in apps] == ["a", "b"]

    def test_single_app(self, project, paths):
        _write(project, "a.json", VALID)
        _write(project, "b.json", VALID)

        apps = load_app_configs(paths, "b")

        assert [a.name for a in apps] == ["b"]

    def test_empty_folder(self, paths):
        assert load_app_configs(paths) == []

    def test_first_invalid_aborts(self, project, paths):
        _write(project, "a.json", VALID)
        _write(project, "b.json", {"apk": "demo.apk"})

        with pytest.raises(ConfigError, match='missing "homeIcon"'):
            load_app_configs(paths)

    def test_custom_config_dir(self, project):
        (project / "suites").mkdir()
        (project / "suites" / "x.json").write_text(json.dumps(VALID))

        apps = load_app_configs(PathSettings(project_root=project, config_dir="suites"))

        assert [a.name for a in apps] == ["x"]
