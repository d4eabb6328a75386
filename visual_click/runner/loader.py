"""
App Descriptor Loader
=====================

Discovers ``configs/*.json`` descriptors, applies naming/path rules and
validates referenced assets before any session is opened.

Descriptor example::

    {
      "name": "ipswich",
      "apk": "app-ipswich.apk",
      "homeIcon": "icons/ipswich/home.png",
      "imageThreshold": 0.5,
      "steps": [
        {"type": "tapImage", "png": "icons/ipswich/menu.png"},
        {"type": "assertImage", "png": "icons/ipswich/menu-open.png", "screenshotAfter": true}
      ]
    }
"""

import json
from pathlib import Path
from typing import Any, Optional, Sequence

from pydantic import ValidationError

from visual_click.config import PathSettings
from visual_click.engine.assets import TemplateError, get_image_dimensions, resolve_asset_path
from visual_click.models import AppConfig
from visual_click.utils.logger import get_logger

logger = get_logger(__name__)


class ConfigError(Exception):
    """A descriptor is missing, malformed, or references missing assets."""

    pass


def format_validation_error(error: ValidationError) -> str:
    """Flatten pydantic errors into one line."""
    parts = []
    for item in error.errors():
        location = ".".join(str(part) for part in item.get("loc", ())) or "value"
        parts.append(f"{location}: {item.get('msg', 'invalid')}")
    return "; ".join(parts)


def list_config_files(config_dir: Path) -> list[Path]:
    """
    List descriptor files in a folder.

    Args:
        config_dir: Folder to scan (not recursive).

    Returns:
        Sorted ``*.json`` paths (suffix match is case-insensitive).

    Raises:
        ConfigError: If the folder does not exist.
    """
    if not config_dir.is_dir():
        raise ConfigError(f"Missing folder: {config_dir}")
    return sorted(
        path for path in config_dir.iterdir()
        if path.is_file() and path.suffix.lower() == ".json"
    )


def select_config_files(files: Sequence[Path], app_name: Optional[str], config_dir: Path) -> list[Path]:
    """
    Pick the descriptors to run.

    Args:
        files: All discovered descriptor files.
        app_name: File stem to select, or empty/None for all.
        config_dir: Folder, for the error message.

    Raises:
        ConfigError: If ``app_name`` is set and has no descriptor.
    """
    if not app_name:
        return list(files)

    for path in files:
        if path.stem == app_name:
            return [path]
    raise ConfigError(
        f"APP={app_name} not found. Expected config file: {config_dir / f'{app_name}.json'}"
    )


def load_app_config(path: Path, paths: PathSettings) -> AppConfig:
    """
    Load and validate one descriptor.

    Rules:
    - ``name`` defaults to the file stem.
    - ``apk`` is required and resolves against the apps folder.
    - ``homeIcon`` is required, resolves against the project root and
      must be a readable image.
    - ``steps`` is optional but must be a list when present.

    Raises:
        ConfigError: On any violation.
    """
    try:
        raw: Any = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise ConfigError(f"Config {path} could not be read: {e}") from e

    if not isinstance(raw, dict):
        raise ConfigError(f"Config {path} must contain a JSON object")

    name = raw.get("name") or path.stem

    apk = raw.get("apk")
    if not apk:
        raise ConfigError(f'Config {path} missing "apk" (e.g. "app-ipswich.apk")')
    apk_path = Path(apk) if Path(apk).is_absolute() else paths.apps_path / apk
    if not apk_path.exists():
        raise ConfigError(f"APK not found for {name}: {apk_path}")

    home_icon = raw.get("homeIcon")
    if not home_icon:
        raise ConfigError(f'Config {path} missing "homeIcon" (e.g. "icons/ipswich/home.png")')
    home_icon_path = resolve_asset_path(home_icon, paths.project_root)
    if not home_icon_path.exists():
        raise ConfigError(f"Icon PNG not found for {name}: {home_icon_path}")
    try:
        get_image_dimensions(home_icon_path.read_bytes())
    except (OSError, TemplateError) as e:
        raise ConfigError(f"Icon PNG unreadable for {name}: {home_icon_path} ({e})") from e

    steps = raw.get("steps")
    if steps is not None and not isinstance(steps, list):
        raise ConfigError(f'Config {path} "steps" must be an array if provided')

    data = {
        **raw,
        "name": str(name),
        "apk": str(apk),
        "apkPath": apk_path,
        "homeIcon": str(home_icon),
        "homeIconPath": home_icon_path,
        "steps": tuple(steps or ()),
    }
    try:
        app = AppConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Config {path} is invalid: {format_validation_error(e)}") from e

    logger.debug("Config loaded", app=app.name, steps=len(app.steps), path=str(path))
    return app


def load_app_configs(paths: PathSettings, app_name: Optional[str] = None) -> list[AppConfig]:
    """
    Discover, select and load descriptors.

    Args:
        paths: Project layout.
        app_name: Optional single app (descriptor file stem).

    Returns:
        Validated AppConfigs in file-name order.

    Raises:
        ConfigError: On the first invalid descriptor.
    """
    config_dir = paths.config_path
    files = select_config_files(list_config_files(config_dir), app_name, config_dir)
    apps = [load_app_config(path, paths) for path in files]
    logger.info("Configs loaded", count=len(apps), config_dir=str(config_dir))
    return apps
