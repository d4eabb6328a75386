"""
Command-Line Runner
===================

Runs the visual click suite against a running Appium server.

Prerequisites:
    1. Start an Appium 2 server with the images plugin
       (``appium --use-plugins=images``)
    2. Start an Android emulator (default device: emulator-5554)
    3. Put one JSON descriptor per app in configs/, APKs in apps/

Usage:
    visual-click

    # Single app (descriptor file stem)
    visual-click --app ipswich
    APP=ipswich python -m visual_click

Exit code is 0 when every app passed, 1 otherwise.
"""

import argparse
import asyncio
import sys
from functools import partial
from pathlib import Path
from typing import Optional, Sequence

from visual_click.config import get_settings
from visual_click.device.appium import AppiumSession
from visual_click.models import AppConfig
from visual_click.runner.aggregator import RunAggregator, format_summary
from visual_click.runner.artifacts import ArtifactStore
from visual_click.runner.loader import ConfigError, load_app_configs
from visual_click.utils.logger import get_logger, setup_logging


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="visual-click",
        description="Vision-based tap/assert tests for Android apps via Appium",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Environment:
  APPIUM_HOST, APPIUM_PORT, APPIUM_PATH   Appium server (default 127.0.0.1:4723/)
  DEVICE_NAME                             Device serial (default emulator-5554)
  APP                                     Run a single descriptor
  LOG_LEVEL, DEBUG                        Logging
        """,
    )
    parser.add_argument("--app", help="Run only configs/<APP>.json (overrides APP)")
    parser.add_argument("--config-dir", type=Path, help="Descriptor folder (default: configs)")
    parser.add_argument("--artifacts-dir", type=Path, help="Screenshot folder (default: artifacts)")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--json-logs", action="store_true", help="Emit JSON log lines (default when DEBUG=false)")
    return parser


def _announce(app: AppConfig) -> None:
    print(f"\n--- Running: {app.name} ---")


async def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Main entry point.

    Returns:
        Process exit code.
    """
    args = build_parser().parse_args(argv)

    settings = get_settings()
    setup_logging(
        level="DEBUG" if args.debug else None,
        json_logs=True if args.json_logs else None,
    )
    logger = get_logger(__name__)

    updates = {}
    if args.config_dir:
        updates["config_dir"] = args.config_dir
    if args.artifacts_dir:
        updates["artifacts_dir"] = args.artifacts_dir
    if updates:
        settings = settings.model_copy(update={"paths": settings.paths.model_copy(update=updates)})

    app_name = args.app if args.app is not None else settings.runner.app

    try:
        apps = load_app_configs(settings.paths, app_name)
    except ConfigError as e:
        print(f"\nERROR: {e}\n", file=sys.stderr)
        return 1

    logger.info("Starting visual click run", apps=[app.name for app in apps], server=settings.appium.get_server_url())

    aggregator = RunAggregator(
        session_factory=partial(AppiumSession.open, settings=settings.appium),
        artifacts=ArtifactStore(settings.paths.artifacts_path),
        settings=settings,
        on_start=_announce,
    )
    summary = await aggregator.run(apps)

    print(format_summary(summary))
    return summary.exit_code


def run() -> None:
    """Console-script entry point."""
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        print("\n\nInterrupted.")
        sys.exit(130)


if __name__ == "__main__":
    run()
