"""
Runner Module
=============

Orchestration of app runs on top of the match engine.

This package contains:
    - loader: App descriptor discovery and validation
    - artifacts: Best-effort diagnostic screenshots
    - steps: Step Orchestrator (fail-fast step sequencing)
    - controller: App Run Controller (one app, one session)
    - aggregator: Run Aggregator and summary
"""

from visual_click.runner.aggregator import RunAggregator, RunSummary, format_summary
from visual_click.runner.artifacts import ArtifactStore
from visual_click.runner.controller import AppRunController, RunResult, RunState, build_capabilities
from visual_click.runner.loader import ConfigError, load_app_config, load_app_configs
from visual_click.runner.steps import StepOrchestrator, StepResult, parse_step

__all__ = [
    "RunAggregator",
    "RunSummary",
    "format_summary",
    "ArtifactStore",
    "AppRunController",
    "RunResult",
    "RunState",
    "build_capabilities",
    "ConfigError",
    "load_app_config",
    "load_app_configs",
    "StepOrchestrator",
    "StepResult",
    "parse_step",
]
