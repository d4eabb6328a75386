"""
Test Package
============

Unit and integration tests for the visual click runner.

Test organization:
    - test_tap_point.py / test_tuning.py: geometry and parameter cascade
    - test_matcher.py: visual match engine and retry loop
    - test_steps.py: step validation and orchestration
    - test_controller.py / test_aggregator.py: app runs and summary
    - test_loader.py: descriptor discovery and pre-flight checks
    - test_appium.py: WebDriver client against a fake server
    - test_cli.py / test_config.py: entry point, settings and logging

Run tests with:
    pytest tests/ -v
"""
