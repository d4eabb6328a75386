"""
Visual Click
============

Vision-based UI interaction tests for mobile applications.

For every app descriptor the runner launches the app through an Appium
session, finds on-screen elements by template-image matching, taps or
asserts them, and reports pass/fail with diagnostic screenshots.

Modules:
    - device: Remote automation session contract and the Appium client
    - engine: Template assets, tap-point math, tuning cascade, match engine
    - runner: Descriptor loading, step orchestration, run control, summary
    - utils: Structured logging
"""

__version__ = "1.0.0"
__author__ = "Visual Click Team"
