"""
dsc-e2e: browser end-to-end test runner

Runs a test module's steps against Sauce Labs or local Selenium drivers,
with per-step timeouts and abort-on-first-failure.
"""

__version__ = "0.1.0"
