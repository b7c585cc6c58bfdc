"""
Pytest root configuration for dsc-e2e.

Unit tests run without a browser. Tests marked `browser` start a real local
Chrome through Selenium and only run with --run-browser:

    pytest dsc_e2e/tests -v
    pytest dsc_e2e/tests -v --run-browser --browser-mode headless
"""

import sys
from pathlib import Path

# Allow `import dsc_e2e` without installing the package
_current_dir = Path(__file__).resolve().parent
if str(_current_dir) not in sys.path:
    sys.path.insert(0, str(_current_dir))

import pytest


def pytest_addoption(parser):
    """Add custom command line options for pytest."""
    parser.addoption(
        "--run-browser",
        action="store_true",
        default=False,
        help="Run tests that drive a real local browser"
    )
    parser.addoption(
        "--browser-mode",
        action="store",
        default="headless",
        choices=["headless", "windowed"],
        help="Driver mode for browser tests"
    )


@pytest.fixture(scope="session")
def browser_mode(request) -> str:
    """Driver mode for browser tests."""
    return request.config.getoption("--browser-mode")


def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "browser: test drives a real local browser"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )


def pytest_collection_modifyitems(session, config, items):
    """Skip browser tests unless --run-browser was given."""
    if config.getoption("--run-browser"):
        return
    skip_browser = pytest.mark.skip(reason="needs --run-browser")
    for item in items:
        if item.get_closest_marker("browser") is not None:
            item.add_marker(skip_browser)
