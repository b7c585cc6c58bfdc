"""
Shared fixtures for dsc-e2e unit tests.

Usage:
    @pytest.mark.asyncio
    async def test_something(make_context, driver_factory):
        context = make_context(lambda run, ctx: run.step("noop", lambda: None))
        result = await RunTest(context, 1, driver_factory=driver_factory).exec()
"""

from unittest.mock import AsyncMock, Mock

import pytest

from dsc_e2e.core.context import ClientSpec, TestContext, TestModule, TestOptions
from dsc_e2e.core.driver_factory import DriverFactory
from dsc_e2e.utils.config_manager import GridConfig

from .fakes import FakeDriver, fake_browsers


@pytest.fixture
def grid_config() -> GridConfig:
    return GridConfig(
        username="sauce-user",
        access_key="sauce-key",
        hub_url="https://ondemand.example.test/wd/hub",
        api_url="https://api.example.test/rest/v1",
    )


@pytest.fixture
def driver_factory() -> DriverFactory:
    """Factory building FakeDriver instances for every mode."""
    return DriverFactory(browsers=fake_browsers(), remote=FakeDriver)


@pytest.fixture
def grid_factory(grid_config) -> DriverFactory:
    return DriverFactory(grid=grid_config, browsers=fake_browsers(), remote=FakeDriver)


@pytest.fixture
def reporter() -> Mock:
    """Reporting collaborator whose update_job always succeeds."""
    reporter = Mock()
    reporter.update_job = AsyncMock(return_value={"passed": True})
    return reporter


@pytest.fixture
def make_context():
    """Build a TestContext around a test function."""
    def _make(test_fn, mode="windowed", browser="chrome", step_timeout="30s", retries=0, test_id="sample"):
        module = TestModule(
            id=test_id,
            options=TestOptions(
                retries=retries,
                clients=[ClientSpec(browser=browser)],
                step_timeout=step_timeout,
            ),
            test=test_fn,
        )
        return TestContext(test=module, mode=mode, client=ClientSpec(browser=browser))
    return _make
