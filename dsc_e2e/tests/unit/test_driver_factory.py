"""
Unit tests for DriverFactory setup steps

The setup bodies are plain functions, so these tests call them directly in
order instead of going through RunTest.
"""

import pytest

from dsc_e2e.core.context import ClientSpec, TestContext, TestModule, TestOptions
from dsc_e2e.core.driver_factory import DriverFactory, HEADLESS_ARGUMENTS
from dsc_e2e.utils.exceptions import DriverAcquisitionError

from dsc_e2e.tests.fakes import FakeDriver, FakeOptions, NoSessionDriver, fake_browsers


def make_context(mode, browser="chrome", platform=None, width=1280, height=1024):
    module = TestModule(id="google", options=TestOptions(), test=lambda run, context: None)
    client = ClientSpec(browser=browser, platform=platform, width=width, height=height)
    return TestContext(test=module, mode=mode, client=client, env="staging")


def run_all(steps):
    for step in steps:
        step.fn()


class TestLocalModes:

    def test_windowed_steps(self, driver_factory):
        attached = []
        context = make_context("windowed", browser="firefox", width=1024, height=768)

        steps = driver_factory.acquisition_steps(context, attached.append)
        run_all(steps)

        assert [s.name for s in steps] == ["setup firefox builder", "setup firefox driver"]
        assert [s.timeout_ms for s in steps] == [90000, 30000]
        assert all(s.error_type is DriverAcquisitionError for s in steps)

        driver = attached[0]
        assert isinstance(driver, FakeDriver)
        assert driver.window_size == (1024, 768)
        assert driver.options.arguments == []

    def test_headless_chrome_steps(self, driver_factory):
        attached = []
        context = make_context("headless", width=800, height=600)

        steps = driver_factory.acquisition_steps(context, attached.append)
        run_all(steps)

        assert [s.name for s in steps] == ["setup chrome builder", "setup headless Chrome driver"]
        driver = attached[0]
        for argument in HEADLESS_ARGUMENTS:
            assert argument in driver.options.arguments
        assert "--window-size=800,600" in driver.options.arguments
        assert driver.window_size is None

    def test_headless_falls_back_to_windowed_for_other_browsers(self, driver_factory):
        attached = []
        steps = driver_factory.acquisition_steps(make_context("headless", browser="edge"), attached.append)
        run_all(steps)

        assert [s.name for s in steps] == ["setup edge builder", "setup edge driver"]
        assert attached[0].window_size == (1280, 1024)

    def test_unknown_browser_fails_builder_step(self, driver_factory):
        steps = driver_factory.acquisition_steps(make_context("windowed", browser="netscape"), lambda d: None)

        with pytest.raises(DriverAcquisitionError, match="netscape"):
            steps[0].fn()

    def test_browser_aliases(self, driver_factory):
        builder = driver_factory.builder_for("MicrosoftEdge")

        assert builder.driver_class is FakeDriver
        assert isinstance(builder.options, FakeOptions)
        assert DriverFactory.canonical_browser("internet explorer") == "ie"

    def test_budgets_are_configurable(self):
        factory = DriverFactory(browsers=fake_browsers())
        factory.build_timeout = "2m"
        factory.session_timeout = 500

        steps = factory.acquisition_steps(make_context("windowed"), lambda d: None)

        assert [s.timeout_ms for s in steps] == [120000, 500]


class TestGridMode:

    def test_grid_steps(self, grid_factory, grid_config):
        attached = []
        context = make_context("grid", platform="Windows 10", width=1920, height=1080)

        steps = grid_factory.acquisition_steps(context, attached.append)
        run_all(steps)

        assert [s.name for s in steps] == ["setup Sauce Labs driver", "get Sauce Labs session"]
        assert [s.timeout_ms for s in steps] == [90000, 30000]

        driver = attached[0]
        assert driver.command_executor == grid_config.hub_url
        assert driver.options.browser_version == "latest"
        assert driver.options.platform_name == "Windows 10"

        sauce = driver.options.capabilities["sauce:options"]
        assert sauce["name"] == "google (staging) chrome@Windows 10"
        assert sauce["screenResolution"] == "1920x1080"
        assert sauce["username"] == "sauce-user"
        assert sauce["accessKey"] == "sauce-key"

        assert context.grid.session_id == "fake-session-1"
        assert context.grid.name == sauce["name"]

    def test_grid_without_credentials(self, driver_factory):
        steps = driver_factory.acquisition_steps(make_context("grid"), lambda d: None)

        with pytest.raises(DriverAcquisitionError, match="credentials"):
            steps[0].fn()

    def test_missing_session_id(self, grid_config):
        factory = DriverFactory(grid=grid_config, browsers=fake_browsers(), remote=NoSessionDriver)
        context = make_context("grid")
        steps = factory.acquisition_steps(context, lambda d: None)

        steps[0].fn()
        with pytest.raises(DriverAcquisitionError, match="session id"):
            steps[1].fn()
        assert context.grid is None
