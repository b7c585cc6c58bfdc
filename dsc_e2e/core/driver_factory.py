"""
Selenium driver acquisition

Acquiring a driver is expressed as one or two setup steps so that every
stage is timeout-bounded and leaves its own StepResult:

    grid:      "setup Sauce Labs driver"      -> "get Sauce Labs session"
    headless:  "setup chrome builder"         -> "setup headless Chrome driver"
    windowed:  "setup <browser> builder"      -> "setup <browser> driver"

Selenium calls block, so every setup body is a plain function; RunTest
runs those on its thread pool.

Usage:
    factory = DriverFactory(grid=runner_config.grid)
    steps = factory.acquisition_steps(context, attach=run.attach_driver)
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

from selenium import webdriver

from .client.saucelabs_client import create_job_name
from .context import GridSession, TestContext
from ..helpers.test_helpers import StepDefinition
from ..utils.config_manager import GridConfig
from ..utils.exceptions import DriverAcquisitionError
from ..utils.timing import Duration, to_ms

LOG = logging.getLogger(__name__)

# browser name -> (driver class, options class)
DEFAULT_BROWSERS: Dict[str, Tuple[Callable, Callable]] = {
    "chrome": (webdriver.Chrome, webdriver.ChromeOptions),
    "firefox": (webdriver.Firefox, webdriver.FirefoxOptions),
    "edge": (webdriver.Edge, webdriver.EdgeOptions),
    "safari": (webdriver.Safari, webdriver.SafariOptions),
    "ie": (webdriver.Ie, webdriver.IeOptions),
}

BROWSER_ALIASES = {
    "googlechrome": "chrome",
    "microsoftedge": "edge",
    "msedge": "edge",
    "internet explorer": "ie",
    "internetexplorer": "ie",
}

HEADLESS_ARGUMENTS = (
    "--headless=new",
    "--disable-extensions",
    "--disable-gpu",
)


@dataclass
class BrowserBuilder:
    """A driver class paired with the options it will be built with"""
    browser: str
    driver_class: Callable
    options: Any

    def build(self):
        return self.driver_class(options=self.options)


class DriverFactory:
    """
    Produces the setup steps that acquire a driver for a TestContext.

    Args:
        grid: Grid credentials; required for grid mode only
        browsers: Mapping of browser name to (driver class, options class)
        remote: Callable building a remote driver, webdriver.Remote by default
    """

    build_timeout: Duration = "90s"
    session_timeout: Duration = "30s"

    def __init__(
        self,
        grid: Optional[GridConfig] = None,
        browsers: Optional[Dict[str, Tuple[Callable, Callable]]] = None,
        remote: Optional[Callable] = None
    ):
        self.grid = grid
        self.browsers = browsers if browsers is not None else DEFAULT_BROWSERS
        self.remote = remote or webdriver.Remote

    @staticmethod
    def canonical_browser(browser: str) -> str:
        return BROWSER_ALIASES.get(browser.lower(), browser.lower())

    def _resolve(self, browser: str) -> Tuple[Callable, Callable]:
        name = self.canonical_browser(browser)
        if name not in self.browsers:
            raise DriverAcquisitionError(
                f"Unsupported browser {browser!r} (known: {', '.join(sorted(self.browsers))})"
            )
        return self.browsers[name]

    def builder_for(self, browser: str) -> BrowserBuilder:
        driver_class, options_class = self._resolve(browser)
        return BrowserBuilder(browser=browser, driver_class=driver_class, options=options_class())

    def acquisition_steps(
        self,
        context: TestContext,
        attach: Callable[[Any], None]
    ) -> List[StepDefinition]:
        """
        Build the setup steps for the context's mode.

        Args:
            context: Run descriptor; grid mode fills context.grid
            attach: Called with the driver as soon as it exists, so a
                partially set up driver can still be quit

        Returns:
            Ordered setup steps
        """
        if context.mode == "grid":
            return self._grid_steps(context, attach)
        return self._local_steps(context, attach)

    def _grid_steps(self, context: TestContext, attach: Callable[[Any], None]) -> List[StepDefinition]:
        client = context.client
        driver = None
        job_name = None

        def setup_remote_driver():
            nonlocal driver, job_name
            if self.grid is None:
                raise DriverAcquisitionError("Grid mode requires grid credentials (SAUCE_USERNAME/SAUCE_ACCESS_KEY)")

            job_name = create_job_name(context.test.id, context.env, client)
            _, options_class = self._resolve(client.browser)
            options = options_class()
            options.browser_version = "latest"
            if client.platform:
                options.platform_name = client.platform
            options.set_capability("sauce:options", {
                "name": job_name,
                "screenResolution": f"{client.width}x{client.height}",
                "username": self.grid.username,
                "accessKey": self.grid.access_key,
            })
            LOG.debug(f"Requesting grid session '{job_name}' for {client.label} at {self.grid.hub_url}")

            driver = self.remote(command_executor=self.grid.hub_url, options=options)
            attach(driver)

        def get_remote_session():
            session_id = getattr(driver, "session_id", None)
            if not session_id:
                raise DriverAcquisitionError("Grid driver has no session id")
            context.grid = GridSession(name=job_name, session_id=session_id)
            LOG.info(f"Grid session {session_id} started for '{job_name}'")

        return [
            StepDefinition(
                name="setup Sauce Labs driver",
                fn=setup_remote_driver,
                timeout_ms=to_ms(self.build_timeout),
                error_type=DriverAcquisitionError,
            ),
            StepDefinition(
                name="get Sauce Labs session",
                fn=get_remote_session,
                timeout_ms=to_ms(self.session_timeout),
                error_type=DriverAcquisitionError,
            ),
        ]

    def _local_steps(self, context: TestContext, attach: Callable[[Any], None]) -> List[StepDefinition]:
        client = context.client
        builder = None

        def setup_builder():
            nonlocal builder
            builder = self.builder_for(client.browser)

        steps = [
            StepDefinition(
                name=f"setup {client.browser} builder",
                fn=setup_builder,
                timeout_ms=to_ms(self.build_timeout),
                error_type=DriverAcquisitionError,
            )
        ]

        if context.mode == "headless" and self.canonical_browser(client.browser) == "chrome":
            def setup_headless_driver():
                for argument in HEADLESS_ARGUMENTS:
                    builder.options.add_argument(argument)
                builder.options.add_argument(f"--window-size={client.width},{client.height}")
                attach(builder.build())

            steps.append(StepDefinition(
                name="setup headless Chrome driver",
                fn=setup_headless_driver,
                timeout_ms=to_ms(self.session_timeout),
                error_type=DriverAcquisitionError,
            ))
            return steps

        if context.mode == "headless":
            LOG.warning(f"Headless mode is only supported for chrome, running {client.browser} windowed")

        def setup_windowed_driver():
            driver = builder.build()
            attach(driver)
            driver.set_window_size(client.width, client.height)

        steps.append(StepDefinition(
            name=f"setup {client.browser} driver",
            fn=setup_windowed_driver,
            timeout_ms=to_ms(self.session_timeout),
            error_type=DriverAcquisitionError,
        ))
        return steps
