"""
Descriptors for one run of one test module against one client

A test module is a plain Python module exposing:

    options = {
        "retries": 1,
        "step_timeout": "30s",          # "stepTimeout" is accepted too
        "clients": [{"browser": "chrome"}, {"browser": "firefox"}],
    }

    def test(run, context):
        run.step("load google.com", lambda: run.driver.get("https://google.com"))
"""

from dataclasses import dataclass, field
from types import ModuleType
from typing import Any, Callable, Dict, List, Optional, Union

from ..utils.exceptions import ConfigurationError
from ..utils.timing import Duration


DEFAULT_STEP_TIMEOUT = "30s"
DEFAULT_WIDTH = 1280
DEFAULT_HEIGHT = 1024


@dataclass
class ClientSpec:
    """Browser, platform and viewport a test runs against"""
    browser: str = "chrome"
    platform: Optional[str] = None
    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT

    @classmethod
    def from_dict(cls, data: Union[str, Dict[str, Any]]) -> "ClientSpec":
        """
        Build from a module's client entry.

        Accepts "chrome", {"browser": "chrome"} or the nested form
        {"browser": {"name": "chrome"}, "platform": {"name": "Windows 10",
        "width": 1920, "height": 1080}}.
        """
        if isinstance(data, str):
            return cls(browser=data.lower())
        if not isinstance(data, dict):
            raise ConfigurationError(f"Invalid client entry: {data!r}", field="clients")

        browser = data.get("browser", "chrome")
        if isinstance(browser, dict):
            browser = browser.get("name", "chrome")

        platform = data.get("platform")
        width = data.get("width", DEFAULT_WIDTH)
        height = data.get("height", DEFAULT_HEIGHT)
        if isinstance(platform, dict):
            width = platform.get("width", width)
            height = platform.get("height", height)
            platform = platform.get("name")

        return cls(browser=str(browser).lower(), platform=platform, width=int(width), height=int(height))

    @property
    def label(self) -> str:
        if self.platform:
            return f"{self.browser}@{self.platform}"
        return self.browser


@dataclass
class TestOptions:
    """Options a test module declares"""
    __test__ = False

    retries: int = 0
    clients: List[ClientSpec] = field(default_factory=lambda: [ClientSpec()])
    step_timeout: Duration = DEFAULT_STEP_TIMEOUT

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "TestOptions":
        data = data or {}
        clients = [ClientSpec.from_dict(c) for c in data.get("clients") or []]
        step_timeout = data.get("step_timeout", data.get("stepTimeout")) or DEFAULT_STEP_TIMEOUT
        return cls(
            retries=int(data.get("retries", 0)),
            clients=clients or [ClientSpec()],
            step_timeout=step_timeout,
        )


@dataclass
class TestModule:
    """A loaded test module: its id, options and test function"""
    __test__ = False

    id: str
    options: TestOptions
    test: Callable

    @classmethod
    def from_module(cls, module: ModuleType, test_id: Optional[str] = None) -> "TestModule":
        test = getattr(module, "test", None)
        if not callable(test):
            raise ConfigurationError(f"Test module {module.__name__} does not define a test() function")
        return cls(
            id=test_id or module.__name__.rsplit(".", 1)[-1],
            options=TestOptions.from_dict(getattr(module, "options", None)),
            test=test,
        )


@dataclass
class GridSession:
    """Identity of a session acquired on the remote grid"""
    name: str
    session_id: str


@dataclass
class TestContext:
    """
    Per-run descriptor handed to RunTest.

    Attributes:
        test: The test module being run
        mode: "grid", "headless" or "windowed"
        client: Target browser/platform/viewport
        env: Environment label, used to name grid jobs
        grid: Set by the driver setup steps once a grid session exists
    """
    __test__ = False

    test: TestModule
    mode: str = "windowed"
    client: ClientSpec = field(default_factory=ClientSpec)
    env: str = "local"
    grid: Optional[GridSession] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "test": self.test.id,
            "mode": self.mode,
            "client": {
                "browser": self.client.browser,
                "platform": self.client.platform,
                "width": self.client.width,
                "height": self.client.height,
            },
            "env": self.env,
            "grid": {"name": self.grid.name, "session_id": self.grid.session_id} if self.grid else None,
        }
