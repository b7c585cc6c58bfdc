"""
Sauce Labs REST API client
For marking grid jobs as passed or failed
"""
import aiohttp
import logging
from typing import Dict, Optional

from ...utils.config_manager import GridConfig
from ...utils.exceptions import ReportingError

LOG = logging.getLogger(__name__)


def create_job_name(test_id: str, env: str, client=None) -> str:
    """Job name shown on the grid dashboard"""
    name = f"{test_id} ({env})"
    if client is not None:
        name = f"{name} {client.label}"
    return name


class SauceLabsClient:
    """Sauce Labs REST API client"""

    def __init__(self, grid: GridConfig, timeout: float = 30.0):
        """
        Initialize REST client

        Args:
            grid: Grid credentials and API base URL
            timeout: Request timeout (seconds)
        """
        self.grid = grid
        self.api_url = grid.api_url.rstrip('/')
        self.timeout = timeout
        self.session: Optional[aiohttp.ClientSession] = None

    def _new_session(self) -> aiohttp.ClientSession:
        return aiohttp.ClientSession(
            timeout=aiohttp.ClientTimeout(total=self.timeout),
            auth=aiohttp.BasicAuth(self.grid.username, self.grid.access_key)
        )

    async def __aenter__(self):
        """Async context manager entry"""
        self.session = self._new_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit"""
        if self.session:
            await self.session.close()
            self.session = None

    async def update_job(self, job_id: str, passed: bool) -> Dict:
        """
        Set the pass/fail status of a job

        Outside `async with`, each call opens and closes its own session, so
        concurrent calls never share one.

        Args:
            job_id: Grid session id of the job
            passed: Outcome to record

        Returns:
            Updated job as returned by the API

        Raises:
            ReportingError: Request failed or was rejected
        """
        if self.session is None:
            async with self._new_session() as session:
                return await self._put_job(session, job_id, passed)
        return await self._put_job(self.session, job_id, passed)

    async def _put_job(self, session: aiohttp.ClientSession, job_id: str, passed: bool) -> Dict:
        url = f"{self.api_url}/{self.grid.username}/jobs/{job_id}"
        LOG.debug(f"Updating job {job_id} at {url}: passed={passed}")

        try:
            async with session.put(url, json={"passed": passed}) as resp:
                if resp.status >= 300:
                    text = await resp.text()
                    raise ReportingError(f"Failed to update job {job_id}: {resp.status} - {text}")

                data = await resp.json(content_type=None)
                LOG.info(f"Marked job {job_id} as {'passed' if passed else 'failed'}")
                return data if isinstance(data, dict) else {}
        except aiohttp.ClientError as e:
            raise ReportingError(f"HTTP request failed for job {job_id}: {e}")
