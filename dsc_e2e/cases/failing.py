"""Always fails on its second step; used to check abort and retry handling"""
import logging

LOG = logging.getLogger(__name__)

options = {
    "retries": 1,
    "clients": [
        {"browser": "chrome"},
        {"browser": "edge"},
    ],
}


def test(run, context):
    def load_google():
        LOG.debug("loading google")
        run.driver.get("https://google.com")
        LOG.debug("loaded google")

    async def not_implemented():
        raise NotImplementedError("not implemented")

    run.step("load google.com", load_google, {"timeout": "30s"})
    run.step("throw an error", not_implemented, "10s")
    run.step("never reached", load_google)
