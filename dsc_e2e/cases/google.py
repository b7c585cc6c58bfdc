import logging

LOG = logging.getLogger(__name__)

options = {
    "retries": 1,
    "clients": [
        {"browser": "chrome"},
        {"browser": "firefox"},
        {"browser": "edge"},
        {"browser": "safari"},
        {"browser": "ie"},
    ],
}


def test(run, context):
    def load_google():
        LOG.debug("loading google")
        run.driver.get("https://google.com")
        LOG.debug("loaded google")

    run.step("load google.com", load_google)
