"""
dsc-e2e unit tests

    pytest dsc_e2e/tests/ -v

Fake Selenium drivers live in fakes.py; no browser or network is needed
unless --run-browser is given.
"""
