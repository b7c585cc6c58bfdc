"""
Example test modules.

Run one with:
    dsc-e2e dsc_e2e.cases.google --mode headless
"""
