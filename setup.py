from setuptools import setup, find_packages

setup(
    name="dsc-e2e",
    version="0.1.0",
    description="Browser E2E test runner for Selenium and Sauce Labs",
    packages=find_packages(exclude=["dsc_e2e.tests", "dsc_e2e.tests.*"]),
    install_requires=[
        "selenium>=4.10.0",
        "aiohttp>=3.8.0",
        "pyyaml>=6.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
        ],
    },
    python_requires=">=3.8",
    entry_points={
        "console_scripts": [
            "dsc-e2e=dsc_e2e.main:cli",
        ],
    },
)
