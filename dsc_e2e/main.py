#!/usr/bin/env python3
import argparse
import asyncio
import importlib
import importlib.util
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .core.client.saucelabs_client import SauceLabsClient
from .core.context import ClientSpec, TestContext, TestModule
from .core.driver_factory import DriverFactory
from .core.run_test import RunTest
from .helpers.test_helpers import RunResult
from .utils.config_manager import LOG_LEVELS, MODES, ConfigManager, RunnerConfig
from .utils.exceptions import ConfigurationError, DscE2EError
from .utils.logging import setup_logging

LOG = logging.getLogger(__name__)


def load_test_module(target: str) -> TestModule:
    """
    Load a test module from a dotted module name or a .py file path.

    Raises:
        ConfigurationError: If the module cannot be imported or has no test()
    """
    path = Path(target)
    try:
        if target.endswith(".py") or path.is_file():
            if not path.is_file():
                raise ConfigurationError(f"Test module file not found: {target}", config_file=target)
            spec = importlib.util.spec_from_file_location(f"dsc_e2e_case_{path.stem}", path)
            module = importlib.util.module_from_spec(spec)
            spec.loader.exec_module(module)
            return TestModule.from_module(module, test_id=path.stem)

        module = importlib.import_module(target)
    except ImportError as e:
        raise ConfigurationError(f"Cannot import test module {target}: {e}")
    return TestModule.from_module(module)


def select_clients(test: TestModule, names: Optional[List[str]]) -> List[ClientSpec]:
    """Clients declared by the module, optionally filtered by browser name"""
    if not names:
        return list(test.options.clients)

    wanted = {n.lower() for n in names}
    clients = [c for c in test.options.clients if c.browser in wanted]
    declared = {c.browser for c in test.options.clients}
    # Browsers asked for on the command line but not declared still run
    clients.extend(ClientSpec(browser=name) for name in sorted(wanted - declared))
    return clients


async def run_client(
    test: TestModule,
    client: ClientSpec,
    config: RunnerConfig,
    factory: DriverFactory,
    reporter: Optional[SauceLabsClient],
    semaphore: asyncio.Semaphore
) -> List[RunResult]:
    """Run attempts for one client until one passes or retries are exhausted"""
    attempts: List[RunResult] = []
    async with semaphore:
        for attempt in range(1, test.options.retries + 2):
            context = TestContext(test=test, mode=config.mode, client=client, env=config.env)
            result = await RunTest(context, attempt, driver_factory=factory, reporter=reporter).exec()
            attempts.append(result)
            if result.success:
                break
            if attempt <= test.options.retries:
                LOG.warning(f"{test.id} [{client.label}] attempt {attempt} failed, retrying")
    return attempts


async def run_module(test: TestModule, clients: List[ClientSpec], config: RunnerConfig) -> List[List[RunResult]]:
    """Run every client concurrently, bounded by config.concurrency"""
    factory = DriverFactory(grid=config.grid)
    semaphore = asyncio.Semaphore(config.concurrency)

    async def run_all(reporter: Optional[SauceLabsClient]) -> List[List[RunResult]]:
        return await asyncio.gather(*[
            run_client(test, client, config, factory, reporter, semaphore)
            for client in clients
        ])

    if config.grid is None:
        return await run_all(None)

    # One HTTP session for every client's status update
    async with SauceLabsClient(config.grid) as reporter:
        return await run_all(reporter)


def log_summary(test: TestModule, runs: List[List[RunResult]]) -> int:
    """Log the outcome per client; returns the number of failed clients"""
    failed = [attempts[-1] for attempts in runs if not attempts[-1].success]

    LOG.info("=" * 60)
    LOG.info(f"TEST RESULTS SUMMARY: {test.id}")
    LOG.info("=" * 60)
    LOG.info(f"Clients: {len(runs)}")
    LOG.info(f"Passed: {len(runs) - len(failed)}")
    LOG.info(f"Failed: {len(failed)}")
    LOG.info("=" * 60)

    for result in failed:
        LOG.error(f"  {result.context.client.label} (attempt {result.attempt}):")
        for step in result.failures:
            LOG.error(f"    {step.name}: {step.error}")

    return len(failed)


def save_results(output_dir: Path, test: TestModule, runs: List[List[RunResult]]) -> Path:
    output_dir.mkdir(parents=True, exist_ok=True)
    results_file = output_dir / "test_results.json"
    with open(results_file, 'w') as f:
        json.dump({
            "test": test.id,
            "success": all(attempts[-1].success for attempts in runs),
            "clients": [[r.to_dict() for r in attempts] for attempts in runs],
        }, f, indent=2)
    return results_file


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Browser E2E test runner")
    parser.add_argument("module",
                        help="Test module to run (dotted name or path to a .py file)")
    parser.add_argument("--config", default=None,
                        help="Path to YAML runner configuration")
    parser.add_argument("--mode", default=None, choices=list(MODES),
                        help="Driver mode (default: windowed)")
    parser.add_argument("--env", default=None,
                        help="Environment label used in grid job names")
    parser.add_argument("--client", action="append", default=None, dest="clients",
                        help="Only run this browser (repeatable)")
    parser.add_argument("--concurrency", type=int, default=None,
                        help="Number of clients run at the same time")
    parser.add_argument("--log-level", default=None,
                        type=str.upper, choices=list(LOG_LEVELS),
                        help="Logging level")
    parser.add_argument("--log-file", default=None,
                        help="Path to log file")
    parser.add_argument("--output-dir", default=None,
                        help="Output directory for test results")
    return parser


async def main(argv: Optional[List[str]] = None) -> int:
    """Main execution flow"""
    args = build_parser().parse_args(argv)

    try:
        config = ConfigManager(args.config).load(overrides={
            "mode": args.mode,
            "env": args.env,
            "concurrency": args.concurrency,
            "log_level": args.log_level,
            "log_file": args.log_file,
            "output_dir": args.output_dir,
        })
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    setup_logging(config.log_level, config.log_file)

    try:
        test = load_test_module(args.module)
    except ConfigurationError as e:
        LOG.error(str(e))
        return 2

    clients = select_clients(test, args.clients)
    LOG.info(f"Running {test.id} on {[c.label for c in clients]} in {config.mode} mode")

    try:
        runs = await run_module(test, clients, config)
    except DscE2EError as e:
        LOG.error(f"Test {test.id} could not run: {e}")
        return 2

    failed = log_summary(test, runs)

    try:
        results_file = save_results(Path(config.output_dir), test, runs)
        LOG.info(f"Test results saved to: {results_file}")
    except OSError as e:
        LOG.error(f"Failed to save test results: {e}")

    return 1 if failed else 0


def cli():
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    cli()
