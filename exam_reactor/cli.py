"""CLI entry point for running test suites through a staged reactor."""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

from exam_reactor.containers.loading import (
    load_container_manifest,
    parse_container_config,
)
from exam_reactor.listeners import LoggingListener
from exam_reactor.models.suite import plan_descriptions
from exam_reactor.reactors.factory import REACTORS, create_reactor
from exam_reactor.runner import SuiteResult, SuiteRunner
from exam_reactor.suite_loader import load_suite_definition

STATUS_SYMBOLS = {
    "passed": "✅",
    "failed": "❌",
    "error": "❗",
}


def log_results_summary(log: logging.Logger, suite_result: SuiteResult) -> None:
    """Log a formatted summary of test results."""
    log.info("=" * 80)
    log.info("Test Results Summary:")
    log.info("=" * 80)

    for test_result in suite_result.results:
        symbol = STATUS_SYMBOLS.get(test_result.status, "?")
        log.info(
            "%s %s: %s (%.2fs)",
            symbol,
            test_result.description.test_id,
            test_result.status,
            test_result.duration,
        )
        if test_result.message:
            log.info("  Message: %s", test_result.message)


async def run(
    container_key: str,
    container_config_json: str,
    suite_path: Path,
    reactor_key: str | None = None,
) -> int:
    """Run a suite and return exit code."""
    log = logging.getLogger("exam_reactor")

    log.info("Loading container: %s", container_key)
    manifest = load_container_manifest(container_key)
    config = parse_container_config(manifest, container_config_json)

    log.info("Loading suite definition: %s", suite_path)
    suite = await load_suite_definition(suite_path)
    probes = suite.build_probes()
    plan = plan_descriptions(probes)

    if not any(description.is_executable for description in plan):
        log.info("No tests found in suite")
        print(json.dumps({"total": 0, "results": []}))
        return 0

    strategy = reactor_key or suite.reactor
    log.info("Running suite with %s reactor", strategy)

    async with manifest.container_factory(config) as container:
        reactor = create_reactor(strategy, [container], probes)
        runner = SuiteRunner(reactor=reactor, listener=LoggingListener())
        suite_result = await runner.run(plan)

    log_results_summary(log, suite_result)

    output = format_output(suite_result)
    print(json.dumps(output, indent=2))

    return 0 if suite_result.successful else 1


def format_output(suite_result: SuiteResult) -> dict[str, Any]:
    """Format suite results for JSON output."""
    all_results = [
        {
            "test": test_result.description.test_id,
            "status": test_result.status,
            "duration": test_result.duration,
            "message": test_result.message,
        }
        for test_result in suite_result.results
    ]

    return {
        "total": len(all_results),
        "passed": suite_result.passed,
        "failed": suite_result.failed,
        "errors": suite_result.errors,
        "results": all_results,
    }


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Run test suites in staged test containers"
    )
    parser.add_argument(
        "--container",
        required=True,
        help="Container key (local, remote)",
    )
    parser.add_argument(
        "--container-config",
        default="{}",
        help="JSON configuration for the container",
    )
    parser.add_argument(
        "--suite",
        type=Path,
        required=True,
        help="Path to the suite.yaml file",
    )
    parser.add_argument(
        "--reactor",
        choices=sorted(REACTORS),
        default=None,
        help="Reactor strategy overriding the one in the suite file",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    exit_code = asyncio.run(
        run(
            container_key=args.container,
            container_config_json=args.container_config,
            suite_path=args.suite,
            reactor_key=args.reactor,
        )
    )
    sys.exit(exit_code)


if __name__ == "__main__":  # pragma: no cover
    main()
