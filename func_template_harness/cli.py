"""CLI entry point for the function template test harness."""

import argparse
import asyncio
import json
import logging
import os
import sys
import tempfile
from collections.abc import Mapping
from pathlib import Path

from func_template_harness.commands.base import Command
from func_template_harness.commands.process import SubprocessCommand
from func_template_harness.config import resolve_run_config
from func_template_harness.discovery import discover_targets
from func_template_harness.errors import ConfigurationError
from func_template_harness.reporter import Reporter
from func_template_harness.runner import TemplateRunner

EXIT_CONFIGURATION_ERROR = 2
WORK_DIR_PREFIX = "func-templates-"


async def run(
    root: Path,
    environ: Mapping[str, str],
    *,
    command: Command | None = None,
    work_dir: Path | None = None,
    json_output: bool = False,
) -> int:
    """Test every template below ``root`` and return the exit code."""
    log = logging.getLogger("func_template_harness")

    try:
        targets = discover_targets(root)
    except ConfigurationError as e:
        log.error("%s", e)
        return EXIT_CONFIGURATION_ERROR

    created_work_dir = work_dir is None
    if work_dir is None:
        work_dir = Path(tempfile.mkdtemp(prefix=WORK_DIR_PREFIX))

    config = resolve_run_config(environ, repository_root=root, work_dir=work_dir)
    log.info("Starting local template testing")
    log.info("Templates root: %s", config.repository_root.resolve())
    log.info("Work directory: %s", config.work_dir)

    reporter = Reporter()
    runner = TemplateRunner(config=config, command=command or SubprocessCommand())
    await runner.run(targets, reporter.record)

    if not reporter.results:
        log.warning("No templates found below %s", root)
    if created_work_dir:
        _remove_if_empty(work_dir)

    print(reporter.render())
    if json_output:
        print(json.dumps(reporter.to_dict(), indent=2))

    return reporter.exit_code()


def _remove_if_empty(path: Path) -> None:
    """Remove a scratch directory that no failed target was preserved in."""
    if path.is_dir() and not any(path.iterdir()):
        path.rmdir()


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Create, build, run and invoke every function template locally"
    )
    parser.add_argument(
        "--root",
        type=Path,
        default=Path("."),
        help="Templates repository root (default: current directory)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Also print the summary as JSON",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    exit_code = asyncio.run(run(args.root, os.environ, json_output=args.json))
    sys.exit(exit_code)


if __name__ == "__main__":  # pragma: no cover
    main()
