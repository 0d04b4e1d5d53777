"""
Command-line interface for the telebuild build orchestration engine.

This module provides the CLI entry point: listing the projects that can be
built and running a single build session, with Ctrl-C cancelling it.
"""

import argparse
import asyncio
import logging
import sys
import tomllib
from pathlib import Path
from typing import List, Optional

from ..config import get_config, set_config_path
from ..models.build import BuildPlatform, BuildRequest, BuildResult, LogBehaviour
from ..orchestration import (
    BuildRunner,
    BuildRunnerConfig,
    CancellationToken,
    SignalHandler,
)
from ..system import project_names
from ..validation import (
    BuildCancelledError,
    ConfigurationError,
    TelebuildError,
    handle_cli_error,
    validate_project_name,
)

logger = logging.getLogger(__name__)

EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_CANCELLED = 130


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)-5.5s] %(name)s:%(filename)s:%(lineno)d\t %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="telebuild",
        description="Run Unity batch-mode builds and collect their artifacts.",
    )
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        help="Path to config.toml (defaults to $TELEBUILD_CONFIG or conf/config.toml).",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("projects", help="List the projects that can be built.")

    build = subparsers.add_parser("build", help="Build a project.")
    build.add_argument("project", help="Project directory name under the projects root.")
    build.add_argument(
        "-p",
        "--platform",
        help=f"Target platform {[p.value for p in BuildPlatform]} or dev/release. "
             "Defaults to build.default_platform from config.",
    )
    build.add_argument(
        "-l",
        "--log-behaviour",
        choices=[b.value for b in LogBehaviour],
        help="Override session.log_behaviour from config.",
    )
    return parser


async def run_cancellable_build(runner: BuildRunner, request: BuildRequest) -> BuildResult:
    """Run one session whose token is cancelled by SIGINT/SIGTERM."""
    token = CancellationToken()
    session = runner.create_session(request)
    with SignalHandler() as handler:
        handler.register_session(session.session_id, token)
        return await runner.run_session(session, request, token)


def _command_projects(app_config) -> int:
    for name in project_names(app_config.paths.projects_root):
        print(name)
    return EXIT_SUCCESS


def _command_build(app_config, args: argparse.Namespace) -> int:
    project_name = validate_project_name(args.project, field_name="project argument")
    available = project_names(app_config.paths.projects_root)
    if project_name not in available:
        logger.error(f"Project '{project_name}' not found under {app_config.paths.projects_root}.")
        logger.info(f"Available projects: {', '.join(available)}")
        return EXIT_FAILURE

    platform = BuildPlatform.parse(args.platform) if args.platform else None
    log_behaviour = LogBehaviour.parse(args.log_behaviour) if args.log_behaviour else None

    request = BuildRequest.from_config(app_config, project_name, platform=platform)
    runner = BuildRunner(BuildRunnerConfig.from_app_config(app_config, log_behaviour=log_behaviour))

    logger.info(f">>> Building {request.project_name} for {request.platform.value}")
    try:
        result = asyncio.run(run_cancellable_build(runner, request))
    except BuildCancelledError as e:
        logger.debug(f"Build ended with {e.kind}: {e}")
        return EXIT_CANCELLED
    except TelebuildError as e:
        logger.debug(f"Build ended with {e.kind}: {e}")
        return EXIT_FAILURE

    print(f"log: {result.log_path}")
    print(f"artifact: {result.artifact_path}")
    return EXIT_SUCCESS


def main_cli(argv: Optional[List[str]] = None) -> None:
    """
    Main command-line interface.

    Raises:
        SystemExit: Always, with the command's exit code.
    """
    args = build_parser().parse_args(argv)
    _configure_logging(args.verbose)

    if args.config:
        set_config_path(args.config)

    try:
        app_config = get_config()
    except (FileNotFoundError, ConfigurationError, tomllib.TOMLDecodeError) as e:
        handle_cli_error(
            error=e,
            context="configuration loading",
            exit_code=EXIT_FAILURE,
            logger=logger,
        )

    try:
        if args.command == "projects":
            exit_code = _command_projects(app_config)
        else:
            exit_code = _command_build(app_config, args)
    except ConfigurationError as e:
        handle_cli_error(
            error=e,
            context=f"{args.command} command",
            exit_code=EXIT_FAILURE,
            logger=logger,
        )

    sys.exit(exit_code)


if __name__ == "__main__":
    main_cli()
