"""Command-line entry point for comgen."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from . import __version__
from .audit import SEVERITY_LEVELS
from .config import DEFAULT_CONFIG_PATH, DEFAULT_PROVIDERS, load_config
from .core import FileWorkflow, WorkflowOptions
from .display import BOLD, GREEN, RED, RESET, Display, Spinner
from .exceptions import ComgenError, ConfigError, OperatorAbort, WorkflowError
from .git import GitRepo, find_git_repo_root
from .log import setup_logging
from .providers import create_backend


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="comgen",
        description="Draft, review and commit one AI-written message per changed file.",
    )
    parser.add_argument(
        "--config",
        default=DEFAULT_CONFIG_PATH,
        help="Path to the configuration file (default: %(default)s)",
    )
    parser.add_argument(
        "-p", "--prefix", default="", help="Prefix commit messages with [PREFIX]"
    )
    parser.add_argument(
        "-a",
        "--auto-push",
        action="store_true",
        help="Push after each commit",
    )
    parser.add_argument(
        "--no-audit",
        dest="audit",
        action="store_false",
        help="Skip the security audit even when enabled in the config",
    )
    parser.add_argument(
        "--audit-level",
        default="MEDIUM",
        type=str.upper,
        choices=SEVERITY_LEVELS,
        help="Minimum severity of audit findings to display (default: %(default)s)",
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="Accept the first generated message without asking",
    )
    parser.add_argument(
        "--provider", choices=sorted(DEFAULT_PROVIDERS), help="Override the provider"
    )
    parser.add_argument("--model", help="Override the model id")
    parser.add_argument(
        "--repo-path", default=".", help="Repository to work in (default: cwd)"
    )
    parser.add_argument(
        "--no-progress",
        dest="progress",
        action="store_false",
        help="Disable the spinner",
    )
    parser.add_argument("--debug", action="store_true", help="Echo debug logs to stderr")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


class CLI:
    """Parses arguments, wires collaborators and runs the workflow."""

    def __init__(self) -> None:
        self.parser = build_parser()

    def run(self, args: Optional[list[str]] = None) -> int:
        try:
            parsed = self.parser.parse_args(args)
        except SystemExit as exc:
            return int(exc.code or 0)

        try:
            logger = setup_logging(debug=parsed.debug)
            return self._execute(parsed, logger)
        except WorkflowError as exc:
            self._print_error(str(exc))
            return 130 if isinstance(exc.cause, OperatorAbort) else 1
        except OperatorAbort as exc:
            self._print_error(str(exc))
            return 130
        except ComgenError as exc:
            self._print_error(str(exc))
            return 1
        except KeyboardInterrupt:
            self._print_error("Interrupted")
            return 130

    def _execute(self, parsed: argparse.Namespace, logger: logging.Logger) -> int:
        logger.info("loading config from %s", parsed.config)
        config = load_config(parsed.config)
        config = config.with_overrides(
            {"provider": parsed.provider, "model": parsed.model}
        )
        config.validate()

        repo_root = find_git_repo_root(Path(parsed.repo_path))
        if repo_root is None:
            raise ConfigError(f"Not a Git repository: {parsed.repo_path}")

        try:
            if config.load_local_template(repo_root):
                logger.info("Local template loaded successfully")
        except ConfigError as exc:
            logger.info("No local template found or error loading it: %s", exc)

        logger.info("using provider: %s", config.provider)
        logger.info("using model: %s", config.model)
        backend = create_backend(config)

        display = Display(
            spinner=Spinner(enabled=parsed.progress),
            audit_level=parsed.audit_level,
        )
        options = WorkflowOptions.from_config(
            config,
            prefix=parsed.prefix,
            auto_push=parsed.auto_push,
            audit=parsed.audit,
            force=parsed.force,
        )
        workflow = FileWorkflow(
            GitRepo(str(repo_root)), backend, display, options, logger=logger
        )

        entries = workflow.list_changes()
        display.display_files(entries)
        result = workflow.run(entries)
        print(f"\n{BOLD}Workflow Summary{RESET}: {GREEN}{result.summary}{RESET}")
        return 0

    @staticmethod
    def _print_error(message: str) -> None:
        print(f"{RED}Error: {message}{RESET}", file=sys.stderr)


def main(argv: Optional[list[str]] = None) -> int:
    return CLI().run(argv)


if __name__ == "__main__":
    sys.exit(main())
