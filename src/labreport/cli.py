"""Command line entry point for labreport."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Callable

from . import __version__
from .config import LabReportSettings, get_settings
from .errors import LabReportError
from .exporters import ExporterLoader, ManifestExporter
from .sequencer import SnapshotSequencer, validate_title
from .vcs import GitRunner


def configure_logging(level: str) -> None:
    """Configure root logging for the CLI."""

    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="[%(asctime)s] [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )


def build_sequencer(
    settings: LabReportSettings,
    *,
    cwd: Path | None = None,
    clock: Callable[[], datetime] | None = None,
) -> SnapshotSequencer:
    """Wire a sequencer from settings for the repository at ``cwd``."""

    cwd = Path(cwd) if cwd is not None else Path.cwd()
    git = GitRunner(Path(settings.git_path) if settings.git_path else None, cwd=cwd)
    search_paths = [path if path.is_absolute() else cwd / path for path in settings.exporter_paths]
    profile = ExporterLoader(search_paths).get(settings.exporter)
    exporter = ManifestExporter(profile, cwd=cwd)
    template = settings.commit_template
    if template is not None and not template.is_absolute():
        template = cwd / template
    return SnapshotSequencer(
        git,
        exporter,
        home_branch=settings.home_branch,
        commit_template=template,
        edit_message=settings.edit_message,
        clock=clock,
    )


def apply_overrides(settings: LabReportSettings, args: argparse.Namespace) -> LabReportSettings:
    updates: dict[str, object] = {}
    if args.home_branch:
        updates["home_branch"] = args.home_branch
    if args.exporter:
        updates["exporter"] = args.exporter
    if args.template:
        updates["commit_template"] = Path(args.template).expanduser()
    if args.no_edit:
        updates["edit_message"] = False
    if args.log_level:
        updates["log_level"] = args.log_level.upper()
    if not updates:
        return settings
    return settings.model_copy(update=updates)


def run(
    args: argparse.Namespace,
    *,
    settings: LabReportSettings | None = None,
    cwd: Path | None = None,
    clock: Callable[[], datetime] | None = None,
) -> int:
    """Create a lab report for ``args.title`` and return the exit status."""

    settings = apply_overrides(settings or get_settings(), args)
    configure_logging(settings.log_level)

    title = " ".join(args.title)
    try:
        validate_title(title)
        sequencer = build_sequencer(settings, cwd=cwd, clock=clock)
        report = asyncio.run(sequencer.create(title))
    except LabReportError as exc:
        print(f"labreport: {exc}", file=sys.stderr)
        for failure in exc.undo_failures:
            print(f"labreport: rollback incomplete: {failure}", file=sys.stderr)
        return exc.exit_code

    print(report.branch)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="labreport",
        description=(
            "Snapshot the current experiment onto a timestamped branch, "
            "then restore the working tree on the home branch."
        ),
    )
    parser.add_argument(
        "title",
        nargs="*",
        help=(
            "Experiment title. Several words are joined with single spaces, so "
            "quoting is optional; spaces become hyphens in the branch name"
        ),
    )
    parser.add_argument("--home-branch", help="Branch to return to (default: wip)")
    parser.add_argument("--exporter", help="Exporter profile id used to regenerate manifests (default: conda)")
    parser.add_argument("--template", help="Commit message template file")
    parser.add_argument(
        "--no-edit",
        action="store_true",
        help="Commit the seeded message without opening an editor",
    )
    parser.add_argument(
        "--log-level",
        choices=["critical", "error", "warning", "info", "debug"],
        type=str.lower,
        help="Logging verbosity",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    exit_code = run(args)
    if exit_code:
        raise SystemExit(exit_code)


if __name__ == "__main__":
    main()
