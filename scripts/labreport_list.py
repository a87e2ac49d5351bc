"""List lab report branches in the current repository."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Iterable

from labreport.config import LabReportSettings
from labreport.errors import ToolNotFoundError
from labreport.naming import parse_branch_name
from labreport.vcs import GitRunner


def load_runner(settings: LabReportSettings) -> GitRunner:
    """Construct a GitRunner for the current directory using the provided settings."""

    return GitRunner(Path(settings.git_path) if settings.git_path else None)


def _normalize_branches(
    branches: Iterable[dict[str, str]],
    *,
    contains: str | None = None,
) -> list[dict[str, object]]:
    reports: list[dict[str, object]] = []
    for branch in branches:
        parsed = parse_branch_name(branch["name"])
        if parsed is None:
            continue
        if contains and contains.lower() not in parsed.slug.lower():
            continue
        reports.append(
            {
                "branch": parsed.name,
                "timestamp": parsed.timestamp.isoformat(),
                "slug": parsed.slug,
                "commit": branch.get("commit"),
                "subject": branch.get("subject"),
            }
        )
    reports.sort(key=lambda item: item["timestamp"])
    return reports


def _default_formatter(item: dict[str, object]) -> str:
    commit = str(item["commit"] or "")[:10]
    return f"{item['branch']}  {commit}  {item['subject']}"


async def _collect(runner: GitRunner) -> list[dict[str, str]] | None:
    if not await runner.is_inside_work_tree():
        return None
    return await runner.list_branches()


def list_reports(args: argparse.Namespace, *, formatter=_default_formatter) -> int:
    settings = LabReportSettings()
    try:
        runner = load_runner(settings)
    except ToolNotFoundError as exc:
        print(f"git unavailable: {exc}", file=sys.stderr)
        return 1

    branches = asyncio.run(_collect(runner))
    if branches is None:
        print(f"Not a git repository: {runner.cwd}", file=sys.stderr)
        return 1

    payload = _normalize_branches(branches, contains=args.contains)
    if args.limit is not None and args.limit > 0:
        payload = payload[-args.limit :]
    if args.format == "json":
        print(json.dumps(payload, indent=2))
    else:
        for item in payload:
            print(formatter(item))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="List lab report branches, oldest first.")
    parser.add_argument("--contains", help="Only show reports whose title contains this text", default=None)
    parser.add_argument(
        "--format",
        choices={"json", "text"},
        default="text",
        help="Output format (default: text)",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="If provided, show only the latest N reports",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    exit_code = list_reports(args)
    if exit_code:
        raise SystemExit(exit_code)


if __name__ == "__main__":
    main()
