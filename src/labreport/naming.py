"""Branch naming for lab reports."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime

TIMESTAMP_FORMAT = "%Y-%m-%d-%H%M%S"

_BRANCH_PATTERN = re.compile(r"^(?P<timestamp>\d{4}-\d{2}-\d{2}-\d{6})-(?P<slug>.+)$")


@dataclass(slots=True)
class LabReportBranch:
    """A branch name split back into its timestamp and title slug."""

    name: str
    timestamp: datetime
    slug: str


def format_timestamp(moment: datetime) -> str:
    """Render ``moment`` as ``YYYY-MM-DD-HHMMSS``."""

    return moment.strftime(TIMESTAMP_FORMAT)


def build_branch_name(title: str, moment: datetime) -> str:
    """Derive the branch name for ``title`` captured at ``moment``.

    Every space in the title becomes a hyphen; nothing else is rewritten.
    """

    return f"{format_timestamp(moment)}-{title.replace(' ', '-')}"


def parse_branch_name(name: str) -> LabReportBranch | None:
    match = _BRANCH_PATTERN.match(name)
    if match is None:
        return None
    try:
        timestamp = datetime.strptime(match.group("timestamp"), TIMESTAMP_FORMAT)
    except ValueError:
        return None
    return LabReportBranch(name=name, timestamp=timestamp, slug=match.group("slug"))


__all__ = [
    "LabReportBranch",
    "TIMESTAMP_FORMAT",
    "build_branch_name",
    "format_timestamp",
    "parse_branch_name",
]
