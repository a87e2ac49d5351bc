"""Commit message seeding."""

from __future__ import annotations

from pathlib import Path

DEFAULT_TEMPLATE = """\
Intro:

Goals:

Method:

Results:
"""


def compose_message(title: str, template_text: str) -> str:
    """Return the seed message: the title line, a blank line, then the template."""

    body = template_text
    if body and not body.endswith("\n"):
        body += "\n"
    return f"title: {title}\n\n{body}"


def write_seed_message(directory: Path, title: str, template_text: str) -> Path:
    """Write the seed message into ``directory`` and return its path."""

    path = Path(directory) / "LABREPORT_MSG"
    path.write_text(compose_message(title, template_text), encoding="utf-8")
    return path


__all__ = ["DEFAULT_TEMPLATE", "compose_message", "write_seed_message"]
