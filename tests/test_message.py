from __future__ import annotations

from pathlib import Path

from labreport.message import DEFAULT_TEMPLATE, compose_message, write_seed_message


def test_compose_message_prepends_title_line() -> None:
    message = compose_message("My first attempt", "Intro:\n\nResults:\n")

    assert message == "title: My first attempt\n\nIntro:\n\nResults:\n"


def test_compose_message_terminates_template() -> None:
    assert compose_message("t", "Goals:").endswith("Goals:\n")
    assert compose_message("t", "") == "title: t\n\n"


def test_default_template_lists_sections() -> None:
    for section in ("Intro:", "Goals:", "Method:", "Results:"):
        assert section in DEFAULT_TEMPLATE
    assert not any(line.startswith("#") for line in DEFAULT_TEMPLATE.splitlines())


def test_write_seed_message(tmp_path: Path) -> None:
    path = write_seed_message(tmp_path, "baseline", "Method:\n")

    assert path.parent == tmp_path
    assert path.read_text(encoding="utf-8") == "title: baseline\n\nMethod:\n"
