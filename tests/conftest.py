from __future__ import annotations

import shutil
import subprocess
import textwrap
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

import pytest

from labreport.config import LabReportSettings, get_settings

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git executable not available")


def git(repo: Path, *args: str) -> str:
    process = subprocess.run(
        ["git", *args],
        cwd=str(repo),
        check=True,
        capture_output=True,
        text=True,
    )
    return process.stdout


def tree_state(repo: Path) -> dict[str, bytes]:
    """Return every working-tree file (outside .git) with its content."""

    state: dict[str, bytes] = {}
    for path in sorted(repo.rglob("*")):
        relative = path.relative_to(repo)
        if relative.parts[0] == ".git" or not path.is_file():
            continue
        state[relative.as_posix()] = path.read_bytes()
    return state


@dataclass
class Workspace:
    repo: Path
    exporter_dir: Path
    clock_value: datetime

    def clock(self) -> datetime:
        return self.clock_value


@pytest.fixture(autouse=True)
def _isolated_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_AUTHOR_NAME", "Lab Tester")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "lab@example.com")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "Lab Tester")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "lab@example.com")
    for key in (
        "LABREPORT_GIT_PATH",
        "LABREPORT_HOME_BRANCH",
        "LABREPORT_COMMIT_TEMPLATE",
        "LABREPORT_EXPORTER",
        "LABREPORT_EXPORTER_PATHS",
        "LABREPORT_EDIT_MESSAGE",
        "LABREPORT_LOG_LEVEL",
    ):
        monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def workspace(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Workspace:
    """A git repository on ``wip`` with one commit and a fake exporter profile."""

    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    script = bin_dir / "fake-conda"
    script.write_text(
        textwrap.dedent(
            """\
            #!/bin/sh
            if [ -n "$FAKE_EXPORT_FAIL" ] && [ "$1" = "$FAKE_EXPORT_FAIL" ]; then
                echo "export broke" >&2
                exit 3
            fi
            echo "exported $@ ${FAKE_EXPORT_TAG:-fresh}"
            """
        ),
        encoding="utf-8",
    )
    script.chmod(0o755)

    exporter_dir = tmp_path / "exporters"
    exporter_dir.mkdir()
    (exporter_dir / "fake.yaml").write_text(
        textwrap.dedent(
            f"""\
            id: fake
            title: Fake conda
            executable: {script}
            manifests:
              - filename: environment.yml
                args: [env, export]
              - filename: requirements.txt
                args: [list, --export]
            """
        ),
        encoding="utf-8",
    )

    repo = tmp_path / "repo"
    repo.mkdir()
    git(repo, "init", "-q")
    git(repo, "checkout", "-q", "-b", "wip")
    (repo / "train.py").write_text("lr = 0.1\n", encoding="utf-8")
    (repo / "environment.yml").write_text("old environment\n", encoding="utf-8")
    git(repo, "add", "--all")
    git(repo, "commit", "-q", "-m", "initial")

    monkeypatch.setenv("LABREPORT_EXPORTER", "fake")
    monkeypatch.setenv("LABREPORT_EXPORTER_PATHS", str(exporter_dir))
    monkeypatch.setenv("LABREPORT_EDIT_MESSAGE", "false")
    return Workspace(repo=repo, exporter_dir=exporter_dir, clock_value=datetime(2024, 3, 1, 10, 15, 30))


@pytest.fixture
def settings(workspace: Workspace) -> LabReportSettings:
    return LabReportSettings()
