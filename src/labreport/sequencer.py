"""Snapshot an experiment onto its own branch and restore the working tree."""

from __future__ import annotations

import logging
import tempfile
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Awaitable, Callable

from .errors import (
    BranchExistsError,
    HomeBranchMissingError,
    InvalidBranchNameError,
    LabReportError,
    MissingTitleError,
    NotARepositoryError,
    NotOnHomeBranchError,
    TemplateNotFoundError,
    UnderlyingToolError,
)
from .exporters import ManifestExporter, ManifestWrite
from .message import DEFAULT_TEMPLATE, write_seed_message
from .naming import build_branch_name
from .vcs import GitExecutionResult, GitRunner, serialize_result

logger = logging.getLogger(__name__)

UndoAction = Callable[[], Awaitable[None]]


@dataclass(slots=True)
class LabReport:
    """Outcome of a successful snapshot."""

    branch: str
    title: str
    timestamp: datetime
    commit: str | None
    manifests: list[Path] = field(default_factory=list)
    stashed: bool = False


class UndoStack:
    """Compensating actions recorded as mutating steps succeed."""

    def __init__(self) -> None:
        self._actions: list[tuple[str, UndoAction]] = []

    def __len__(self) -> int:
        return len(self._actions)

    @property
    def descriptions(self) -> list[str]:
        return [description for description, _ in self._actions]

    def push(self, description: str, action: UndoAction) -> None:
        self._actions.append((description, action))

    def discard(self) -> None:
        self._actions.clear()

    async def unwind(self) -> list[str]:
        """Run every recorded action, newest first.

        A failing action is logged and reported in the returned list; the
        remaining actions still run.
        """

        failures: list[str] = []
        while self._actions:
            description, action = self._actions.pop()
            try:
                await action()
            except Exception as exc:
                logger.error(
                    "Undo step failed",
                    extra={"undo_step": description, "error": str(exc)},
                )
                failures.append(f"{description}: {exc}")
            else:
                logger.info("Undid step", extra={"undo_step": description})
        return failures


def validate_title(title: str | None) -> str:
    if title is None or not title.strip():
        raise MissingTitleError("A title for the lab report is required")
    return title


class SnapshotSequencer:
    """Create lab report branches.

    The working tree is stashed, replayed onto a fresh timestamped branch and
    committed there, then restored on the home branch. If any step fails the
    steps already taken are undone in reverse order before the error
    propagates.
    """

    def __init__(
        self,
        git: GitRunner,
        exporter: ManifestExporter,
        *,
        home_branch: str = "wip",
        commit_template: Path | None = None,
        edit_message: bool = True,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._git = git
        self._exporter = exporter
        self._home_branch = home_branch
        self._commit_template = Path(commit_template) if commit_template is not None else None
        self._edit_message = edit_message
        self._clock = clock or datetime.now

    @property
    def home_branch(self) -> str:
        return self._home_branch

    async def create(self, title: str | None) -> LabReport:
        title = validate_title(title)
        moment = self._clock()
        branch = build_branch_name(title, moment)

        await self._check_preconditions(branch)
        template_text = await self._load_template()

        logger.info("Creating lab report", extra={"branch": branch, "home_branch": self._home_branch})
        undo = UndoStack()
        try:
            report = await self._snapshot(title, moment, branch, template_text, undo)
        except BaseException as exc:
            if len(undo):
                logger.warning(
                    "Lab report failed; rolling back",
                    extra={"branch": branch, "pending_undo": undo.descriptions},
                )
                failures = await undo.unwind()
                if failures and isinstance(exc, LabReportError):
                    exc.undo_failures = tuple(failures)
            raise
        undo.discard()

        logger.info("Lab report created", extra={"branch": branch, "commit": report.commit})
        return report

    async def _check_preconditions(self, branch: str) -> None:
        git = self._git
        if not await git.is_inside_work_tree():
            raise NotARepositoryError(f"{git.cwd} is not inside a git working tree")
        if not await git.branch_exists(self._home_branch):
            raise HomeBranchMissingError(f"Home branch '{self._home_branch}' does not exist")
        current = await git.current_branch()
        if current != self._home_branch:
            raise NotOnHomeBranchError(
                f"Expected to be on '{self._home_branch}', currently on '{current or 'detached HEAD'}'"
            )
        if not await git.is_valid_branch_name(branch):
            raise InvalidBranchNameError(f"'{branch}' is not a valid branch name")
        if await git.branch_exists(branch):
            raise BranchExistsError(f"Branch '{branch}' already exists")

    async def _load_template(self) -> str:
        path = self._commit_template
        if path is None:
            configured = await self._git.config_get("commit.template")
            if configured:
                path = Path(configured).expanduser()
                if not path.is_absolute():
                    path = self._git.cwd / path
        if path is None:
            return DEFAULT_TEMPLATE
        try:
            return path.read_text(encoding="utf-8")
        except OSError as exc:
            raise TemplateNotFoundError(f"Cannot read commit template {path}: {exc}") from exc

    async def _snapshot(
        self,
        title: str,
        moment: datetime,
        branch: str,
        template_text: str,
        undo: UndoStack,
    ) -> LabReport:
        git = self._git

        manifests: list[Path] = []
        for manifest in self._exporter.manifests:
            written = await self._exporter.export(manifest)
            undo.push(f"restore {manifest.filename}", self._restore_manifest(written))
            manifests.append(written.path)

        previous_tip = await git.stash_tip()
        result = await git.stash_push(f"labreport: {title}")
        stash = await git.stash_tip()
        if stash == previous_tip:
            stash = None
        if stash is not None:
            undo.push("restore stashed working tree", lambda: self._restore_stash(stash))
        self._check(result, "stash working tree")
        if stash is None:
            logger.info("No local changes to stash; recording an empty commit")

        await self._step(git.checkout_new_branch(branch), f"create branch {branch}")
        undo.push(f"delete branch {branch}", lambda: self._abandon_branch(branch))
        undo.push(f"discard changes on {branch}", self._discard_changes)

        if stash is not None:
            await self._step(git.stash_apply(stash), "apply stash onto report branch")
        await self._step(git.add_all(), "stage changes")

        with tempfile.TemporaryDirectory(prefix="labreport-") as tmp:
            seed = write_seed_message(Path(tmp), title, template_text)
            await self._step(git.commit(seed, edit=self._edit_message), "commit lab report")
        commit = await git.head()

        await self._step(git.checkout(self._home_branch), f"return to {self._home_branch}")
        if stash is not None:
            await self._restore_stash(stash)

        return LabReport(
            branch=branch,
            title=title,
            timestamp=moment,
            commit=commit,
            manifests=manifests,
            stashed=stash is not None,
        )

    def _check(self, result: GitExecutionResult, description: str) -> GitExecutionResult:
        if not result.ok:
            logger.debug("Command failed: %s", serialize_result(result))
            raise UnderlyingToolError(description, result)
        logger.debug("Completed step", extra={"step": description})
        return result

    async def _step(self, pending: Awaitable[GitExecutionResult], description: str) -> GitExecutionResult:
        return self._check(await pending, description)

    @staticmethod
    def _restore_manifest(written: ManifestWrite) -> UndoAction:
        async def action() -> None:
            written.restore()

        return action

    async def _discard_changes(self) -> None:
        await self._step(self._git.reset_hard(), "reset working tree")
        await self._step(self._git.clean(), "remove untracked files")

    async def _abandon_branch(self, branch: str) -> None:
        await self._step(self._git.checkout(self._home_branch, force=True), f"return to {self._home_branch}")
        await self._step(self._git.delete_branch(branch), f"delete branch {branch}")

    async def _restore_stash(self, stash: str) -> None:
        """Pop the stash identified by commit id ``stash``.

        Staged state is restored when possible; otherwise only file contents.
        """

        ref = await self._git.stash_ref_for(stash)
        if ref is None:
            raise UnderlyingToolError("restore stash", message=f"stash {stash} is no longer in the stash list")
        result = await self._git.stash_pop(ref, index=True)
        if result.ok:
            return
        logger.warning(
            "Could not restore staged state; retrying without --index",
            extra={"stash": ref, "stderr": result.stderr.strip()},
        )
        await self._discard_changes()
        await self._step(self._git.stash_pop(ref), f"restore stash {ref} ({stash})")


__all__ = ["LabReport", "SnapshotSequencer", "UndoStack", "validate_title"]
