"""Async runner for the git CLI."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Callable, Iterable

from ..process import ProcessResult, resolve_executable, run_process

GitExecutionResult = ProcessResult


class GitRunner:
    """Execute git commands asynchronously inside one working directory."""

    def __init__(self, executable: Path | None = None, *, cwd: Path | None = None) -> None:
        self._executable_path = resolve_executable("git", executable)
        self._cwd = Path(cwd) if cwd is not None else Path.cwd()

    @property
    def executable(self) -> Path:
        return self._executable_path

    @property
    def cwd(self) -> Path:
        return self._cwd

    # Queries

    async def is_inside_work_tree(self) -> bool:
        result = await self._invoke("rev-parse", "--is-inside-work-tree")
        return result.ok and result.stdout.strip() == "true"

    async def current_branch(self) -> str | None:
        """Return the checked-out branch, or None on a detached HEAD."""

        result = await self._invoke("symbolic-ref", "--quiet", "--short", "HEAD")
        if not result.ok:
            return None
        return result.stdout.strip() or None

    async def branch_exists(self, name: str) -> bool:
        result = await self._invoke("show-ref", "--verify", "--quiet", f"refs/heads/{name}")
        return result.ok

    async def is_valid_branch_name(self, name: str) -> bool:
        result = await self._invoke("check-ref-format", "--branch", name)
        return result.ok

    async def config_get(self, key: str) -> str | None:
        result = await self._invoke("config", "--get", key)
        if not result.ok:
            return None
        return result.stdout.strip() or None

    async def head(self) -> str | None:
        result = await self._invoke("rev-parse", "--verify", "--quiet", "HEAD")
        if not result.ok:
            return None
        return result.stdout.strip() or None

    async def stash_tip(self) -> str | None:
        """Return the commit id of the newest stash entry, if any."""

        result = await self._invoke("rev-parse", "--verify", "--quiet", "refs/stash")
        if not result.ok:
            return None
        return result.stdout.strip() or None

    async def stash_ref_for(self, commit: str) -> str | None:
        """Map a stash commit id to its current ``stash@{n}`` reference."""

        result = await self._invoke("stash", "list", "--format=%H")
        if not result.ok:
            return None
        for index, line in enumerate(result.stdout.splitlines()):
            if line.strip() == commit:
                return f"stash@{{{index}}}"
        return None

    async def list_branches(self) -> list[dict[str, str]]:
        """Return local branches with their tip commit and subject line."""

        result = await self._invoke(
            "for-each-ref",
            "--format=%(refname:short)%09%(objectname)%09%(contents:subject)",
            "refs/heads",
        )
        if not result.ok:
            return []
        branches: list[dict[str, str]] = []
        for line in result.stdout.splitlines():
            if not line.strip():
                continue
            name, _, rest = line.partition("\t")
            commit, _, subject = rest.partition("\t")
            branches.append({"name": name, "commit": commit, "subject": subject})
        return branches

    # Mutations

    async def stash_push(self, message: str) -> GitExecutionResult:
        return await self._invoke("stash", "push", "--include-untracked", "--message", message)

    async def stash_apply(self, ref: str, *, index: bool = False) -> GitExecutionResult:
        args = ["stash", "apply"]
        if index:
            args.append("--index")
        return await self._invoke(*args, ref)

    async def stash_pop(self, ref: str, *, index: bool = False) -> GitExecutionResult:
        args = ["stash", "pop"]
        if index:
            args.append("--index")
        return await self._invoke(*args, ref)

    async def checkout_new_branch(self, name: str) -> GitExecutionResult:
        return await self._invoke("checkout", "-b", name)

    async def checkout(self, name: str, *, force: bool = False) -> GitExecutionResult:
        if force:
            return await self._invoke("checkout", "--force", name)
        return await self._invoke("checkout", name)

    async def add_all(self) -> GitExecutionResult:
        return await self._invoke("add", "--all")

    async def commit(
        self,
        message_file: Path,
        *,
        edit: bool = True,
        allow_empty: bool = True,
    ) -> GitExecutionResult:
        args = ["commit", "--file", str(message_file)]
        if edit:
            args.append("--edit")
        if allow_empty:
            args.append("--allow-empty")
        return await self._invoke(*args, interactive=edit)

    async def reset_hard(self, ref: str = "HEAD") -> GitExecutionResult:
        return await self._invoke("reset", "--hard", ref)

    async def clean(self) -> GitExecutionResult:
        """Remove untracked files across the whole work tree, not just ``cwd``."""

        return await self._invoke("clean", "-d", "--force", "--", ":/")

    async def delete_branch(self, name: str) -> GitExecutionResult:
        return await self._invoke("branch", "-D", name)

    async def _invoke(self, *args: str, interactive: bool = False) -> GitExecutionResult:
        cmd = [str(self._executable_path), *args]
        return await run_process(cmd, cwd=self._cwd, interactive=interactive)


class FakeGitRunner(GitRunner):
    """Test double that simulates git CLI responses.

    Replies come from ``handler`` when given, otherwise from the ``responses``
    queue, otherwise a successful empty result.
    """

    def __init__(  # type: ignore[override]
        self,
        responses: Iterable[GitExecutionResult] | None = None,
        *,
        handler: Callable[[tuple[str, ...]], GitExecutionResult | None] | None = None,
        cwd: Path | None = None,
    ) -> None:
        self._responses = list(responses or [])
        self._handler = handler
        self._invocations: list[tuple[str, ...]] = []
        self._executable_path = Path("/tmp/fake-git")
        self._cwd = Path(cwd) if cwd is not None else Path("/tmp")

    async def _invoke(self, *args: str, interactive: bool = False) -> GitExecutionResult:  # type: ignore[override]
        self._invocations.append(tuple(args))
        if self._handler is not None:
            result = self._handler(tuple(args))
            if result is not None:
                return result
        if self._responses:
            return self._responses.pop(0)
        return GitExecutionResult(args=tuple(args), returncode=0, stdout="", stderr="")

    @property
    def invocations(self) -> list[tuple[str, ...]]:
        return self._invocations


def serialize_result(result: GitExecutionResult) -> str:
    """Serialize a command result for debug logging."""

    return json.dumps(
        {
            "args": list(result.args),
            "returncode": result.returncode,
            "stdout": result.stdout,
            "stderr": result.stderr,
        }
    )
