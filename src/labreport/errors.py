"""Error taxonomy for lab report creation."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from .process import ProcessResult


class LabReportError(RuntimeError):
    """Base class for lab report errors.

    ``exit_code`` is the process status the CLI exits with.
    """

    exit_code = 1
    undo_failures: tuple[str, ...] = ()


class MissingTitleError(LabReportError):
    """Raised when no usable title was supplied."""


class NotARepositoryError(LabReportError):
    """Raised when the working directory is not inside a git work tree."""


class HomeBranchMissingError(LabReportError):
    """Raised when the configured home branch does not exist."""


class NotOnHomeBranchError(LabReportError):
    """Raised when the home branch is not the checked-out branch."""


class InvalidBranchNameError(LabReportError):
    """Raised when the derived branch name is rejected by git."""


class BranchExistsError(LabReportError):
    """Raised when the derived branch name is already taken."""


class TemplateNotFoundError(LabReportError):
    """Raised when the configured commit template cannot be read."""


class UnderlyingToolError(LabReportError):
    """Raised when a wrapped command exits with a non-zero status."""

    def __init__(self, step: str, result: ProcessResult | None = None, message: str | None = None) -> None:
        self.step = step
        self.result = result
        if message is None:
            detail = ""
            if result is not None:
                detail = (result.stderr or result.stdout).strip()
                message = f"{step} failed with exit code {result.returncode}"
            else:
                message = f"{step} failed"
            if detail:
                message = f"{message}: {detail}"
        super().__init__(message)

    @property
    def exit_code(self) -> int:  # type: ignore[override]
        if self.result is not None and self.result.returncode:
            return self.result.returncode
        return 1


class ToolNotFoundError(UnderlyingToolError):
    """Raised when a required executable cannot be located."""

    def __init__(self, message: str) -> None:
        super().__init__("resolve executable", message=message)

    @property
    def exit_code(self) -> int:  # type: ignore[override]
        return 127


__all__ = [
    "BranchExistsError",
    "HomeBranchMissingError",
    "InvalidBranchNameError",
    "LabReportError",
    "MissingTitleError",
    "NotARepositoryError",
    "NotOnHomeBranchError",
    "TemplateNotFoundError",
    "ToolNotFoundError",
    "UnderlyingToolError",
]
