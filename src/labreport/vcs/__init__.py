"""Git CLI orchestration utilities."""

from .runner import FakeGitRunner, GitExecutionResult, GitRunner, serialize_result

__all__ = [
    "FakeGitRunner",
    "GitExecutionResult",
    "GitRunner",
    "serialize_result",
]
