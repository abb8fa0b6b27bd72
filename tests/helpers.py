"""Shared test helpers."""

from pathlib import Path
from typing import Optional, Sequence

from git import Actor, Repo

from gitaddons.git import CommandResult

AUTHOR = Actor("Test User", "test@example.com")


class FakeRunner:
    """Command runner answering from a fixed table of git invocations.

    Anything not in the table fails with exit status 1.
    """

    def __init__(self, responses: Optional[dict[tuple[str, ...], CommandResult]] = None) -> None:
        self.responses = dict(responses or {})
        self.calls: list[tuple[str, ...]] = []

    def succeed(self, *argv: str, stdout: str = "") -> "FakeRunner":
        self.responses[argv] = CommandResult(stdout=stdout, status=0)
        return self

    def run(self, argv: Sequence[str]) -> CommandResult:
        key = tuple(argv)
        self.calls.append(key)
        return self.responses.get(key, CommandResult(stdout="", status=1))


def has_local_branch(runner: FakeRunner, name: str) -> FakeRunner:
    return runner.succeed("show-ref", "--verify", "--quiet", f"refs/heads/{name}")


def commit_file(repo: Repo, path: Path, name: str, content: str, message: str) -> None:
    """Write a file and commit it."""
    target = path / name
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(content)
    repo.index.add([name])
    repo.index.commit(message, author=AUTHOR)
