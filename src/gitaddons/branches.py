"""Branch catalog built from raw ``git branch`` listings.

Local lines come from ``git branch`` and remote lines from ``git branch -r``.
Each line is parsed into one of three results:

- ``ParsedBranch``: a branch that can be offered as a switch target
- ``SkippedLine``: a line that carries no branch (blank lines, symbolic refs
  such as ``origin/HEAD -> origin/main``, a detached HEAD entry)
- ``MalformedLine``: a line that could not be understood; it is dropped and
  logged

The catalog keeps local branches first and remote-only branches after them,
each group in listing order. Remote refs whose short name matches a local
branch are dropped, and the checked out branch is never offered.
"""

from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, Sequence, Union

from gitaddons.git import DEFAULT_REMOTE, BranchNotFoundError
from gitaddons.logging_config import get_logger

logger = get_logger(__name__)

CURRENT_MARKER = "* "
WORKTREE_MARKER = "+ "
SYMBOLIC_REF_ARROW = "->"
DETACHED_PREFIX = "("


def remote_prefix(remote: str = DEFAULT_REMOTE) -> str:
    return f"{remote}/"


def strip_remote_prefix(name: str, remote: str = DEFAULT_REMOTE) -> str:
    """Drop a leading ``<remote>/`` from a branch name, if present."""
    prefix = remote_prefix(remote)
    if name.startswith(prefix):
        return name[len(prefix) :]
    return name


@dataclass(frozen=True)
class Branch:
    """A ref that can be shown in the branch picker."""

    name: str
    short_name: str
    is_local: bool
    is_remote: bool
    is_current: bool = False

    @classmethod
    def local(cls, name: str, current: bool = False) -> "Branch":
        return cls(name=name, short_name=name, is_local=True, is_remote=False, is_current=current)

    @classmethod
    def remote(cls, ref: str, remote: str = DEFAULT_REMOTE) -> "Branch":
        return cls(name=ref, short_name=strip_remote_prefix(ref, remote), is_local=False, is_remote=True)

    @property
    def is_remote_only(self) -> bool:
        return self.is_remote and not self.is_local

    @property
    def display_name(self) -> str:
        if self.is_current:
            return f"{self.name} (current)"
        if self.is_remote_only:
            return f"{self.short_name} (remote)"
        return self.name


@dataclass(frozen=True)
class ParsedBranch:
    branch: Branch


@dataclass(frozen=True)
class SkippedLine:
    line: str


@dataclass(frozen=True)
class MalformedLine:
    line: str
    reason: str


ParseResult = Union[ParsedBranch, SkippedLine, MalformedLine]


def _check_name(line: str, name: str) -> Optional[MalformedLine]:
    if not name:
        return MalformedLine(line, "empty branch name")
    if any(char.isspace() for char in name):
        return MalformedLine(line, "branch name contains whitespace")
    return None


def parse_local_line(line: str) -> ParseResult:
    """Parse one line of ``git branch`` output."""
    text = line.strip()
    if not text:
        return SkippedLine(line)

    is_current = text.startswith(CURRENT_MARKER)
    if is_current:
        text = text[len(CURRENT_MARKER) :].strip()
    elif text.startswith(WORKTREE_MARKER):
        # Checked out in another worktree
        text = text[len(WORKTREE_MARKER) :].strip()

    if is_current and text.startswith(DETACHED_PREFIX):
        return SkippedLine(line)
    if SYMBOLIC_REF_ARROW in text:
        return MalformedLine(line, "unexpected symbolic ref in local listing")

    malformed = _check_name(line, text)
    if malformed:
        return malformed
    return ParsedBranch(Branch.local(text, current=is_current))


def parse_remote_line(line: str, remote: str = DEFAULT_REMOTE) -> ParseResult:
    """Parse one line of ``git branch -r`` output."""
    text = line.strip()
    if not text or SYMBOLIC_REF_ARROW in text:
        return SkippedLine(line)

    malformed = _check_name(line, text) or _check_name(line, strip_remote_prefix(text, remote))
    if malformed:
        return malformed
    return ParsedBranch(Branch.remote(text, remote))


def _parsed(results: Iterable[ParseResult]) -> Iterator[Branch]:
    for result in results:
        if isinstance(result, ParsedBranch):
            yield result.branch
        elif isinstance(result, MalformedLine):
            logger.warning("Ignoring branch listing line %r: %s", result.line, result.reason)


class BranchCatalog:
    """Switchable branches of one repository, rebuilt on every invocation."""

    def __init__(self, branches: Sequence[Branch], current: Optional[str] = None) -> None:
        self.branches: list[Branch] = list(branches)
        self.current = current

    @classmethod
    def build(
        cls,
        local_lines: Iterable[str],
        remote_lines: Iterable[str],
        remote: str = DEFAULT_REMOTE,
    ) -> "BranchCatalog":
        """Build the catalog from raw local and remote listing lines."""
        local = list(_parsed(parse_local_line(line) for line in local_lines))
        local_names = {branch.name for branch in local}

        remote_only = [
            branch
            for branch in _parsed(parse_remote_line(line, remote) for line in remote_lines)
            if branch.short_name not in local_names
        ]

        current = next((branch.name for branch in local if branch.is_current), None)
        selectable = [branch for branch in local + remote_only if not branch.is_current]
        logger.debug(
            "Catalog: %d local, %d remote-only, current=%s",
            len(local) - (current is not None),
            len(remote_only),
            current,
        )
        return cls(selectable, current=current)

    def find(self, name: str) -> Branch:
        """Look up a branch by its name, falling back to its short name.

        Raises:
            BranchNotFoundError: If no branch in the catalog matches
        """
        for branch in self.branches:
            if branch.name == name:
                return branch
        for branch in self.branches:
            if branch.short_name == name:
                return branch
        raise BranchNotFoundError(f"Selected branch not found: {name}")

    def __iter__(self) -> Iterator[Branch]:
        return iter(self.branches)

    def __len__(self) -> int:
        return len(self.branches)

    def __getitem__(self, index: int) -> Branch:
        return self.branches[index]
