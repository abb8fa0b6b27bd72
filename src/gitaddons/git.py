"""Git repository operations."""

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, Sequence

from git import Git, GitCommandNotFound, InvalidGitRepositoryError, NoSuchPathError, Repo

from gitaddons.logging_config import get_logger

if TYPE_CHECKING:
    from gitaddons.resolver import CheckoutCommand, RebaseTarget

logger = get_logger(__name__)

DEFAULT_REMOTE = "origin"

# Exit status reported when the git executable itself cannot be started
COMMAND_NOT_FOUND = 127


class GitError(Exception):
    """Git operation error."""


class NotARepositoryError(GitError):
    """The working directory is not inside a usable git repository."""


class FetchError(GitError):
    """Fetching from remotes failed."""


class BranchListingError(GitError):
    """The local branch listing could not be read."""


class BranchNotFoundError(GitError):
    """A selected branch is not part of the catalog."""


class CheckoutError(GitError):
    """Switching to a branch failed."""


class RebaseError(GitError):
    """Rebasing onto the upstream branch failed."""

    def __init__(self, message: str, status_report: str = "") -> None:
        """Initialize error.

        Args:
            message: Error message
            status_report: Output of ``git status`` captured after the failure, if the tree is dirty
        """
        super().__init__(message)
        self.status_report = status_report


class LogError(GitError):
    """Reading the commit log failed."""


@dataclass(frozen=True)
class CommandResult:
    """Outcome of one external command."""

    stdout: str
    status: int

    @property
    def ok(self) -> bool:
        return self.status == 0


class CommandRunner(Protocol):
    """Anything that can run a git command and report its stdout and exit status."""

    def run(self, argv: Sequence[str]) -> CommandResult: ...


class GitRunner:
    """Run git commands in an explicit working directory."""

    def __init__(self, working_dir: Path) -> None:
        self.working_dir = Path(working_dir)
        self.git = Git(self.working_dir)

    def run(self, argv: Sequence[str]) -> CommandResult:
        """Run ``git <argv>`` and return its stdout and exit status.

        Never raises for a non-zero exit; stderr is discarded.
        """
        command = [Git.GIT_PYTHON_GIT_EXECUTABLE, *argv]
        logger.debug("Running %s in %s", " ".join(command), self.working_dir)
        try:
            status, stdout, _stderr = self.git.execute(
                command,
                with_extended_output=True,
                with_exceptions=False,
            )
        except GitCommandNotFound as err:
            logger.debug("git executable not found: %s", err)
            return CommandResult(stdout="", status=COMMAND_NOT_FOUND)
        logger.debug("Exit status %s", status)
        return CommandResult(stdout=stdout, status=status)


class GitRepo:
    """Git repository operations used by the switch and who commands."""

    def __init__(self, path: Path) -> None:
        """Open the repository containing ``path``."""
        try:
            self.repo: Repo = Repo(path, search_parent_directories=True)
        except (InvalidGitRepositoryError, NoSuchPathError) as err:
            raise NotARepositoryError(f"Not in a Git repository: {path}") from err
        if self.repo.bare or self.repo.working_tree_dir is None:
            raise NotARepositoryError("Cannot operate on bare repository")
        self.path = Path(self.repo.working_tree_dir)
        self.runner: CommandRunner = GitRunner(self.path)

    def fetch_all(self) -> None:
        """Fetch latest state from all remotes."""
        if not self.runner.run(["fetch", "--all"]).ok:
            raise FetchError("Could not fetch from remotes")

    def list_local_branches(self) -> list[str]:
        """Return the raw lines of ``git branch``, uncoloured whatever ``color.ui`` says."""
        result = self.runner.run(["branch", "--no-color"])
        if not result.ok:
            raise BranchListingError("Failed to list local branches")
        return [line.strip() for line in result.stdout.splitlines()]

    def list_remote_branches(self) -> list[str]:
        """Return the raw lines of ``git branch -r``, or nothing if they cannot be read."""
        result = self.runner.run(["branch", "-r", "--no-color"])
        if not result.ok:
            logger.warning("Could not list remote branches")
            return []
        return [line.strip() for line in result.stdout.splitlines()]

    def current_branch_name(self) -> str:
        """Get current branch name ("HEAD" when detached)."""
        result = self.runner.run(["rev-parse", "--abbrev-ref", "HEAD"])
        return result.stdout.strip() if result.ok else ""

    def checkout(self, command: "CheckoutCommand") -> None:
        """Run a resolved checkout command."""
        if not self.runner.run(command.argv).ok:
            raise CheckoutError(f"Error switching to branch {command.local_name}")

    def rebase(self, target: "RebaseTarget") -> None:
        """Rebase the checked out branch onto the target's remote ref."""
        if not self.runner.run(target.argv).ok:
            raise RebaseError("Rebase encountered conflicts or errors.", status_report=self.status_report())

    def status_report(self) -> str:
        """Return ``git status`` output if the working tree has changes, else an empty string."""
        porcelain = self.runner.run(["status", "--porcelain"])
        if not porcelain.ok or not porcelain.stdout.strip():
            return ""
        full = self.runner.run(["status"])
        return full.stdout if full.ok else ""

    def user_name(self) -> str:
        """Get the configured ``user.name``, or an empty string."""
        reader = self.repo.config_reader()
        try:
            return str(reader.get_value("user", "name", default=""))
        finally:
            reader.release()

    def contributors(self) -> list[str]:
        """Return the raw author names of every commit, newest first."""
        result = self.runner.run(["log", "--format=%an"])
        if not result.ok:
            raise LogError("Failed to read commit authors")
        return result.stdout.splitlines()

    def log(self, author: str, since: str, log_format: str) -> list[str]:
        """Return raw ``git log`` lines for ``author`` since ``since``.

        The author is matched literally, so names like ``renovate[bot]`` find
        their own commits.
        """
        result = self.runner.run(
            [
                "log",
                f"--format={log_format}",
                "--date=short",
                f"--since={since}",
                f"--author={author}",
                "--fixed-strings",
            ]
        )
        if not result.ok:
            raise LogError(f"Failed to read commit log for {author}")
        return result.stdout.splitlines()
