"""Turn a branch selection into the checkout and rebase commands to run."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from gitaddons.branches import Branch, remote_prefix, strip_remote_prefix
from gitaddons.git import DEFAULT_REMOTE, CommandRunner
from gitaddons.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_BRANCH_CANDIDATES = ("main", "master")


@dataclass(frozen=True)
class PlainCheckout:
    """Switch to a branch that already exists locally."""

    name: str

    @property
    def local_name(self) -> str:
        return self.name

    @property
    def argv(self) -> list[str]:
        return ["checkout", self.name]

    def __str__(self) -> str:
        return f"git checkout {self.name}"


@dataclass(frozen=True)
class CreateTrackingCheckout:
    """Create a local branch tracking a remote ref and switch to it.

    Checking out the remote ref directly would leave HEAD detached.
    """

    local_name: str
    remote_ref: str

    @property
    def argv(self) -> list[str]:
        return ["checkout", "-b", self.local_name, self.remote_ref]

    def __str__(self) -> str:
        return f"git checkout -b {self.local_name} {self.remote_ref}"


CheckoutCommand = Union[PlainCheckout, CreateTrackingCheckout]


class SkipReason(Enum):
    """Why no rebase follows the switch."""

    UNDETERMINABLE = "could not determine main branch"
    ALREADY_ON_TARGET = "already on target"
    DISABLED = "rebase disabled"


@dataclass(frozen=True)
class RebaseSkip:
    reason: SkipReason
    target: Optional[str] = None


@dataclass(frozen=True)
class RebaseTarget:
    """Rebase ``branch`` onto the remote ref of the upstream default branch."""

    branch: str
    upstream: str
    remote: str = DEFAULT_REMOTE

    @property
    def source(self) -> str:
        return f"{remote_prefix(self.remote)}{self.upstream}"

    @property
    def argv(self) -> list[str]:
        return ["rebase", self.source]

    def __str__(self) -> str:
        return f"git rebase {self.source}"


RebaseOutcome = Union[RebaseTarget, RebaseSkip]


@dataclass(frozen=True)
class ResolvedAction:
    checkout: CheckoutCommand
    rebase: RebaseOutcome


class SwitchResolver:
    """Decide what to run for a branch picked from the catalog."""

    def __init__(self, runner: CommandRunner, remote: str = DEFAULT_REMOTE) -> None:
        self.runner = runner
        self.remote = remote

    def resolve(self, selected: Branch) -> CheckoutCommand:
        """Get the checkout command for ``selected``."""
        local_name = strip_remote_prefix(selected.name, self.remote)
        if selected.is_remote_only:
            return CreateTrackingCheckout(local_name=local_name, remote_ref=selected.name)
        return PlainCheckout(local_name)

    def default_branch(self) -> Optional[str]:
        """Find the upstream default branch.

        Tries, in order: a local ``main``, a local ``master``, then the
        remote's ``HEAD`` symbolic ref. Returns None if none of them works.
        """
        for candidate in DEFAULT_BRANCH_CANDIDATES:
            if self.runner.run(["show-ref", "--verify", "--quiet", f"refs/heads/{candidate}"]).ok:
                return candidate

        head_ref = f"refs/remotes/{self.remote}/HEAD"
        result = self.runner.run(["symbolic-ref", head_ref])
        if result.ok:
            target = result.stdout.strip()
            prefix = f"refs/remotes/{self.remote}/"
            if target.startswith(prefix):
                target = target[len(prefix) :]
            if target:
                return target
        logger.debug("No default branch found via %s", head_ref)
        return None

    def resolve_upstream_target(self, current_branch: str) -> RebaseOutcome:
        """Work out what ``current_branch`` should be rebased onto, if anything."""
        target = self.default_branch()
        if target is None:
            return RebaseSkip(SkipReason.UNDETERMINABLE)
        if current_branch == target:
            return RebaseSkip(SkipReason.ALREADY_ON_TARGET, target=target)
        return RebaseTarget(branch=current_branch, upstream=target, remote=self.remote)

    def plan(self, selected: Branch, rebase: bool = True) -> ResolvedAction:
        """Resolve both the checkout and the rebase that follows it."""
        checkout = self.resolve(selected)
        if not rebase:
            return ResolvedAction(checkout, RebaseSkip(SkipReason.DISABLED))
        return ResolvedAction(checkout, self.resolve_upstream_target(checkout.local_name))
