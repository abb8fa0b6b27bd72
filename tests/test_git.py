"""Tests for repository operations against real git repositories."""

from pathlib import Path
from typing import Sequence

import pytest
from git import Git, Repo

from gitaddons.branches import BranchCatalog
from gitaddons.git import (
    COMMAND_NOT_FOUND,
    BranchListingError,
    CommandResult,
    FetchError,
    GitRepo,
    GitRunner,
    NotARepositoryError,
)
from gitaddons.resolver import PlainCheckout, RebaseTarget, SwitchResolver


def test_not_a_repository(tmp_path: Path) -> None:
    with pytest.raises(NotARepositoryError):
        GitRepo(tmp_path)


def test_missing_path(tmp_path: Path) -> None:
    with pytest.raises(NotARepositoryError):
        GitRepo(tmp_path / "missing")


def test_bare_repository(test_env: tuple[Path, Path]) -> None:
    _, remote_path = test_env
    with pytest.raises(NotARepositoryError, match="bare"):
        GitRepo(remote_path)


def test_opens_from_subdirectory(test_repo: Path) -> None:
    subdir = test_repo / "docs"
    subdir.mkdir()
    assert GitRepo(subdir).path.resolve() == test_repo.resolve()


def test_runner_reports_exit_status(test_repo: Path) -> None:
    runner = GitRunner(test_repo)
    assert runner.run(["rev-parse", "--abbrev-ref", "HEAD"]) == CommandResult(stdout="main", status=0)
    assert not runner.run(["show-ref", "--verify", "--quiet", "refs/heads/nope"]).ok


def test_runner_without_git_executable(test_repo: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(Git, "GIT_PYTHON_GIT_EXECUTABLE", str(test_repo / "no-such-git"))
    result = GitRunner(test_repo).run(["status"])
    assert result.status == COMMAND_NOT_FOUND


def test_list_branches(test_repo: Path) -> None:
    repo = GitRepo(test_repo)
    assert repo.list_local_branches() == ["develop", "* main"]
    assert repo.list_remote_branches() == ["origin/develop", "origin/feature/remote", "origin/main"]


def test_list_branches_ignores_forced_colour(test_repo: Path) -> None:
    with Repo(test_repo).config_writer() as config:
        config.set_value("color", "ui", "always")
    repo = GitRepo(test_repo)
    assert repo.list_local_branches() == ["develop", "* main"]
    assert repo.list_remote_branches() == ["origin/develop", "origin/feature/remote", "origin/main"]
    catalog = BranchCatalog.build(repo.list_local_branches(), repo.list_remote_branches())
    assert catalog.current == "main"
    assert catalog.find("develop").name == "develop"


def test_catalog_from_real_repository(test_repo: Path) -> None:
    repo = GitRepo(test_repo)
    catalog = BranchCatalog.build(repo.list_local_branches(), repo.list_remote_branches())
    assert [branch.display_name for branch in catalog] == ["develop", "feature/remote (remote)"]
    assert catalog.current == "main"


def test_remote_listing_failure_is_not_fatal(test_repo: Path) -> None:
    repo = GitRepo(test_repo)

    class FailingRemoteListing(GitRunner):
        def run(self, argv: Sequence[str]) -> CommandResult:
            if list(argv) == ["branch", "-r", "--no-color"]:
                return CommandResult(stdout="", status=128)
            return super().run(argv)

    repo.runner = FailingRemoteListing(test_repo)
    assert repo.list_remote_branches() == []
    assert repo.list_local_branches() == ["develop", "* main"]


def test_local_listing_failure_is_fatal(test_repo: Path) -> None:
    repo = GitRepo(test_repo)

    class Broken:
        def run(self, argv: Sequence[str]) -> CommandResult:
            return CommandResult(stdout="", status=128)

    repo.runner = Broken()
    with pytest.raises(BranchListingError):
        repo.list_local_branches()


def test_fetch_all(test_env: tuple[Path, Path]) -> None:
    local_path, remote_path = test_env
    Repo(remote_path).git.branch("fetched", "main")
    repo = GitRepo(local_path)
    repo.fetch_all()
    assert "origin/fetched" in repo.list_remote_branches()


def test_fetch_failure(test_env: tuple[Path, Path]) -> None:
    local_path, remote_path = test_env
    Repo(local_path).remote("origin").set_url(str(remote_path / "gone"))
    with pytest.raises(FetchError):
        GitRepo(local_path).fetch_all()


def test_checkout_and_rebase_up_to_date_branch(test_repo: Path) -> None:
    repo = GitRepo(test_repo)
    resolver = SwitchResolver(repo.runner)
    action = resolver.plan(BranchCatalog.build(repo.list_local_branches(), repo.list_remote_branches()).find("develop"))
    assert action.checkout == PlainCheckout("develop")
    assert action.rebase == RebaseTarget(branch="develop", upstream="main")

    repo.checkout(action.checkout)
    repo.rebase(action.rebase)
    assert repo.current_branch_name() == "develop"


def test_status_report_clean_tree(test_repo: Path) -> None:
    assert GitRepo(test_repo).status_report() == ""


def test_status_report_dirty_tree(test_repo: Path) -> None:
    (test_repo / "README.md").write_text("changed\n")
    report = GitRepo(test_repo).status_report()
    assert "README.md" in report


def test_user_name(test_repo: Path) -> None:
    assert GitRepo(test_repo).user_name() == "Test User"


def test_contributors_and_log(test_repo: Path) -> None:
    repo = GitRepo(test_repo)
    assert set(repo.contributors()) == {"Test User"}
    lines = repo.log("Test User", "1 week ago", "%s")
    assert lines == ["Initial commit"]
