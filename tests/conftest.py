"""Test configuration and fixtures."""

from pathlib import Path
from typing import Generator

import pytest
from git import Repo

from tests.helpers import AUTHOR, FakeRunner, commit_file


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def test_env(tmp_path: Path) -> Generator[tuple[Path, Path], None, None]:
    """Create a test environment with local and remote repositories.

    The local repository is on ``main`` and has:
    - ``develop``: local branch pushed to origin
    - ``feature/remote``: exists only on origin

    Returns:
        Tuple of (local_repo_path, remote_repo_path)
    """
    remote_path = tmp_path / "remote"
    local_path = tmp_path / "local"
    remote_path.mkdir()
    local_path.mkdir()

    Repo.init(remote_path, bare=True, initial_branch="main")
    local_repo = Repo.init(local_path, initial_branch="main")

    with local_repo.config_writer() as config:
        config.set_value("user", "name", AUTHOR.name)
        config.set_value("user", "email", AUTHOR.email)

    commit_file(local_repo, local_path, "README.md", "# Test Repository\n", "Initial commit")
    main_branch = local_repo.heads.main

    origin = local_repo.create_remote("origin", url=str(remote_path))
    origin.push("main")
    main_branch.set_tracking_branch(origin.refs.main)

    develop = local_repo.create_head("develop")
    origin.push("develop")
    develop.set_tracking_branch(origin.refs.develop)

    # Remote-only branch: push it, then drop the local head
    feature = local_repo.create_head("feature/remote")
    feature.checkout()
    commit_file(local_repo, local_path, "feature_remote.txt", "Remote branch content\n", "Add remote branch")
    origin.push("feature/remote")
    main_branch.checkout()
    local_repo.delete_head("feature/remote", force=True)

    yield local_path, remote_path


@pytest.fixture
def test_repo(test_env: tuple[Path, Path]) -> Path:
    local_path, _ = test_env
    return local_path
