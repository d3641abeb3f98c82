"""Test fixtures for bashbrew-source."""

from collections.abc import Callable
from pathlib import Path

import git
import pytest

ALPINE_LIBRARY = "3.18: https://github.com/alpinelinux/docker-alpine@abc123 .\n"


def commit_files(repo: git.Repo, files: dict[str, str], message: str = "Update") -> str:
    """Write the files into the repository and commit them, returning the sha."""
    root = Path(repo.working_tree_dir or "")
    for name, content in files.items():
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
    repo.git.add(".")
    repo.git.commit(m=message)
    return repo.head.commit.hexsha


def init_repo(path: Path) -> git.Repo:
    """Create a local git repository for testing."""
    path.mkdir(parents=True)
    repo = git.Repo.init(path)
    repo.config_writer().set_value("user", "name", "myusername").release()
    repo.config_writer().set_value("user", "email", "myemail").release()
    return repo


@pytest.fixture(name="upstream_repo")
def upstream_repo_fixture(tmp_path: Path) -> git.Repo:
    """Create an upstream library repository with a single image."""
    repo = init_repo(tmp_path / "upstream")
    commit_files(repo, {"library/alpine": ALPINE_LIBRARY}, "Initial commit")
    return repo


@pytest.fixture(name="upstream_url")
def upstream_url_fixture(upstream_repo: git.Repo) -> str:
    """URL of the upstream library repository."""
    return f"file://{upstream_repo.working_tree_dir}"


@pytest.fixture(name="workspace")
def workspace_fixture(tmp_path: Path) -> Path:
    """Local workspace for the library mirror."""
    return tmp_path / "workspace"


class FakeClock:
    """Clock that only moves when told to."""

    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(name="clock")
def clock_fixture() -> FakeClock:
    """Fake clock used to drive the mirror pull delay."""
    return FakeClock()


@pytest.fixture(name="commit_upstream")
def commit_upstream_fixture(upstream_repo: git.Repo) -> Callable[[dict[str, str]], str]:
    """Commit files to the upstream library repository."""

    def commit(files: dict[str, str]) -> str:
        return commit_files(upstream_repo, files)

    return commit


@pytest.fixture(name="project_repo")
def project_repo_fixture(tmp_path: Path) -> git.Repo:
    """Create a project repository holding Dockerfiles."""
    repo = init_repo(tmp_path / "project")
    commit_files(
        repo,
        {
            "docker/8.0/Dockerfile": "FROM debian:bookworm-slim\nRUN echo 8.0\n",
            "docker/9.0/Dockerfile": "FROM --platform=linux/amd64 library/debian:trixie AS base\n",
        },
        "Initial commit",
    )
    return repo


@pytest.fixture(name="commit_project")
def commit_project_fixture(project_repo: git.Repo) -> Callable[[dict[str, str]], str]:
    """Commit files to the project repository."""

    def commit(files: dict[str, str]) -> str:
        return commit_files(project_repo, files)

    return commit
