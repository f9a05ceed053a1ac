"""Shared test fixtures for change-tree."""

from pathlib import Path

import pytest
from click.testing import CliRunner
from git import Actor, Repo

from change_tree.models import ChangeFileRecord, ChangeStatus

AUTHOR = Actor("Test User", "test@example.com")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep CT_* variables from the developer's shell out of the tests."""
    for name in ("CT_SEPARATOR", "CT_KEEP_ROOT_CHANGES", "CT_INCLUDE_UNTRACKED"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def cli_runner():
    """Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def scenario_a() -> list[ChangeFileRecord]:
    """Two changes in src/a and one in src/b."""
    return [
        ChangeFileRecord("src/a/file1.txt", ChangeStatus.MODIFIED),
        ChangeFileRecord("src/a/file2.txt", ChangeStatus.ADDED),
        ChangeFileRecord("src/b/file3.txt", ChangeStatus.DELETED),
    ]


def write_file(root: Path, relative: str, content: str) -> None:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)


@pytest.fixture
def git_repo(tmp_path: Path) -> Path:
    """A committed git repository with no pending changes.

    Structure:
        repo/
        ├── README.md
        └── src/
            ├── a/
            │   └── file1.txt
            └── b/
                └── file3.txt
    """
    root = tmp_path / "repo"
    root.mkdir()
    repo = Repo.init(root)

    files = ["README.md", "src/a/file1.txt", "src/b/file3.txt"]
    for relative in files:
        write_file(root, relative, f"# {relative}\n")

    repo.index.add(files)
    repo.index.commit("Initial commit", author=AUTHOR, committer=AUTHOR)
    repo.close()
    return root


@pytest.fixture
def dirty_repo(git_repo: Path) -> Path:
    """The committed repository with a modified, an untracked and a deleted file."""
    write_file(git_repo, "src/a/file1.txt", "# changed\n")
    write_file(git_repo, "src/a/file2.txt", "# new\n")
    (git_repo / "src" / "b" / "file3.txt").unlink()
    return git_repo
