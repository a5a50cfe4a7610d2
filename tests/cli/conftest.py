"""Shared fixtures for CLI tests."""

import asyncio
from argparse import Namespace

import pytest
from git import Repo

from optiban.cli.init import init_board
from optiban.cli.task import task_add
from optiban.store.git import GitStore


@pytest.fixture
def empty_repo(tmp_path):
    """Create an empty git repo with a repository-level identity."""
    repo = Repo.init(tmp_path)
    writer = repo.config_writer("repository")
    writer.set_value("user", "name", "Alice")
    writer.set_value("user", "email", "alice@example.com")
    writer.release()
    (tmp_path / ".gitkeep").write_text("")
    repo.index.add([".gitkeep"])
    repo.index.commit("Initial commit")
    return tmp_path


@pytest.fixture
def initialized_repo(empty_repo, capsys):
    """Create a repo with board 1 (default columns) and two tasks in To Do."""
    assert init_board(Namespace(repo=str(empty_repo), json=True, name="Project")) == 0
    for title in ("First task", "Second task"):
        args = Namespace(
            repo=str(empty_repo),
            json=True,
            column=None,
            title=title,
            description=f"{title} description.",
            priority=None,
        )
        assert task_add(args) == 0
    capsys.readouterr()
    return empty_repo


@pytest.fixture
def read_board():
    """Read board 1's document straight from the store."""

    def read(repo_path, board_id="1"):
        return asyncio.run(GitStore(repo_path).fetch_board(board_id))

    return read


@pytest.fixture
def read_task():
    """Read a task document straight from the store."""

    def read(repo_path, task_id):
        docs = asyncio.run(GitStore(repo_path).fetch_tasks_for_board("1"))
        return next((doc for doc in docs if doc["id"] == task_id), None)

    return read
