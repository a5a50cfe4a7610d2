"""Shared fixtures: a store test double and a seeded board."""

import asyncio

import pytest
import pytest_asyncio

from optiban.errors import StoreError
from optiban.session import BoardSession
from optiban.store.memory import MemoryStore


class FlakyStore(MemoryStore):
    """MemoryStore that records calls and can fail or pause named operations.

    ``fail`` holds operation names that raise StoreError. ``hold(op)``
    makes the next call of op wait on the returned asyncio.Event, which
    keeps it in flight until the test sets the event. The failure check
    happens after the wait.
    """

    def __init__(self):
        super().__init__()
        self.fail: set[str] = set()
        self.gates: dict[str, list[asyncio.Event]] = {}
        self.calls: list[tuple] = []

    def hold(self, op: str) -> asyncio.Event:
        gate = asyncio.Event()
        self.gates.setdefault(op, []).append(gate)
        return gate

    def count(self, op: str) -> int:
        return sum(1 for call in self.calls if call[0] == op)

    async def _enter(self, op, *args):
        self.calls.append((op, *args))
        gates = self.gates.get(op)
        if gates:
            await gates.pop(0).wait()
        if op in self.fail:
            raise StoreError(f"{op} failed")

    async def fetch_board(self, board_id):
        await self._enter("fetch_board", board_id)
        return await super().fetch_board(board_id)

    async def write_board(self, board_id, fields):
        await self._enter("write_board", board_id, fields)
        await super().write_board(board_id, fields)

    async def fetch_tasks_for_board(self, board_id):
        await self._enter("fetch_tasks_for_board", board_id)
        return await super().fetch_tasks_for_board(board_id)

    async def create_task(self, fields):
        await self._enter("create_task", fields)
        return await super().create_task(fields)

    async def write_task(self, task_id, fields):
        await self._enter("write_task", task_id, fields)
        await super().write_task(task_id, fields)

    async def delete_task(self, task_id):
        await self._enter("delete_task", task_id)
        await super().delete_task(task_id)

    async def fetch_users_by_ids(self, user_ids):
        user_ids = set(user_ids)
        await self._enter("fetch_users_by_ids", user_ids)
        return await super().fetch_users_by_ids(user_ids)


def _task(task_id, column_id, title, creator_id="alice", **extra):
    doc = {
        "id": task_id,
        "board_id": "b1",
        "column_id": column_id,
        "title": title,
        "description": f"{title} description",
        "priority": "medium",
        "creator_id": creator_id,
        "is_archived": False,
        "created_at": "2024-01-01T00:00:00+00:00",
        "updated_at": "2024-01-01T00:00:00+00:00",
        "subtasks": [],
        "comments": [],
    }
    doc.update(extra)
    return doc


@pytest.fixture
def store():
    """A store holding board b1 (owned by alice) with three columns and three tasks.

    todo: [1, 2], doing: [3], done: []. Task 1 has no is_completed field.
    Task 3 was created by bob, whose profile exists; carol has no profile.
    """
    s = FlakyStore()
    s.boards["b1"] = {
        "id": "b1",
        "name": "Project",
        "owner_id": "alice",
        "columns": [
            {"id": "todo", "name": "To Do", "task_ids": ["1", "2"]},
            {"id": "doing", "name": "Doing", "task_ids": ["3"]},
            {"id": "done", "name": "Done", "task_ids": []},
        ],
    }
    s.boards["b2"] = {"id": "b2", "name": "Secret", "owner_id": "mallory", "columns": []}
    s.tasks["1"] = _task("1", "todo", "Write docs")
    s.tasks["2"] = _task("2", "todo", "Fix bug", is_completed=False)
    s.tasks["3"] = _task("3", "doing", "Review", creator_id="bob", is_completed=True)
    s.users["alice"] = {"id": "alice", "display_name": "Alice", "email": "alice@example.com"}
    s.users["bob"] = {"id": "bob", "display_name": "Bob", "email": "bob@example.com"}
    return s


@pytest.fixture
def notes():
    """Notifications collected from a session."""
    return []


@pytest_asyncio.fixture
async def session(store, notes):
    """A session for alice with board b1 loaded and the store call log reset."""
    s = BoardSession(store, "alice", notify=notes.append)
    await s.select_board("b1")
    store.calls.clear()
    return s


@pytest.fixture
def task_doc():
    """Factory for task documents on board b1."""
    return _task
