"""In-process document store."""

from __future__ import annotations

import copy
from typing import Iterable

from optiban.errors import StoreNotFound
from optiban.ids import max_id, next_id
from optiban.model.task import now_iso


class MemoryStore:
    """BoardStore backed by dicts.

    Documents are deep-copied on the way in and out, so callers can
    never mutate stored state by accident.
    """

    def __init__(self) -> None:
        self.boards: dict[str, dict] = {}
        self.tasks: dict[str, dict] = {}
        self.users: dict[str, dict] = {}

    async def create_board(self, fields: dict) -> dict:
        board_id = fields.get("id") or next_id(max_id(list(self.boards)))
        doc = {"columns": [], **copy.deepcopy(fields), "id": board_id}
        self.boards[board_id] = doc
        return copy.deepcopy(doc)

    async def fetch_board(self, board_id: str) -> dict | None:
        doc = self.boards.get(board_id)
        return copy.deepcopy(doc) if doc is not None else None

    async def write_board(self, board_id: str, fields: dict) -> None:
        if board_id not in self.boards:
            raise StoreNotFound(f"board {board_id} not found")
        self.boards[board_id].update(copy.deepcopy(fields))

    async def fetch_tasks_for_board(self, board_id: str) -> list[dict]:
        return [copy.deepcopy(doc) for doc in self.tasks.values() if doc.get("board_id") == board_id]

    async def create_task(self, fields: dict) -> dict:
        task_id = next_id(max_id(list(self.tasks)))
        stamp = now_iso()
        doc = {
            **copy.deepcopy(fields),
            "id": task_id,
            "is_completed": False,
            "created_at": stamp,
            "updated_at": stamp,
        }
        self.tasks[task_id] = doc
        return copy.deepcopy(doc)

    async def write_task(self, task_id: str, fields: dict) -> None:
        if task_id not in self.tasks:
            raise StoreNotFound(f"task {task_id} not found")
        fields = {k: v for k, v in copy.deepcopy(fields).items() if k != "id"}
        fields.setdefault("updated_at", now_iso())
        self.tasks[task_id].update(fields)

    async def delete_task(self, task_id: str) -> None:
        if self.tasks.pop(task_id, None) is None:
            raise StoreNotFound(f"task {task_id} not found")

    async def fetch_users_by_ids(self, user_ids: Iterable[str]) -> list[dict]:
        return [copy.deepcopy(self.users[uid]) for uid in user_ids if uid in self.users]

    async def write_user(self, profile: dict) -> None:
        self.users[profile["id"]] = copy.deepcopy(profile)
