"""Interface of the document store a board session persists to."""

from __future__ import annotations

from typing import Iterable, Protocol, runtime_checkable


@runtime_checkable
class BoardStore(Protocol):
    """Async persistence for boards, tasks and user profiles.

    Documents are plain dicts with snake_case keys. Every method may
    raise StoreError; writes and deletes addressing a missing record
    raise StoreNotFound.
    """

    async def fetch_board(self, board_id: str) -> dict | None:
        """Return the board document, or None if there is none."""
        ...

    async def write_board(self, board_id: str, fields: dict) -> None:
        """Merge fields (usually just "columns") into the board document."""
        ...

    async def fetch_tasks_for_board(self, board_id: str) -> list[dict]:
        """Return every task document of a board, archived ones included."""
        ...

    async def create_task(self, fields: dict) -> dict:
        """Create a task. The store assigns id, timestamps and is_completed=False."""
        ...

    async def write_task(self, task_id: str, fields: dict) -> None:
        """Merge fields into a task document."""
        ...

    async def delete_task(self, task_id: str) -> None:
        ...

    async def fetch_users_by_ids(self, user_ids: Iterable[str]) -> list[dict]:
        """Return the profiles found. Unknown ids are omitted, not errors."""
        ...
