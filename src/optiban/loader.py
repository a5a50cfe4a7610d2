"""Load a board, its tasks and their creators' profiles from a store."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from optiban.errors import AccessDenied, LoadFailure, NotFound, StoreError
from optiban.model.column import board_from_doc
from optiban.model.node import ListNode, Node
from optiban.model.task import task_from_doc
from optiban.profiles import ProfileResolver
from optiban.store.protocol import BoardStore

logger = logging.getLogger(__name__)


@dataclass
class LoadedBoard:
    """Detached board and task trees, ready to be installed in a session."""

    board: Node
    tasks: ListNode


async def load_board(
    store: BoardStore,
    board_id: str,
    user_id: str,
    profiles: ProfileResolver,
) -> LoadedBoard:
    """Fetch a board owned by user_id together with all of its tasks.

    Raises NotFound if the board does not exist and AccessDenied if it
    belongs to someone else; tasks are not fetched in either case.
    Creator profiles missing from the cache are fetched in one batch.
    """
    try:
        doc = await store.fetch_board(board_id)
    except StoreError as exc:
        raise LoadFailure(f"Could not load board {board_id}: {exc}") from exc
    if doc is None:
        raise NotFound(f"Board {board_id} does not exist.")
    if doc.get("owner_id") != user_id:
        raise AccessDenied(f"You do not have permission to view board {board_id}.")

    try:
        task_docs = await store.fetch_tasks_for_board(board_id)
    except StoreError as exc:
        raise LoadFailure(f"Could not load tasks of board {board_id}: {exc}") from exc

    tasks = ListNode()
    for task_doc in task_docs:
        tasks[task_doc["id"]] = task_from_doc(task_doc)

    await profiles.load_batch(task.creator_id for task in tasks)
    logger.info("loaded board %s with %d tasks", board_id, len(tasks))
    return LoadedBoard(board=board_from_doc(doc), tasks=tasks)
