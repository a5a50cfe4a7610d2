"""Shared helpers for model tests."""

import pytest

from optiban.model.column import board_from_doc
from optiban.model.node import ListNode
from optiban.model.task import task_from_doc


@pytest.fixture
def make_board():
    """Build a board Node from {column_id: [task ids]} in order."""

    def _make_board(columns=None, board_id="b1"):
        return board_from_doc(
            {
                "id": board_id,
                "name": "Board",
                "owner_id": "alice",
                "columns": [
                    {"id": col_id, "name": col_id.title(), "task_ids": list(ids)}
                    for col_id, ids in (columns or {}).items()
                ],
            }
        )

    return _make_board


@pytest.fixture
def make_tasks():
    """Build a task ListNode from {task_id: column_id}."""

    def _make_tasks(placement):
        tasks = ListNode()
        for task_id, column_id in placement.items():
            tasks[task_id] = task_from_doc({"id": task_id, "column_id": column_id, "title": f"Task {task_id}"})
        return tasks

    return _make_tasks
