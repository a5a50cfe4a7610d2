"""Reactive board model."""

from optiban.model.column import (
    board_from_doc,
    clean_column_name,
    column_from_doc,
    columns_to_docs,
    make_column,
    rename_column,
)
from optiban.model.node import ListNode, Node, copy_tree, to_plain
from optiban.model.snapshot import Snapshot
from optiban.model.task import (
    active_tasks,
    append_task,
    find_task_column,
    is_unedited,
    move_task,
    new_task_fields,
    remove_task,
    task_from_doc,
    task_to_doc,
)

__all__ = [
    "ListNode",
    "Node",
    "Snapshot",
    "active_tasks",
    "append_task",
    "board_from_doc",
    "clean_column_name",
    "column_from_doc",
    "columns_to_docs",
    "copy_tree",
    "find_task_column",
    "is_unedited",
    "make_column",
    "move_task",
    "new_task_fields",
    "remove_task",
    "rename_column",
    "task_from_doc",
    "task_to_doc",
    "to_plain",
]
