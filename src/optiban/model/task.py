"""Task operations for optiban boards."""

from datetime import datetime, timezone

from optiban.constants import DEFAULT_PRIORITY, DEFAULT_TASK_TITLE
from optiban.model.node import ListNode, Node, to_plain

TASK_DEFAULTS = {
    "title": "",
    "description": "",
    "priority": DEFAULT_PRIORITY,
    "is_completed": False,
    "is_archived": False,
    "archived_at": None,
    "subtasks": [],
    "comments": [],
}


def now_iso() -> str:
    """Current UTC time as an ISO 8601 string."""
    return datetime.now(timezone.utc).isoformat()


def task_from_doc(doc: dict) -> Node:
    """Build a task Node from a stored document.

    A missing completion flag is normalised to False.
    """
    data = {**TASK_DEFAULTS, **doc}
    data["is_completed"] = bool(data.get("is_completed"))
    data["is_archived"] = bool(data.get("is_archived"))
    return Node(**data)


def task_to_doc(task: Node) -> dict:
    """Full plain record of a task, including unset nullable fields."""
    return {**TASK_DEFAULTS, **to_plain(task)}


def new_task_fields(board_id: str, column_id: str, creator_id: str) -> dict:
    """Fields for a freshly added task, before the store assigns identity."""
    return {
        "title": DEFAULT_TASK_TITLE,
        "description": "",
        "priority": DEFAULT_PRIORITY,
        "subtasks": [],
        "comments": [],
        "board_id": board_id,
        "column_id": column_id,
        "creator_id": creator_id,
        "is_archived": False,
    }


def is_unedited(task: Node) -> bool:
    """True if a task still has the default title and a blank description."""
    return task.title == DEFAULT_TASK_TITLE and not (task.description or "").strip()


def active_tasks(tasks: ListNode) -> list[Node]:
    """Tasks that are not archived, in collection order."""
    return [task for task in tasks if not task.is_archived]


def find_task_column(board: Node, task_id: str) -> Node | None:
    """Find the column listing a task."""
    for col in board.columns:
        if task_id in (col.task_ids or ()):
            return col
    return None


def append_task(column: Node, task_id: str) -> None:
    """Append a task id to the end of a column."""
    column.task_ids = (*(column.task_ids or ()), task_id)


def remove_task(board: Node, task_id: str) -> bool:
    """Remove a task id from every column. Returns True if any changed."""
    changed = False
    for col in board.columns:
        ids = col.task_ids or ()
        if task_id in ids:
            col.task_ids = tuple(t for t in ids if t != task_id)
            changed = True
    return changed


def move_task(
    board: Node,
    task_id: str,
    source_id: str,
    dest_id: str,
    before_id: str | None = None,
) -> None:
    """Move a task id from one column to a position in another.

    The task is inserted before before_id when that id is in the
    destination, otherwise appended. The id is taken out of every other
    column too, so a stale source_id never leaves a duplicate behind.
    Same-column reorders are a single assignment so watchers never see
    the task missing. Raises KeyError without mutating anything if
    either column is unknown.
    """
    source = board.columns[source_id]
    dest = board.columns[dest_id]
    if source is None:
        raise KeyError(source_id)
    if dest is None:
        raise KeyError(dest_id)

    for col in board.columns:
        if col is not dest and task_id in (col.task_ids or ()):
            col.task_ids = tuple(t for t in col.task_ids if t != task_id)
    ids = [t for t in dest.task_ids or () if t != task_id]

    index = ids.index(before_id) if before_id is not None and before_id in ids else len(ids)
    ids.insert(index, task_id)
    dest.task_ids = tuple(ids)
