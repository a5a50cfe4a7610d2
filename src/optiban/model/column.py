"""Column operations for optiban boards."""

from optiban.ids import new_column_id
from optiban.model.node import ListNode, Node


def column_from_doc(doc: dict) -> Node:
    """Build a column Node from a stored column document."""
    return Node(id=doc["id"], name=doc.get("name", ""), task_ids=tuple(doc.get("task_ids") or ()))


def column_to_doc(col: Node) -> dict:
    return {"id": col.id, "name": col.name, "task_ids": list(col.task_ids or ())}


def columns_to_docs(columns: ListNode) -> list[dict]:
    """Serialize the column structure in display order."""
    return [column_to_doc(col) for col in columns]


def board_from_doc(doc: dict) -> Node:
    """Build a board Node (with its columns ListNode) from a board document."""
    columns = ListNode()
    for col_doc in doc.get("columns") or []:
        columns[col_doc["id"]] = column_from_doc(col_doc)
    return Node(
        id=doc["id"],
        name=doc.get("name", ""),
        owner_id=doc.get("owner_id"),
        columns=columns,
    )


def clean_column_name(name: str) -> str | None:
    """Trimmed column name, or None if nothing is left."""
    name = (name or "").strip()
    return name or None


def make_column(board: Node, name: str) -> Node:
    """Build a new empty column with an id unique within the board.

    The column is not attached to the board.
    """
    return Node(id=new_column_id(set(board.columns.keys())), name=name, task_ids=())


def rename_column(board: Node, column_id: str, name: str) -> None:
    """Rename a column in place. KeyError if the column is unknown."""
    col = board.columns[column_id]
    if col is None:
        raise KeyError(column_id)
    col.name = name
