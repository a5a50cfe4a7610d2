"""CLI argument parser and dispatch for optiban."""

import argparse

from optiban.cli.board import board_summary
from optiban.cli.column import column_add, column_list, column_rename
from optiban.cli.init import init_board
from optiban.cli.task import task_add, task_archive, task_done, task_list, task_move, task_update
from optiban.constants import PRIORITIES


def build_parser() -> argparse.ArgumentParser:
    """Build the full CLI argument parser."""
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--repo", default=".", help="Path to git repository (default: .)")
    common.add_argument("--board", help="Board ID (default: optiban.board from git config)")
    common.add_argument("--json", action="store_true", help="Machine-readable JSON output")
    common.add_argument("-v", "--verbose", action="store_true", help="Log store activity to stderr")

    parser = argparse.ArgumentParser(
        prog="optiban",
        description="Kanban board with optimistic updates over a git document store",
        parents=[common],
    )

    nouns = parser.add_subparsers(dest="noun")

    # --- init ---
    init_p = nouns.add_parser("init", help="Create a board", parents=[common])
    init_p.add_argument("name", help="Board name")
    init_p.set_defaults(func=init_board)

    # --- board ---
    board_p = nouns.add_parser("board", help="Board operations", parents=[common])
    board_verbs = board_p.add_subparsers(dest="verb")

    board_summary_p = board_verbs.add_parser("summary", help="Show board summary", parents=[common])
    board_summary_p.set_defaults(func=board_summary)

    # board with no verb = summary
    board_p.set_defaults(func=board_summary)

    # --- task ---
    task_p = nouns.add_parser("task", help="Task operations", parents=[common])
    task_verbs = task_p.add_subparsers(dest="verb")

    task_list_p = task_verbs.add_parser("list", help="List active tasks", parents=[common])
    task_list_p.add_argument("--column", dest="column", help="Filter by column ID")
    task_list_p.set_defaults(func=task_list)

    task_add_p = task_verbs.add_parser("add", help="Create a task", parents=[common])
    task_add_p.add_argument("title", help="Task title")
    task_add_p.add_argument("--description", default="", help="Task description")
    task_add_p.add_argument("--priority", choices=PRIORITIES, help="Task priority")
    task_add_p.add_argument("--column", dest="column", help="Target column ID (default: first column)")
    task_add_p.set_defaults(func=task_add)

    task_update_p = task_verbs.add_parser("update", help="Edit a task", parents=[common])
    task_update_p.add_argument("id", help="Task ID")
    task_update_p.add_argument("--title", help="New title")
    task_update_p.add_argument("--description", help="New description")
    task_update_p.add_argument("--priority", choices=PRIORITIES, help="New priority")
    task_update_p.set_defaults(func=task_update)

    task_move_p = task_verbs.add_parser("move", help="Move a task", parents=[common])
    task_move_p.add_argument("id", help="Task ID")
    task_move_p.add_argument("--column", dest="column", required=True, help="Target column ID")
    task_move_p.add_argument("--before", help="Insert before this task ID (default: end of column)")
    task_move_p.set_defaults(func=task_move)

    task_archive_p = task_verbs.add_parser("archive", help="Archive a task", parents=[common])
    task_archive_p.add_argument("id", help="Task ID")
    task_archive_p.set_defaults(func=task_archive)

    task_done_p = task_verbs.add_parser("done", help="Mark a task complete", parents=[common])
    task_done_p.add_argument("id", help="Task ID")
    task_done_p.add_argument("--undo", action="store_true", help="Mark incomplete instead")
    task_done_p.set_defaults(func=task_done)

    # task with no verb = list
    task_p.set_defaults(func=task_list, column=None)

    # --- column ---
    col_p = nouns.add_parser("column", help="Column operations", parents=[common])
    col_verbs = col_p.add_subparsers(dest="verb")

    col_list_p = col_verbs.add_parser("list", help="List columns", parents=[common])
    col_list_p.set_defaults(func=column_list)

    col_add_p = col_verbs.add_parser("add", help="Create a column", parents=[common])
    col_add_p.add_argument("name", help="Column name")
    col_add_p.set_defaults(func=column_add)

    col_rename_p = col_verbs.add_parser("rename", help="Rename a column", parents=[common])
    col_rename_p.add_argument("id", help="Column ID")
    col_rename_p.add_argument("new_name", help="New column name")
    col_rename_p.set_defaults(func=column_rename)

    # column with no verb = list
    col_p.set_defaults(func=column_list)

    return parser
