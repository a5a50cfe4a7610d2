"""Shared helpers for CLI command handlers."""

import asyncio
import json
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Awaitable, Callable

from optiban.errors import BoardError, NotFound
from optiban.git import Identity, is_git_repo, read_git_config, read_identity
from optiban.model.node import Node
from optiban.notify import Notification
from optiban.session import BoardSession
from optiban.store.git import GitStore

Intent = Callable[[BoardSession], Awaitable[tuple[dict | list, str]]]


@dataclass
class Context:
    """Everything a command needs to open a session."""

    repo_path: Path
    store: GitStore
    identity: Identity
    board_id: str


def open_context(args, need_board: bool = True) -> Context:
    """Resolve repo, config, identity and board. Exit 1 if any is missing."""
    repo_path = Path(args.repo).resolve()
    if not is_git_repo(repo_path):
        error(f"{repo_path} is not a git repository.", args.json)
    config = read_git_config(repo_path)
    identity = read_identity(config)
    if identity is None:
        error("No user configured. Set user.email or optiban.user in git config.", args.json)
    board_id = getattr(args, "board", None) or config["optiban"]["board"]
    if need_board and not board_id:
        error("No board selected. Run 'optiban init' or pass --board.", args.json)
    store = GitStore(repo_path, branch=config["optiban"]["branch"])
    return Context(repo_path=repo_path, store=store, identity=identity, board_id=board_id)


def run_intent(args, intent: Intent) -> int:
    """Load the board into a session, run one intent, report the outcome."""
    ctx = open_context(args)
    try:
        return asyncio.run(_run(ctx, args, intent))
    except BoardError as exc:
        error(str(exc), args.json)


async def _run(ctx: Context, args, intent: Intent) -> int:
    notes: list[Notification] = []
    session = BoardSession(ctx.store, ctx.identity.id, notify=notes.append)
    try:
        await session.select_board(ctx.board_id)
        data, text = await intent(session)
    finally:
        await session.drain()
    if not args.json:
        print_notes(notes)
    output_result(data, text, args.json)
    return 0


def print_notes(notes: list[Notification]) -> None:
    """Echo notifications to stderr."""
    for note in notes:
        prefix = "warning: " if note.error else ""
        print(f"{prefix}{note.title}: {note.message}", file=sys.stderr)


def find_task(session: BoardSession, task_id: str) -> Node:
    """Lookup an active task. Raises NotFound if missing or archived."""
    task = session.tasks[task_id]
    if task is None or task.is_archived:
        raise NotFound(f"Task {task_id} does not exist.")
    return task


def column_name(session: BoardSession, column_id: str | None) -> str:
    col = session.board.columns[column_id] if column_id else None
    return col.name if col is not None else ""


def task_summary(session: BoardSession, task: Node) -> dict:
    """Build a JSON-friendly summary of a task."""
    creator = session.profiles.get(task.creator_id) if task.creator_id else None
    return {
        "id": task.id,
        "title": task.title,
        "priority": task.priority,
        "completed": bool(task.is_completed),
        "column": {"id": task.column_id, "name": column_name(session, task.column_id)},
        "creator": (creator.display_name or creator.id) if creator else task.creator_id,
    }


def format_task_line(t: dict, indent: str = "") -> str:
    done = "x" if t["completed"] else " "
    return f"{indent}{t['id']:>4}  [{done}] {t['title']}  ({t['priority']})"


def output_json(data: dict | list) -> None:
    """Write JSON to stdout."""
    print(json.dumps(data, indent=2))


def output_result(data: dict | list, text: str, json_mode: bool) -> None:
    """Output result as JSON or plain text."""
    if json_mode:
        output_json(data)
    elif text:
        print(text)


def error(message: str, json_mode: bool) -> None:
    """Print error to stderr and exit 1."""
    if json_mode:
        print(json.dumps({"error": message}), file=sys.stderr)
    else:
        print(f"error: {message}", file=sys.stderr)
    sys.exit(1)
