"""Board session: optimistic local state reconciled with a document store.

Every mutating intent follows the same shape:

1. validate (board loaded, user known, referenced ids exist)
2. capture snapshots, synchronously, before the first ``await``
3. mutate the local tree so watchers fire immediately
4. write to the store
5. on failure restore the snapshots (or reload the board), notify,
   and raise a typed BoardError

Operations may overlap on the event loop. Rollback assigns the captured
value back, so a failed operation can overwrite the effect of another
operation that completed while it was in flight (last writer wins).
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable

from optiban.errors import (
    AccessDenied,
    BoardError,
    LoadFailure,
    NotFound,
    StoreError,
    TransientWriteFailure,
    ValidationFailure,
)
from optiban.loader import load_board
from optiban.model.column import clean_column_name, column_to_doc, columns_to_docs, make_column, rename_column
from optiban.model.node import ListNode, Node
from optiban.model.snapshot import Snapshot
from optiban.model.task import (
    active_tasks,
    append_task,
    move_task,
    new_task_fields,
    now_iso,
    remove_task,
    task_from_doc,
    task_to_doc,
)
from optiban.notify import Notification, Sink, log_sink
from optiban.profiles import ProfileResolver
from optiban.provisional import CloseOutcome, ProvisionalTracker
from optiban.store.protocol import BoardStore

logger = logging.getLogger(__name__)

_LOAD_TITLES = {
    AccessDenied: "Access Denied",
    NotFound: "Board Not Found",
    LoadFailure: "Error Loading Board",
}


class BoardSession:
    """Local projection of one selected board, owned by a single user.

    Observers watch the ``state`` tree: ``state.watch("board", cb)``
    and ``state.watch("tasks", cb)`` fire for any change below those
    keys (changes bubble), ``state.watch("detail", cb)`` for the detail
    surface. ``profiles.watch(cb)`` reports resolved profiles.
    """

    def __init__(self, store: BoardStore, user_id: str | None, notify: Sink = log_sink) -> None:
        self.store = store
        self.user_id = user_id
        self.profiles = ProfileResolver(store)
        self.provisional = ProvisionalTracker()
        self.state = Node(tasks=ListNode(), detail={})
        self._notify = notify
        self._generation = 0
        self._load_seq = 0
        self._background: set[asyncio.Future] = set()

    # --- accessors ---

    @property
    def board(self) -> Node | None:
        return self.state.board

    @property
    def tasks(self) -> ListNode:
        """Full local task collection, archived tasks included."""
        return self.state.tasks

    @property
    def detail_open(self) -> bool:
        return bool(self.state.detail.open)

    @property
    def selected_task(self) -> Node | None:
        task_id = self.state.detail.task_id
        return self.tasks[task_id] if task_id is not None else None

    @property
    def loading(self) -> bool:
        return bool(self.state.loading)

    def active_tasks(self) -> list[Node]:
        """Tasks that are not archived; what every view renders."""
        return active_tasks(self.tasks)

    def column_tasks(self, column_id: str) -> list[Node]:
        """Active tasks of a column in display order."""
        col = self.board.columns[column_id] if self.board is not None else None
        if col is None:
            return []
        tasks = (self.tasks[task_id] for task_id in col.task_ids or ())
        return [task for task in tasks if task is not None and not task.is_archived]

    # --- plumbing ---

    def _fail(self, exc: BoardError, title: str) -> BoardError:
        """Notify about a failure and hand the exception back for raising."""
        logger.warning("%s: %s", title, exc)
        self._notify(Notification(title, str(exc), error=True))
        return exc

    def _require(self, title: str) -> Node:
        if self.board is None or self.user_id is None:
            raise self._fail(ValidationFailure("No board or user selected."), title)
        return self.board

    def _require_task(self, task_id: str, title: str) -> Node:
        task = self.tasks[task_id]
        if task is None or task.is_archived:
            raise self._fail(NotFound(f"Task {task_id} does not exist."), title)
        return task

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation

    def _spawn(self, aw: Awaitable[Any], title: str, message: str) -> asyncio.Future:
        """Run a write in the background; failures are notified, never raised."""
        fut = asyncio.ensure_future(aw)
        self._background.add(fut)

        def done(f: asyncio.Future) -> None:
            self._background.discard(f)
            if f.cancelled():
                return
            exc = f.exception()
            if exc is None:
                return
            if isinstance(exc, StoreError):
                logger.warning("background write failed: %s", exc)
            else:
                logger.error("background write crashed", exc_info=exc)
            self._notify(Notification(title, message, error=True))

        fut.add_done_callback(done)
        return fut

    async def drain(self) -> None:
        """Wait for every detached background write to finish."""
        while self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)

    def _show(self, task_id: str) -> None:
        self.state.detail.task_id = task_id
        self.state.detail.open = True

    def _hide(self) -> None:
        self.state.detail.open = None
        self.state.detail.task_id = None

    def _clear(self) -> None:
        self.state.loading = None
        self.state.board = None
        self.state.tasks = ListNode()
        self._hide()
        self.profiles.reset()
        self.provisional.reset()

    # --- loading ---

    async def select_board(self, board_id: str | None) -> None:
        """Switch the session to another board, or to none.

        All local state is torn down first. A load that is overtaken by
        a newer selection is dropped silently.
        """
        self._generation += 1
        self._clear()
        if board_id is None:
            return
        if self.user_id is None:
            raise self._fail(ValidationFailure("Cannot load a board without a user."), "Error Loading Board")
        await self._load(board_id)

    async def reload(self) -> None:
        """Refetch the current board and replace local state with it."""
        if self.board is None:
            return
        await self._load(self.board.id)

    async def _load(self, board_id: str) -> None:
        generation = self._generation
        self._load_seq += 1
        seq = self._load_seq
        self.state.loading = True
        try:
            loaded = await load_board(self.store, board_id, self.user_id, self.profiles)
        except BoardError as exc:
            if not self._is_current(generation) or seq != self._load_seq:
                logger.info("ignoring failure of superseded load of %s: %s", board_id, exc)
                return
            self._clear()
            raise self._fail(exc, _LOAD_TITLES.get(type(exc), "Error Loading Board"))
        if not self._is_current(generation) or seq != self._load_seq:
            logger.info("dropping superseded load of %s", board_id)
            return
        self.state.loading = None

        if self.board is not None and self.board.id == loaded.board.id:
            self.board.update(loaded.board)
            self.tasks.update(loaded.tasks)
        else:
            self.state.board = loaded.board
            self.state.tasks = loaded.tasks
            self.provisional.reset()
        selected = self.selected_task
        if self.state.detail.task_id is not None and (selected is None or selected.is_archived):
            self._hide()

    async def _recover(self) -> None:
        """Reload after local and remote state may have diverged."""
        try:
            await self.reload()
        except BoardError as exc:
            # already notified by _load
            logger.warning("reload after failure did not succeed: %s", exc)

    # --- detail surface ---

    def click_task(self, task_id: str) -> Node:
        """Open the detail surface on a task."""
        task = self._require_task(task_id, "Error")
        self._show(task_id)
        return task

    async def close_detail(self) -> CloseOutcome:
        """Close the detail surface, discarding the provisional task if unedited.

        The provisional marker is cleared whatever happens.
        """
        task = self.selected_task
        outcome = self.provisional.closed(task)
        self._hide()
        if outcome is CloseOutcome.DISCARD:
            await self._discard(task)
        return outcome

    async def _discard(self, task: Node) -> None:
        board = self.board
        if board is None or self.user_id is None:
            return
        generation = self._generation
        try:
            await self.store.delete_task(task.id)
            if not self._is_current(generation):
                return
            remove_task(board, task.id)
            self.tasks[task.id] = None
            await self.store.write_board(board.id, {"columns": columns_to_docs(board.columns)})
        except StoreError as exc:
            err = self._fail(TransientWriteFailure("Could not remove the provisional task."), "Error")
            if self._is_current(generation):
                await self._recover()
            raise err from exc
        self._notify(Notification("New Task Discarded", "The empty new task was removed."))

    # --- tasks ---

    async def add_task(self, column_id: str | None = None) -> Node | None:
        """Create a default task at the end of a column and open it.

        An unknown column id falls back to the first column. The new
        task is provisional until updated. Returns None if the session
        moved to another board while the task was being created.
        """
        title = "Error Creating Task"
        board = self._require(title)
        if not len(board.columns):
            raise self._fail(ValidationFailure("No columns available on the board."), title)
        target = board.columns[column_id] if column_id is not None else None
        if target is None:
            target = next(iter(board.columns))

        generation = self._generation
        try:
            doc = await self.store.create_task(new_task_fields(board.id, target.id, self.user_id))
        except StoreError as exc:
            raise self._fail(TransientWriteFailure("Failed to create new task."), title) from exc
        if not self._is_current(generation):
            logger.info("board changed while creating task %s", doc.get("id"))
            return None

        task = task_from_doc(doc)
        self.tasks[task.id] = task
        column = board.columns[target.id] or next(iter(board.columns))
        if task.column_id != column.id:
            task.column_id = column.id
        append_task(column, task.id)
        self.provisional.created(task.id)
        self._show(task.id)

        # Column structure is saved in the background: a failure is
        # reported but the task stays visible.
        self._spawn(
            self.store.write_board(board.id, {"columns": columns_to_docs(board.columns)}),
            "Board Update Error",
            "Could not save new task to board structure in background.",
        )
        await self.profiles.ensure(task.creator_id)
        return task

    async def update_task(self, task_id: str, changes: dict) -> Node:
        """Persist a task's full record with changes applied, then adopt it.

        Local state is only touched after the store accepts the write;
        a store failure is raised as TransientWriteFailure.
        """
        title = "Error Updating Task"
        self._require(title)
        current = self._require_task(task_id, title)
        generation = self._generation

        record = {**task_to_doc(current), **changes, "id": task_id, "updated_at": now_iso()}
        fields = {k: v for k, v in record.items() if k != "id"}
        try:
            await self.store.write_task(task_id, fields)
        except StoreError as exc:
            raise self._fail(TransientWriteFailure(f"Could not save task {task_id}."), title) from exc
        if not self._is_current(generation):
            return task_from_doc(record)

        updated = task_from_doc(record)
        live = self.tasks[task_id]
        if live is None:
            self.tasks[task_id] = updated
        else:
            live.update(updated)
        self.provisional.confirmed(task_id)
        await self.profiles.ensure(record.get("creator_id"))
        return self.tasks[task_id]

    async def move_task(
        self,
        task_id: str,
        source_column_id: str,
        dest_column_id: str,
        before_task_id: str | None = None,
    ) -> None:
        """Move a task before another task, or to the end of a column.

        Unknown columns mean local and remote state diverged: nothing is
        mutated and the board is reloaded. A failed write also reloads,
        since the task and the columns may be half committed.
        """
        title = "Error Moving Task"
        board = self._require(title)
        task = self._require_task(task_id, title)
        missing = [c for c in (source_column_id, dest_column_id) if board.columns[c] is None]
        if missing:
            err = self._fail(NotFound(f"Column {missing[0]} not found. Re-fetching board."), title)
            await self._recover()
            raise err

        move_task(board, task_id, source_column_id, dest_column_id, before_task_id)
        changed = task.column_id != dest_column_id
        if changed:
            task.column_id = dest_column_id
        docs = columns_to_docs(board.columns)

        generation = self._generation
        try:
            if changed:
                await self.store.write_task(task_id, {"column_id": dest_column_id})
            await self.store.write_board(board.id, {"columns": docs})
        except StoreError as exc:
            err = self._fail(
                TransientWriteFailure("Could not update task position. Re-fetching board."),
                title,
            )
            if self._is_current(generation):
                await self._recover()
            raise err from exc

    async def archive_task(self, task_id: str) -> None:
        """Take a task off the board; restore everything if the store refuses."""
        title = "Error Archiving Task"
        board = self._require(title)
        task = self.tasks[task_id]
        if task is None:
            raise self._fail(NotFound(f"Task {task_id} does not exist."), title)

        tasks_snapshot = Snapshot.capture(self.tasks)
        board_snapshot = Snapshot.capture(board)
        was_showing = self.detail_open and self.state.detail.task_id == task_id
        held = self.provisional.task_id

        # archiving again keeps the first archive time
        stamp = task.archived_at if task.is_archived and task.archived_at else now_iso()
        remove_task(board, task_id)
        task.is_archived = True
        task.archived_at = stamp
        if was_showing:
            self._hide()
        self.provisional.confirmed(task_id)
        docs = columns_to_docs(board.columns)

        generation = self._generation
        try:
            await self.store.write_task(task_id, {"is_archived": True, "archived_at": stamp})
            await self.store.write_board(board.id, {"columns": docs})
        except StoreError as exc:
            if self._is_current(generation):
                tasks_snapshot.restore(self.tasks)
                board_snapshot.restore(board)
                if held == task_id:
                    self.provisional.created(task_id)
                if was_showing:
                    self._show(task_id)
            raise self._fail(TransientWriteFailure("Could not archive task. Reverting."), title) from exc
        self._notify(Notification("Task Archived", f'"{task.title}" has been archived.'))

    async def toggle_completion(self, task_id: str, completed: bool) -> None:
        title = "Error Updating Task"
        self._require(title)
        task = self._require_task(task_id, title)

        snapshot = Snapshot.capture(self.tasks)
        task.is_completed = bool(completed)
        task.updated_at = now_iso()

        generation = self._generation
        try:
            await self.store.write_task(task_id, {"is_completed": bool(completed)})
        except StoreError as exc:
            if self._is_current(generation):
                snapshot.restore(self.tasks)
            raise self._fail(
                TransientWriteFailure("Could not save task completion status. Reverting."),
                title,
            ) from exc
        state = "complete" if completed else "incomplete"
        self._notify(Notification("Task Updated", f"Task marked as {state}."))

    # --- columns ---

    async def add_column(self, name: str) -> Node:
        """Append an empty column. The store is written before local state."""
        board = self._require("Error Adding Column")
        clean = clean_column_name(name)
        if clean is None:
            raise self._fail(ValidationFailure("Column name cannot be empty."), "Invalid Column Name")

        column = make_column(board, clean)
        docs = [*columns_to_docs(board.columns), column_to_doc(column)]
        generation = self._generation
        try:
            await self.store.write_board(board.id, {"columns": docs})
        except StoreError as exc:
            raise self._fail(
                TransientWriteFailure("Failed to save the new column."),
                "Error Adding Column",
            ) from exc
        if self._is_current(generation):
            board.columns[column.id] = column
        self._notify(Notification("Column Added", f'Column "{clean}" added successfully.'))
        return column

    async def rename_column(self, column_id: str, name: str) -> None:
        """Rename a column optimistically; the old column list returns on failure."""
        title = "Error Renaming Column"
        board = self._require(title)
        if board.columns[column_id] is None:
            raise self._fail(NotFound(f"Column {column_id} not found."), title)
        clean = clean_column_name(name)
        if clean is None:
            raise self._fail(ValidationFailure("Column name cannot be empty."), "Invalid Column Name")

        snapshot = Snapshot.capture(board.columns)
        rename_column(board, column_id, clean)
        docs = columns_to_docs(board.columns)

        generation = self._generation
        try:
            await self.store.write_board(board.id, {"columns": docs})
        except StoreError as exc:
            if self._is_current(generation):
                snapshot.restore(board.columns)
            raise self._fail(TransientWriteFailure("Failed to save column name. Reverting."), title) from exc
        self._notify(Notification("Column Renamed", f'Column renamed to "{clean}".'))


