"""Tracking of the one task that was just added and not yet confirmed."""

from __future__ import annotations

import enum

from optiban.model.node import Node
from optiban.model.task import is_unedited


class CloseOutcome(enum.Enum):
    """What to do with a task when its detail surface closes."""

    NONE = "none"
    KEEP = "keep"
    DISCARD = "discard"


class ProvisionalTracker:
    """State machine holding at most one provisional task id.

    ============================  ===========================
    event                         effect
    ============================  ===========================
    created(id)                   hold id (replacing any other)
    confirmed(id)                 clear if id is held
    closed(task), task unedited   clear, outcome DISCARD
    closed(task), task edited     clear, outcome KEEP
    closed(other task)            clear, outcome NONE
    ============================  ===========================
    """

    def __init__(self) -> None:
        self._task_id: str | None = None

    @property
    def task_id(self) -> str | None:
        return self._task_id

    def created(self, task_id: str) -> None:
        """A task was added. An earlier pending one is forgotten, not discarded."""
        self._task_id = task_id

    def confirmed(self, task_id: str) -> None:
        """The task was explicitly updated, so it is no longer provisional."""
        if self._task_id == task_id:
            self._task_id = None

    def closed(self, task: Node | None) -> CloseOutcome:
        """The detail surface closed while showing task. Always clears."""
        held = self._task_id
        self._task_id = None
        if task is None or held is None or task.id != held:
            return CloseOutcome.NONE
        return CloseOutcome.DISCARD if is_unedited(task) else CloseOutcome.KEEP

    def reset(self) -> None:
        self._task_id = None
