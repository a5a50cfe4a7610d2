"""Captured values of mutable aggregates, used for rollback."""

from __future__ import annotations

from dataclasses import dataclass

from optiban.model.node import ListNode, Node, copy_tree


@dataclass(frozen=True)
class Snapshot:
    """A detached copy of one aggregate (the columns, the task collection...).

    Capture happens by value, so later mutations of the live tree never
    leak into the snapshot. Restoring is an assignment of the captured
    value onto the live aggregate, done in-place so watchers survive.
    """

    value: Node | ListNode

    @classmethod
    def capture(cls, aggregate: Node | ListNode) -> Snapshot:
        return cls(copy_tree(aggregate))

    def restore(self, aggregate: Node | ListNode) -> None:
        """Make aggregate equal to the captured value.

        A fresh copy is applied each time, so one snapshot can be
        restored more than once.
        """
        aggregate.update(copy_tree(self.value))
