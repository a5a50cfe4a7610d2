"""Typed failures raised by the board session and its store."""


class BoardError(Exception):
    """Base class for failures surfaced to the presentation layer."""


class ValidationFailure(BoardError):
    """Rejected before any local mutation or remote call."""


class AccessDenied(BoardError):
    """The board belongs to someone else. Terminal for the load."""


class NotFound(BoardError):
    """A board, task or column could not be found."""


class TransientWriteFailure(BoardError):
    """A store write failed; local state was rolled back or reloaded."""


class LoadFailure(BoardError):
    """A store read failed while loading a board; local state was cleared."""


class StoreError(Exception):
    """Raised by store implementations when a call fails."""


class StoreNotFound(StoreError):
    """The record addressed by a store write or delete does not exist."""
