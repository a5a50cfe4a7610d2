"""User-visible notifications raised by board operations."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notification:
    """A toast-style message: operation title, summary, and whether it failed."""

    title: str
    message: str
    error: bool = False


Sink = Callable[[Notification], None]


def log_sink(note: Notification) -> None:
    """Default sink: send notifications to the log."""
    if note.error:
        logger.warning("%s: %s", note.title, note.message)
    else:
        logger.info("%s: %s", note.title, note.message)
