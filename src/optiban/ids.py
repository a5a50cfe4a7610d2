"""ID comparison and generation for tasks and columns."""

import random
import string
import time


def compare_ids(left: str, right: str) -> int:
    """Compare two IDs, padding with leading zeros.

    Returns -1 if left < right, 0 if equal, 1 if left > right.
    """
    max_len = max(len(left), len(right))
    left_padded = left.zfill(max_len)
    right_padded = right.zfill(max_len)

    if left_padded < right_padded:
        return -1
    if left_padded > right_padded:
        return 1
    return 0


def max_id(ids: list[str]) -> str | None:
    """Find the highest ID from a list, or None if empty."""
    if not ids:
        return None

    highest = ids[0]
    for id_ in ids[1:]:
        if compare_ids(id_, highest) > 0:
            highest = id_
    return highest


def next_id(current_max: str | None) -> str:
    """Generate the next sequential ID after current_max.

    - If None, returns "1"
    - If numeric (e.g., "9"), returns "10"
    - If non-numeric (e.g., "fish"), returns "1" + "0" * len (e.g., "10000")
    """
    if current_max is None:
        return "1"

    try:
        return str(int(current_max) + 1)
    except ValueError:
        return "1" + "0" * len(current_max)


def _base36(n: int) -> str:
    digits = string.digits + string.ascii_lowercase
    out = ""
    while True:
        n, r = divmod(n, 36)
        out = digits[r] + out
        if n == 0:
            return out


def new_column_id(existing: set[str] | None = None) -> str:
    """Generate a column ID from the current time plus a random suffix.

    "col-<millis>-<5 random base36 chars>", regenerated on the unlikely
    collision with an id in existing.
    """
    existing = existing or set()
    while True:
        suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=5))
        column_id = f"col-{_base36(time.time_ns() // 1_000_000)}-{suffix}"
        if column_id not in existing:
            return column_id
