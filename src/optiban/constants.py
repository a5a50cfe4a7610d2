"""Shared constants."""

BRANCH_NAME = "optiban"

DEFAULT_TASK_TITLE = "New Task"
DEFAULT_PRIORITY = "medium"
PRIORITIES = ("low", "medium", "high")

DEFAULT_COLUMNS = ("To Do", "In Progress", "Done")
