"""Handlers for 'optiban board' commands."""

from optiban.cli._common import format_task_line, run_intent, task_summary


def board_summary(args) -> int:
    """Show the board with its columns and active tasks."""

    async def intent(session):
        board = session.board
        owner = session.profiles.get(board.owner_id)
        columns = [
            {
                "id": col.id,
                "name": col.name,
                "tasks": [task_summary(session, t) for t in session.column_tasks(col.id)],
            }
            for col in board.columns
        ]
        data = {"id": board.id, "name": board.name, "owner": board.owner_id, "columns": columns}

        lines = [f"{board.name}  (id {board.id}, owner {owner.display_name if owner else board.owner_id})"]
        for col in columns:
            count = len(col["tasks"])
            lines.append(f"{col['id']}  {col['name']}  ({count} {'task' if count == 1 else 'tasks'})")
            lines.extend(format_task_line(t, "  ") for t in col["tasks"])
        return data, "\n".join(lines)

    return run_intent(args, intent)
