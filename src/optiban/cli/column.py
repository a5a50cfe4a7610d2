"""Handlers for 'optiban column' commands."""

from optiban.cli._common import run_intent


def column_list(args) -> int:
    """List all columns."""

    async def intent(session):
        items = [
            {"id": col.id, "name": col.name, "tasks": len(session.column_tasks(col.id))}
            for col in session.board.columns
        ]
        lines = []
        for c in items:
            tasks = "task" if c["tasks"] == 1 else "tasks"
            lines.append(f"{c['id']}  {c['name']:<16} {c['tasks']} {tasks}")
        return items, "\n".join(lines)

    return run_intent(args, intent)


def column_add(args) -> int:
    """Append a new column."""

    async def intent(session):
        col = await session.add_column(args.name)
        return {"id": col.id, "name": col.name}, ""

    return run_intent(args, intent)


def column_rename(args) -> int:
    """Rename a column."""

    async def intent(session):
        col = session.board.columns[args.id]
        old_name = col.name if col is not None else ""
        await session.rename_column(args.id, args.new_name)
        new_name = session.board.columns[args.id].name
        return {"id": args.id, "old_name": old_name, "new_name": new_name}, ""

    return run_intent(args, intent)
