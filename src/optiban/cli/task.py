"""Handlers for 'optiban task' commands."""

from optiban.cli._common import find_task, format_task_line, run_intent, task_summary
from optiban.model.task import find_task_column


def task_list(args) -> int:
    """List active tasks grouped by column."""

    async def intent(session):
        columns = []
        for col in session.board.columns:
            if args.column and col.id != args.column:
                continue
            tasks = [task_summary(session, t) for t in session.column_tasks(col.id)]
            columns.append({"id": col.id, "name": col.name, "tasks": tasks})
        items = [t for col in columns for t in col["tasks"]]
        lines = []
        for col in columns:
            lines.append(f"{col['id']}  {col['name']}")
            lines.extend(format_task_line(t, "  ") for t in col["tasks"])
        return items, "\n".join(lines)

    return run_intent(args, intent)


def task_add(args) -> int:
    """Create a task and fill in its fields straight away."""

    async def intent(session):
        task = await session.add_task(args.column)
        changes = {"title": args.title, "description": args.description}
        if args.priority:
            changes["priority"] = args.priority
        task = await session.update_task(task.id, changes)
        await session.close_detail()
        data = task_summary(session, task)
        return data, f'Created task {task.id} "{task.title}" in {data["column"]["name"]}'

    return run_intent(args, intent)


def task_update(args) -> int:
    """Change a task's title, description or priority."""

    async def intent(session):
        find_task(session, args.id)
        changes = {
            key: value
            for key, value in (
                ("title", args.title),
                ("description", args.description),
                ("priority", args.priority),
            )
            if value is not None
        }
        session.click_task(args.id)
        task = await session.update_task(args.id, changes)
        await session.close_detail()
        return task_summary(session, task), f'Updated task {task.id} "{task.title}"'

    return run_intent(args, intent)


def task_move(args) -> int:
    """Move a task to a column, optionally before another task."""

    async def intent(session):
        task = find_task(session, args.id)
        source = find_task_column(session.board, args.id)
        source_id = source.id if source is not None else task.column_id
        await session.move_task(args.id, source_id, args.column, args.before)
        data = task_summary(session, session.tasks[args.id])
        return data, f'Moved task {args.id} to {data["column"]["name"]}'

    return run_intent(args, intent)


def task_archive(args) -> int:
    """Archive a task."""

    async def intent(session):
        task = find_task(session, args.id)
        await session.archive_task(args.id)
        return {"id": args.id, "title": task.title, "archived_at": task.archived_at}, ""

    return run_intent(args, intent)


def task_done(args) -> int:
    """Mark a task complete, or incomplete with --undo."""

    async def intent(session):
        find_task(session, args.id)
        await session.toggle_completion(args.id, not args.undo)
        return task_summary(session, session.tasks[args.id]), ""

    return run_intent(args, intent)
