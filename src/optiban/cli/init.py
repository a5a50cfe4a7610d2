"""Handler for 'optiban init' command."""

import asyncio

from optiban.cli._common import error, open_context, output_result
from optiban.constants import DEFAULT_COLUMNS
from optiban.errors import StoreError
from optiban.git import write_git_config_key
from optiban.ids import new_column_id


async def _create(ctx, name: str) -> dict:
    columns = []
    for column_name in DEFAULT_COLUMNS:
        columns.append({"id": new_column_id({c["id"] for c in columns}), "name": column_name, "task_ids": []})
    await ctx.store.write_user(ctx.identity.to_profile())
    return await ctx.store.create_board({"name": name, "owner_id": ctx.identity.id, "columns": columns})


def init_board(args) -> int:
    """Create a board owned by the current user and make it the default."""
    ctx = open_context(args, need_board=False)
    name = args.name.strip()
    if not name:
        error("Board name cannot be empty.", args.json)

    try:
        board = asyncio.run(_create(ctx, name))
    except StoreError as e:
        error(f"Could not create board: {e}", args.json)

    write_git_config_key(ctx.repo_path, "optiban", "board", board["id"])
    output_result(
        {"id": board["id"], "name": name, "owner": ctx.identity.id},
        f'Created board "{name}" (id {board["id"]})',
        args.json,
    )
    return 0
