"""Document store kept on a git branch, without touching the working tree.

Layout of the branch::

    boards/<id>.json
    tasks/<id>.json
    users/<id>.json

Every write is one commit, built through a temporary index with git
plumbing. All git I/O runs via asyncio.to_thread to stay non-blocking.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import subprocess
import tempfile
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Iterable, Iterator

from git import GitError, Repo
from git.objects import Blob, Tree

from optiban.constants import BRANCH_NAME
from optiban.errors import StoreError, StoreNotFound
from optiban.ids import max_id, next_id
from optiban.model.task import now_iso

logger = logging.getLogger(__name__)


# --- Git plumbing ---


def _git(repo_path: Path, args: list[str], env: dict | None = None, input: str | None = None) -> str:
    """Run a git command and return stdout."""
    result = subprocess.run(
        ["git", *args],
        cwd=repo_path,
        env=env,
        input=input.encode("utf-8") if input is not None else None,
        capture_output=True,
        check=True,
    )
    return result.stdout.decode("utf-8").strip()


def _get_branch_tip(repo_path: Path, branch: str) -> str | None:
    """Get the current commit hash of a branch, or None if it doesn't exist."""
    result = subprocess.run(
        ["git", "rev-parse", "--verify", f"refs/heads/{branch}"],
        cwd=repo_path,
        capture_output=True,
    )
    if result.returncode != 0:
        return None
    return result.stdout.decode("utf-8").strip()


def _tree_get(tree: Tree, path: str) -> Blob | Tree | None:
    """Get an item from a tree by path, returning None if not found."""
    try:
        return tree[path]
    except KeyError:
        return None


def _dump(doc: dict) -> str:
    return json.dumps(doc, indent=2, sort_keys=True) + "\n"


def _load(blob: Blob) -> dict:
    return json.loads(blob.data_stream.read().decode("utf-8"))


class GitStore:
    """BoardStore persisting JSON documents on a dedicated git branch."""

    def __init__(self, repo_path: str | Path, branch: str = BRANCH_NAME) -> None:
        self.repo_path = Path(repo_path)
        self.branch = branch
        self._lock = threading.Lock()

    # --- reading ---

    @contextmanager
    def _tree(self) -> Iterator[Tree | None]:
        """Yield the branch tip's tree. The Repo is closed on exit."""
        tip = _get_branch_tip(self.repo_path, self.branch)
        if tip is None:
            yield None
            return
        with Repo(self.repo_path) as repo:
            yield repo.commit(tip).tree

    def _read(self, path: str) -> dict | None:
        with self._tree() as tree:
            if tree is None:
                return None
            blob = _tree_get(tree, path)
            return _load(blob) if isinstance(blob, Blob) else None

    def _read_all(self, folder: str) -> dict[str, dict]:
        """Return {stem: document} for every JSON file in a folder."""
        with self._tree() as tree:
            sub = _tree_get(tree, folder) if tree is not None else None
            if not isinstance(sub, Tree):
                return {}
            return {blob.name[:-5]: _load(blob) for blob in sub.blobs if blob.name.endswith(".json")}

    # --- writing ---

    def _commit(self, changes: dict[str, dict | None], message: str) -> str:
        """Apply {path: document or None to delete} as one commit on the branch."""
        tip = _get_branch_tip(self.repo_path, self.branch)
        with tempfile.TemporaryDirectory(prefix="optiban_idx_") as tmp:
            env = {**os.environ, "GIT_INDEX_FILE": os.path.join(tmp, "index")}
            if tip is not None:
                _git(self.repo_path, ["read-tree", tip], env=env)
            for path, doc in changes.items():
                if doc is None:
                    _git(self.repo_path, ["update-index", "--force-remove", path], env=env)
                    continue
                blob = _git(self.repo_path, ["hash-object", "-w", "--stdin"], input=_dump(doc))
                _git(
                    self.repo_path,
                    ["update-index", "--add", "--cacheinfo", f"100644,{blob},{path}"],
                    env=env,
                )
            tree = _git(self.repo_path, ["write-tree"], env=env)
        parent_args = ["-p", tip] if tip else []
        commit = _git(self.repo_path, ["commit-tree", tree, *parent_args, "-m", message])
        # Compare-and-swap against the tip we built on
        _git(self.repo_path, ["update-ref", f"refs/heads/{self.branch}", commit, tip or ""])
        logger.debug("committed %s: %s", commit[:7], message)
        return commit

    def _modify(self, path: str, fields: dict, message: str, bump: bool = False) -> None:
        with self._lock:
            doc = self._read(path)
            if doc is None:
                raise StoreNotFound(f"{path} not found")
            doc.update({k: v for k, v in fields.items() if k != "id"})
            if bump:
                doc["updated_at"] = fields.get("updated_at") or now_iso()
            self._commit({path: doc}, message)

    def _create_board_sync(self, fields: dict) -> dict:
        with self._lock:
            board_id = fields.get("id") or next_id(max_id(list(self._read_all("boards"))))
            doc = {"columns": [], **fields, "id": board_id}
            self._commit({f"boards/{board_id}.json": doc}, f"Create board {board_id}: {doc.get('name', '')}")
        return doc

    def _create_task_sync(self, fields: dict) -> dict:
        with self._lock:
            task_id = next_id(max_id(list(self._read_all("tasks"))))
            stamp = now_iso()
            doc = {**fields, "id": task_id, "is_completed": False, "created_at": stamp, "updated_at": stamp}
            self._commit({f"tasks/{task_id}.json": doc}, f"Add task {task_id}: {doc.get('title', '')}")
        return doc

    def _delete_task_sync(self, task_id: str) -> None:
        path = f"tasks/{task_id}.json"
        with self._lock:
            if self._read(path) is None:
                raise StoreNotFound(f"{path} not found")
            self._commit({path: None}, f"Delete task {task_id}")

    def _write_user_sync(self, profile: dict) -> None:
        with self._lock:
            self._commit({f"users/{profile['id']}.json": profile}, f"Update user {profile['id']}")

    def _fetch_tasks_sync(self, board_id: str) -> list[dict]:
        tasks = self._read_all("tasks")
        return [tasks[k] for k in sorted(tasks, key=lambda k: (len(k), k)) if tasks[k].get("board_id") == board_id]

    def _fetch_users_sync(self, user_ids: set[str]) -> list[dict]:
        found = []
        for user_id in sorted(user_ids):
            doc = self._read(f"users/{user_id}.json")
            if doc is not None:
                found.append(doc)
        return found

    # --- async interface ---

    async def _call(self, fn: Callable[..., Any], *args: Any) -> Any:
        try:
            return await asyncio.to_thread(fn, *args)
        except StoreError:
            raise
        except (subprocess.CalledProcessError, GitError, OSError, ValueError) as exc:
            raise StoreError(str(exc)) from exc

    async def create_board(self, fields: dict) -> dict:
        return await self._call(self._create_board_sync, fields)

    async def fetch_board(self, board_id: str) -> dict | None:
        return await self._call(self._read, f"boards/{board_id}.json")

    async def write_board(self, board_id: str, fields: dict) -> None:
        await self._call(self._modify, f"boards/{board_id}.json", fields, f"Update board {board_id}")

    async def fetch_tasks_for_board(self, board_id: str) -> list[dict]:
        return await self._call(self._fetch_tasks_sync, board_id)

    async def create_task(self, fields: dict) -> dict:
        return await self._call(self._create_task_sync, fields)

    async def write_task(self, task_id: str, fields: dict) -> None:
        await self._call(self._modify, f"tasks/{task_id}.json", fields, f"Update task {task_id}", True)

    async def delete_task(self, task_id: str) -> None:
        await self._call(self._delete_task_sync, task_id)

    async def fetch_users_by_ids(self, user_ids: Iterable[str]) -> list[dict]:
        return await self._call(self._fetch_users_sync, set(user_ids))

    async def write_user(self, profile: dict) -> None:
        await self._call(self._write_user_sync, profile)
