"""Lazy, deduplicated cache of user profiles referenced by tasks."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, Iterable

from optiban.store.protocol import BoardStore

logger = logging.getLogger(__name__)

_ABSENT = object()


@dataclass
class UserProfile:
    """Display fields for a user."""

    id: str
    display_name: str = ""
    email: str = ""
    photo_url: str | None = None

    @classmethod
    def from_doc(cls, doc: dict) -> UserProfile:
        return cls(
            id=doc["id"],
            display_name=doc.get("display_name") or "",
            email=doc.get("email") or "",
            photo_url=doc.get("photo_url"),
        )

    def to_doc(self) -> dict:
        return {
            "id": self.id,
            "display_name": self.display_name,
            "email": self.email,
            "photo_url": self.photo_url,
        }


class ProfileResolver:
    """Profile cache keyed by user id.

    Each key is in one of three states: absent (never requested),
    None (requested, not found) or a UserProfile. Fetch failures are
    logged and leave the key absent so a later request retries.
    """

    def __init__(self, store: BoardStore) -> None:
        self._store = store
        self._profiles: dict[str, UserProfile | None] = {}
        self._pending: dict[str, asyncio.Task] = {}
        self._watchers: list[Callable[[str, UserProfile | None], None]] = []

    def __contains__(self, user_id: str) -> bool:
        return user_id in self._profiles

    def __len__(self) -> int:
        return len(self._profiles)

    def get(self, user_id: str, default=None) -> UserProfile | None:
        return self._profiles.get(user_id, default)

    def is_absent(self, user_id: str) -> bool:
        return self._profiles.get(user_id, _ABSENT) is _ABSENT

    def watch(self, callback: Callable[[str, UserProfile | None], None]) -> Callable[[], None]:
        """Call callback(user_id, profile) whenever an entry is stored."""
        self._watchers.append(callback)
        return lambda: callback in self._watchers and self._watchers.remove(callback)

    def _store_entry(self, user_id: str, profile: UserProfile | None) -> None:
        self._profiles[user_id] = profile
        for cb in list(self._watchers):
            cb(user_id, profile)

    def reset(self) -> None:
        """Forget every entry. In-flight fetches land in the old cache only."""
        self._profiles = {}
        self._pending = {}

    async def _fetch(self, ids: set[str]) -> None:
        profiles = self._profiles
        try:
            docs = await self._store.fetch_users_by_ids(ids)
        except Exception as exc:
            logger.warning("profile fetch for %s failed: %s", sorted(ids), exc)
            return
        if profiles is not self._profiles:
            # reset() happened while fetching
            return
        found = {doc["id"]: UserProfile.from_doc(doc) for doc in docs}
        for user_id in sorted(ids):
            self._store_entry(user_id, found.get(user_id))

    async def load_batch(self, user_ids: Iterable[str | None]) -> None:
        """Fetch every distinct absent id in one store call."""
        ids = {uid for uid in user_ids if uid and self.is_absent(uid)}
        if ids:
            await self._fetch(ids)

    async def ensure(self, user_id: str | None) -> UserProfile | None:
        """Resolve one id on demand if it is absent from the cache.

        Concurrent calls for the same id share a single fetch.
        """
        if not user_id:
            return None
        if not self.is_absent(user_id):
            return self._profiles[user_id]
        pending = self._pending.get(user_id)
        if pending is None:
            pending = asyncio.ensure_future(self._fetch({user_id}))
            pending_map = self._pending
            pending_map[user_id] = pending
            pending.add_done_callback(lambda fut: pending_map.get(user_id) is fut and pending_map.pop(user_id))
        await asyncio.shield(pending)
        return self._profiles.get(user_id)
