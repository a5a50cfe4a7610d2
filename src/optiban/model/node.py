"""Reactive state tree with change notification and bubbling."""

from __future__ import annotations

from typing import Any, Callable

Callback = Callable[["Node | ListNode", str, Any, Any], None]


def _wrap(value: Any, parent: Node | ListNode, key: str) -> Any:
    """Auto-wrap dicts as Nodes. Reparent existing Nodes/ListNodes."""
    if isinstance(value, dict):
        return Node(_parent=parent, _key=key, **value)
    if isinstance(value, (Node, ListNode)):
        object.__setattr__(value, "_parent", parent)
        object.__setattr__(value, "_key", key)
    return value


def _emit(node: Node | ListNode, key: str, old: Any, new: Any) -> None:
    """Fire local watchers for key, then bubble up the parent chain."""
    for cb in list(node._watchers.get(key, ())):
        cb(node, key, old, new)
    child = node
    while child._parent is not None:
        parent = child._parent
        for cb in list(parent._watchers.get(child._key, ())):
            cb(node, key, old, new)
        child = parent


def _unwatch(watchers: dict[str, list[Callback]], key: str, callback: Callback) -> Callable[[], None]:
    def unwatch() -> None:
        if callback in watchers.get(key, []):
            watchers[key].remove(callback)

    return unwatch


class Node:
    """Reactive dict-like tree node.

    Stores data in an internal dict, accessed via attribute syntax.
    Setting a value to None deletes the key, so a missing key and a
    None value read the same. Dict values are auto-wrapped as child
    Nodes. Changes fire watchers and bubble up through the parent chain.
    """

    def __init__(
        self,
        _parent: Node | ListNode | None = None,
        _key: str | None = None,
        **data: Any,
    ) -> None:
        object.__setattr__(self, "_children", {})
        object.__setattr__(self, "_watchers", {})
        object.__setattr__(self, "_parent", None)
        object.__setattr__(self, "_key", _key)
        object.__setattr__(self, "_version", 0)
        for k, v in data.items():
            setattr(self, k, v)
        object.__setattr__(self, "_parent", _parent)

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        return self._children.get(name)

    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith("_"):
            object.__setattr__(self, name, value)
            return
        old = self._children.get(name)
        if value is None:
            self._children.pop(name, None)
        else:
            value = _wrap(value, parent=self, key=name)
            self._children[name] = value
        if old != value:
            self._version += 1
            _emit(self, name, old, value)

    def __contains__(self, key: str) -> bool:
        return key in self._children

    def watch(self, key: str, callback: Callback) -> Callable[[], None]:
        """Watch a key for changes. Returns an unwatch callable."""
        self._watchers.setdefault(key, []).append(callback)
        return _unwatch(self._watchers, key, callback)

    def keys(self):
        return self._children.keys()

    def items(self):
        return self._children.items()

    def values(self):
        return self._children.values()

    @property
    def path(self) -> str:
        """Dotted path from root to this node."""
        parts: list[str] = []
        current: Node | ListNode | None = self
        while current is not None and current._key is not None:
            parts.append(current._key)
            current = current._parent
        return ".".join(reversed(parts))

    def update(self, other: Node) -> None:
        """Update this node in-place to match other, preserving watchers."""
        existing_keys = set(self.keys())
        other_keys = set(other.keys())
        for key in existing_keys - other_keys:
            setattr(self, key, None)
        for key in other.keys():
            old_value = self._children.get(key)
            new_value = other._children.get(key)
            if isinstance(old_value, Node) and isinstance(new_value, Node):
                old_value.update(new_value)
            elif isinstance(old_value, ListNode) and isinstance(new_value, ListNode):
                old_value.update(new_value)
            elif old_value == new_value:
                continue
            else:
                setattr(self, key, new_value)

    def __repr__(self) -> str:
        p = self.path
        keys = ", ".join(self._children.keys())
        label = f"Node({p})" if p else "Node"
        return f"<{label} [{keys}]>"


class ListNode:
    """Ordered, id-keyed collection with change notification.

    Items are accessed by string id. Setting to None deletes.
    Dicts are auto-wrapped as Nodes. Changes fire watchers and
    bubble up through the parent chain.
    """

    def __init__(
        self,
        _parent: Node | None = None,
        _key: str | None = None,
    ) -> None:
        object.__setattr__(self, "_by_id", {})
        object.__setattr__(self, "_watchers", {})
        object.__setattr__(self, "_parent", _parent)
        object.__setattr__(self, "_key", _key)
        object.__setattr__(self, "_version", 0)

    def __getitem__(self, key: str) -> Any:
        return self._by_id.get(str(key))

    def __setitem__(self, key: str, value: Any) -> None:
        key = str(key)
        old = self._by_id.get(key)
        if value is None:
            if old is None:
                return
            del self._by_id[key]
            self._version += 1
            _emit(self, key, old, None)
            return
        value = _wrap(value, parent=self, key=key)
        self._by_id[key] = value
        if old != value:
            self._version += 1
            _emit(self, key, old, value)

    def __iter__(self):
        return iter(list(self._by_id.values()))

    def __len__(self) -> int:
        return len(self._by_id)

    def __contains__(self, key: str) -> bool:
        return str(key) in self._by_id

    def watch(self, key: str, callback: Callback) -> Callable[[], None]:
        """Watch an item id for changes. Use "*" for reorders."""
        key = str(key)
        self._watchers.setdefault(key, []).append(callback)
        return _unwatch(self._watchers, key, callback)

    @property
    def path(self) -> str:
        parts: list[str] = []
        current: Node | ListNode | None = self
        while current is not None and current._key is not None:
            parts.append(current._key)
            current = current._parent
        return ".".join(reversed(parts))

    def keys(self) -> list[str]:
        """Return ordered keys."""
        return list(self._by_id.keys())

    def items(self) -> list[tuple[str, Any]]:
        """Return ordered (key, value) pairs."""
        return list(self._by_id.items())

    def update(self, other: ListNode) -> None:
        """Update this list in-place to match other, preserving watchers."""
        existing_keys = set(self._by_id.keys())
        other_keys = set(other._by_id.keys())
        for key in existing_keys - other_keys:
            self[key] = None
        for key in other._by_id:
            old_value = self._by_id.get(key)
            new_value = other._by_id.get(key)
            if old_value is None:
                self[key] = new_value
            elif isinstance(old_value, Node) and isinstance(new_value, Node):
                old_value.update(new_value)
            elif isinstance(old_value, ListNode) and isinstance(new_value, ListNode):
                old_value.update(new_value)
            elif old_value == new_value:
                continue
            else:
                self[key] = new_value
        old_keys = self.keys()
        new_keys = list(other._by_id.keys())
        if old_keys != new_keys:
            object.__setattr__(self, "_by_id", {k: self._by_id[k] for k in new_keys})
            self._version += 1
            _emit(self, "*", old_keys, new_keys)

    def __repr__(self) -> str:
        p = self.path
        ids = ", ".join(self._by_id.keys())
        label = f"ListNode({p})" if p else "ListNode"
        return f"<{label} [{ids}]>"


def copy_tree(value: Any) -> Any:
    """Return a detached deep copy of a Node/ListNode tree.

    Lists and dicts inside leaves are copied too, so the result shares
    no mutable state with the source.
    """
    if isinstance(value, Node):
        return Node(**{k: copy_tree(v) for k, v in value.items()})
    if isinstance(value, ListNode):
        copy = ListNode()
        for k, v in value.items():
            copy[k] = copy_tree(v)
        return copy
    if isinstance(value, list):
        return [copy_tree(v) for v in value]
    if isinstance(value, dict):
        return {k: copy_tree(v) for k, v in value.items()}
    return value


def to_plain(value: Any) -> Any:
    """Convert a Node/ListNode tree back to plain dicts and lists.

    A ListNode becomes a list of its values in order.
    """
    if isinstance(value, Node):
        return {k: to_plain(v) for k, v in value.items()}
    if isinstance(value, ListNode):
        return [to_plain(v) for v in value]
    if isinstance(value, tuple):
        return list(value)
    if isinstance(value, list):
        return [to_plain(v) for v in value]
    if isinstance(value, dict):
        return {k: to_plain(v) for k, v in value.items()}
    return value
