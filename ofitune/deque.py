"""A thread-safe double-ended queue supporting removal of arbitrary items."""

from __future__ import annotations

import threading
from typing import Any, Generic, Iterable, Iterator, Optional, TypeVar

T = TypeVar("T")


class _Node:
    __slots__ = ("item", "prev", "next")

    def __init__(self, item: Any) -> None:
        self.item = item
        self.prev: _Node = self
        self.next: _Node = self


class Deque(Generic[T]):
    """Circular doubly linked deque; items are tracked by identity.

    An item may be stored at most once, and ``None`` cannot be stored.
    """

    def __init__(self, items: Iterable[T] = ()) -> None:
        self._head = _Node(None)
        self._nodes: dict[int, _Node] = {}
        self._lock = threading.Lock()
        for item in items:
            self.insert_back(item)

    def _new_node(self, item: T) -> _Node:
        if item is None:
            raise ValueError("None cannot be stored in a Deque")
        if id(item) in self._nodes:
            raise ValueError("item is already in the deque")
        node = _Node(item)
        self._nodes[id(item)] = node
        return node

    def _node_of(self, item: T) -> _Node:
        try:
            return self._nodes[id(item)]
        except KeyError:
            raise ValueError("item is not in the deque") from None

    def insert_back(self, item: T) -> None:
        """Append ``item`` at the back."""
        with self._lock:
            node = self._new_node(item)
            head = self._head
            node.next = head
            node.prev = head.prev
            head.prev.next = node
            head.prev = node

    def insert_front(self, item: T) -> None:
        """Prepend ``item`` at the front."""
        with self._lock:
            node = self._new_node(item)
            head = self._head
            node.next = head.next
            node.prev = head
            head.next.prev = node
            head.next = node

    def is_empty(self) -> bool:
        """Return True if the deque holds no items (does not take the lock)."""
        return self._head.next is self._head

    def remove_front(self) -> Optional[T]:
        """Remove and return the front item, or None if the deque is empty."""
        if self.is_empty():
            return None
        with self._lock:
            if self.is_empty():
                return None
            node = self._head.next
            self._unlink(node)
            return node.item

    def remove(self, item: T) -> None:
        """Remove ``item`` from wherever it is; ValueError if absent."""
        with self._lock:
            self._unlink(self._node_of(item))

    def _unlink(self, node: _Node) -> None:
        node.prev.next = node.next
        node.next.prev = node.prev
        node.prev = node
        node.next = node
        del self._nodes[id(node.item)]

    def front(self) -> Optional[T]:
        """Return the front item without removing it, or None if empty."""
        with self._lock:
            if self.is_empty():
                return None
            return self._head.next.item

    def next_after(self, item: T) -> Optional[T]:
        """Return the item following ``item``, or None if it is the last."""
        with self._lock:
            nxt = self._node_of(item).next
            if nxt is self._head:
                return None
            return nxt.item

    def __iter__(self) -> Iterator[T]:
        """Iterate front to back; removing the current item is allowed."""
        item = self.front()
        while item is not None:
            following = self.next_after(item)
            yield item
            item = following

    def __len__(self) -> int:
        with self._lock:
            return len(self._nodes)

    def __contains__(self, item: object) -> bool:
        with self._lock:
            return id(item) in self._nodes

    def __repr__(self) -> str:
        return f"Deque({list(self)!r})"