"""
LRU Cache — bounded map with O(1) get/set/evict.

A dict indexes nodes of a doubly linked list ordered from most to least
recently used. Both reads and writes mark a key as most recently used.
"""

from __future__ import annotations

from typing import Generic, Hashable, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class _Node(Generic[K, V]):
    __slots__ = ("key", "value", "prev", "next")

    def __init__(self, key: K, value: V) -> None:
        self.key = key
        self.value = value
        self.prev: _Node[K, V] | None = None
        self.next: _Node[K, V] | None = None


class LRUCache(Generic[K, V]):
    def __init__(self, max_size: int) -> None:
        if max_size <= 0:
            raise ValueError("Cache size must be greater than 0")
        self._max_size = max_size
        self._nodes: dict[K, _Node[K, V]] = {}
        self._head: _Node[K, V] | None = None
        self._tail: _Node[K, V] | None = None

    @property
    def max_size(self) -> int:
        return self._max_size

    def get(self, key: K) -> V | None:
        node = self._nodes.get(key)
        if node is None:
            return None
        self._move_to_front(node)
        return node.value

    def set(self, key: K, value: V) -> None:
        node = self._nodes.get(key)

        if node is not None:
            node.value = value
            self._move_to_front(node)
            return

        if len(self._nodes) >= self._max_size and self._tail is not None:
            evicted = self._tail
            self._remove(evicted)
            del self._nodes[evicted.key]

        node = _Node(key, value)
        self._nodes[key] = node
        self._add_to_front(node)

    def delete(self, key: K) -> bool:
        node = self._nodes.pop(key, None)
        if node is None:
            return False
        self._remove(node)
        return True

    def clear(self) -> None:
        self._nodes.clear()
        self._head = None
        self._tail = None

    def size(self) -> int:
        return len(self._nodes)

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, key: object) -> bool:
        return key in self._nodes

    def keys(self) -> list[K]:
        """Keys from most to least recently used."""
        keys = []
        node = self._head
        while node is not None:
            keys.append(node.key)
            node = node.next
        return keys

    def _add_to_front(self, node: _Node[K, V]) -> None:
        node.prev = None
        node.next = self._head
        if self._head is not None:
            self._head.prev = node
        self._head = node
        if self._tail is None:
            self._tail = node

    def _remove(self, node: _Node[K, V]) -> None:
        if node.prev is not None:
            node.prev.next = node.next
        else:
            self._head = node.next

        if node.next is not None:
            node.next.prev = node.prev
        else:
            self._tail = node.prev

        node.prev = node.next = None

    def _move_to_front(self, node: _Node[K, V]) -> None:
        if node is self._head:
            return
        self._remove(node)
        self._add_to_front(node)
