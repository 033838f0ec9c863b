"""
Thread-safe per-namespace handle cache.

Maps each namespace to exactly one backend handle, constructed lazily on
first use and retained for the lifetime of the owning service.

Guarantees:
    - Exactly one construction runs to completion per distinct namespace
    - All concurrent first-use callers for a namespace observe the same handle
    - Construction for one namespace never waits on another namespace
    - A failed construction stores nothing; the next caller tries again
    - No eviction (handles are cheap and bounded by namespace count)

Example:
    >>> cache = KeyedHandleCache(backend.key_value_operations)
    >>> handle = cache.get_or_create("kv/nifi")
    >>> handle is cache.get_or_create("kv/nifi")
    True
"""

import threading
from collections.abc import Callable
from typing import Generic, TypeVar

H = TypeVar("H")


class KeyedHandleCache(Generic[H]):
    """
    Lazily constructed, never evicted handle per namespace.

    Attributes:
        _factory: Callable building a handle for a namespace
        _handles: Constructed handles by namespace
        _construction_locks: Per-namespace locks held while a handle is built
        _lock: Guards ``_handles`` and ``_construction_locks``

    Thread Safety:
        All public methods may be called concurrently without external locking.
    """

    def __init__(self, factory: Callable[[str], H]) -> None:
        self._factory = factory
        self._handles: dict[str, H] = {}
        self._construction_locks: dict[str, threading.Lock] = {}
        self._lock = threading.Lock()

    def get_or_create(self, namespace: str) -> H:
        """
        Return the handle for ``namespace``, constructing it on first use.

        Raises:
            Whatever the factory raises; nothing is cached in that case.
        """
        with self._lock:
            if namespace in self._handles:
                return self._handles[namespace]
            construction_lock = self._construction_locks.setdefault(namespace, threading.Lock())

        with construction_lock:
            # Another caller may have finished construction while we waited
            with self._lock:
                if namespace in self._handles:
                    return self._handles[namespace]

            handle = self._factory(namespace)
            with self._lock:
                self._handles[namespace] = handle
                self._construction_locks.pop(namespace, None)
            return handle

    def namespaces(self) -> list[str]:
        """Return the namespaces with a constructed handle, sorted."""
        with self._lock:
            return sorted(self._handles)

    def __contains__(self, namespace: object) -> bool:
        with self._lock:
            return namespace in self._handles

    def __len__(self) -> int:
        with self._lock:
            return len(self._handles)
