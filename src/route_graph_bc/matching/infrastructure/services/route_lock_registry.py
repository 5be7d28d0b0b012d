import threading
from contextlib import contextmanager
from typing import Dict, Iterator, List


class RouteLockRegistry:
    """One lock per route id, so builds of the same route never overlap.

    Locks are reentrant: a handler may hold a route while the builder it
    calls takes the same route again.

    A route's entry lives only while someone holds or waits for it, so ids
    that are never seen again do not accumulate.

    Builds of different routes run independently. The registry only covers
    the current process; the SQL store adds an advisory lock for other
    processes.
    """

    def __init__(self):
        # route id -> [lock, holders and waiters]
        self._locks: Dict[str, List] = {}
        self._guard = threading.Lock()

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)

    @contextmanager
    def hold(self, route_id: str) -> Iterator[None]:
        """Block until the route's lock is free and hold it for the block."""
        with self._guard:
            entry = self._locks.get(route_id)
            if entry is None:
                entry = [threading.RLock(), 0]
                self._locks[route_id] = entry
            entry[1] += 1

        try:
            with entry[0]:
                yield
        finally:
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[route_id]
