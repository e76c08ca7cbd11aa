# title_scout/crawler/frontier.py
"""
Frontier manager: FIFO queue of discovered URLs plus the visited set.

URL identity is exact string equality; no normalization is applied, so
``/a`` and ``/a/`` are two different pages.
"""
from __future__ import annotations

from collections import deque
from typing import Deque, Iterable, List, Optional, Set

from title_scout.logger import get_logger


class Frontier:
    """Discovered-but-unvisited URLs and the URLs already visited."""

    def __init__(self, max_size: Optional[int] = None) -> None:
        if max_size is not None and max_size < 1:
            raise ValueError("max_size must be >= 1")
        self.max_size = max_size
        self._queue: Deque[str] = deque()
        self._queued: Set[str] = set()
        self._visited: Set[str] = set()
        self.dropped: int = 0
        self.logger = get_logger("frontier")

    def __len__(self) -> int:
        return len(self._queue)

    def __bool__(self) -> bool:
        return bool(self._queue)

    def __contains__(self, url: object) -> bool:
        return url in self._queued

    @property
    def visited(self) -> frozenset[str]:
        return frozenset(self._visited)

    @property
    def visited_count(self) -> int:
        return len(self._visited)

    def is_visited(self, url: str) -> bool:
        return url in self._visited

    def offer(self, url: str) -> bool:
        """Queue *url* unless it was visited, is already queued or the queue is full."""
        if url in self._visited or url in self._queued:
            return False
        if self.max_size is not None and len(self._queue) >= self.max_size:
            if not self.dropped:
                self.logger.warning("Frontier is full (%d URLs), new links are dropped", self.max_size)
            self.dropped += 1
            return False
        self._queue.append(url)
        self._queued.add(url)
        return True

    def offer_all(self, urls: Iterable[str]) -> int:
        return sum(1 for url in urls if self.offer(url))

    def take_batch(self, n: int) -> List[str]:
        """Remove and return up to *n* URLs in insertion order."""
        if n < 1:
            raise ValueError("batch size must be >= 1")
        batch: List[str] = []
        while self._queue and len(batch) < n:
            url = self._queue.popleft()
            self._queued.discard(url)
            batch.append(url)
        return batch

    def mark_visited(self, url: str) -> None:
        self._visited.add(url)
        if url in self._queued:
            self._queued.discard(url)
            self._queue.remove(url)


__all__ = ["Frontier"]
