from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple
import heapq


SortKey = Tuple[int, str, str, str]


@dataclass
class TieBreakState:
    """Bookkeeping for one inter-subnet search.

    Nodes are ordered by the cascade (hop count, first hop, second hop, node
    address). Hops and addresses compare as dotted-quad strings, not numerically;
    a hop that does not exist yet compares as the empty string.
    """

    source: str
    hop_counts: Dict[str, int] = field(default_factory=dict)
    first_hops: Dict[str, str] = field(default_factory=dict)
    second_hops: Dict[str, str] = field(default_factory=dict)
    previous: Dict[str, Optional[str]] = field(default_factory=dict)
    visited: set = field(default_factory=set)
    _heap: List[SortKey] = field(default_factory=list)

    def __post_init__(self):
        self.hop_counts[self.source] = 0
        self.previous[self.source] = None
        heapq.heappush(self._heap, self.key(self.source))

    def key(self, node: str) -> SortKey:
        return (
            self.hop_counts[node],
            self.first_hops.get(node, ""),
            self.second_hops.get(node, ""),
            node,
        )

    def candidate(self, current: str, neighbor: str) -> SortKey:
        """The key ``neighbor`` would get if reached through ``current``."""

        if current == self.source:
            first, second = neighbor, ""
        elif self.previous.get(current) == self.source:
            first, second = current, neighbor
        else:
            first, second = self.first_hops[current], self.second_hops[current]
        return (self.hop_counts[current] + 1, first, second, neighbor)

    def offer(self, current: str, neighbor: str) -> bool:
        """Record ``current -> neighbor`` if it strictly beats what is known."""

        if neighbor in self.visited:
            return False
        cand = self.candidate(current, neighbor)
        if neighbor in self.hop_counts and not cand < self.key(neighbor):
            return False

        hops, first, second, _node = cand
        self.hop_counts[neighbor] = hops
        self.first_hops[neighbor] = first
        if second:
            self.second_hops[neighbor] = second
        else:
            self.second_hops.pop(neighbor, None)
        self.previous[neighbor] = current
        heapq.heappush(self._heap, cand)
        return True

    def pop(self) -> Optional[str]:
        # Entries superseded by a later offer() are skipped.
        while self._heap:
            entry = heapq.heappop(self._heap)
            node = entry[3]
            if node in self.visited or entry != self.key(node):
                continue
            self.visited.add(node)
            return node
        return None

    def path_to(self, node: str) -> List[str]:
        path: List[str] = []
        at: Optional[str] = node
        while at is not None:
            path.append(at)
            at = self.previous.get(at)
        path.reverse()
        return path
