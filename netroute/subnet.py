from __future__ import annotations

from typing import Dict, List, Optional, Tuple
import heapq

from . import address
from .errors import (
    ConnectionNotFound,
    ConnectionTypeMismatch,
    DuplicateConnection,
    InvalidWeight,
    RouterRemovalDenied,
    SystemNotFound,
)
from .system import NetworkSystem


class Subnet:
    """A CIDR block with its member systems and weighted intra-subnet links.

    Edges are kept as ``ip -> {neighbor_ip: weight}`` and are always symmetric.
    Membership checks and the address-uniqueness rule across subnets belong to
    :class:`netroute.topology.Network`; this class trusts its caller there.
    """

    def __init__(self, base_address: str, prefix_length: int):
        address.mask(prefix_length)
        self.base_address = address.canonical(base_address)
        self.prefix_length = prefix_length
        self._systems: Dict[str, NetworkSystem] = {}
        self.edges: Dict[str, Dict[str, int]] = {}

    def __repr__(self) -> str:
        return f"Subnet({self.cidr})"

    def __str__(self) -> str:
        return self.cidr

    @property
    def cidr(self) -> str:
        return f"{self.base_address}/{self.prefix_length}"

    @property
    def last_address(self) -> str:
        return address.last_address(self.base_address, self.prefix_length)

    @property
    def range(self) -> Tuple[str, str]:
        return self.base_address, self.last_address

    # ───────────────────────────── Members ─────────────────────────────

    @property
    def systems(self) -> List[NetworkSystem]:
        return list(self._systems.values())

    @property
    def router(self) -> Optional[NetworkSystem]:
        for s in self._systems.values():
            if s.is_router:
                return s
        return None

    def routers(self) -> List[NetworkSystem]:
        return [s for s in self._systems.values() if s.is_router]

    def find_system(self, ip: str) -> Optional[NetworkSystem]:
        if not address.is_valid(ip):
            return None
        return self._systems.get(address.canonical(ip))

    def add_system(self, system: NetworkSystem):
        self._systems[system.address] = system

    def remove_system(self, ip: str) -> NetworkSystem:
        system = self.find_system(ip)
        if system is None:
            raise SystemNotFound(f"System {ip} not found in subnet {self.cidr}")
        if system.is_router:
            raise RouterRemovalDenied(f"Router {system.address} cannot be removed")

        for nb in list(self.edges.get(system.address, {})):
            self._unlink(nb, system.address)
        self.edges.pop(system.address, None)
        del self._systems[system.address]
        return system

    def contains_address(self, ip: str) -> bool:
        if not address.is_valid(self.base_address) or not address.is_valid(ip):
            return False
        return address.contains(self.base_address, self.prefix_length, ip)

    # ───────────────────────────── Edges ─────────────────────────────

    def _require(self, ip: str) -> NetworkSystem:
        system = self.find_system(ip)
        if system is None:
            raise SystemNotFound(f"System {ip} not found in subnet {self.cidr}")
        return system

    def add_connection(self, ip1: str, ip2: str, weight: int):
        a = self._require(ip1).address
        b = self._require(ip2).address
        if a == b:
            raise ConnectionTypeMismatch(f"Cannot connect {a} to itself")
        if b in self.edges.get(a, {}):
            raise DuplicateConnection(f"Connection between {a} and {b} already exists")
        if isinstance(weight, bool) or not isinstance(weight, int) or weight <= 0:
            raise InvalidWeight(f"Weight must be a positive integer, got {weight}")

        self.edges.setdefault(a, {})[b] = weight
        self.edges.setdefault(b, {})[a] = weight

    def remove_connection(self, ip1: str, ip2: str):
        a = address.canonical(ip1)
        b = address.canonical(ip2)
        if b not in self.edges.get(a, {}):
            raise ConnectionNotFound(f"No connection between {a} and {b}")
        self._unlink(a, b)
        self._unlink(b, a)

    def _unlink(self, a: str, b: str):
        nbrs = self.edges.get(a)
        if nbrs is None:
            return
        nbrs.pop(b, None)
        if not nbrs:
            del self.edges[a]

    def weight(self, ip1: str, ip2: str) -> Optional[int]:
        return self.edges.get(address.canonical(ip1), {}).get(address.canonical(ip2))

    def neighbors(self, ip: str) -> Dict[str, int]:
        return dict(self.edges.get(address.canonical(ip), {}))

    def path_cost(self, path: List[str]) -> int:
        total = 0
        for a, b in zip(path, path[1:]):
            w = self.weight(a, b)
            if w is None:
                raise ConnectionNotFound(f"No connection between {a} and {b}")
            total += w
        return total

    # ───────────────────────────── Search ─────────────────────────────

    def shortest_path(self, from_ip: str, to_ip: str) -> Optional[List[str]]:
        """Minimum-weight path between two members, or None when disconnected.

        Equal-distance frontier entries pop in numeric address order.
        """

        src = self.find_system(from_ip)
        dst = self.find_system(to_ip)
        if src is None or dst is None:
            return None
        src_ip, dst_ip = src.address, dst.address

        dist: Dict[str, float] = {ip: float("inf") for ip in self._systems}
        prev: Dict[str, Optional[str]] = {ip: None for ip in self._systems}
        dist[src_ip] = 0
        heap = [(0, address.sort_key(src_ip), src_ip)]
        visited = set()

        while heap:
            d, _key, cur = heapq.heappop(heap)
            if cur in visited:
                continue
            visited.add(cur)
            if cur == dst_ip:
                break
            for nb, w in self.edges.get(cur, {}).items():
                if nb in visited or nb not in dist:
                    continue
                nd = d + w
                if nd < dist[nb]:
                    dist[nb] = nd
                    prev[nb] = cur
                    heapq.heappush(heap, (nd, address.sort_key(nb), nb))

        path: List[str] = []
        at: Optional[str] = dst_ip
        while at is not None:
            path.append(at)
            at = prev[at]
        path.reverse()

        if len(path) == 1 and src_ip != dst_ip:
            return None
        return path
