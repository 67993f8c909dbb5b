from __future__ import annotations

import copy
from typing import Dict, Iterable, List, Optional, Set, Tuple

from . import address
from .errors import (
    AddressOutOfRange,
    ConnectionNotFound,
    ConnectionTypeMismatch,
    DuplicateConnection,
    DuplicateSystem,
    SubnetNotFound,
    SystemNotFound,
    TopologyError,
)
from .subnet import Subnet
from .system import NetworkSystem, Role


def _base_of(subnet: str) -> str:
    # "10.0.0.0/24" and "10.0.0.0" both name the subnet keyed by 10.0.0.0.
    return address.canonical((subnet or "").split("/")[0])


class Network:
    """Registry of subnets plus the router-to-router adjacency.

    Router links are tracked twice: ``router_links`` is the hop-count graph the
    routing engine searches, ``router_link_weights`` keeps the weight given when
    the link was added, for reporting only.
    """

    def __init__(self):
        self.subnets: Dict[str, Subnet] = {}
        self.router_links: Dict[str, Set[str]] = {}
        self.router_link_weights: Dict[str, Dict[str, int]] = {}
        self.device_names: Dict[str, str] = {}

    # ───────────────────────────── Construction ─────────────────────────────

    def create_subnet(self, base_address: str, prefix_length: int) -> Subnet:
        subnet = Subnet(base_address, prefix_length)
        if subnet.base_address in self.subnets:
            raise TopologyError(f"Subnet {subnet.cidr} already exists")
        for other in self.subnets.values():
            if other.contains_address(subnet.base_address) or subnet.contains_address(other.base_address):
                raise TopologyError(f"Subnet {subnet.cidr} overlaps {other.cidr}")
        self.subnets[subnet.base_address] = subnet
        return subnet

    def create_system(self, ip: str, is_router: bool = False) -> NetworkSystem:
        return NetworkSystem.router(ip) if is_router else NetworkSystem.host(ip)

    def add_to_subnet(self, subnet: Subnet, system: NetworkSystem, name: Optional[str] = None):
        if self.find_system(system.address) is not None:
            raise DuplicateSystem(f"System {system.address} already exists")
        if name and name in self.device_names:
            raise DuplicateSystem(f"Device name '{name}' is already in use")
        if not subnet.contains_address(system.address):
            raise AddressOutOfRange(f"IP address {system.address} does not belong to subnet {subnet.cidr}")
        if system.is_router and subnet.router is not None:
            raise TopologyError(f"Subnet {subnet.cidr} already has router {subnet.router.address}")
        subnet.add_system(system)
        if name:
            self.device_names[name] = system.address

    def load_topology(
        self,
        subnets: Iterable[Tuple[str, int]],
        systems: Iterable[Tuple[str, bool]],
        edges: Iterable[Tuple[str, str, int]],
    ):
        """Bulk load ``(base, prefix)`` subnets, ``(ip, is_router)`` systems and
        ``(ip1, ip2, weight)`` edges, then check the one-router invariant.

        Works on a copy; the registry only changes when the whole load succeeds.
        """

        staged = copy.deepcopy(self)
        for base, prefix in subnets:
            staged.create_subnet(base, prefix)
        for ip, is_router in systems:
            subnet = staged.find_subnet(ip)
            if subnet is None:
                raise SubnetNotFound(f"IP address {ip} is not in any subnet")
            staged.add_to_subnet(subnet, staged.create_system(ip, is_router))
        for ip1, ip2, weight in edges:
            staged.add_connection(ip1, ip2, weight)
        staged.validate()

        self.subnets = staged.subnets
        self.router_links = staged.router_links
        self.router_link_weights = staged.router_link_weights
        self.device_names = staged.device_names

    def validate(self):
        for subnet in self.subnets.values():
            n = len(subnet.routers())
            if n != 1:
                raise TopologyError(f"Subnet {subnet.cidr} must have exactly one router, found {n}")

    # ───────────────────────────── Lookup ─────────────────────────────

    def find_subnet(self, ip: str) -> Optional[Subnet]:
        if not address.is_valid(ip):
            return None
        for subnet in self.subnets.values():
            if subnet.contains_address(ip):
                return subnet
        return None

    def require_subnet(self, ip: str) -> Subnet:
        address.parse(ip)
        subnet = self.find_subnet(ip)
        if subnet is None:
            raise SubnetNotFound(f"IP address {ip} is not in any subnet")
        return subnet

    def find_system(self, ip: str) -> Optional[NetworkSystem]:
        subnet = self.find_subnet(ip)
        if subnet is None:
            return None
        return subnet.find_system(ip)

    def subnet_for(self, subnet: str) -> Subnet:
        sn = self.subnets.get(_base_of(subnet))
        if sn is None:
            raise SubnetNotFound(f"Subnet {subnet} not found")
        if "/" in subnet:
            _base, prefix = address.parse_cidr(subnet)
            if prefix != sn.prefix_length:
                raise SubnetNotFound(f"Subnet {subnet} not found")
        return sn

    def router_neighbors(self, ip: str) -> List[str]:
        return sorted(self.router_links.get(address.canonical(ip), set()))

    # ───────────────────────────── Queries ─────────────────────────────

    def list_subnets(self) -> List[Subnet]:
        return sorted(self.subnets.values(), key=lambda s: address.sort_key(s.base_address))

    def subnet_range(self, subnet: str) -> Tuple[str, str]:
        return self.subnet_for(subnet).range

    def list_systems(self, subnet: str) -> List[str]:
        return [s.address for s in self.subnet_for(subnet).systems]

    # ───────────────────────────── Mutation ─────────────────────────────

    def add_system(self, subnet: str, ip: str, role: Role = Role.HOST) -> NetworkSystem:
        sn = self.subnet_for(subnet)
        system = self.create_system(ip, role is Role.ROUTER)
        self.add_to_subnet(sn, system)
        return system

    def remove_system(self, subnet: str, ip: str) -> NetworkSystem:
        sn = self.subnet_for(subnet)
        removed = sn.remove_system(ip)
        for name, dev_ip in list(self.device_names.items()):
            if dev_ip == removed.address:
                del self.device_names[name]
        return removed

    def _router_pair(self, ip1: str, ip2: str, s1: Subnet, s2: Subnet) -> Tuple[str, str]:
        r1 = s1.find_system(ip1)
        r2 = s2.find_system(ip2)
        if r1 is None:
            raise SystemNotFound(f"System {ip1} not found")
        if r2 is None:
            raise SystemNotFound(f"System {ip2} not found")
        if not (r1.is_router and r2.is_router):
            raise ConnectionTypeMismatch("Inter-subnet connections are only allowed between routers")
        return r1.address, r2.address

    def add_connection(self, ip1: str, ip2: str, weight: int = 0):
        s1 = self.require_subnet(ip1)
        s2 = self.require_subnet(ip2)
        if s1 is s2:
            s1.add_connection(ip1, ip2, weight)
            return

        a, b = self._router_pair(ip1, ip2, s1, s2)
        if b in self.router_links.get(a, set()):
            raise DuplicateConnection(f"Connection between {a} and {b} already exists")
        self.router_links.setdefault(a, set()).add(b)
        self.router_links.setdefault(b, set()).add(a)
        self.router_link_weights.setdefault(a, {})[b] = weight
        self.router_link_weights.setdefault(b, {})[a] = weight

    def remove_connection(self, ip1: str, ip2: str):
        s1 = self.require_subnet(ip1)
        s2 = self.require_subnet(ip2)
        if s1 is s2:
            s1.remove_connection(ip1, ip2)
            return

        a, b = self._router_pair(ip1, ip2, s1, s2)
        if b not in self.router_links.get(a, set()):
            raise ConnectionNotFound(f"No connection between {a} and {b}")
        for x, y in ((a, b), (b, a)):
            self.router_links[x].discard(y)
            if not self.router_links[x]:
                del self.router_links[x]
            weights = self.router_link_weights.get(x, {})
            weights.pop(y, None)
            if not weights:
                self.router_link_weights.pop(x, None)

    def connections(self) -> List[Tuple[str, str, int]]:
        """Every link once as ``(ip1, ip2, weight)``, in numeric address order."""

        out: List[Tuple[str, str, int]] = []
        for subnet in self.list_subnets():
            for a, nbrs in subnet.edges.items():
                for b, w in nbrs.items():
                    if address.sort_key(a) < address.sort_key(b):
                        out.append((a, b, w))
        for a, nbrs in self.router_links.items():
            for b in nbrs:
                if address.sort_key(a) < address.sort_key(b):
                    out.append((a, b, self.router_link_weights.get(a, {}).get(b, 0)))
        out.sort(key=lambda e: (address.sort_key(e[0]), address.sort_key(e[1])))
        return out
