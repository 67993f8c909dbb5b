from __future__ import annotations

from typing import List, Optional

from . import address
from .errors import NoPathFound, SystemNotFound
from .subnet import Subnet
from .tiebreak import TieBreakState
from .topology import Network


def collapse(path: List[str]) -> List[str]:
    """Drop consecutive repeats (the router appears at each segment seam)."""

    out: List[str] = []
    for hop in path:
        if not out or out[-1] != hop:
            out.append(hop)
    return out


class RoutingEngine:
    """Source routing over a :class:`Network`.

    Same-subnet traffic follows the subnet's weighted shortest path. Cross-subnet
    traffic is stitched from three segments: sender to its router, router to
    router by hop count, and destination router to receiver.
    """

    def __init__(self, network: Network):
        self.network = network

    def inter_subnet_path(self, from_router: str, to_router: str) -> Optional[List[str]]:
        src = address.canonical(from_router)
        dst = address.canonical(to_router)
        if src == dst:
            return [src]

        links = self.network.router_links
        state = TieBreakState(source=src)
        while True:
            cur = state.pop()
            if cur is None or cur == dst:
                break
            for nb in links.get(cur, ()):
                state.offer(cur, nb)

        path = state.path_to(dst)
        if len(path) == 1:
            return None
        return path

    def _member(self, subnet: Subnet, ip: str) -> str:
        system = subnet.find_system(ip)
        if system is None:
            raise SystemNotFound(f"System {ip} not found in subnet {subnet.cidr}")
        return system.address

    def _router_of(self, subnet: Subnet) -> str:
        router = subnet.router
        if router is None:
            raise NoPathFound(f"Subnet {subnet.cidr} has no router")
        return router.address

    def route(self, from_ip: str, to_ip: str) -> List[str]:
        src_net = self.network.require_subnet(from_ip)
        dst_net = self.network.require_subnet(to_ip)
        src = self._member(src_net, from_ip)
        dst = self._member(dst_net, to_ip)

        if src_net is dst_net:
            path = src_net.shortest_path(src, dst)
            if path is None:
                raise NoPathFound(f"No path found within subnet {src_net.cidr}")
            return collapse(path)

        sender_router = self._router_of(src_net)
        if src == sender_router:
            to_router = [src]
        else:
            to_router = src_net.shortest_path(src, sender_router)
            if to_router is None:
                raise NoPathFound(f"No path from {src} to its router {sender_router}")

        receiver_router = self._router_of(dst_net)
        core = self.inter_subnet_path(sender_router, receiver_router)
        if not core:
            raise NoPathFound(f"No router path from {sender_router} to {receiver_router}")

        if dst == receiver_router:
            return collapse(to_router + core)

        to_receiver = dst_net.shortest_path(receiver_router, dst)
        if to_receiver is None:
            raise NoPathFound(f"No path from router {receiver_router} to {dst}")
        return collapse(to_router + core + to_receiver)

    def route_cost(self, path: List[str]) -> int:
        """Summed intra-subnet weights plus one per router-to-router hop."""

        total = 0
        for a, b in zip(path, path[1:]):
            sa = self.network.require_subnet(a)
            sb = self.network.require_subnet(b)
            if sa is sb:
                total += sa.path_cost([a, b])
            else:
                total += 1
        return total
