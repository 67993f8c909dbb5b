"""Topology loading and rendering.

Two input formats are understood. The diagram format describes subnets as
subgraphs of a mermaid-like graph::

    graph
        subgraph 192.168.1.0/24
            router1[192.168.1.1]
            pc1[192.168.1.2]
            router1 <-->|2| pc1
        end
        router1 <--> router2

A declared system is a router when its name contains "router". Weighted links
inside a subgraph are intra-subnet edges; unweighted links outside every
subgraph join routers of different subnets and are applied once the whole
file has been read.

The JSON format is a :class:`netroute.schema.TopologyDocument`.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple
import json
import re

from pydantic import ValidationError

from . import address
from .errors import LoadError, RoutingError
from .schema import LinkSpec, SubnetSpec, SystemSpec, TopologyDocument, TopologyMeta
from .topology import Network


_SYSTEM_RE = re.compile(r"^([^\[\]\s]+)\s*\[\s*([^\]]*?)\s*\]$")
_LINK_RE = re.compile(r"^(\S+?)\s*<-->\s*(?:\|\s*([^|]*?)\s*\|)?\s*(\S+)$")


def _is_router_name(name: str) -> bool:
    return "router" in name.lower()


def _resolve(net: Network, name: str, lineno: int) -> str:
    ip = net.device_names.get(name)
    if ip is None:
        raise LoadError(f"Device '{name}' not found", lineno)
    return ip


def _parse_weight(raw: Optional[str], lineno: int) -> Optional[int]:
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        raise LoadError(f"Invalid weight '{raw}'", lineno)


def _apply_links(net: Network, links: List[Tuple[int, str, str, int]]):
    for ln, a, b, w in links:
        ip1 = _resolve(net, a, ln)
        ip2 = _resolve(net, b, ln)
        try:
            net.add_connection(ip1, ip2, w)
        except RoutingError as e:
            raise LoadError(str(e), ln) from e


class _DiagramParser:
    def __init__(self):
        self.net = Network()
        self.current = None
        self.subnet_links: List[Tuple[int, str, str, int]] = []
        self.router_links: List[Tuple[int, str, str, int]] = []

    def feed(self, line: str, lineno: int):
        if not line or line == "graph" or line.startswith("graph ") or line.startswith("%%"):
            return

        if line.startswith("subgraph"):
            if self.current is not None:
                raise LoadError(f"Nested subgraph inside {self.current.cidr}", lineno)
            parts = line.split()
            if len(parts) != 2:
                raise LoadError("Expected 'subgraph <cidr>'", lineno)
            base, prefix = address.parse_cidr(parts[1])
            self.current = self.net.create_subnet(base, prefix)
            return

        if line == "end":
            if self.current is None:
                raise LoadError("'end' without an open subgraph", lineno)
            _apply_links(self.net, self.subnet_links)
            self.subnet_links.clear()
            self.current = None
            return

        m = _LINK_RE.match(line)
        if m:
            a, raw_weight, b = m.groups()
            weight = _parse_weight(raw_weight, lineno)
            if self.current is not None:
                if weight is None:
                    raise LoadError(f"Connection {a} <--> {b} inside a subnet needs a weight", lineno)
                self.subnet_links.append((lineno, a, b, weight))
            else:
                self.router_links.append((lineno, a, b, weight or 0))
            return

        m = _SYSTEM_RE.match(line)
        if m:
            name, ip = m.groups()
            if self.current is None:
                raise LoadError(f"System '{name}' declared outside a subgraph", lineno)
            if name in self.net.device_names:
                raise LoadError(f"Duplicate device name '{name}'", lineno)
            system = self.net.create_system(ip, _is_router_name(name))
            self.net.add_to_subnet(self.current, system, name=name)
            return

        raise LoadError(f"Unrecognized line '{line}'", lineno)

    def finish(self) -> Network:
        if self.current is not None:
            raise LoadError(f"Subgraph {self.current.cidr} is missing 'end'")
        # Router links may name routers declared further down the file.
        _apply_links(self.net, self.router_links)
        try:
            self.net.validate()
        except RoutingError as e:
            raise LoadError(str(e)) from e
        return self.net


def load_text(text: str) -> Network:
    parser = _DiagramParser()
    for lineno, raw in enumerate((text or "").splitlines(), start=1):
        try:
            parser.feed(raw.strip(), lineno)
        except LoadError:
            raise
        except RoutingError as e:
            raise LoadError(str(e), lineno) from e
    return parser.finish()


def load_document(data: Dict[str, Any]) -> Network:
    try:
        doc = TopologyDocument.model_validate(data)
    except ValidationError as e:
        raise LoadError(f"Invalid topology document: {e.error_count()} problem(s)") from e

    net = Network()
    try:
        for sn in doc.subnets:
            base, prefix = address.parse_cidr(sn.cidr)
            subnet = net.create_subnet(base, prefix)
            for s in sn.systems:
                net.add_to_subnet(subnet, net.create_system(s.ip, s.role == "router"), name=s.name)
        for link in doc.links:
            net.add_connection(link.a, link.b, link.weight)
        net.validate()
    except RoutingError as e:
        raise LoadError(str(e)) from e
    return net


def export_document(net: Network, name: str = "Network") -> Dict[str, Any]:
    names = {ip: n for n, ip in net.device_names.items()}
    doc = TopologyDocument(
        meta=TopologyMeta(name=name),
        subnets=[
            SubnetSpec(
                cidr=sn.cidr,
                systems=[
                    SystemSpec(ip=s.address, role=s.role.value, name=names.get(s.address))
                    for s in sn.systems
                ],
            )
            for sn in net.list_subnets()
        ],
        links=[LinkSpec(a=a, b=b, weight=w) for a, b, w in net.connections()],
    )
    return doc.model_dump(exclude_none=True)


def load_file(path: str) -> Network:
    try:
        with open(path, "r", encoding="utf-8") as f:
            if str(path).lower().endswith(".json"):
                try:
                    data = json.load(f)
                except json.JSONDecodeError as e:
                    raise LoadError(f"Invalid JSON: {e.msg}", e.lineno) from e
                return load_document(data)
            return load_text(f.read())
    except OSError as e:
        raise LoadError(f"Cannot read '{path}': {e.strerror or e}") from e


def _display_names(net: Network) -> Dict[str, str]:
    # Roles are read back from names; a stored name is kept only when it
    # implies the system's role.
    stored = {ip: n for n, ip in net.device_names.items()}
    names: Dict[str, str] = {}
    for sn in net.subnets.values():
        for s in sn.systems:
            name = stored.get(s.address)
            if name is None or _is_router_name(name) != s.is_router:
                name = f"router_{s.address}" if s.is_router else s.address
            names[s.address] = name
    return names


def render(net: Network) -> str:
    """Diagram text for ``net``; feeding it back to :func:`load_text` rebuilds it."""

    names = _display_names(net)
    lines = ["graph"]
    for sn in net.list_subnets():
        lines.append(f"    subgraph {sn.cidr}")
        for s in sn.systems:
            lines.append(f"        {names[s.address]}[{s.address}]")
        for a, nbrs in sn.edges.items():
            for b, w in nbrs.items():
                if address.sort_key(a) < address.sort_key(b):
                    lines.append(f"        {names[a]} <-->|{w}| {names[b]}")
        lines.append("    end")
    for a, b, _w in net.connections():
        if net.find_subnet(a) is not net.find_subnet(b):
            lines.append(f"    {names[a]} <--> {names[b]}")
    return "\n".join(lines)
