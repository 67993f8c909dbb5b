from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple
import threading

from . import loader
from .errors import RoutingError
from .routing import RoutingEngine
from .system import Role
from .topology import Network


LogCallback = Callable[..., None]


@dataclass
class Outcome:
    """Result of a service call: a value on success, a tagged error otherwise."""

    ok: bool
    value: Any = None
    error: Optional[RoutingError] = None

    @property
    def code(self) -> Optional[str]:
        return self.error.code if self.error is not None else None

    @property
    def message(self) -> str:
        return str(self.error) if self.error is not None else ""


class NetworkService:
    """Boundary around a :class:`Network` and its :class:`RoutingEngine`.

    Every call runs under one lock and returns an :class:`Outcome`; topology
    and routing errors never escape as exceptions. A failed mutation leaves
    the network as it was, and a failed load keeps the previous network.
    """

    def __init__(self, network: Optional[Network] = None, log_cb: Optional[LogCallback] = None):
        self.network = network if network is not None else Network()
        self.engine = RoutingEngine(self.network)
        self.log_cb = log_cb
        self._lock = threading.RLock()

    def _log(self, kind: str, ok: bool, error: Optional[str], **data: Any):
        if self.log_cb is None:
            return
        self.log_cb(kind, ok=ok, error=error, **data)

    def _run(self, kind: str, fn: Callable[[], Any], **data: Any) -> Outcome:
        with self._lock:
            try:
                value = fn()
            except RoutingError as e:
                self._log(kind, False, e.code, message=str(e), **data)
                return Outcome(ok=False, error=e)
        self._log(kind, True, None, **data)
        return Outcome(ok=True, value=value)

    def _replace(self, network: Network) -> Network:
        self.network = network
        self.engine = RoutingEngine(network)
        return network

    # ───────────────────────────── Loading ─────────────────────────────

    def load_file(self, path: str) -> Outcome:
        return self._run("load_file", lambda: self._replace(loader.load_file(path)), path=path)

    def load_text(self, text: str) -> Outcome:
        return self._run("load_text", lambda: self._replace(loader.load_text(text)))

    def load_document(self, data: Dict[str, Any]) -> Outcome:
        return self._run("load_document", lambda: self._replace(loader.load_document(data)))

    def export_document(self, name: str = "Network") -> Outcome:
        return self._run("export_document", lambda: loader.export_document(self.network, name=name))

    def render(self) -> Outcome:
        return self._run("render", lambda: loader.render(self.network))

    # ───────────────────────────── Mutation ─────────────────────────────

    def add_system(self, subnet: str, ip: str, role: Role = Role.HOST) -> Outcome:
        return self._run(
            "add_system",
            lambda: self.network.add_system(subnet, ip, role).address,
            subnet=subnet,
            ip=ip,
            role=role.value,
        )

    def remove_system(self, subnet: str, ip: str) -> Outcome:
        return self._run("remove_system", lambda: self.network.remove_system(subnet, ip).address, subnet=subnet, ip=ip)

    def add_connection(self, ip1: str, ip2: str, weight: int = 0) -> Outcome:
        return self._run(
            "add_connection", lambda: self.network.add_connection(ip1, ip2, weight), ip1=ip1, ip2=ip2, weight=weight
        )

    def remove_connection(self, ip1: str, ip2: str) -> Outcome:
        return self._run("remove_connection", lambda: self.network.remove_connection(ip1, ip2), ip1=ip1, ip2=ip2)

    # ───────────────────────────── Queries ─────────────────────────────

    def route(self, from_ip: str, to_ip: str) -> Outcome:
        return self._run("route", lambda: self.engine.route(from_ip, to_ip), src=from_ip, dst=to_ip)

    def route_with_cost(self, from_ip: str, to_ip: str) -> Outcome:
        def _go() -> Tuple[List[str], int]:
            path = self.engine.route(from_ip, to_ip)
            return path, self.engine.route_cost(path)

        return self._run("route_with_cost", _go, src=from_ip, dst=to_ip)

    def list_subnets(self) -> Outcome:
        return self._run("list_subnets", lambda: [s.cidr for s in self.network.list_subnets()])

    def subnet_range(self, subnet: str) -> Outcome:
        return self._run("subnet_range", lambda: self.network.subnet_range(subnet), subnet=subnet)

    def list_systems(self, subnet: str) -> Outcome:
        return self._run("list_systems", lambda: self.network.list_systems(subnet), subnet=subnet)
