"""Deterministic source routing over a small internetwork of IPv4 subnets.

Each subnet holds hosts and one router joined by weighted links; routers of
different subnets are joined by unweighted links. Routes are computed end to
end before anything is "sent".
"""

from .errors import RoutingError
from .system import NetworkSystem, Role
from .subnet import Subnet
from .topology import Network
from .routing import RoutingEngine
from .service import NetworkService, Outcome
from .cli import CommandEngine

__all__ = [
    "RoutingError",
    "NetworkSystem",
    "Role",
    "Subnet",
    "Network",
    "RoutingEngine",
    "NetworkService",
    "Outcome",
    "CommandEngine",
]
