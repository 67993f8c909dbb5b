from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from . import address


class Role(str, Enum):
    HOST = "host"
    ROUTER = "router"


@dataclass(frozen=True)
class NetworkSystem:
    """An endpoint of the internetwork. Identity is the canonical address."""

    address: str
    role: Role = Role.HOST

    @staticmethod
    def host(ip: str) -> "NetworkSystem":
        return NetworkSystem(address=address.canonical(ip), role=Role.HOST)

    @staticmethod
    def router(ip: str) -> "NetworkSystem":
        return NetworkSystem(address=address.canonical(ip), role=Role.ROUTER)

    @property
    def is_router(self) -> bool:
        return self.role is Role.ROUTER
