from __future__ import annotations


class RoutingError(Exception):
    """Base class for every failure the topology and routing layers report.

    ``code`` is a stable tag (the class name) so callers can branch on the kind
    of failure without isinstance chains.
    """

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message

    @property
    def code(self) -> str:
        return type(self).__name__

    def __str__(self) -> str:
        return self.message or self.code


class AddressFormatError(RoutingError):
    pass


class SubnetNotFound(RoutingError):
    pass


class SystemNotFound(RoutingError):
    pass


class DuplicateSystem(RoutingError):
    pass


class AddressOutOfRange(RoutingError):
    pass


class DuplicateConnection(RoutingError):
    pass


class ConnectionNotFound(RoutingError):
    pass


class InvalidWeight(RoutingError):
    pass


class ConnectionTypeMismatch(RoutingError):
    pass


class NoPathFound(RoutingError):
    pass


class RouterRemovalDenied(RoutingError):
    pass


class TopologyError(RoutingError):
    """Structural invariant violated (overlapping subnets, router count)."""


class LoadError(RoutingError):
    def __init__(self, message: str, line: int = 0):
        if line:
            message = f"line {line}: {message}"
        super().__init__(message)
        self.line = line
