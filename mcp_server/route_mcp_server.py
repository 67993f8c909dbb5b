"""
Optional: MCP server exposing the routing network as tools.

Lets an MCP client load a topology, inspect subnets and ask for the source
route between two addresses.

Run (example):
  pip install -e .
  python mcp_server/route_mcp_server.py

Then connect an MCP client to:
  http://localhost:8000/mcp

Set NETROUTE_TOPOLOGY to preload a topology file.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional
import os

from mcp.server.fastmcp import FastMCP
from pydantic import ValidationError

from netroute.schema import TopologyDocument
from netroute.service import NetworkService, Outcome


def _result(res: Outcome, key: str = "value") -> Dict[str, Any]:
    if not res.ok:
        return {"ok": False, "error": res.code, "message": res.message}
    return {"ok": True, key: res.value}


def validate_topology(data: Dict[str, Any]) -> List[str]:
    """Problems found in a topology document, schema first, then structure."""

    try:
        TopologyDocument.model_validate(data)
    except ValidationError as e:
        return [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()]
    res = NetworkService().load_document(data)
    return [] if res.ok else [res.message]


def load_topology_text(service: NetworkService, diagram: str) -> Dict[str, Any]:
    res = service.load_text(diagram)
    if not res.ok:
        return _result(res)
    return {"ok": True, "subnets": service.list_subnets().value}


def load_topology_json(service: NetworkService, topology_json: Dict[str, Any]) -> Dict[str, Any]:
    res = service.load_document(topology_json)
    if not res.ok:
        return _result(res)
    return {"ok": True, "subnets": service.list_subnets().value}


def send_packet(service: NetworkService, from_ip: str, to_ip: str) -> Dict[str, Any]:
    res = service.route_with_cost(from_ip, to_ip)
    if not res.ok:
        return _result(res)
    path, cost = res.value
    return {"ok": True, "path": path, "cost": cost}


def create_server(service: Optional[NetworkService] = None) -> FastMCP:
    service = service if service is not None else NetworkService()
    mcp = FastMCP(
        "NetRoute MCP Server",
        instructions="Tools for loading an IPv4 subnet topology and computing source routes.",
        stateless_http=True,
        json_response=True,
    )

    @mcp.tool()
    def validate_topology_json(topology_json: Dict[str, Any]) -> Dict[str, Any]:
        """Validate a topology JSON object; returns problems list."""
        problems = validate_topology(topology_json)
        return {"ok": len(problems) == 0, "problems": problems}

    @mcp.tool(name="load_topology_text")
    def _load_text(diagram: str) -> Dict[str, Any]:
        """Replace the current network with a diagram-format topology."""
        return load_topology_text(service, diagram)

    @mcp.tool(name="load_topology_json")
    def _load_json(topology_json: Dict[str, Any]) -> Dict[str, Any]:
        """Replace the current network with a JSON topology document."""
        return load_topology_json(service, topology_json)

    @mcp.tool(name="send_packet")
    def _send(from_ip: str, to_ip: str) -> Dict[str, Any]:
        """Source route between two addresses, with its cost."""
        return send_packet(service, from_ip, to_ip)

    @mcp.tool()
    def list_subnets() -> Dict[str, Any]:
        """Subnets in numeric order."""
        return _result(service.list_subnets(), "subnets")

    @mcp.tool()
    def list_range(subnet: str) -> Dict[str, Any]:
        """First and last address of a subnet."""
        return _result(service.subnet_range(subnet), "range")

    @mcp.tool()
    def list_systems(subnet: str) -> Dict[str, Any]:
        """Addresses of the systems in a subnet."""
        return _result(service.list_systems(subnet), "systems")

    @mcp.tool()
    def add_connection(ip1: str, ip2: str, weight: int = 0) -> Dict[str, Any]:
        """Add an intra-subnet link (weight > 0) or a router-to-router link."""
        return _result(service.add_connection(ip1, ip2, weight))

    @mcp.tool()
    def remove_connection(ip1: str, ip2: str) -> Dict[str, Any]:
        """Remove an existing link."""
        return _result(service.remove_connection(ip1, ip2))

    return mcp


if __name__ == "__main__":
    svc = NetworkService()
    preload = os.getenv("NETROUTE_TOPOLOGY")
    if preload:
        res = svc.load_file(preload)
        if not res.ok:
            raise SystemExit(f"Cannot load {preload}: {res.message}")
    # serves http://localhost:8000/mcp
    create_server(svc).run(transport="streamable-http")
