import unittest

from mcp.server.fastmcp import FastMCP

from mcp_server import route_mcp_server as srv
from netroute.service import NetworkService


DOC = {
    "schemaVersion": 1,
    "meta": {"name": "two subnets"},
    "subnets": [
        {
            "cidr": "192.168.1.0/24",
            "systems": [
                {"ip": "192.168.1.1", "role": "router", "name": "router1"},
                {"ip": "192.168.1.2", "name": "pc2"},
            ],
        },
        {"cidr": "10.0.0.0/24", "systems": [{"ip": "10.0.0.1", "role": "router"}]},
    ],
    "links": [
        {"a": "192.168.1.1", "b": "192.168.1.2", "weight": 2},
        {"a": "192.168.1.1", "b": "10.0.0.1"},
    ],
}


class TestToolHelpers(unittest.TestCase):
    def test_validate_topology(self):
        self.assertEqual(srv.validate_topology(DOC), [])

        problems = srv.validate_topology({"subnets": [], "nodes": []})
        self.assertEqual(len(problems), 1)
        self.assertTrue(problems[0].startswith("nodes:"))

        two_routers = {
            "subnets": [
                {
                    "cidr": "10.0.0.0/24",
                    "systems": [{"ip": "10.0.0.1", "role": "router"}, {"ip": "10.0.0.2", "role": "router"}],
                }
            ]
        }
        problems = srv.validate_topology(two_routers)
        self.assertEqual(len(problems), 1)
        self.assertIn("router", problems[0])

    def test_load_and_send(self):
        svc = NetworkService()
        out = srv.load_topology_json(svc, DOC)
        self.assertEqual(out, {"ok": True, "subnets": ["10.0.0.0/24", "192.168.1.0/24"]})

        out = srv.send_packet(svc, "192.168.1.2", "10.0.0.1")
        self.assertEqual(out, {"ok": True, "path": ["192.168.1.2", "192.168.1.1", "10.0.0.1"], "cost": 3})

        out = srv.send_packet(svc, "192.168.1.2", "10.0.0.7")
        self.assertFalse(out["ok"])
        self.assertEqual(out["error"], "SystemNotFound")

    def test_load_text_reports_line(self):
        svc = NetworkService()
        out = srv.load_topology_text(svc, "graph\n    bogus line\n")
        self.assertFalse(out["ok"])
        self.assertEqual(out["error"], "LoadError")
        self.assertIn("line 2", out["message"])

    def test_create_server(self):
        svc = NetworkService()
        self.assertIsInstance(srv.create_server(svc), FastMCP)


if __name__ == "__main__":
    unittest.main()
