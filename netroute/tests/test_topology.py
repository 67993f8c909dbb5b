import unittest

from netroute.errors import (
    AddressFormatError,
    AddressOutOfRange,
    ConnectionNotFound,
    ConnectionTypeMismatch,
    DuplicateConnection,
    DuplicateSystem,
    InvalidWeight,
    RouterRemovalDenied,
    SubnetNotFound,
    SystemNotFound,
    TopologyError,
)
from netroute.system import Role
from netroute.topology import Network


def two_subnets() -> Network:
    net = Network()
    net.load_topology(
        subnets=[("192.168.1.0", 24), ("10.0.0.0", 8)],
        systems=[
            ("192.168.1.1", True),
            ("192.168.1.2", False),
            ("192.168.1.3", False),
            ("10.0.0.1", True),
            ("10.0.0.2", False),
        ],
        edges=[("192.168.1.1", "192.168.1.2", 3), ("10.0.0.1", "10.0.0.2", 1)],
    )
    return net


class TestRegistryQueries(unittest.TestCase):
    def test_list_subnets_numeric_order(self):
        net = Network()
        for base in ("192.168.1.0", "9.0.0.0", "10.0.0.0", "100.0.0.0"):
            net.create_subnet(base, 24)
        self.assertEqual(
            [s.cidr for s in net.list_subnets()],
            ["9.0.0.0/24", "10.0.0.0/24", "100.0.0.0/24", "192.168.1.0/24"],
        )

    def test_range_and_systems(self):
        net = two_subnets()
        self.assertEqual(net.subnet_range("10.0.0.0/8"), ("10.0.0.0", "10.255.255.255"))
        self.assertEqual(net.subnet_range("192.168.1.0"), ("192.168.1.0", "192.168.1.255"))
        self.assertEqual(net.list_systems("192.168.1.0/24"), ["192.168.1.1", "192.168.1.2", "192.168.1.3"])
        with self.assertRaises(SubnetNotFound):
            net.subnet_range("172.16.0.0/16")
        with self.assertRaises(SubnetNotFound):
            net.list_systems("192.168.1.0/25")

    def test_find_subnet_by_containment(self):
        net = two_subnets()
        self.assertEqual(net.find_subnet("10.200.3.4").cidr, "10.0.0.0/8")
        self.assertIsNone(net.find_subnet("172.16.0.1"))
        self.assertIsNone(net.find_subnet("garbage"))
        with self.assertRaises(AddressFormatError):
            net.require_subnet("garbage")


class TestRegistryConstruction(unittest.TestCase):
    def test_overlapping_subnets_rejected(self):
        net = Network()
        net.create_subnet("10.0.0.0", 8)
        with self.assertRaises(TopologyError):
            net.create_subnet("10.1.0.0", 16)
        with self.assertRaises(TopologyError):
            net.create_subnet("0.0.0.0", 0)

    def test_addresses_unique_and_in_range(self):
        net = two_subnets()
        sn = net.subnet_for("192.168.1.0/24")
        with self.assertRaises(DuplicateSystem):
            net.add_to_subnet(sn, net.create_system("192.168.1.2"))
        with self.assertRaises(AddressOutOfRange):
            net.add_to_subnet(sn, net.create_system("10.9.9.9"))
        with self.assertRaises(TopologyError):
            net.add_to_subnet(sn, net.create_system("192.168.1.254", is_router=True))

    def test_validate_requires_one_router(self):
        net = Network()
        with self.assertRaises(TopologyError):
            net.load_topology(subnets=[("10.0.0.0", 24)], systems=[("10.0.0.5", False)], edges=[])

    def test_failed_load_leaves_registry_unchanged(self):
        net = Network()
        with self.assertRaises(InvalidWeight):
            net.load_topology(
                subnets=[("10.0.0.0", 24)],
                systems=[("10.0.0.1", True), ("10.0.0.2", False)],
                edges=[("10.0.0.1", "10.0.0.2", 0)],
            )
        self.assertEqual(net.subnets, {})
        self.assertEqual(net.device_names, {})

        net = two_subnets()
        with self.assertRaises(TopologyError):
            net.load_topology(
                subnets=[("172.16.0.0", 16)],
                systems=[("172.16.0.5", False)],
                edges=[("192.168.1.1", "10.0.0.1", 0)],
            )
        self.assertEqual(sorted(net.subnets), ["10.0.0.0", "192.168.1.0"])
        self.assertEqual(net.router_links, {})
        self.assertEqual(net.list_systems("10.0.0.0/8"), ["10.0.0.1", "10.0.0.2"])

    def test_load_adds_to_existing_registry(self):
        net = two_subnets()
        net.load_topology(subnets=[("172.16.0.0", 16)], systems=[("172.16.0.1", True)], edges=[("10.0.0.1", "172.16.0.1", 0)])
        self.assertEqual(sorted(net.subnets), ["10.0.0.0", "172.16.0.0", "192.168.1.0"])
        self.assertEqual(net.router_neighbors("172.16.0.1"), ["10.0.0.1"])

    def test_system_outside_any_subnet(self):
        net = Network()
        with self.assertRaises(SubnetNotFound):
            net.load_topology(subnets=[("10.0.0.0", 24)], systems=[("11.0.0.1", True)], edges=[])


class TestRegistryConnections(unittest.TestCase):
    def test_router_link_is_symmetric(self):
        net = two_subnets()
        net.add_connection("192.168.1.1", "10.0.0.1", 5)
        self.assertEqual(net.router_neighbors("10.0.0.1"), ["192.168.1.1"])
        self.assertEqual(net.router_neighbors("192.168.1.1"), ["10.0.0.1"])
        self.assertEqual(net.router_link_weights["10.0.0.1"]["192.168.1.1"], 5)
        with self.assertRaises(DuplicateConnection):
            net.add_connection("10.0.0.1", "192.168.1.1")

    def test_hosts_cannot_link_across_subnets(self):
        net = two_subnets()
        with self.assertRaises(ConnectionTypeMismatch):
            net.add_connection("192.168.1.2", "10.0.0.1")
        with self.assertRaises(ConnectionTypeMismatch):
            net.add_connection("192.168.1.2", "10.0.0.2", 4)
        self.assertEqual(net.router_links, {})

    def test_unknown_endpoints(self):
        net = two_subnets()
        with self.assertRaises(SubnetNotFound):
            net.add_connection("172.16.0.1", "10.0.0.1")
        with self.assertRaises(SystemNotFound):
            net.add_connection("192.168.1.1", "10.0.0.77")
        with self.assertRaises(AddressFormatError):
            net.add_connection("192.168.1", "10.0.0.1")

    def test_intra_subnet_delegates(self):
        net = two_subnets()
        net.add_connection("192.168.1.2", "192.168.1.3", 6)
        self.assertEqual(net.subnet_for("192.168.1.0").weight("192.168.1.3", "192.168.1.2"), 6)
        with self.assertRaises(InvalidWeight):
            net.add_connection("192.168.1.1", "192.168.1.3", 0)

    def test_remove_connections(self):
        net = two_subnets()
        net.add_connection("192.168.1.1", "10.0.0.1")
        net.remove_connection("10.0.0.1", "192.168.1.1")
        self.assertEqual(net.router_links, {})
        self.assertEqual(net.router_link_weights, {})
        with self.assertRaises(ConnectionNotFound):
            net.remove_connection("10.0.0.1", "192.168.1.1")
        with self.assertRaises(ConnectionNotFound):
            net.remove_connection("192.168.1.2", "192.168.1.3")

    def test_connections_listing(self):
        net = two_subnets()
        net.add_connection("192.168.1.1", "10.0.0.1")
        self.assertEqual(
            net.connections(),
            [
                ("10.0.0.1", "10.0.0.2", 1),
                ("10.0.0.1", "192.168.1.1", 0),
                ("192.168.1.1", "192.168.1.2", 3),
            ],
        )


class TestRegistrySystems(unittest.TestCase):
    def test_add_and_remove_host(self):
        net = two_subnets()
        net.add_system("10.0.0.0/8", "10.1.2.3")
        self.assertIn("10.1.2.3", net.list_systems("10.0.0.0"))
        net.remove_system("10.0.0.0/8", "10.1.2.3")
        self.assertNotIn("10.1.2.3", net.list_systems("10.0.0.0"))

    def test_remove_router_denied(self):
        net = two_subnets()
        net.add_connection("192.168.1.1", "10.0.0.1")
        with self.assertRaises(RouterRemovalDenied):
            net.remove_system("10.0.0.0/8", "10.0.0.1")
        self.assertIn("10.0.0.1", net.list_systems("10.0.0.0/8"))
        self.assertEqual(net.router_neighbors("10.0.0.1"), ["192.168.1.1"])

    def test_remove_missing_host(self):
        net = two_subnets()
        with self.assertRaises(SystemNotFound):
            net.remove_system("10.0.0.0/8", "10.0.0.99")
        with self.assertRaises(SubnetNotFound):
            net.remove_system("11.0.0.0/8", "11.0.0.1")

    def test_second_router_rejected(self):
        net = two_subnets()
        with self.assertRaises(TopologyError):
            net.add_system("10.0.0.0/8", "10.0.0.9", Role.ROUTER)


if __name__ == "__main__":
    unittest.main()
