"""Topology model for the school network simulation.

This module defines the TopologyModel class, which places hosts on
subnets, assigns their addresses and answers reachability queries for the
network stack. Paths are delay-weighted shortest paths over a NetworkX
graph.
"""

from __future__ import annotations

import ipaddress
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

import networkx as nx

from school_net.config import ScenarioConfig
from school_net.core.enums import HostRole
from school_net.core.errors import ConfigurationError
from school_net.core.link import Link
from school_net.core.node import Host

logger = logging.getLogger(__name__)

ROUTER = "router"
SERVER = "server"


@dataclass(frozen=True)
class Path:
    """A resolved route between two hosts.

    Attributes:
        hops: Host IDs from source to destination, both included.
        links: Links traversed, in order.
    """

    hops: Tuple[str, ...]
    links: Tuple[Link, ...]

    @property
    def propagation_delay(self) -> float:
        return sum(link.propagation_delay for link in self.links)

    @property
    def bottleneck_capacity(self) -> float:
        if not self.links:
            return float("inf")
        return min(link.capacity for link in self.links)

    def delivery_delay(self, packet_size: int) -> float:
        """Store-and-forward delay of one packet along the path."""
        return sum(link.get_total_delay(packet_size) for link in self.links)


@dataclass
class Subnet:
    """An IPv4 segment and the hosts attached to it, in address order."""

    name: str
    network: ipaddress.IPv4Network
    label: str
    members: List[str] = field(default_factory=list)


class TopologyModel:
    """Hosts, links and subnets of the simulated network.

    Attributes:
        graph: NetworkX graph; every edge carries its ``Link`` and ``delay``.
        hosts: Host objects keyed by host ID.
        subnets: Subnets keyed by name, in creation order.
    """

    def __init__(self):
        self.graph = nx.Graph()
        self.hosts: Dict[str, Host] = {}
        self.subnets: Dict[str, Subnet] = {}
        self._paths: Dict[Tuple[str, str], Optional[Path]] = {}

    def add_host(self, host_id: str, role: HostRole, label: str = "") -> Host:
        """Add a host to the network.

        Raises:
            ConfigurationError: If the host already exists.
        """
        if host_id in self.hosts:
            raise ConfigurationError(f"Host {host_id} already exists")
        host = Host(host_id, role, label)
        self.hosts[host_id] = host
        self.graph.add_node(host_id, role=role)
        return host

    def add_link(self, source: str, target: str, capacity: float, delay: float) -> Link:
        """Add a bidirectional link between hosts.

        Args:
            source: Source host ID.
            target: Target host ID.
            capacity: Link capacity in bits per second.
            delay: Propagation delay in seconds.

        Returns:
            The created Link object.
        """
        if source not in self.hosts or target not in self.hosts:
            raise ConfigurationError(f"Hosts {source} and/or {target} do not exist")

        link = Link(source, target, capacity, delay)
        self.graph.add_edge(source, target, link=link, delay=delay, capacity=capacity)
        self._paths.clear()
        return link

    def add_subnet(
        self,
        name: str,
        cidr: str,
        members: Iterable[str],
        label: str = "",
        capacity: Optional[float] = None,
        delay: Optional[float] = None,
    ) -> Subnet:
        """Attach hosts to an IPv4 subnet and assign their addresses.

        Addresses are handed out in member order, starting at the first
        usable address of the network. When ``capacity`` is given, every
        member after the first is linked to the first one, which acts as the
        segment's gateway.
        """
        if name in self.subnets:
            raise ConfigurationError(f"Subnet {name} already exists")
        network = ipaddress.ip_network(cidr)
        subnet = Subnet(name, network, label or name, list(members))

        addresses = network.hosts()
        for host_id in subnet.members:
            if host_id not in self.hosts:
                raise ConfigurationError(f"Host {host_id} does not exist")
            try:
                self.hosts[host_id].addresses[name] = next(addresses)
            except StopIteration:
                raise ConfigurationError(f"Subnet {cidr} is too small for {name}") from None

        if capacity is not None and subnet.members:
            gateway = subnet.members[0]
            for host_id in subnet.members[1:]:
                self.add_link(host_id, gateway, capacity, delay or 0.0)

        self.subnets[name] = subnet
        return subnet

    def hosts_with_role(self, role: HostRole) -> List[Host]:
        return [host for host in self.hosts.values() if host.role == role]

    def address_of(self, host_id: str, subnet: Optional[str] = None) -> ipaddress.IPv4Address:
        host = self.hosts[host_id]
        if subnet is None:
            return host.primary_address
        return host.addresses[subnet]

    def resolve(self, source: str, destination: str) -> Optional[Path]:
        """Resolve the route between two hosts.

        Returns:
            The delay-weighted shortest path, or None if the hosts are not
            connected.
        """
        key = (source, destination)
        if key in self._paths:
            return self._paths[key]
        if source not in self.hosts or destination not in self.hosts:
            raise ConfigurationError(f"Hosts {source} and/or {destination} do not exist")

        try:
            hops = nx.shortest_path(self.graph, source, destination, weight="delay")
        except nx.NetworkXNoPath:
            logger.debug("No path from %s to %s", source, destination)
            path = None
        else:
            links = tuple(self.graph[u][v]["link"] for u, v in zip(hops, hops[1:]))
            path = Path(tuple(hops), links)

        self._paths[key] = path
        return path

    def format_address_report(self) -> str:
        """Format the address assigned to every access host, grouped by subnet."""
        rule = "=" * 56
        lines = ["", rule, "          IP ADDRESS ASSIGNMENT REPORT", rule]
        for subnet in self.subnets.values():
            hosts = [
                self.hosts[host_id]
                for host_id in subnet.members
                if self.hosts[host_id].role not in (HostRole.ROUTER, HostRole.SERVER)
            ]
            if not hosts:
                continue
            lines.append(f"{subnet.label} ({subnet.network}):")
            for host in hosts:
                lines.append(f"  - {host.label:<20}: {host.addresses[subnet.name]}")
            lines.append("")
        lines.append(rule)
        return "\n".join(lines)

    def __repr__(self) -> str:
        return f"TopologyModel(hosts={len(self.hosts)}, links={self.graph.number_of_edges()})"


def build_school_topology(config: ScenarioConfig) -> TopologyModel:
    """Build the school network: four LAN segments behind one router.

    Students and labs share the 192.168.30.0/24 segment. The router reaches
    the Internet server over a point-to-point link.
    """
    topology = TopologyModel()
    topology.add_host(ROUTER, HostRole.ROUTER, "Router")
    topology.add_host(SERVER, HostRole.SERVER, "Internet")

    def add_group(prefix: str, role: HostRole, count: int, label: str) -> List[str]:
        ids = []
        for i in range(count):
            host_id = f"{prefix}-{i + 1}"
            topology.add_host(host_id, role, f"{label} {i + 1}")
            ids.append(host_id)
        return ids

    admins = add_group("admin", HostRole.ADMIN, config.admins, "Admin")
    teachers = add_group("teacher", HostRole.TEACHER, config.teachers, "Teacher Room")
    students = add_group("student", HostRole.STUDENT, config.students, "Student Room")
    labs = add_group("lab", HostRole.LAB, config.labs, "Computer Lab")
    guests = add_group("guest", HostRole.GUEST, config.guests, "Guest AP")

    lan = dict(capacity=config.lan_capacity_bps, delay=config.lan_delay)
    topology.add_subnet("admin", "192.168.10.0/24", [ROUTER] + admins, "ADMINISTRATION", **lan)
    topology.add_subnet("teachers", "192.168.20.0/24", [ROUTER] + teachers, "TEACHER ROOMS", **lan)
    topology.add_subnet(
        "classrooms", "192.168.30.0/24", [ROUTER] + students + labs, "STUDENT ROOMS AND LABS", **lan
    )
    topology.add_subnet("guests", "192.168.40.0/24", [ROUTER] + guests, "GUESTS", **lan)
    topology.add_subnet(
        "internet",
        "203.0.113.0/30",
        [ROUTER, SERVER],
        "INTERNET",
        capacity=config.wan_capacity_bps,
        delay=config.wan_delay,
    )

    logger.info("Built school topology: %r", topology)
    return topology
