"""Host class for the school network topology.

This module defines the Host class, which represents a node (classroom,
access point, router, server) of the simulated network.
"""

import ipaddress
from dataclasses import dataclass, field
from typing import Dict

from school_net.core.enums import HostRole


@dataclass
class Host:
    """Represents a host of the topology.

    Attributes:
        id: Unique identifier for the host.
        role: What the host is in the school.
        label: Human readable name used in reports.
        addresses: IPv4 address per attached subnet, keyed by subnet name.
    """

    id: str
    role: HostRole
    label: str = ""
    addresses: Dict[str, ipaddress.IPv4Address] = field(default_factory=dict)

    def __post_init__(self):
        if not self.label:
            self.label = self.id

    @property
    def primary_address(self) -> ipaddress.IPv4Address:
        """Address on the first subnet the host was attached to."""
        if not self.addresses:
            raise LookupError(f"Host {self.id} has no address")
        return next(iter(self.addresses.values()))

    def __repr__(self) -> str:
        return f"Host({self.id})"
