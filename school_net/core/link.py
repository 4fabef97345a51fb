"""Link class for the school network topology.

This module defines the Link class, which describes a network link
between two hosts of the topology.
"""

from dataclasses import dataclass

from school_net.core.errors import ConfigurationError


@dataclass(frozen=True)
class Link:
    """Represents a network link between hosts.

    Attributes:
        source: Source host ID.
        target: Target host ID.
        capacity: Link capacity in bits per second.
        propagation_delay: Propagation delay in seconds.
    """

    source: str
    target: str
    capacity: float
    propagation_delay: float

    def __post_init__(self):
        if self.capacity <= 0:
            raise ConfigurationError(
                f"Link {self.source}->{self.target} capacity must be positive"
            )
        if self.propagation_delay < 0:
            raise ConfigurationError(
                f"Link {self.source}->{self.target} delay must be non-negative"
            )

    def calculate_transmission_delay(self, packet_size: int) -> float:
        """Calculate transmission delay based on packet size and link capacity.

        Args:
            packet_size: Size of the packet in bytes.

        Returns:
            Transmission delay in seconds.
        """
        return (packet_size * 8) / self.capacity

    def get_total_delay(self, packet_size: int) -> float:
        """Calculate total delay for a packet (transmission + propagation).

        Args:
            packet_size: Size of the packet in bytes.

        Returns:
            Total delay in seconds.
        """
        return self.calculate_transmission_delay(packet_size) + self.propagation_delay

    def __repr__(self) -> str:
        return f"Link({self.source}->{self.target}, {self.capacity/1000000:.1f}Mbps, {self.propagation_delay*1000:.1f}ms)"
