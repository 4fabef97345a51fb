"""Transmit request for the school network simulation.

This module defines the TransmitRequest class, the unit of simulated
traffic a source hands to the network stack.
"""

import itertools
from dataclasses import dataclass, field
from typing import Optional

from school_net.core.enums import TrafficClass, Transport

_request_ids = itertools.count(1)


@dataclass
class TransmitRequest:
    """Represents one simulated packet on its way to a sink.

    Attributes:
        source: Source node ID.
        destination: Destination node ID.
        traffic_class: Class the packet belongs to.
        size: Size of packet in bytes.
        marking: ToS byte carried by the packet.
        transport: Transport reliability mode.
        creation_time: Time when the packet was sent.
        id: Unique identifier for the packet.
        delivery_time: Time when the packet reached its sink.
    """

    source: str
    destination: str
    traffic_class: TrafficClass
    size: int
    marking: int
    transport: Transport
    creation_time: float = 0
    id: int = field(init=False)
    delivery_time: Optional[float] = None

    def __post_init__(self):
        self.id = next(_request_ids)

    @property
    def dscp(self) -> int:
        """DSCP code point, the upper six bits of the ToS byte."""
        return self.marking >> 2

    def record_delivery(self, time: float) -> None:
        """Record the time the packet reached its sink.

        Args:
            time: Current simulation time.
        """
        self.delivery_time = time

    def get_total_delay(self) -> Optional[float]:
        """Calculate end-to-end delay if the packet has been delivered.

        Returns:
            Total delay in seconds or None if the packet hasn't arrived.
        """
        if self.delivery_time is None:
            return None
        return self.delivery_time - self.creation_time
