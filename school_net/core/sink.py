"""Flow sinks for the school network simulation.

This module defines the FlowSink class, a receiver that counts the bytes
of one traffic class, and the SinkTable that holds the server's sinks.
"""

import logging
from typing import Dict, Iterator

from school_net.core.enums import TrafficClass, Transport
from school_net.core.errors import ConfigurationError, DeliveryError

logger = logging.getLogger(__name__)


class FlowSink:
    """Receiver counting the traffic of one class on one (transport, port).

    Attributes:
        traffic_class: Class whose bytes this sink counts.
        transport: Transport the sink listens on.
        port: Port the sink listens on.
        start_time: Time the sink was opened.
        packets_received: Number of packets delivered.
    """

    def __init__(
        self,
        traffic_class: TrafficClass,
        transport: Transport,
        port: int,
        start_time: float = 0.0,
    ):
        self.traffic_class = traffic_class
        self.transport = transport
        self.port = port
        self.start_time = start_time
        self.packets_received = 0
        self._total_bytes = 0

    @property
    def total_received(self) -> int:
        """Bytes received since the sink was opened."""
        return self._total_bytes

    def deliver(self, traffic_class: TrafficClass, num_bytes: int) -> None:
        """Account for a delivered packet.

        Raises:
            DeliveryError: If the packet belongs to another class or has a
                negative size.
        """
        if traffic_class is not self.traffic_class:
            raise DeliveryError(
                f"{traffic_class.label} traffic delivered to the {self.traffic_class.label} sink"
            )
        if num_bytes < 0:
            raise DeliveryError(f"Cannot deliver {num_bytes} bytes")
        self._total_bytes += num_bytes
        self.packets_received += 1

    def __repr__(self) -> str:
        return (
            f"FlowSink({self.traffic_class.label}, {self.transport.value}/{self.port}, "
            f"{self._total_bytes}B)"
        )


class SinkTable:
    """The server's sinks, one per traffic class."""

    def __init__(self):
        self._sinks: Dict[TrafficClass, FlowSink] = {}

    def open(self, profile, start_time: float = 0.0) -> FlowSink:
        """Provision the sink for a traffic profile.

        Args:
            profile: TrafficProfile whose class, transport and port the sink
                listens on.
            start_time: Time the sink is opened.

        Raises:
            ConfigurationError: If the class or its (transport, port) already
                has a sink.
        """
        if profile.traffic_class in self._sinks:
            raise ConfigurationError(f"{profile.traffic_class.label} sink is already open")
        for sink in self._sinks.values():
            if (sink.transport, sink.port) == (profile.transport, profile.port):
                raise ConfigurationError(
                    f"{profile.transport.value}/{profile.port} is already bound to {sink!r}"
                )

        sink = FlowSink(profile.traffic_class, profile.transport, profile.port, start_time)
        self._sinks[profile.traffic_class] = sink
        logger.debug("Opened %r", sink)
        return sink

    def get(self, traffic_class: TrafficClass) -> FlowSink:
        try:
            return self._sinks[traffic_class]
        except KeyError:
            raise DeliveryError(f"No sink provisioned for {traffic_class.label}") from None

    def deliver(self, traffic_class: TrafficClass, num_bytes: int) -> None:
        """Route delivered bytes to the sink of their class."""
        self.get(traffic_class).deliver(traffic_class, num_bytes)

    def total_received(self, traffic_class: TrafficClass) -> int:
        return self.get(traffic_class).total_received

    def __contains__(self, traffic_class: TrafficClass) -> bool:
        return traffic_class in self._sinks

    def __iter__(self) -> Iterator[FlowSink]:
        return iter(list(self._sinks.values()))

    def __len__(self) -> int:
        return len(self._sinks)
