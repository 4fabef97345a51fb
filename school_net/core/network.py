"""Network stack for the school network simulation.

This module defines the NetworkStack class, the idealized transport that
carries transmit requests from sources to the server's sinks. It is
lossless: a packet reaches its sink after the propagation and
serialization delays of its resolved path.
"""

import logging
from collections import defaultdict
from typing import Any, Callable, Dict, List

from school_net.core.enums import TrafficClass
from school_net.core.errors import ConfigurationError
from school_net.core.packet import TransmitRequest
from school_net.core.scheduler import EventScheduler
from school_net.core.sink import SinkTable
from school_net.core.topology import Path, TopologyModel

logger = logging.getLogger(__name__)


class NetworkStack:
    """Moves transmit requests through the topology to the sinks.

    Attributes:
        scheduler: Event scheduler of the run.
        topology: Topology used to resolve paths.
        sinks: Sinks the traffic is delivered to.
        bytes_sent: Bytes handed to the stack, per class.
        bytes_in_flight: Bytes sent but not yet delivered.
    """

    def __init__(
        self,
        scheduler: EventScheduler,
        topology: TopologyModel,
        sinks: SinkTable,
    ):
        self.scheduler = scheduler
        self.topology = topology
        self.sinks = sinks
        self.bytes_sent: Dict[TrafficClass, int] = defaultdict(int)
        self.bytes_in_flight = 0

        self.hooks: Dict[str, List[Callable[..., Any]]] = {
            "packet_sent": [],  # a source hands a packet to the stack
            "packet_delivered": [],  # a packet reaches its sink
        }

    def validate(self, source: str, destination: str, profile) -> Path:
        """Check that traffic of ``profile`` from ``source`` can be delivered.

        Returns:
            The resolved path.

        Raises:
            ConfigurationError: If the class has no sink or the destination
                is unreachable.
        """
        if profile.traffic_class not in self.sinks:
            raise ConfigurationError(
                f"No sink provisioned for {profile.traffic_class.label} traffic from {source}"
            )
        path = self.topology.resolve(source, destination)
        if path is None:
            raise ConfigurationError(f"{destination} is unreachable from {source}")
        return path

    def send(self, request: TransmitRequest) -> None:
        """Schedule the delivery of a transmit request."""
        path = self.topology.resolve(request.source, request.destination)
        if path is None:
            raise ConfigurationError(
                f"{request.destination} is unreachable from {request.source}"
            )

        self.bytes_sent[request.traffic_class] += request.size
        self.bytes_in_flight += request.size
        self.call_hooks("packet_sent", request, self.scheduler.now)
        self.scheduler.schedule(
            path.delivery_delay(request.size), lambda: self._deliver(request)
        )

    def _deliver(self, request: TransmitRequest) -> None:
        request.record_delivery(self.scheduler.now)
        self.bytes_in_flight -= request.size
        self.sinks.deliver(request.traffic_class, request.size)
        self.call_hooks("packet_delivered", request, self.scheduler.now)

    def register_hook(self, event_type: str, callback: Callable[..., Any]) -> None:
        """Register a callback function for a specific event type.

        Args:
            event_type: The type of event to register for.
            callback: The function to call when the event occurs.
        """
        if event_type not in self.hooks:
            raise ValueError(f"Unknown hook type: {event_type}")
        self.hooks[event_type].append(callback)

    def call_hooks(self, event_type: str, *args: Any, **kwargs: Any) -> None:
        """Call all registered callbacks for the given event type."""
        for callback in self.hooks.get(event_type, []):
            callback(*args, **kwargs)
