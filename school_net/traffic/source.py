"""On/Off traffic source for the school network simulation.

This module defines the TrafficSource class. A source belongs to one host
and one traffic profile; it alternates between on and off periods drawn
from the profile and, while on, sends fixed-size packets at the profile's
rate towards the server.
"""

import logging
from typing import List, Optional, Tuple

from school_net.core.enums import SourceState
from school_net.core.errors import ConfigurationError
from school_net.core.network import NetworkStack
from school_net.core.packet import TransmitRequest
from school_net.core.scheduler import EventScheduler
from school_net.core.topology import SERVER
from school_net.traffic.profiles import TrafficProfile

logger = logging.getLogger(__name__)


class TrafficSource:
    """On/Off generator driven by the event scheduler.

    The source enters TRANSMITTING at ``start_time`` and leaves it when the
    drawn on period ends; after an off period it turns on again, until
    ``stop_time`` ends its lifetime for good. Packets go out one packet
    interval apart, the first a full interval after turning on. Bits owed
    when an on period is cut short carry over to the next one, so a zero
    length off period does not disturb the packet spacing.

    Attributes:
        node_id: Host the source runs on.
        profile: Shared, read-only traffic profile.
        destination: Host the packets are addressed to.
        start_time: Time the source first turns on.
        stop_time: Time the source's lifetime ends.
        state: Current state.
        pending_event_id: Scheduled state transition, if any.
        history: (time, state) for every transition taken.
        packets_sent: Packets handed to the network stack.
        bytes_sent: Bytes handed to the network stack.
    """

    def __init__(
        self,
        scheduler: EventScheduler,
        stack: NetworkStack,
        node_id: str,
        profile: TrafficProfile,
        rng,
        start_time: float,
        stop_time: float,
        destination: str = SERVER,
    ):
        """Initialize the traffic source.

        Args:
            scheduler: Event scheduler of the run.
            stack: Network stack carrying the packets.
            node_id: Host the source runs on.
            profile: Traffic profile of the source.
            rng: Random source passed to the profile's duration distributions.
            start_time: Time the source first turns on.
            stop_time: Time the source's lifetime ends.
            destination: Host the packets are addressed to.
        """
        if start_time < 0 or stop_time < 0:
            raise ConfigurationError("Source start and stop times must be non-negative")

        self.scheduler = scheduler
        self.stack = stack
        self.node_id = node_id
        self.profile = profile
        self.rng = rng
        self.start_time = start_time
        self.stop_time = stop_time
        self.destination = destination

        self.state = SourceState.IDLE
        self.pending_event_id: Optional[int] = None
        self.history: List[Tuple[float, SourceState]] = []
        self.packets_sent = 0
        self.bytes_sent = 0
        self.finished = False
        self._activated = False

        self._send_event_id: Optional[int] = None
        self._stop_event_id: Optional[int] = None
        self._residual_bits = 0.0
        self._last_start_time = 0.0
        self._on_since = 0.0
        self._time_on = 0.0

    @property
    def time_transmitting(self) -> float:
        """Total time spent in TRANSMITTING so far."""
        if self.state == SourceState.TRANSMITTING:
            return self._time_on + self.scheduler.now - self._on_since
        return self._time_on

    def activate(self) -> None:
        """Validate the wiring and schedule the source's lifetime.

        A source whose start time is not before its stop time never turns on.

        Raises:
            ConfigurationError: If the profile's class has no sink or the
                destination is unreachable, or the source was already
                activated.
        """
        if self._activated:
            raise ConfigurationError(f"{self!r} is already activated")
        self.stack.validate(self.node_id, self.destination, self.profile)
        self._activated = True

        if self.start_time >= self.stop_time:
            logger.debug("%r has an empty lifetime, not activating", self)
            self.finished = True
            return

        now = self.scheduler.now
        self.pending_event_id = self.scheduler.schedule(
            max(0.0, self.start_time - now), self._start_sending
        )
        self._stop_event_id = self.scheduler.schedule(
            max(0.0, self.stop_time - now), self._stop
        )

    def cancel(self) -> None:
        """End the source's lifetime now, dropping every scheduled event."""
        self._cancel_event("_stop_event_id")
        self._stop()

    def _start_sending(self) -> None:
        self.pending_event_id = None
        self._set_state(SourceState.TRANSMITTING)
        self._last_start_time = self.scheduler.now
        self._schedule_next_tx()

        if not self.profile.always_on:
            on_time = self.profile.on_duration(self.rng)
            self.pending_event_id = self.scheduler.schedule(on_time, self._stop_sending)

    def _stop_sending(self) -> None:
        self.pending_event_id = None
        self._cancel_send(keep_residual=True)
        self._set_state(SourceState.IDLE)

        if self.scheduler.now < self.stop_time:
            off_time = self.profile.off_duration(self.rng)
            self.pending_event_id = self.scheduler.schedule(off_time, self._start_sending)
        else:
            self.finished = True

    def _stop(self) -> None:
        self._stop_event_id = None
        self._cancel_event("pending_event_id")
        self._cancel_send(keep_residual=False)
        if self.state == SourceState.TRANSMITTING:
            self._set_state(SourceState.IDLE)
        self.finished = True
        logger.debug(
            "%r stopped at t=%.6f after %d packets", self, self.scheduler.now, self.packets_sent
        )

    def _schedule_next_tx(self) -> None:
        if self.profile.rate <= 0:
            return
        bits = self.profile.packet_size * 8 - self._residual_bits
        self._send_event_id = self.scheduler.schedule(
            max(0.0, bits / self.profile.rate), self._send_packet
        )

    def _send_packet(self) -> None:
        self._send_event_id = None
        request = TransmitRequest(
            source=self.node_id,
            destination=self.destination,
            traffic_class=self.profile.traffic_class,
            size=self.profile.packet_size,
            marking=self.profile.marking,
            transport=self.profile.transport,
            creation_time=self.scheduler.now,
        )
        self.stack.send(request)
        self.packets_sent += 1
        self.bytes_sent += request.size
        self._residual_bits = 0.0
        self._last_start_time = self.scheduler.now
        self._schedule_next_tx()

    def _cancel_send(self, keep_residual: bool) -> None:
        if self._send_event_id is None:
            return
        if keep_residual:
            elapsed = self.scheduler.now - self._last_start_time
            self._residual_bits += self.profile.rate * elapsed
        self._cancel_event("_send_event_id")

    def _cancel_event(self, attribute: str) -> None:
        event_id = getattr(self, attribute)
        if self.scheduler.is_pending(event_id):
            self.scheduler.cancel(event_id)
        setattr(self, attribute, None)

    def _set_state(self, state: SourceState) -> None:
        if state == self.state:
            raise RuntimeError(f"{self!r} is already {state.name}")
        now = self.scheduler.now
        if state == SourceState.TRANSMITTING:
            self._on_since = now
        else:
            self._time_on += now - self._on_since
        self.state = state
        self.history.append((now, state))
        logger.debug("%r -> %s at t=%.6f", self, state.name, now)

    def __repr__(self) -> str:
        return f"TrafficSource({self.node_id}, {self.profile.traffic_class.label})"
