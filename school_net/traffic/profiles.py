"""Traffic profiles for the school network simulation.

This module provides the duration distributions that drive On/Off sources
and the table of the four differentiated traffic classes. A profile is
plain data; every class runs through the same TrafficSource state machine.
"""

from dataclasses import dataclass, replace
from typing import Callable, Dict, Optional

import numpy as np

from school_net.core.enums import TrafficClass, Transport
from school_net.core.errors import ConfigurationError

Duration = Callable[[np.random.Generator], float]

# ToS byte values (DSCP << 2)
TOS_EF = 0xB8
TOS_AF21 = 0x48
TOS_AF11 = 0x28
TOS_BEST_EFFORT = 0x00

DEFAULT_PACKET_SIZE = 512


def constant(value: float) -> Duration:
    """Deterministic duration.

    Args:
        value: Duration in seconds.

    Returns:
        Function that always returns ``value``.
    """
    if value < 0:
        raise ConfigurationError(f"Duration must be non-negative, got {value}")
    return lambda rng: value


def exponential(mean: float) -> Duration:
    """Exponentially distributed duration.

    Args:
        mean: Mean duration in seconds.

    Returns:
        Function drawing one duration from the given random source.
    """
    if mean <= 0:
        raise ConfigurationError(f"Exponential mean must be positive, got {mean}")
    return lambda rng: float(rng.exponential(mean))


@dataclass(frozen=True)
class TrafficProfile:
    """Shaping policy of one traffic class.

    Attributes:
        traffic_class: Class this profile generates.
        transport: Transport reliability mode.
        rate: Sending rate while on, in bits per second.
        on_duration: Distribution of on periods; None keeps the source on for
            its whole lifetime.
        off_duration: Distribution of off periods.
        marking: ToS byte attached to every packet.
        port: Destination port of the class's sink.
        packet_size: Payload size of each packet in bytes.
    """

    traffic_class: TrafficClass
    transport: Transport
    rate: float
    on_duration: Optional[Duration]
    off_duration: Duration
    marking: int
    port: int
    packet_size: int = DEFAULT_PACKET_SIZE

    def __post_init__(self):
        if self.rate < 0:
            raise ConfigurationError(
                f"{self.traffic_class.label} rate must be non-negative, got {self.rate}"
            )
        if self.packet_size <= 0:
            raise ConfigurationError(
                f"{self.traffic_class.label} packet size must be positive"
            )
        if not 0 <= self.marking <= 0xFF:
            raise ConfigurationError(f"Invalid ToS byte {self.marking:#x}")

    @property
    def always_on(self) -> bool:
        return self.on_duration is None

    def with_packet_size(self, packet_size: int) -> "TrafficProfile":
        return replace(self, packet_size=packet_size)


VIDEO = TrafficProfile(
    traffic_class=TrafficClass.VIDEO,
    transport=Transport.UNRELIABLE,
    rate=2_000_000,
    on_duration=constant(1.0),
    off_duration=constant(0.0),
    marking=TOS_EF,
    port=9000,
)

BURSTY = TrafficProfile(
    traffic_class=TrafficClass.BURSTY,
    transport=Transport.UNRELIABLE,
    rate=500_000,
    on_duration=exponential(1.0),
    off_duration=exponential(1.0),
    marking=TOS_AF21,
    port=9001,
)

WEB_BACKGROUND = TrafficProfile(
    traffic_class=TrafficClass.WEB_BACKGROUND,
    transport=Transport.RELIABLE,
    rate=100_000,
    on_duration=None,
    off_duration=constant(0.0),
    marking=TOS_BEST_EFFORT,
    port=80,
)

WEB_STANDARD = TrafficProfile(
    traffic_class=TrafficClass.WEB_STANDARD,
    transport=Transport.RELIABLE,
    rate=1_000_000,
    on_duration=exponential(2.0),
    off_duration=exponential(5.0),
    marking=TOS_AF11,
    port=8080,
)

PROFILES: Dict[TrafficClass, TrafficProfile] = {
    profile.traffic_class: profile
    for profile in (VIDEO, BURSTY, WEB_BACKGROUND, WEB_STANDARD)
}
