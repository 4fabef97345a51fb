"""Scenario configuration for the school network simulation."""

from __future__ import annotations

from dataclasses import dataclass

from school_net.core.errors import ConfigurationError


@dataclass(frozen=True)
class ScenarioConfig:
    """Configurable parameters for a single school network run.

    Defaults reproduce the reference scenario: 43 access hosts on four
    subnets, applications stopping at 10 s and a 12 s run.
    """

    students: int = 15
    teachers: int = 15
    labs: int = 2
    admins: int = 1
    guests: int = 10
    lan_capacity_bps: float = 1e9
    lan_delay: float = 0.002
    wan_capacity_bps: float = 10e9
    wan_delay: float = 0.005
    packet_size: int = 512
    app_stop_time: float = 10.0
    duration: float = 12.0
    sample_start: float = 1.0
    sample_period: float = 0.5
    seed: int = 1

    def __post_init__(self) -> None:
        for name in ("students", "teachers", "labs", "admins", "guests"):
            if getattr(self, name) < 0:
                raise ConfigurationError(f"{name} must be non-negative")
        if self.lan_capacity_bps <= 0 or self.wan_capacity_bps <= 0:
            raise ConfigurationError("link capacities must be positive")
        if self.lan_delay < 0 or self.wan_delay < 0:
            raise ConfigurationError("link delays must be non-negative")
        if self.packet_size <= 0:
            raise ConfigurationError("packet_size must be positive")
        if self.duration <= 0:
            raise ConfigurationError("duration must be positive")
        if not 0 <= self.app_stop_time <= self.duration:
            raise ConfigurationError("app_stop_time must be between 0 and duration")
        if self.sample_period <= 0:
            raise ConfigurationError("sample_period must be positive")
        if self.sample_start < 0:
            raise ConfigurationError("sample_start must be non-negative")
