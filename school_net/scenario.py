"""School network scenario.

This module defines the SchoolNetwork class, which wires the topology,
the server's sinks, the per-host traffic sources and the throughput
sampler together and runs them on one event scheduler.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from school_net.config import ScenarioConfig
from school_net.core.enums import HostRole, TrafficClass
from school_net.core.errors import SimulationError
from school_net.core.network import NetworkStack
from school_net.core.scheduler import EventScheduler
from school_net.core.sink import SinkTable
from school_net.core.topology import SERVER, build_school_topology
from school_net.stats.report import ClassSummary, format_summary, summarize
from school_net.stats.sampler import ThroughputSample, ThroughputSampler
from school_net.traffic.profiles import PROFILES, TrafficProfile
from school_net.traffic.source import TrafficSource
from school_net.utils.rng import RandomStreams

logger = logging.getLogger(__name__)

# (class, first start time, start offset per room index)
TRAFFIC_PLAN: Dict[HostRole, List[Tuple[TrafficClass, float, float]]] = {
    HostRole.STUDENT: [
        (TrafficClass.BURSTY, 1.0, 0.1),
        (TrafficClass.VIDEO, 2.0, 0.1),
        (TrafficClass.WEB_STANDARD, 1.0, 0.2),
    ],
    HostRole.TEACHER: [
        (TrafficClass.BURSTY, 1.5, 0.1),
        (TrafficClass.VIDEO, 2.5, 0.1),
        (TrafficClass.WEB_STANDARD, 1.5, 0.2),
    ],
    HostRole.GUEST: [(TrafficClass.WEB_STANDARD, 3.0, 0.5)],
    HostRole.ADMIN: [(TrafficClass.BURSTY, 1.0, 0.0)],
    HostRole.LAB: [
        (TrafficClass.BURSTY, 1.0, 0.0),
        (TrafficClass.WEB_BACKGROUND, 0.5, 0.0),
    ],
}

TRACKED_CLASSES = (TrafficClass.VIDEO, TrafficClass.BURSTY, TrafficClass.WEB_STANDARD)


@dataclass(frozen=True)
class ScenarioResult:
    """Outcome of one run.

    Attributes:
        samples: Throughput series.
        classes: Classes tracked by the series, in column order.
        summaries: Per-class totals over the whole run.
        duration: Run duration in seconds.
        packets_sent: Packets sent by all sources.
    """

    samples: List[ThroughputSample]
    classes: List[TrafficClass]
    summaries: List[ClassSummary]
    duration: float
    packets_sent: int

    def summary_for(self, traffic_class: TrafficClass) -> ClassSummary:
        for summary in self.summaries:
            if summary.traffic_class is traffic_class:
                return summary
        raise KeyError(traffic_class)


class SchoolNetwork:
    """The school network simulation environment.

    Attributes:
        config: Scenario parameters.
        scheduler: Event scheduler owning the clock of this run.
        topology: Hosts, subnets and links.
        sinks: The Internet server's sinks, one per class.
        stack: Network stack carrying packets to the sinks.
        sources: Traffic sources in creation order.
        sampler: Throughput sampler, created by ``setup``.
    """

    def __init__(
        self,
        config: Optional[ScenarioConfig] = None,
        profiles: Mapping[TrafficClass, TrafficProfile] = PROFILES,
        tracked_classes: Sequence[TrafficClass] = TRACKED_CLASSES,
    ):
        self.config = config or ScenarioConfig()
        self.profiles = {
            cls: profile.with_packet_size(self.config.packet_size)
            for cls, profile in profiles.items()
        }
        self.tracked_classes = list(tracked_classes)

        self.scheduler = EventScheduler()
        self.topology = build_school_topology(self.config)
        self.sinks = SinkTable()
        self.stack = NetworkStack(self.scheduler, self.topology, self.sinks)
        self.streams = RandomStreams(self.config.seed)
        self.sources: List[TrafficSource] = []
        self.sampler: Optional[ThroughputSampler] = None
        self._is_setup = False

        self.hooks: Dict[str, List[Callable[..., Any]]] = {
            "sim_end": [],  # the run ends, called with the ScenarioResult
        }

    def setup(self) -> None:
        """Provision sinks, traffic sources and the sampler."""
        if self._is_setup:
            return
        logger.info("Configuring applications and traffic...")
        self.setup_sinks()
        self.setup_applications()
        self.sampler = ThroughputSampler(
            self.scheduler,
            self.sinks,
            self.tracked_classes,
            period=self.config.sample_period,
            start=self.config.sample_start,
        )
        self._is_setup = True

    def setup_sinks(self) -> None:
        for profile in self.profiles.values():
            self.sinks.open(profile, start_time=0.0)

    def setup_applications(self) -> None:
        """Create the sources of every host following ``TRAFFIC_PLAN``."""
        students = self.topology.hosts_with_role(HostRole.STUDENT)
        teachers = self.topology.hosts_with_role(HostRole.TEACHER)

        # students and teachers of room i are interleaved
        for i in range(max(len(students), len(teachers))):
            if i < len(students):
                self._add_role_traffic(students[i].id, HostRole.STUDENT, i)
            if i < len(teachers):
                self._add_role_traffic(teachers[i].id, HostRole.TEACHER, i)

        for role in (HostRole.GUEST, HostRole.ADMIN, HostRole.LAB):
            for i, host in enumerate(self.topology.hosts_with_role(role)):
                self._add_role_traffic(host.id, role, i)

        logger.info("Created %d traffic sources", len(self.sources))

    def add_source(self, node_id: str, traffic_class: TrafficClass, start_time: float) -> TrafficSource:
        """Create and activate one traffic source on a host."""
        source = TrafficSource(
            self.scheduler,
            self.stack,
            node_id,
            self.profiles[traffic_class],
            self.streams.stream(),
            start_time=start_time,
            stop_time=self.config.app_stop_time,
            destination=SERVER,
        )
        source.activate()
        self.sources.append(source)
        return source

    def _add_role_traffic(self, node_id: str, role: HostRole, index: int) -> None:
        for traffic_class, base, step in TRAFFIC_PLAN[role]:
            self.add_source(node_id, traffic_class, base + index * step)

    def run(self, print_report: bool = True, final_sample: bool = False) -> ScenarioResult:
        """Run the scenario for the configured duration.

        Args:
            print_report: Print the address report and the final summary.
            final_sample: Force one extra sample at the end of the run.

        Returns:
            The throughput series and per-class summaries.
        """
        if self.scheduler.closed:
            raise SimulationError("This scenario has already been run")

        if print_report:
            print(self.topology.format_address_report())
        self.setup()

        logger.info("Starting simulation (duration %.1fs)...", self.config.duration)
        try:
            self.scheduler.run_until(self.config.duration)
            if final_sample:
                self.sampler.record()
            summaries = summarize(self.sinks, self.config.duration)
        finally:
            self.scheduler.close()

        result = ScenarioResult(
            samples=list(self.sampler.samples),
            classes=list(self.tracked_classes),
            summaries=summaries,
            duration=self.config.duration,
            packets_sent=sum(source.packets_sent for source in self.sources),
        )
        if print_report:
            print(format_summary(summaries))

        self.call_hooks("sim_end", result)
        logger.info("Simulation finished.")
        return result

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
        for callback in self.hooks.get(event_type, []):
            callback(*args, **kwargs)
