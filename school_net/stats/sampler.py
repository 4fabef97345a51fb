"""Throughput sampler for the school network simulation.

This module defines the ThroughputSampler class, which periodically reads
the sinks' byte counters and records one rate per tracked class.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from school_net.core.enums import TrafficClass
from school_net.core.errors import ConfigurationError
from school_net.core.scheduler import EventScheduler
from school_net.core.sink import SinkTable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ThroughputSample:
    """Per-class rates observed at one instant.

    Attributes:
        time: Simulation time of the sample.
        rates: Rate per class in Mbit/s.
    """

    time: float
    rates: Dict[TrafficClass, float]


class ThroughputSampler:
    """Records a cumulative-average throughput series.

    Every sample divides the bytes a sink has received since the run
    started by the elapsed time, so it is an average from time zero, not a
    windowed rate. The sampler keeps rescheduling itself until the scheduler
    is torn down.

    Attributes:
        samples: Recorded samples, in time order.
    """

    def __init__(
        self,
        scheduler: EventScheduler,
        sinks: SinkTable,
        classes: Sequence[TrafficClass],
        period: float = 0.5,
        start: float = 1.0,
        origin: float = 0.0,
    ):
        """Initialize the sampler and schedule its first sample.

        Args:
            scheduler: Event scheduler of the run.
            sinks: Sinks to read.
            classes: Classes to track, in column order.
            period: Seconds between samples.
            start: Time of the first sample.
            origin: Time rates are averaged from.

        Raises:
            ConfigurationError: If the period is not positive, the start time
                is negative, or a tracked class has no sink.
        """
        if period <= 0:
            raise ConfigurationError(f"Sampling period must be positive, got {period}")
        if start < 0:
            raise ConfigurationError(f"Sampling start must be non-negative, got {start}")
        for traffic_class in classes:
            if traffic_class not in sinks:
                raise ConfigurationError(f"No sink provisioned for {traffic_class.label}")

        self.scheduler = scheduler
        self.sinks = sinks
        self.classes = list(classes)
        self.period = period
        self.origin = origin
        self.samples: List[ThroughputSample] = []
        self._event_id: Optional[int] = scheduler.schedule(
            max(0.0, start - scheduler.now), self._fire
        )

    def rate(self, traffic_class: TrafficClass) -> float:
        """Average rate of a class since the origin, in Mbit/s."""
        elapsed = self.scheduler.now - self.origin
        if elapsed <= 0:
            return 0.0
        return self.sinks.total_received(traffic_class) * 8 / 1e6 / elapsed

    def record(self) -> Optional[ThroughputSample]:
        """Record a sample at the current time.

        Returns:
            The new sample, or None if one was already taken at this time.
        """
        now = self.scheduler.now
        if self.samples and self.samples[-1].time >= now:
            return None
        sample = ThroughputSample(now, {cls: self.rate(cls) for cls in self.classes})
        self.samples.append(sample)
        return sample

    def _fire(self) -> None:
        sample = self.record()
        if sample is not None:
            logger.debug(
                "t=%.3f %s",
                sample.time,
                " ".join(f"{cls.label}={rate:.3f}" for cls, rate in sample.rates.items()),
            )
        self._event_id = self.scheduler.schedule(self.period, self._fire)
