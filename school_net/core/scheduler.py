"""Event scheduler for the school network simulation.

This module defines the EventScheduler class, a callback-oriented facade
over a SimPy environment. Every component schedules its future work
through one scheduler instance, which owns the simulation clock.
"""

import itertools
import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Set

import simpy

from school_net.core.errors import SchedulingError

logger = logging.getLogger(__name__)


@dataclass
class ScheduledEvent:
    """A pending callback owned by the scheduler.

    Attributes:
        id: Identifier returned by ``EventScheduler.schedule``.
        fire_time: Simulation time at which the callback runs.
        action: Zero-argument callback.
    """

    id: int
    fire_time: float
    action: Callable[[], None]


class EventScheduler:
    """Orders and dispatches time-stamped callbacks.

    Events with equal fire times run in the order they were scheduled. This
    comes from SimPy itself, which keys its event heap on
    ``(time, priority, insertion id)``; every callback is scheduled with the
    same priority.

    The scheduler is an explicitly owned context: it can be used as a context
    manager and is closed on exit, after which nothing can be scheduled.

    Attributes:
        env: SimPy environment driving the clock.
        dispatched: Number of callbacks that have fired.
    """

    def __init__(self, initial_time: float = 0.0):
        """Initialize the scheduler.

        Args:
            initial_time: Simulation time the clock starts at.
        """
        if initial_time < 0:
            raise SchedulingError(f"Initial time must be non-negative, got {initial_time}")
        self.env = simpy.Environment(initial_time=initial_time)
        self.dispatched = 0
        self._ids = itertools.count(1)
        self._last_id = 0
        self._pending: Dict[int, ScheduledEvent] = {}
        self._cancelled: Set[int] = set()
        self._closed = False

    @property
    def now(self) -> float:
        """Current simulation time in seconds."""
        return self.env.now

    @property
    def pending(self) -> int:
        """Number of scheduled events that have neither fired nor been cancelled."""
        return len(self._pending)

    @property
    def cancelled(self) -> int:
        """Number of cancelled events whose fire time has not been reached."""
        return len(self._cancelled)

    @property
    def closed(self) -> bool:
        return self._closed

    def schedule(self, delay: float, action: Callable[[], None]) -> int:
        """Schedule a callback ``delay`` seconds from now.

        Args:
            delay: Non-negative delay in seconds. Zero is legal and queues the
                callback behind everything already scheduled for ``now``.
            action: Zero-argument callback.

        Returns:
            Identifier usable with ``cancel``.

        Raises:
            SchedulingError: If the delay is negative or the scheduler is closed.
        """
        if self._closed:
            raise SchedulingError("Cannot schedule on a closed scheduler")
        if delay < 0:
            raise SchedulingError(f"Cannot schedule with negative delay {delay}")

        event_id = next(self._ids)
        self._last_id = event_id
        timeout = self.env.timeout(delay)
        self._pending[event_id] = ScheduledEvent(event_id, self.env.now + delay, action)
        timeout.callbacks.append(lambda _event: self._dispatch(event_id))
        return event_id

    def cancel(self, event_id: int) -> None:
        """Cancel a scheduled event.

        Cancelling an event whose fire time has passed is a no-op, whether it
        fired or was cancelled before; a cancelled event is only remembered
        until its fire time.

        Raises:
            SchedulingError: If the event was already cancelled or never issued.
        """
        if event_id in self._pending:
            del self._pending[event_id]
            self._cancelled.add(event_id)
            return
        if event_id in self._cancelled:
            raise SchedulingError(f"Event {event_id} is already cancelled")
        if not 0 < event_id <= self._last_id:
            raise SchedulingError(f"Unknown event {event_id}")

    def is_pending(self, event_id: Optional[int]) -> bool:
        """Check whether an event is still waiting to fire."""
        return event_id in self._pending

    def fire_time(self, event_id: int) -> float:
        """Return the fire time of a pending event."""
        try:
            return self._pending[event_id].fire_time
        except KeyError:
            raise SchedulingError(f"Event {event_id} is not pending") from None

    def run_until(self, end_time: float) -> None:
        """Dispatch every event with fire time less than or equal to ``end_time``.

        Events beyond ``end_time`` stay queued; they only fire if the
        scheduler is run further, and are discarded by ``close``.

        Raises:
            SchedulingError: If ``end_time`` lies in the past or the scheduler
                is closed.
        """
        if self._closed:
            raise SchedulingError("Cannot run a closed scheduler")
        if end_time < self.env.now:
            raise SchedulingError(
                f"Cannot run until {end_time}, clock is already at {self.env.now}"
            )

        if end_time > self.env.now:
            self.env.run(until=end_time)

        # SimPy stops before normal-priority events at exactly end_time
        while self.env.peek() <= end_time:
            self.env.step()

    def close(self) -> None:
        """Tear the scheduler down, discarding every pending event."""
        if self._closed:
            return
        if self._pending:
            logger.debug(
                "Discarding %d pending events at t=%.6f", len(self._pending), self.now
            )
        self._pending.clear()
        self._cancelled.clear()
        self._closed = True

    def _dispatch(self, event_id: int) -> None:
        event = self._pending.pop(event_id, None)
        if event is None:
            self._cancelled.discard(event_id)
            return
        self.dispatched += 1
        event.action()

    def __enter__(self) -> "EventScheduler":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"EventScheduler(now={self.now:.6f}, pending={self.pending})"
