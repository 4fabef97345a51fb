import pytest

from school_net.core.enums import HostRole
from school_net.core.network import NetworkStack
from school_net.core.scheduler import EventScheduler
from school_net.core.sink import SinkTable
from school_net.core.topology import TopologyModel


class FakeRNG:
    """Random source returning a fixed sequence of durations."""

    def __init__(self, values=()):
        self.values = list(values)
        self.draws = 0

    def exponential(self, mean):
        if not self.values:
            raise AssertionError("unexpected random draw")
        self.draws += 1
        return self.values.pop(0)


@pytest.fixture
def scheduler():
    sched = EventScheduler()
    yield sched
    sched.close()


@pytest.fixture
def make_stack(scheduler):
    """Build a host -> server network over one lossless 10 Gbit/s link."""

    def _make(*profiles, delay=0.0):
        topology = TopologyModel()
        topology.add_host("host", HostRole.STUDENT)
        topology.add_host("server", HostRole.SERVER)
        topology.add_link("host", "server", capacity=10e9, delay=delay)
        sinks = SinkTable()
        for profile in profiles:
            sinks.open(profile)
        return NetworkStack(scheduler, topology, sinks), sinks

    return _make
