import pytest

from school_net.core.enums import TrafficClass, Transport
from school_net.core.errors import ConfigurationError, DeliveryError
from school_net.core.sink import FlowSink, SinkTable
from school_net.traffic.profiles import BURSTY, VIDEO, WEB_STANDARD, TrafficProfile, constant


class TestFlowSink:
    def test_deliver_accumulates_bytes(self):
        sink = FlowSink(TrafficClass.VIDEO, Transport.UNRELIABLE, 9000)
        sink.deliver(TrafficClass.VIDEO, 512)
        sink.deliver(TrafficClass.VIDEO, 1000)
        assert sink.total_received == 1512
        assert sink.packets_received == 2

    def test_reading_total_does_not_mutate(self):
        sink = FlowSink(TrafficClass.VIDEO, Transport.UNRELIABLE, 9000)
        sink.deliver(TrafficClass.VIDEO, 512)
        assert sink.total_received == sink.total_received == 512

    def test_other_class_rejected(self):
        sink = FlowSink(TrafficClass.VIDEO, Transport.UNRELIABLE, 9000)
        with pytest.raises(DeliveryError):
            sink.deliver(TrafficClass.BURSTY, 512)
        assert sink.total_received == 0

    def test_negative_size_rejected(self):
        sink = FlowSink(TrafficClass.VIDEO, Transport.UNRELIABLE, 9000)
        with pytest.raises(DeliveryError):
            sink.deliver(TrafficClass.VIDEO, -1)


class TestSinkTable:
    def test_deliver_routes_by_class(self):
        sinks = SinkTable()
        sinks.open(VIDEO)
        sinks.open(BURSTY)
        sinks.deliver(TrafficClass.VIDEO, 100)
        sinks.deliver(TrafficClass.BURSTY, 7)
        assert sinks.total_received(TrafficClass.VIDEO) == 100
        assert sinks.total_received(TrafficClass.BURSTY) == 7

    def test_unknown_class_is_fatal(self):
        sinks = SinkTable()
        sinks.open(VIDEO)
        with pytest.raises(DeliveryError, match="No sink provisioned"):
            sinks.deliver(TrafficClass.WEB_STANDARD, 512)

    def test_duplicate_class_rejected(self):
        sinks = SinkTable()
        sinks.open(VIDEO)
        with pytest.raises(ConfigurationError):
            sinks.open(VIDEO)

    def test_port_clash_rejected(self):
        sinks = SinkTable()
        sinks.open(WEB_STANDARD)
        clash = TrafficProfile(
            traffic_class=TrafficClass.WEB_BACKGROUND,
            transport=Transport.RELIABLE,
            rate=100_000,
            on_duration=None,
            off_duration=constant(0.0),
            marking=0,
            port=8080,
        )
        with pytest.raises(ConfigurationError, match="tcp/8080"):
            sinks.open(clash)

    def test_same_port_on_other_transport_allowed(self):
        sinks = SinkTable()
        sinks.open(VIDEO)
        other = TrafficProfile(
            traffic_class=TrafficClass.WEB_STANDARD,
            transport=Transport.RELIABLE,
            rate=1_000_000,
            on_duration=None,
            off_duration=constant(0.0),
            marking=0x28,
            port=9000,
        )
        sinks.open(other)
        assert len(sinks) == 2

    def test_iterates_in_provisioning_order(self):
        sinks = SinkTable()
        for profile in (WEB_STANDARD, VIDEO, BURSTY):
            sinks.open(profile)
        assert [sink.traffic_class for sink in sinks] == [
            TrafficClass.WEB_STANDARD,
            TrafficClass.VIDEO,
            TrafficClass.BURSTY,
        ]
