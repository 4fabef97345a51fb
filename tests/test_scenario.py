import math

import pytest

import main
from conftest import FakeRNG
from school_net.config import ScenarioConfig
from school_net.core.enums import TrafficClass
from school_net.core.errors import SimulationError
from school_net.scenario import SchoolNetwork
from school_net.stats.report import summarize
from school_net.traffic.profiles import VIDEO
from school_net.traffic.source import TrafficSource

VIDEO_INTERVAL = 512 * 8 / 2_000_000

SMALL = dict(students=3, teachers=3, labs=1, guests=2, duration=6.0, app_stop_time=5.0)


@pytest.fixture(scope="module")
def reference_run():
    network = SchoolNetwork()
    hook_calls = []
    network.register_hook("sim_end", hook_calls.append)
    result = network.run(print_report=False)
    return network, result, hook_calls


class TestSingleVideoFlow:
    def test_video_over_lossless_path(self, scheduler, make_stack):
        stack, sinks = make_stack(VIDEO, delay=0.005)
        source = TrafficSource(scheduler, stack, "host", VIDEO, FakeRNG(), 1.0, 10.0)
        source.activate()
        scheduler.run_until(12.0)

        total = sinks.total_received(TrafficClass.VIDEO)
        assert total == pytest.approx(2_250_000, abs=512)
        (summary,) = summarize(sinks, 12.0)
        assert summary.throughput_kbps == pytest.approx(1500.0, rel=1e-3)


class TestReferenceScenario:
    def test_source_count(self, reference_run):
        network, _, _ = reference_run
        # 3 classes per classroom, 1 per guest AP, 1 admin, 2 per lab
        assert len(network.sources) == 15 * 3 + 15 * 3 + 10 + 1 + 2 * 2

    def test_sample_times(self, reference_run):
        _, result, _ = reference_run
        times = [sample.time for sample in result.samples]
        assert times[0] == 1.0
        assert times[-1] == 12.0
        assert len(times) == 23
        assert all(b - a == pytest.approx(0.5) for a, b in zip(times, times[1:]))

    def test_tracked_classes(self, reference_run):
        _, result, _ = reference_run
        assert result.classes == [
            TrafficClass.VIDEO,
            TrafficClass.BURSTY,
            TrafficClass.WEB_STANDARD,
        ]

    def test_video_bytes_match_sources(self, reference_run):
        network, result, _ = reference_run
        video_sources = [
            s for s in network.sources if s.profile.traffic_class is TrafficClass.VIDEO
        ]
        assert len(video_sources) == 30
        for source in video_sources:
            # a packet falling due exactly at the stop time is not sent
            due = round((10.0 - source.start_time) / VIDEO_INTERVAL, 6)
            assert source.packets_sent == math.ceil(due) - 1
        assert result.summary_for(TrafficClass.VIDEO).total_bytes == sum(
            s.bytes_sent for s in video_sources
        )

    def test_web_background_is_always_on(self, reference_run):
        _, result, _ = reference_run
        # two labs from 0.5 s to 10 s at 100 kbit/s
        assert result.summary_for(TrafficClass.WEB_BACKGROUND).total_bytes == 2 * 231 * 512

    def test_every_sent_byte_is_delivered(self, reference_run):
        network, result, _ = reference_run
        assert network.stack.bytes_in_flight == 0
        for summary in result.summaries:
            assert summary.total_bytes == network.stack.bytes_sent[summary.traffic_class]

    def test_sources_are_finished(self, reference_run):
        network, _, _ = reference_run
        assert all(source.finished for source in network.sources)

    def test_sim_end_hook(self, reference_run):
        _, result, hook_calls = reference_run
        assert hook_calls == [result]

    def test_cannot_run_twice(self, reference_run):
        network, _, _ = reference_run
        with pytest.raises(SimulationError):
            network.run(print_report=False)


class TestScenarioRuns:
    def test_same_seed_is_reproducible(self):
        first = SchoolNetwork(ScenarioConfig(seed=5, **SMALL)).run(print_report=False)
        second = SchoolNetwork(ScenarioConfig(seed=5, **SMALL)).run(print_report=False)
        assert first.samples == second.samples
        assert first.summaries == second.summaries

    def test_seed_changes_random_classes(self):
        first = SchoolNetwork(ScenarioConfig(seed=5, **SMALL)).run(print_report=False)
        second = SchoolNetwork(ScenarioConfig(seed=6, **SMALL)).run(print_report=False)
        assert (
            first.summary_for(TrafficClass.BURSTY).total_bytes
            != second.summary_for(TrafficClass.BURSTY).total_bytes
        )
        assert (
            first.summary_for(TrafficClass.VIDEO).total_bytes
            == second.summary_for(TrafficClass.VIDEO).total_bytes
        )

    def test_console_reports(self, capsys):
        SchoolNetwork(ScenarioConfig(**SMALL)).run()
        out = capsys.readouterr().out
        assert "IP ADDRESS ASSIGNMENT REPORT" in out
        assert "FINAL STATISTICS" in out
        assert "Traffic WebBackground" in out

    def test_final_sample(self):
        config = ScenarioConfig(sample_period=0.75, **SMALL)
        result = SchoolNetwork(config).run(print_report=False, final_sample=True)
        assert result.samples[-1].time == 6.0


class TestCommandLine:
    def test_writes_series_and_summary(self, tmp_path):
        series = tmp_path / "throughput-data.dat"
        summary = tmp_path / "summary.json"
        main.main(
            [
                "--quiet",
                "--duration", "4",
                "--stop-time", "3",
                "--output", str(series),
                "--summary-json", str(summary),
            ]
        )
        lines = series.read_text().splitlines()
        assert lines[0].startswith("# time_seconds")
        assert len(lines) == 1 + 7
        assert summary.exists()
