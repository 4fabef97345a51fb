from school_net.config import ScenarioConfig
from school_net.core.enums import TrafficClass
from school_net.core.topology import build_school_topology
from school_net.stats.sampler import ThroughputSample
from school_net.utils.visualization import plot_throughput, save_topology_visualization


class TestVisualization:
    def test_throughput_plot_is_saved(self, tmp_path):
        samples = [
            ThroughputSample(t, {TrafficClass.VIDEO: t / 10, TrafficClass.BURSTY: 0.1})
            for t in (1.0, 1.5, 2.0)
        ]
        filename = tmp_path / "plots" / "throughput.png"
        plot_throughput(samples, [TrafficClass.VIDEO, TrafficClass.BURSTY], str(filename))
        assert filename.stat().st_size > 0

    def test_topology_plot_is_saved(self, tmp_path):
        topology = build_school_topology(ScenarioConfig(students=2, teachers=2, guests=1))
        filename = tmp_path / "topology.png"
        save_topology_visualization(topology, str(filename))
        assert filename.stat().st_size > 0
