"""Output artifacts of a school network run.

This module writes the throughput time series consumed by plotting tools
and builds the per-class summary printed at the end of a run.
"""

import csv
import json
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Sequence

from school_net.core.enums import TrafficClass
from school_net.core.errors import ConfigurationError
from school_net.core.sink import SinkTable
from school_net.stats.sampler import ThroughputSample


@dataclass(frozen=True)
class ClassSummary:
    """Totals of one traffic class over the whole run.

    Attributes:
        traffic_class: Class summarized.
        total_bytes: Bytes received by the class's sink.
        throughput_kbps: Average throughput over the run duration in kbit/s.
    """

    traffic_class: TrafficClass
    total_bytes: int
    throughput_kbps: float


def series_header(classes: Sequence[TrafficClass]) -> List[str]:
    return ["# time_seconds"] + [f"{cls.label}_Mbps" for cls in classes]


def write_throughput_series(
    samples: Sequence[ThroughputSample],
    classes: Sequence[TrafficClass],
    filename: str = "throughput-data.dat",
) -> None:
    """Write the throughput series as tab-separated text.

    Args:
        samples: Samples in time order.
        classes: Classes to write, in column order.
        filename: Output filename.
    """
    directory = os.path.dirname(filename)
    if directory:
        os.makedirs(directory, exist_ok=True)

    with open(filename, "w", newline="") as f:
        writer = csv.writer(f, delimiter="\t", lineterminator="\n")
        writer.writerow(series_header(classes))
        for sample in samples:
            writer.writerow(
                [repr(sample.time)] + [f"{sample.rates[cls]:.6f}" for cls in classes]
            )


def read_throughput_series(filename: str) -> List[ThroughputSample]:
    """Read a series written by ``write_throughput_series``."""
    with open(filename, newline="") as f:
        reader = csv.reader(f, delimiter="\t")
        header = next(reader)
        classes = [TrafficClass(column[: -len("_Mbps")]) for column in header[1:]]
        return [
            ThroughputSample(
                float(row[0]), {cls: float(value) for cls, value in zip(classes, row[1:])}
            )
            for row in reader
            if row
        ]


def summarize(sinks: SinkTable, duration: float) -> List[ClassSummary]:
    """Summarize every sink over a fixed run duration.

    Args:
        sinks: Sinks of the run, summarized in provisioning order.
        duration: Run duration in seconds the averages are taken over.

    Returns:
        One summary per sink.
    """
    if duration <= 0:
        raise ConfigurationError(f"Summary duration must be positive, got {duration}")
    return [
        ClassSummary(
            sink.traffic_class,
            sink.total_received,
            sink.total_received * 8 / 1000 / duration,
        )
        for sink in sinks
    ]


def format_summary(summaries: Sequence[ClassSummary]) -> str:
    lines = ["", "--- FINAL STATISTICS (SERVER) ---"]
    for summary in summaries:
        lines.append(
            f"Traffic {summary.traffic_class.label:<15} "
            f"| RX Bytes: {summary.total_bytes:<10} "
            f"| Throughput: {summary.throughput_kbps:.2f} Kbps"
        )
    return "\n".join(lines)


def save_summary_to_json(
    summaries: Sequence[ClassSummary],
    duration: float,
    filename: str = "results/summary.json",
) -> None:
    """Save the run summary to a JSON file.

    Args:
        summaries: Per-class summaries.
        duration: Run duration the averages were taken over.
        filename: Output filename.
    """
    directory = os.path.dirname(filename)
    if directory:
        os.makedirs(directory, exist_ok=True)

    serializable: Dict[str, Any] = {
        "duration": duration,
        "classes": {
            summary.traffic_class.label: {
                "rx_bytes": summary.total_bytes,
                "throughput_kbps": summary.throughput_kbps,
            }
            for summary in summaries
        },
    }

    with open(filename, "w") as f:
        json.dump(serializable, f, indent=2)
