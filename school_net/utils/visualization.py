"""Visualization utilities for the school network simulation.

This module provides functions for plotting the throughput series and the
network topology.
"""

import os
from typing import Sequence, Tuple

import matplotlib.pyplot as plt
import networkx as nx

from school_net.core.enums import HostRole, TrafficClass
from school_net.core.topology import TopologyModel
from school_net.stats.sampler import ThroughputSample

ROLE_COLORS = {
    HostRole.ADMIN: "orange",
    HostRole.TEACHER: "lightgreen",
    HostRole.STUDENT: "lightblue",
    HostRole.LAB: "violet",
    HostRole.GUEST: "khaki",
    HostRole.ROUTER: "gray",
    HostRole.SERVER: "tomato",
}


def _save(fig, filename: str) -> None:
    directory = os.path.dirname(filename)
    if directory:
        os.makedirs(directory, exist_ok=True)
    fig.savefig(filename)
    plt.close(fig)


def plot_throughput(
    samples: Sequence[ThroughputSample],
    classes: Sequence[TrafficClass],
    filename: str = "results/throughput.png",
    figsize: Tuple[int, int] = (10, 6),
) -> None:
    """Plot the throughput series, one line per class.

    Args:
        samples: Samples in time order.
        classes: Classes to plot.
        filename: Output filename.
        figsize: Figure size as (width, height) in inches.
    """
    fig, ax = plt.subplots(figsize=figsize)
    times = [sample.time for sample in samples]
    for traffic_class in classes:
        ax.plot(
            times,
            [sample.rates[traffic_class] for sample in samples],
            "o-",
            label=traffic_class.label,
        )

    ax.set_title("Average Throughput per Traffic Class")
    ax.set_xlabel("Simulation Time (seconds)")
    ax.set_ylabel("Throughput (Mbps)")
    ax.grid(True, linestyle="--", alpha=0.7)
    ax.legend()
    fig.tight_layout()
    _save(fig, filename)


def save_topology_visualization(
    topology: TopologyModel,
    filename: str = "results/topology.png",
    figsize: Tuple[int, int] = (12, 10),
) -> None:
    """Save network topology visualization to a file.

    Args:
        topology: Topology to draw.
        filename: Output filename.
        figsize: Figure size as (width, height) in inches.
    """
    fig = plt.figure(figsize=figsize)
    graph = topology.graph
    pos = nx.spring_layout(graph, seed=0)

    colors = [ROLE_COLORS[topology.hosts[node].role] for node in graph.nodes()]
    nx.draw_networkx_nodes(graph, pos, node_size=300, node_color=colors)
    nx.draw_networkx_edges(graph, pos, edge_color="gray")
    nx.draw_networkx_labels(graph, pos, font_size=7)

    plt.axis("off")
    plt.tight_layout()
    _save(fig, filename)
