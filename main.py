import argparse
import logging

from school_net.config import ScenarioConfig
from school_net.scenario import SchoolNetwork
from school_net.stats.report import save_summary_to_json, write_throughput_series


def run_school_simulation(args):
    """
    Run the school network scenario and write its output files

    Args:
        args: Parsed command line arguments

    Returns:
        ScenarioResult of the run
    """
    config = ScenarioConfig(
        seed=args.seed, duration=args.duration, app_stop_time=args.stop_time
    )
    network = SchoolNetwork(config)
    result = network.run(print_report=not args.quiet)

    write_throughput_series(result.samples, result.classes, args.output)

    if args.summary_json:
        save_summary_to_json(result.summaries, result.duration, args.summary_json)

    if args.plot or args.topology_plot:
        from school_net.utils.visualization import (
            plot_throughput,
            save_topology_visualization,
        )

        if args.plot:
            plot_throughput(result.samples, result.classes, args.plot)
        if args.topology_plot:
            save_topology_visualization(network.topology, args.topology_plot)

    if not args.quiet:
        print("\n[GENERATED] Output files:")
        print(f" 1. '{args.output}' -> throughput series for gnuplot/spreadsheets.")
        if args.summary_json:
            print(f" 2. '{args.summary_json}' -> final per-class statistics.")

    return result


def main(argv=None):
    """Main function to run the simulation"""
    parser = argparse.ArgumentParser(description="School Network QoS Simulation")
    parser.add_argument("--seed", type=int, default=1, help="Random seed")
    parser.add_argument(
        "--duration", type=float, default=12.0, help="Simulated seconds to run"
    )
    parser.add_argument(
        "--stop-time",
        type=float,
        default=10.0,
        help="Time at which all traffic sources stop",
    )
    parser.add_argument(
        "--output",
        default="throughput-data.dat",
        help="Tab-separated throughput series file",
    )
    parser.add_argument("--summary-json", help="Save the final statistics as JSON")
    parser.add_argument("--plot", help="Save a throughput plot to this file")
    parser.add_argument(
        "--topology-plot", help="Save a drawing of the topology to this file"
    )
    parser.add_argument(
        "--quiet", action="store_true", help="Do not print the console reports"
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    return run_school_simulation(args)


if __name__ == "__main__":
    main()
