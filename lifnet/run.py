"""Run a random recurrent LIF network and write its spike raster.

Usage:
    python -m lifnet.run [--config params.yaml] [--preset NAME]
                         [--mode conductance|current] [--seed N]
                         [--output spikes.csv] [--quiet]
"""

import sys
import argparse

import yaml

from lifnet.simulation.engine import SimulationEngine
from lifnet.simulation.export import save_spikes
from lifnet.simulation.params import PRESETS, get_preset, load_params
from lifnet.utils import get_logger

LOG = get_logger("run")


def build_params(args):
    """Resolve the network parameters from preset, YAML and flags."""
    params = get_preset(args.preset)
    if args.config:
        params = load_params(args.config, base=params)
    if args.mode:
        params = params.with_updates(mode=args.mode)
    return params


def print_progress(step, n_steps):
    print(f"Step {step}/{n_steps}", end="\r", flush=True)


def main(args):
    try:
        params = build_params(args)
    except (KeyError, ValueError, OSError, yaml.YAMLError) as err:
        LOG.error("Invalid configuration: %s", err)
        return 1

    LOG.info("Network parameters:\n%s", params.summary())

    try:
        engine = SimulationEngine(params, seed=args.seed)
    except ValueError as err:
        LOG.error("Invalid seed: %s", err)
        return 1

    result = engine.run(progress=None if args.quiet else print_progress)
    if not args.quiet:
        print("\nSimulation done.")

    LOG.info("Simulation time: %.0f ms (seed %s)", result.wall_time_ms, result.seed)

    try:
        save_spikes(result.spike_log, args.output)
    except OSError:
        return 1
    return 0


def get_parser():
    parser = argparse.ArgumentParser(
        description="Simulate a random recurrent LIF network and save its spike raster")

    parser.add_argument("-c", "--config",
                        required=False, default=None,
                        help="YAML mapping of network options overriding the preset.")

    parser.add_argument("-p", "--preset",
                        required=False, default="default",
                        choices=sorted(PRESETS),
                        help="Named parameter set to start from.")

    parser.add_argument("-m", "--mode",
                        required=False, default=None,
                        choices=["conductance", "current"],
                        help="Synapse model; overrides preset and config.")

    parser.add_argument("-s", "--seed", type=int,
                        required=False, default=None,
                        help="Random seed. Drawn from OS entropy if omitted.")

    parser.add_argument("-o", "--output",
                        required=False, default="spikes.csv",
                        help="Path of the spike raster (time,neuron per line).")

    parser.add_argument("-q", "--quiet", action="store_true",
                        help="Do not print step progress.")
    return parser


def cli(argv=None):
    args = get_parser().parse_args(argv)
    return main(args)


if __name__ == "__main__":
    sys.exit(cli())
