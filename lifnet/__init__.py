"""lifnet — recurrent leaky integrate-and-fire network simulator.

Builds a randomly connected population of LIF point neurons, advances it
in fixed timesteps and records a spike raster for downstream analysis.

Subpackages:
    simulation    Parameters, connectivity, neuron models, engine, export
    utils         Logging helpers
"""

__version__ = "0.1.0"
