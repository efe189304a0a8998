"""simulation — Recurrent LIF network engine.

Pure-python point-neuron simulation with random Erdos-Renyi connectivity,
conductance- or current-based synapses, a one-step synaptic delay and
spike raster export.
"""

from .params import (
    SynapseMode,
    NetworkParams,
    PRESETS,
    get_preset,
    params_from_dict,
    load_params,
)
from .random_source import RandomSource
from .connectivity import (
    NetworkTopology,
    connect_random,
)
from .neuron import (
    Neuron,
    ConductanceSynapse,
    CurrentSynapse,
    make_synapse,
)
from .engine import (
    SimulationEngine,
    SimulationResult,
    simulate,
)
from .export import (
    format_spikes,
    save_spikes,
    load_spikes,
)
from .analysis import (
    firing_rates,
    spike_raster,
    spikes_to_frame,
    active_fraction,
    population_rate,
    synchrony_index,
)
