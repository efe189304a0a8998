"""Fixed-timestep engine for a recurrent LIF network.

Each step runs two passes separated by a full barrier:

    1. Update: every neuron, in index order, advances one step. Fired
       neurons are logged as (index, step * dt). Same-step spikes do not
       reach anyone during this pass.
    2. Propagate: every neuron that fired delivers receive_spike() to each
       of its postsynaptic targets.

A spike at step t therefore first affects its targets at step t + 1,
whatever the iteration order within a pass.
"""

import time
from dataclasses import dataclass, field
from typing import Optional

import numpy as np

from lifnet.simulation.connectivity import connect_random
from lifnet.simulation.neuron import Neuron, make_synapse
from lifnet.simulation.random_source import RandomSource
from lifnet.utils import get_logger

LOG = get_logger("simulation.engine")


@dataclass
class SimulationResult:
    """Results from a simulation run.

    Attributes
    ----------
    spike_log : list of (int, float)
        (neuron index, time ms) in emission order: step by step, and by
        neuron index within a step.
    spike_times : list of np.ndarray
        spike_times[i] is an array of spike times (ms) for neuron i.
    dt : float
        Timestep used (ms).
    duration : float
        Total simulation time (ms).
    n_neurons : int
        Number of neurons.
    seed : int, optional
        Seed of the random stream, for replay.
    wall_time_ms : float
        Wall-clock time spent in the loop (ms).
    """
    spike_log: list
    spike_times: list = field(default_factory=list)
    dt: float = 0.1
    duration: float = 1000.0
    n_neurons: int = 0
    seed: Optional[int] = None
    wall_time_ms: float = 0.0

    @property
    def n_spikes(self):
        """Total number of spikes across all neurons."""
        return len(self.spike_log)

    def mean_rate(self):
        """Mean firing rate across all neurons (Hz)."""
        duration_s = self.duration / 1000.0
        return self.n_spikes / (self.n_neurons * duration_s) if self.n_neurons > 0 else 0.0

    def neuron_rates(self):
        """Per-neuron firing rates (Hz)."""
        duration_s = self.duration / 1000.0
        return np.array([len(st) / duration_s for st in self.spike_times])


class SimulationEngine:
    """Owns a neuron population, its connectivity and the spike log.

    Parameters
    ----------
    params : NetworkParams
        Network constants.
    rng : RandomSource, optional
        Shared random stream. If None, one is created from ``seed``.
    seed : int, optional
        Seed for a new RandomSource; ignored when ``rng`` is given.
    topology : NetworkTopology, optional
        Precomputed connectivity. If None, drawn with connect_random from
        the shared stream.
    """

    def __init__(self, params, rng=None, seed=None, topology=None):
        self.params = params
        self.rng = rng if rng is not None else RandomSource(seed)

        if topology is None:
            topology = connect_random(params.n_neurons, params.p_conn, self.rng)
        elif topology.n_neurons != params.n_neurons:
            raise ValueError(
                f"Topology has {topology.n_neurons} neurons, "
                f"parameters specify {params.n_neurons}")
        self.topology = topology

        self.synapse = make_synapse(params)
        self.neurons = [
            Neuron(params=params, synapse=self.synapse,
                   outgoing_targets=list(targets))
            for targets in topology.targets
        ]
        self.spike_log = []
        self.current_step = 0

    @property
    def n_neurons(self):
        return len(self.neurons)

    @property
    def n_steps(self):
        return self.params.n_steps

    def update_phase(self, t):
        """Advance every neuron one step; return the indices that fired."""
        fired = []
        dt = self.params.dt
        for i, neuron in enumerate(self.neurons):
            if neuron.update(t, self.rng):
                fired.append(i)
                self.spike_log.append((i, t * dt))
        return fired

    def propagate(self, fired):
        """Deliver spikes from the fired neurons to their targets."""
        for i in fired:
            for target in self.neurons[i].outgoing_targets:
                self.neurons[target].receive_spike()

    def step(self):
        """Run one full step (update, then propagate).

        Returns
        -------
        list of int
            Indices of neurons that fired.
        """
        t = self.current_step
        fired = self.update_phase(t)
        self.propagate(fired)
        self.current_step += 1
        return fired

    def run(self, progress=None, progress_every=100):
        """Run the remaining steps up to params.n_steps.

        Parameters
        ----------
        progress : callable, optional
            Called as progress(step, n_steps) every ``progress_every`` steps.
        progress_every : int
            Observation period in steps.

        Returns
        -------
        SimulationResult
        """
        n_steps = self.n_steps
        LOG.info("Starting simulation: %d neurons, %d synapses, %.0f ms, "
                 "dt=%.2f ms, %s synapses",
                 self.n_neurons, self.topology.n_synapses,
                 self.params.duration, self.params.dt, self.params.mode.value)

        start = time.perf_counter()
        while self.current_step < n_steps:
            if progress is not None and self.current_step % progress_every == 0:
                progress(self.current_step, n_steps)
            self.step()
        wall_time_ms = (time.perf_counter() - start) * 1000.0

        result = self.result(wall_time_ms=wall_time_ms)
        LOG.info("Simulation complete: %d spikes, mean rate %.2f Hz, %.0f ms wall time",
                 result.n_spikes, result.mean_rate(), wall_time_ms)
        return result

    def result(self, wall_time_ms=0.0):
        """Snapshot the recorded spikes as a SimulationResult."""
        return SimulationResult(
            spike_log=list(self.spike_log),
            spike_times=[np.array(n.spike_record, dtype=np.float64)
                         for n in self.neurons],
            dt=self.params.dt,
            duration=self.params.duration,
            n_neurons=self.n_neurons,
            seed=getattr(self.rng, "seed", None),
            wall_time_ms=wall_time_ms,
        )


def simulate(params, seed=None, rng=None, topology=None, progress=None):
    """Build a random network from params and run it to completion.

    Parameters
    ----------
    params : NetworkParams
        Network constants.
    seed : int, optional
        Random seed. If None, seeded from OS entropy.
    rng : RandomSource, optional
        Shared random stream; overrides ``seed``.
    topology : NetworkTopology, optional
        Precomputed connectivity.
    progress : callable, optional
        Progress observer, see SimulationEngine.run.

    Returns
    -------
    SimulationResult
    """
    engine = SimulationEngine(params, rng=rng, seed=seed, topology=topology)
    return engine.run(progress=progress)
