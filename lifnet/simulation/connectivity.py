"""Random directed connectivity for a neuron population.

Erdos-Renyi style: every ordered pair (i, j) with i != j is connected
independently with probability p_conn. Self-connections are never drawn.
Connectivity is held as per-neuron lists of postsynaptic indices.
"""

from dataclasses import dataclass

import numpy as np
import pandas as pd

from lifnet.utils import get_logger

LOG = get_logger("simulation.connectivity")


@dataclass
class NetworkTopology:
    """Outgoing adjacency lists for a population.

    Attributes
    ----------
    targets : list of list of int
        targets[i] lists the postsynaptic indices of neuron i, in
        increasing order.
    """
    targets: list

    @property
    def n_neurons(self):
        return len(self.targets)

    @property
    def n_synapses(self):
        return sum(len(t) for t in self.targets)

    def out_degree(self):
        """Number of outgoing connections per neuron."""
        return np.array([len(t) for t in self.targets], dtype=np.int64)

    def in_degree(self):
        """Number of incoming connections per neuron."""
        counts = np.zeros(self.n_neurons, dtype=np.int64)
        for t in self.targets:
            if t:
                np.add.at(counts, t, 1)
        return counts

    def to_edges(self):
        """Flatten into an edge table.

        Returns
        -------
        pd.DataFrame
            Columns: pre, post. One row per directed connection.
        """
        pre = [i for i, t in enumerate(self.targets) for _ in t]
        post = [j for t in self.targets for j in t]
        return pd.DataFrame({
            "pre": np.asarray(pre, dtype=np.int64),
            "post": np.asarray(post, dtype=np.int64),
        })

    def summary(self):
        """Return a summary string."""
        n = self.n_neurons
        lines = [
            f"Topology: {n:,} neurons, {self.n_synapses:,} synapses",
        ]
        if n > 0:
            lines.append(f"  mean out-degree: {self.out_degree().mean():.2f}")
        return "\n".join(lines)


def connect_random(n_neurons, p_conn, rng):
    """Draw a random directed graph without self-loops.

    One Bernoulli(p_conn) trial is drawn for each ordered pair (i, j),
    i != j, in row-major order; on success j is appended to i's targets.

    Parameters
    ----------
    n_neurons : int
        Population size.
    p_conn : float
        Connection probability, in [0, 1].
    rng : RandomSource
        Shared random stream.

    Returns
    -------
    NetworkTopology
    """
    if not 0.0 <= p_conn <= 1.0:
        raise ValueError(f"p_conn must lie in [0, 1], got {p_conn}")

    targets = [[] for _ in range(n_neurons)]
    for i in range(n_neurons):
        for j in range(n_neurons):
            if i != j and rng.bernoulli(p_conn):
                targets[i].append(j)

    topology = NetworkTopology(targets=targets)
    LOG.info("Connected %d neurons: %d synapses (p_conn=%.3f, expected degree %.1f)",
             n_neurons, topology.n_synapses, p_conn, (n_neurons - 1) * p_conn)
    return topology
