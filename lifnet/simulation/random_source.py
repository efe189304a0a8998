"""A single pseudo-random stream shared by every stochastic step.

Connectivity draws and spontaneous-fire checks all pull from the same
stream, in a fixed order, so a run is fully reproducible from its seed.
"""

import numpy as np


class RandomSource:
    """Uniform and Bernoulli draws from one seeded numpy stream.

    Parameters
    ----------
    seed : int, optional
        Seed for the stream. If None, a seed is drawn from OS entropy and
        kept in ``self.seed`` so the run can be replayed.
    """

    def __init__(self, seed=None):
        if seed is None:
            seed = int(np.random.SeedSequence().generate_state(1)[0])
        elif not 0 <= seed < 2**32:
            raise ValueError(f"seed must lie in [0, 2**32 - 1], got {seed}")
        self.seed = seed
        self._rng = np.random.RandomState(seed)

    def uniform(self):
        """A real in [0, 1)."""
        return float(self._rng.random_sample())

    def bernoulli(self, p):
        """True with probability p."""
        return self.uniform() < p

    def __repr__(self):
        return f"RandomSource(seed={self.seed})"
