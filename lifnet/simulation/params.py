"""Network parameter sets for the LIF simulator.

All constants are simulation-wide: every neuron shares the same membrane,
synapse and refractory parameters. Units follow the usual point-neuron
conventions (mV, ms, GOhm, uS, uA), so that R_m * g * (E_rev - V) and
R_m * I_syn both come out in mV.

Defaults reproduce the reference 100-neuron network:
    N = 100, p_conn = 0.1, dt = 0.1 ms, T = 1000 ms,
    V_rest = -70 mV, V_th = -55 mV, E_rev = 0 mV,
    R_m = 0.1 GOhm, tau_m = 10 ms, tau_s = 5 ms,
    g_s = 0.01 uS (10 nS), I_s = 0.0001 uA (100 pA),
    p_s = 1e-4 per step, tau_ref = 2 ms.
"""

import math
from dataclasses import dataclass, fields, replace
from enum import Enum

import yaml

from lifnet.utils import get_logger

LOG = get_logger("simulation.params")


class SynapseMode(Enum):
    """Which synaptic dynamics drive the membrane."""
    CONDUCTANCE = "conductance"
    CURRENT = "current"

    @classmethod
    def parse(cls, value):
        """Accept a SynapseMode or its string name."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ValueError(
                f"Unknown synapse mode '{value}'. "
                f"Use one of {[m.value for m in cls]}."
            ) from None


@dataclass(frozen=True)
class NetworkParams:
    """Parameters of a random recurrent LIF network.

    Parameters
    ----------
    n_neurons : int
        Population size N.
    p_conn : float
        Probability of each directed connection (i, j), i != j.
    dt : float
        Timestep (ms).
    duration : float
        Total simulated time T (ms).
    v_rest : float
        Resting (and reset) potential (mV).
    v_thresh : float
        Firing threshold (mV).
    e_rev : float
        Synaptic reversal potential (mV), conductance mode only.
    r_m : float
        Membrane resistance (GOhm).
    tau_m : float
        Membrane time constant (ms).
    tau_syn : float
        Synaptic time constant (ms), shared by conductance and current.
    g_syn : float
        Conductance increment per received spike (uS).
    i_syn : float
        Current increment per received spike (uA).
    p_spont : float
        Probability of a spontaneous spike per active step.
    tau_ref : float
        Refractory period (ms).
    mode : SynapseMode or str
        Conductance-based or current-based synapses.
    """
    n_neurons: int = 100
    p_conn: float = 0.1
    dt: float = 0.1
    duration: float = 1000.0
    v_rest: float = -70.0
    v_thresh: float = -55.0
    e_rev: float = 0.0
    r_m: float = 0.1
    tau_m: float = 10.0
    tau_syn: float = 5.0
    g_syn: float = 0.01
    i_syn: float = 0.0001
    p_spont: float = 1e-4
    tau_ref: float = 2.0
    mode: SynapseMode = SynapseMode.CONDUCTANCE

    def __post_init__(self):
        object.__setattr__(self, "mode", SynapseMode.parse(self.mode))

        try:
            n_neurons = float(self.n_neurons)
        except (TypeError, ValueError):
            n_neurons = None
        if (n_neurons is None or not math.isfinite(n_neurons)
                or int(n_neurons) != n_neurons or n_neurons <= 0):
            raise ValueError(
                f"n_neurons must be a positive integer, got {self.n_neurons!r}")
        object.__setattr__(self, "n_neurons", int(n_neurons))

        # YAML reads exponent-only literals such as 1e-4 as strings.
        for f in fields(self):
            if f.name in ("n_neurons", "mode"):
                continue
            value = getattr(self, f.name)
            try:
                value = float(value)
            except (TypeError, ValueError):
                raise ValueError(
                    f"{f.name} must be a number, got {value!r}") from None
            if not math.isfinite(value):
                raise ValueError(f"{f.name} must be finite, got {value}")
            object.__setattr__(self, f.name, value)

        for name in ("p_conn", "p_spont"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must lie in [0, 1], got {value}")

        for name in ("dt", "duration", "tau_m", "tau_syn"):
            value = getattr(self, name)
            if not value > 0.0:
                raise ValueError(f"{name} must be positive, got {value}")

        if self.tau_ref < 0.0:
            raise ValueError(f"tau_ref must be non-negative, got {self.tau_ref}")

        # Forward Euler decay x -= x * dt / tau overshoots past zero if dt > tau.
        for name in ("tau_m", "tau_syn"):
            tau = getattr(self, name)
            if self.dt > tau:
                raise ValueError(
                    f"dt ({self.dt} ms) must not exceed {name} ({tau} ms)")

    @property
    def n_steps(self):
        """Number of simulation steps, round(T / dt)."""
        return int(round(self.duration / self.dt))

    @property
    def refractory_steps(self):
        """Refractory period in whole steps, round(tau_ref / dt)."""
        return int(round(self.tau_ref / self.dt))

    @property
    def is_conductance_based(self):
        return self.mode is SynapseMode.CONDUCTANCE

    def with_updates(self, **kwargs):
        """Return a copy with some fields replaced (re-validated)."""
        return replace(self, **kwargs)

    def to_dict(self):
        """Serialize to a plain dict for provenance or YAML export."""
        d = {f.name: getattr(self, f.name) for f in fields(self)}
        d["mode"] = self.mode.value
        return d

    def summary(self):
        """Return a summary string."""
        lines = [
            f"Network: {self.n_neurons:,} neurons, p_conn={self.p_conn}",
            f"  mode: {self.mode.value}",
            f"  run: {self.duration} ms at dt={self.dt} ms ({self.n_steps:,} steps)",
            f"  membrane: V_rest={self.v_rest} mV, V_th={self.v_thresh} mV, "
            f"tau_m={self.tau_m} ms, R_m={self.r_m}",
            f"  synapse: tau_s={self.tau_syn} ms, g_s={self.g_syn}, "
            f"I_s={self.i_syn}, E_rev={self.e_rev} mV",
            f"  spontaneous: p_s={self.p_spont}/step, "
            f"tau_ref={self.tau_ref} ms ({self.refractory_steps} steps)",
        ]
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Presets
# ---------------------------------------------------------------------------

PRESETS = {
    "default": NetworkParams(),
    "current_based": NetworkParams(mode=SynapseMode.CURRENT),
    # No stochastic drive: with zero input nothing ever fires.
    "silent": NetworkParams(p_spont=0.0),
}


def get_preset(name):
    """Get a named parameter set."""
    if name not in PRESETS:
        raise KeyError(f"Unknown preset '{name}'. "
                       f"Available: {list(PRESETS.keys())}")
    return PRESETS[name]


def params_from_dict(config, base=None):
    """Overlay a mapping of options on a base parameter set.

    Parameters
    ----------
    config : dict
        Option name -> value. Keys must be NetworkParams field names.
    base : NetworkParams, optional
        Starting point. Defaults to the "default" preset.

    Returns
    -------
    NetworkParams
    """
    base = base if base is not None else get_preset("default")
    known = {f.name for f in fields(NetworkParams)}
    unknown = sorted(set(config) - known)
    if unknown:
        raise ValueError(f"Unknown network options {unknown}. "
                         f"Recognized: {sorted(known)}")
    return replace(base, **config)


def load_params(path, base=None):
    """Load a parameter set from a YAML mapping.

    A ``preset`` key, if present, selects the base parameter set; the
    remaining keys override it.

    Parameters
    ----------
    path : str or Path
        YAML file.
    base : NetworkParams, optional
        Starting point when the file names no preset.

    Returns
    -------
    NetworkParams
    """
    with open(path, "r") as f:
        config = yaml.safe_load(f) or {}

    if not isinstance(config, dict):
        raise ValueError(f"Configuration in {path} must be a mapping, "
                         f"got {type(config).__name__}")

    config = dict(config)
    preset = config.pop("preset", None)
    if preset is not None:
        base = get_preset(preset)

    params = params_from_dict(config, base=base)
    LOG.info("Loaded network parameters from %s", path)
    return params
