"""LIF point neuron with pluggable synapse dynamics.

Each neuron advances one timestep at a time:

    1. Refractory: count down, hold V at rest, no spike.
    2. Spontaneous: one uniform draw; below p_s the neuron fires at once
       and skips integration for this step.
    3. Integrate the synaptic drive (conductance or current model):
           dV = dt/tau_m * (-(V - V_rest) + drive)
    4. Fire if V >= V_th: reset to V_rest, start the refractory countdown,
       record the spike time.

The synapse model is chosen once per network and shared by every neuron.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Union

from lifnet.simulation.params import NetworkParams, SynapseMode


class ConductanceSynapse:
    """Conductance-based synapse: drive = R_m * g * (E_rev - V).

    The conductance decays toward zero with tau_s once per step before it
    is used. The auxiliary synaptic current is decayed by the same amount
    and floored at zero; it does not drive the membrane.
    """
    mode = SynapseMode.CONDUCTANCE

    def __init__(self, params):
        self.params = params

    def integrate(self, neuron):
        p = self.params
        decay = neuron.conductance / p.tau_syn * p.dt
        neuron.synaptic_current = max(0.0, neuron.synaptic_current - decay)
        neuron.conductance -= decay
        v = neuron.membrane_potential
        return p.dt / p.tau_m * (-(v - p.v_rest)
                                 + p.r_m * neuron.conductance * (p.e_rev - v))

    def receive(self, neuron):
        neuron.conductance += self.params.g_syn


class CurrentSynapse:
    """Current-based synapse: drive = R_m * I_syn, independent of V."""
    mode = SynapseMode.CURRENT

    def __init__(self, params):
        self.params = params

    def integrate(self, neuron):
        p = self.params
        neuron.synaptic_current -= neuron.synaptic_current / p.tau_syn * p.dt
        v = neuron.membrane_potential
        return p.dt / p.tau_m * (-(v - p.v_rest) + p.r_m * neuron.synaptic_current)

    def receive(self, neuron):
        neuron.synaptic_current += self.params.i_syn


SYNAPSE_MODELS = {
    SynapseMode.CONDUCTANCE: ConductanceSynapse,
    SynapseMode.CURRENT: CurrentSynapse,
}


def make_synapse(params):
    """Instantiate the synapse model selected by params.mode."""
    return SYNAPSE_MODELS[params.mode](params)


@dataclass
class Neuron:
    """State of one LIF neuron.

    Attributes
    ----------
    membrane_potential : float
        Current potential (mV).
    conductance : float
        Synaptic conductance (uS), conductance mode only.
    synaptic_current : float
        Synaptic current (uA). Drives V in current mode; auxiliary and
        never negative in conductance mode.
    refractory_countdown : int
        Steps left during which the neuron cannot integrate or fire.
    outgoing_targets : list of int
        Postsynaptic neuron indices. Fixed after construction.
    spike_record : list of float
        Firing times (ms), append-only.
    spontaneous_prob : float, optional
        Per-neuron override of the network's p_s.
    """
    params: NetworkParams
    synapse: Union[ConductanceSynapse, CurrentSynapse]
    membrane_potential: Optional[float] = None
    conductance: float = 0.0
    synaptic_current: float = 0.0
    refractory_countdown: int = 0
    outgoing_targets: List[int] = field(default_factory=list)
    spike_record: List[float] = field(default_factory=list)
    spontaneous_prob: Optional[float] = None

    def __post_init__(self):
        if self.membrane_potential is None:
            self.membrane_potential = self.params.v_rest

    @property
    def is_refractory(self):
        return self.refractory_countdown > 0

    @property
    def p_spont(self):
        if self.spontaneous_prob is not None:
            return self.spontaneous_prob
        return self.params.p_spont

    def update(self, step, rng):
        """Advance one timestep with zero external input.

        Parameters
        ----------
        step : int
            Step index; the spike time is step * dt.
        rng : RandomSource
            Shared stream for the spontaneous-fire draw.

        Returns
        -------
        bool
            True if the neuron fired this step.
        """
        if self.refractory_countdown > 0:
            self.refractory_countdown -= 1
            self.membrane_potential = self.params.v_rest
            return False

        if rng.uniform() < self.p_spont:
            self._fire(step)
            return True

        self.membrane_potential += self.synapse.integrate(self)

        if self.membrane_potential >= self.params.v_thresh:
            self._fire(step)
            return True
        return False

    def receive_spike(self):
        """Accumulate one presynaptic spike."""
        self.synapse.receive(self)

    def _fire(self, step):
        self.membrane_potential = self.params.v_rest
        self.refractory_countdown = self.params.refractory_steps
        self.spike_record.append(step * self.params.dt)
