"""Post-simulation analysis tools.

Everything here reads the global spike log of a SimulationResult, the
same ``(neuron, time)`` event stream the exporter writes, so a raster
loaded back from disk analyses the same way as a fresh run.
"""

import numpy as np
import pandas as pd


def _log_arrays(spike_log):
    """Neuron indices and spike times (ms) of a log, in emission order."""
    if not spike_log:
        return np.zeros(0, dtype=np.int64), np.zeros(0)
    neurons, times = zip(*spike_log)
    return np.asarray(neurons, dtype=np.int64), np.asarray(times, dtype=np.float64)


def _window_mask(times, time_window):
    if time_window is None:
        return np.ones(len(times), dtype=bool)
    t0, t1 = time_window
    return (times >= t0) & (times < t1)


def firing_rates(result, time_window=None):
    """Per-neuron firing rate (Hz).

    Parameters
    ----------
    result : SimulationResult
        Simulation output.
    time_window : tuple of float, optional
        Half-open (start_ms, end_ms). Defaults to the whole run.

    Returns
    -------
    np.ndarray
        One rate per neuron, silent neurons included.
    """
    neurons, times = _log_arrays(result.spike_log)
    mask = _window_mask(times, time_window)
    if time_window is None:
        span_ms = result.duration
    else:
        span_ms = time_window[1] - time_window[0]
    counts = np.bincount(neurons[mask], minlength=result.n_neurons)
    return counts / (span_ms / 1000.0)


def spike_raster(result, neuron_indices=None, time_window=None):
    """Raster points (times, neurons) in emission order.

    ``neuron_indices`` restricts to a subset of neurons, ``time_window``
    to a half-open (start_ms, end_ms) interval.
    """
    neurons, times = _log_arrays(result.spike_log)
    mask = _window_mask(times, time_window)
    if neuron_indices is not None:
        mask &= np.isin(neurons, np.asarray(neuron_indices))
    return times[mask], neurons[mask]


def spikes_to_frame(spike_log):
    """Spike log as a DataFrame with columns neuron, time (ms)."""
    neurons, times = _log_arrays(spike_log)
    return pd.DataFrame({"neuron": neurons, "time": times})


def active_fraction(result, threshold_hz=1.0, time_window=None):
    """Fraction of neurons firing above a threshold rate."""
    rates = firing_rates(result, time_window=time_window)
    if len(rates) == 0:
        return 0.0
    return float(np.mean(rates > threshold_hz))


def population_rate(result, bin_ms=10.0):
    """Population-averaged firing rate over time.

    Spikes are histogrammed into ``bin_ms`` bins covering the run; a spike
    past the last full bin is counted in it.

    Returns
    -------
    times : np.ndarray
        Bin centers (ms).
    rates : np.ndarray
        Mean rate per neuron (Hz) in each bin.
    """
    n_bins = max(1, int(result.duration / bin_ms))
    _, times = _log_arrays(result.spike_log)
    bins = np.clip((times / bin_ms).astype(np.int64), 0, n_bins - 1)
    counts = np.bincount(bins, minlength=n_bins)
    rates = counts / (result.n_neurons * bin_ms / 1000.0)
    centers = (np.arange(n_bins) + 0.5) * bin_ms
    return centers, rates


def synchrony_index(result, bin_ms=1.0):
    """Variance-to-mean ratio of the binned population rate.

    Large when the population fires in volleys, 0 for a silent network.
    """
    _, rates = population_rate(result, bin_ms=bin_ms)
    mean_rate = np.mean(rates)
    if mean_rate == 0:
        return 0.0
    return float(np.var(rates) / mean_rate)
