"""Tests for post-simulation analysis tools."""

import numpy as np
import pytest

from lifnet.simulation.analysis import (
    firing_rates, spike_raster, spikes_to_frame, active_fraction,
    population_rate, synchrony_index,
)
from lifnet.simulation.engine import SimulationResult


@pytest.fixture
def result():
    """Synthetic result with known spikes."""
    spike_times = [
        np.array([10.0, 20.0, 30.0, 40.0, 50.0]),  # 5 spikes in 100ms = 50Hz
        np.array([15.0, 45.0]),  # 2 spikes = 20Hz
        np.array([]),  # silent
    ]
    log = sorted(((i, t) for i, st in enumerate(spike_times) for t in st),
                 key=lambda e: (e[1], e[0]))
    return SimulationResult(
        spike_log=log,
        spike_times=spike_times,
        dt=0.1,
        duration=100.0,
        n_neurons=3,
    )


class TestRates:
    def test_firing_rates(self, result):
        rates = firing_rates(result)
        assert abs(rates[0] - 50.0) < 0.1
        assert abs(rates[1] - 20.0) < 0.1
        assert rates[2] == 0.0

    def test_firing_rates_windowed(self, result):
        rates = firing_rates(result, time_window=(0.0, 50.0))
        # Neuron 0: 4 spikes in 50ms = 80 Hz
        assert abs(rates[0] - 80.0) < 0.1

    def test_active_fraction(self, result):
        frac = active_fraction(result, threshold_hz=1.0)
        assert abs(frac - 2.0 / 3.0) < 0.01

    def test_population_rate(self, result):
        times, rates = population_rate(result, bin_ms=50.0)
        assert len(times) == 2
        np.testing.assert_allclose(times, [25.0, 75.0])
        # 6 spikes in the first bin, 1 in the second; 3 neurons, 50 ms
        np.testing.assert_allclose(rates, [6 / 0.15, 1 / 0.15])


class TestRaster:
    def test_spike_raster(self, result):
        times, neurons = spike_raster(result)
        assert len(times) == 7  # 5 + 2 + 0
        assert len(neurons) == 7

    def test_spike_raster_subset(self, result):
        times, neurons = spike_raster(result, neuron_indices=[0])
        assert len(times) == 5
        assert np.all(neurons == 0)

    def test_spike_raster_window(self, result):
        times, _ = spike_raster(result, time_window=(12.0, 41.0))
        assert sorted(times) == [15.0, 20.0, 30.0, 40.0]

    def test_spikes_to_frame(self, result):
        df = spikes_to_frame(result.spike_log)
        assert list(df.columns) == ["neuron", "time"]
        assert len(df) == 7
        assert df["time"].is_monotonic_increasing

    def test_spikes_to_frame_empty(self):
        df = spikes_to_frame([])
        assert len(df) == 0
        assert list(df.columns) == ["neuron", "time"]


class TestSynchrony:
    def test_silent(self):
        silent = SimulationResult(spike_log=[], spike_times=[np.array([])] * 4,
                                  duration=100.0, n_neurons=4)
        assert synchrony_index(silent) == 0.0

    def test_volleys_more_synchronous(self):
        n, duration = 10, 100.0
        volley = [(i, t) for t in (10.0, 50.0, 90.0) for i in range(n)]
        spread = sorted(((i, t + i) for t in (10.0, 50.0, 90.0) for i in range(n)),
                        key=lambda e: (e[1], e[0]))
        sync = SimulationResult(spike_log=volley, duration=duration, n_neurons=n)
        async_ = SimulationResult(spike_log=spread, duration=duration, n_neurons=n)
        assert synchrony_index(sync) > synchrony_index(async_) > 0.0


class TestFromLog:
    """The helpers need nothing but the global spike log."""

    @pytest.fixture
    def log_only(self, result):
        return SimulationResult(spike_log=list(result.spike_log),
                                duration=result.duration,
                                n_neurons=result.n_neurons)

    def test_rates_match_per_neuron_times(self, result, log_only):
        np.testing.assert_allclose(firing_rates(log_only), firing_rates(result))
        np.testing.assert_allclose(firing_rates(log_only), result.neuron_rates())

    def test_raster_keeps_emission_order(self, log_only):
        times, neurons = spike_raster(log_only)
        assert list(zip(neurons, times)) == log_only.spike_log

    def test_spike_at_run_end_in_last_bin(self):
        res = SimulationResult(spike_log=[(0, 100.0)], duration=100.0,
                               n_neurons=1)
        _, rates = population_rate(res, bin_ms=50.0)
        np.testing.assert_allclose(rates, [0.0, 20.0])
