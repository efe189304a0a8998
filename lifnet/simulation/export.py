"""Spike raster export.

A raster is plain text, one ``time,neuron`` line per spike, in the order
the spikes were emitted. No header. Times use the general ``%g`` format
(six significant digits), so 12.3 ms is written ``12.3`` and not
``12.299999999999999``.
"""

from pathlib import Path

import pandas as pd

from lifnet.utils import get_logger

LOG = get_logger("simulation.export")


def format_spike(neuron, time_ms):
    """One raster line, without the newline."""
    return f"{time_ms:g},{int(neuron)}"


def format_spikes(spike_log):
    """Render a spike log as raster text.

    Parameters
    ----------
    spike_log : iterable of (int, float)
        (neuron index, time ms) pairs, already in emission order.

    Returns
    -------
    str
    """
    return "".join(format_spike(neuron, t) + "\n" for neuron, t in spike_log)


def save_spikes(spike_log, path):
    """Write a spike log to ``path``.

    The log is not modified, so a failed write can be retried with
    another destination.

    Parameters
    ----------
    spike_log : iterable of (int, float)
        (neuron index, time ms) pairs.
    path : str or Path
        Destination file. Overwritten if it exists.

    Returns
    -------
    Path
        The file written.

    Raises
    ------
    OSError
        If the destination cannot be written.
    """
    path = Path(path)
    text = format_spikes(spike_log)
    try:
        with open(path, "w", newline="\n") as f:
            f.write(text)
    except OSError as err:
        LOG.error("Could not write spikes to %s: %s", path, err)
        raise

    LOG.info("Spikes saved to %s (%d spikes)", path, text.count("\n"))
    return path


def load_spikes(path):
    """Read a raster written by save_spikes.

    Returns
    -------
    pd.DataFrame
        Columns: time (float, ms), neuron (int). File order preserved.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Spike raster not found: {path}")
    if path.stat().st_size == 0:
        return pd.DataFrame({
            "time": pd.Series(dtype="float64"),
            "neuron": pd.Series(dtype="int64"),
        })
    return pd.read_csv(path, header=None, names=["time", "neuron"],
                       dtype={"time": "float64", "neuron": "int64"})
