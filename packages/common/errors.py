from __future__ import annotations


class BarSignalError(Exception):
    """Base class for errors raised by the bar/signal core."""


class EmptySeries(BarSignalError, RuntimeError):
    """
    replace_last() was called on a series holding no bar.

    The aggregator only merges into an existing bar, so seeing this means an
    internal invariant was broken. Treat it as fatal.
    """


class InvalidConfiguration(BarSignalError, ValueError):
    """Rejected runtime configuration (bar count, delay, instrument set, YAML shape)."""
