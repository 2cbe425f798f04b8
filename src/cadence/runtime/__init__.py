"""Runtime infrastructure - default ticker and emitter."""

from cadence.runtime.emitter import Emitter
from cadence.runtime.ticker import PeriodicTicker

__all__ = [
    "Emitter",
    "PeriodicTicker",
]
