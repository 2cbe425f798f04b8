"""Kernel layer - pure abstractions for cadence."""

from cadence.kernel.cancel import CancelScope, OperationCancelledError
from cadence.kernel.invocation import Invocation, start_invocation
from cadence.kernel.outcome import Outcome
from cadence.kernel.ports import Observer, Operation, Ticker, TickerFactory
from cadence.kernel.trace import Evidence, Trace

__all__ = [
    "Outcome",
    "Invocation",
    "start_invocation",
    # Cancellation
    "CancelScope",
    "OperationCancelledError",
    # Tracing
    "Evidence",
    "Trace",
    # Ports
    "Operation",
    "Observer",
    "Ticker",
    "TickerFactory",
]
