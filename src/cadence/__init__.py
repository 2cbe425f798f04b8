from .combinators import (
    PeriodicStream,
    Policy,
    StreamConfig,
    Subscription,
    ordered_completion,
    periodic,
    recent_only_completion,
    unordered_completion,
)
from .kernel import CancelScope, Evidence, Observer, OperationCancelledError, Outcome, Trace
from .runtime import Emitter, PeriodicTicker

__all__ = [
    # Combinators
    "periodic",
    "ordered_completion",
    "unordered_completion",
    "recent_only_completion",
    # Streams
    "PeriodicStream",
    "Subscription",
    "StreamConfig",
    "Policy",
    # Primitives
    "CancelScope",
    "OperationCancelledError",
    "Outcome",
    "Observer",
    "Emitter",
    "PeriodicTicker",
    # Tracing
    "Trace",
    "Evidence",
]
