"""Combinators - periodic completion primitives."""

from .ops import ordered_completion, periodic, recent_only_completion, unordered_completion
from .types import PeriodicStream, Policy, StreamConfig, Subscription

__all__ = [
    "periodic",
    "ordered_completion",
    "unordered_completion",
    "recent_only_completion",
    "PeriodicStream",
    "Policy",
    "StreamConfig",
    "Subscription",
]
