"""Completion policies: how overlapping invocations are ordered and superseded."""

from cadence.policies.base import CompletionPolicy
from cadence.policies.ordered import OrderedCompletion
from cadence.policies.recent_only import RecentOnlyCompletion
from cadence.policies.unordered import UnorderedCompletion

__all__ = [
    "CompletionPolicy",
    "OrderedCompletion",
    "UnorderedCompletion",
    "RecentOnlyCompletion",
]
