"""
Failure kinds shared by the store, the upstream gateways and the resolver.

These are explicit and separable from other runtime errors so the resolver
can decide per kind whether to degrade, return an empty result, or fail.
"""

from __future__ import annotations

from typing import Any


class AggregatorError(RuntimeError):
    pass


class NoUpstreamData(AggregatorError):
    """
    The provider answered, but with an empty or absent result array.
    """


class UpstreamUnavailable(AggregatorError):
    """
    Transport error, timeout, non-2xx status or unreadable body from a provider.
    """


class MalformedUpstreamData(AggregatorError):
    def __init__(self, message: str, payload: Any = None) -> None:
        super().__init__(message)
        self.payload = payload


class StoreUnavailable(AggregatorError):
    pass
