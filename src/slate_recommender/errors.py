"""
Error taxonomy for the slate pipeline.

- ConfigLoadError: weight table missing or malformed. Raised and caught inside the
  weight loader only; callers see a degraded WeightsLoadResult instead.
- TransientStoreError: the store failed in a way worth one more attempt
  (dropped connection, operational error, pool timeout).
- FatalStoreError: any other store failure. Never retried.

An empty candidate pool is not an error.
"""


class SlateRecommenderError(Exception):
    """Base class for all errors raised by this package."""


class ConfigLoadError(SlateRecommenderError):
    """Weight table could not be read or parsed."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot load weight table from {path}: {reason}")


class StoreError(SlateRecommenderError):
    """Base class for data store failures."""


class TransientStoreError(StoreError):
    """Store failure that may succeed on an immediate retry."""


class FatalStoreError(StoreError):
    """Store failure that will not succeed on retry."""
