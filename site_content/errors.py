"""
Error taxonomy for the content store.

Adapter errors (``AdapterUnavailable``, ``WriteFailed``) never leave the
store; they are turned into fallback attempts. Only ``AllTiersExhausted`` and
``ContentValidationError`` reach the API views.
"""

UNAVAILABLE = "unavailable"
WRITE_FAILED = "write_failed"


class StoreError(Exception):
    kind = UNAVAILABLE

    def __init__(self, message, tier=None):
        super().__init__(message)
        self.message = message
        self.tier = tier

    def as_dict(self):
        return {"tier": self.tier, "kind": self.kind, "message": self.message}


class AdapterUnavailable(StoreError):
    """Adapter not configured, unreachable or timed out."""
    kind = UNAVAILABLE


class WriteFailed(StoreError):
    """Adapter was reachable but rejected the write."""
    kind = WRITE_FAILED


class AllTiersExhausted(StoreError):
    kind = UNAVAILABLE

    def __init__(self, message, tiers_attempted=None, failures=None):
        super().__init__(message)
        self.tiers_attempted = list(tiers_attempted or [])
        self.failures = list(failures or [])


class ContentValidationError(ValueError):
    def __init__(self, message, field=None):
        super().__init__(message)
        self.message = message
        self.field = field
