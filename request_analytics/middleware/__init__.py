"""Custom middleware components."""

from .fingerprint import APP_STATE_KEY, FingerprintMiddleware

__all__ = ["APP_STATE_KEY", "FingerprintMiddleware"]
