"""Data management: result cache and validation schemas."""

from dateline.data_management.result_cache import ResultCache, fingerprint

__all__ = ["ResultCache", "fingerprint"]
