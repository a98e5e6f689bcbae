"""Stable API contracts and versioning.

This module centralizes the version stamped on negotiation summaries.
"""

API_VERSION = "v1"

__all__ = ["API_VERSION"]
