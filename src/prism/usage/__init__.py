"""Usage estimation for Prism."""

from prism.usage.tracker import UsageRecord, UsageTracker, estimate_tokens

__all__ = ["UsageRecord", "UsageTracker", "estimate_tokens"]
