"""Gateway facade for Prism."""

from prism.gateway.models import BackendAvailability, CostComparison
from prism.gateway.service import LISTING_ORDER, Gateway

__all__ = ["Gateway", "BackendAvailability", "CostComparison", "LISTING_ORDER"]
