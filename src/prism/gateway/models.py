"""Read-only views the gateway returns for listings."""

from dataclasses import dataclass

from prism.providers.base import BackendId


@dataclass(frozen=True, slots=True)
class BackendAvailability:
    """Whether one backend is registered, and whether it is the default."""

    id: BackendId
    name: str
    available: bool
    is_default: bool


@dataclass(frozen=True, slots=True)
class CostComparison:
    """Default-model prices of a registered backend, USD per million tokens."""

    backend: BackendId
    name: str
    model: str
    input_price: float
    output_price: float
