"""Approximate token and cost accounting for successful requests.

Token counts are a character heuristic (ceil(len / 4)), not a tokenizer.
Do not rely on them for billing.
"""

import math
from collections.abc import Sequence
from dataclasses import dataclass

from prism.core.types import CostUSD, TokenCount
from prism.observability.logging import get_logger
from prism.providers.base import BackendClient, BackendId, Message

log = get_logger(__name__)

CHARS_PER_TOKEN = 4


def estimate_tokens(text: str) -> TokenCount:
    """Approximate token count of text."""
    return math.ceil(len(text) / CHARS_PER_TOKEN)


@dataclass(frozen=True, slots=True)
class UsageRecord:
    """Usage of one successful request.

    Attributes:
        backend: Backend that answered.
        model: Model id that answered.
        input_tokens: Estimated prompt tokens.
        output_tokens: Estimated response tokens.
        cost: Estimated cost in US dollars.
    """

    backend: BackendId
    model: str
    input_tokens: TokenCount
    output_tokens: TokenCount
    cost: CostUSD

    @property
    def total_tokens(self) -> TokenCount:
        return self.input_tokens + self.output_tokens


class UsageTracker:
    """Builds UsageRecords. Holds no state; records are not persisted."""

    def record(
        self,
        client: BackendClient,
        backend: BackendId,
        messages: Sequence[Message],
        response_text: str,
        model: str | None = None,
    ) -> UsageRecord:
        """Estimate usage and cost for one answered request.

        Args:
            client: The backend client that answered, used for pricing.
            backend: Its identifier.
            messages: Messages that were sent.
            response_text: The answer text.
            model: Model id that answered. Defaults to the client's model.

        Returns:
            UsageRecord for the request.
        """
        input_tokens = estimate_tokens(" ".join(m.content for m in messages))
        output_tokens = estimate_tokens(response_text)
        model = model or client.model_id
        cost = client.estimate_cost(input_tokens, output_tokens, model)

        log.debug(
            "usage.record.created",
            backend=backend.value,
            model=model,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            cost=cost,
        )
        return UsageRecord(
            backend=backend,
            model=model,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            cost=cost,
        )
