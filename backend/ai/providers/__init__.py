import random

from fastapi import Request

from ai.providers.base import AutomationSuggestion, DraftProvider
from ai.providers.simulated import SimulatedOpenAIProvider


def get_provider(
    provider_name: str,
    latency_scale: float = 1.0,
    rng: random.Random | None = None,
) -> DraftProvider:
    providers = {
        "simulated": SimulatedOpenAIProvider,
    }
    cls = providers.get((provider_name or "").strip().lower())
    if not cls:
        raise ValueError(f"Unknown provider: {provider_name}")
    return cls(latency_scale=latency_scale, rng=rng)


def get_draft_provider(request: Request) -> DraftProvider:
    return request.app.state.draft_provider


__all__ = [
    "AutomationSuggestion",
    "DraftProvider",
    "SimulatedOpenAIProvider",
    "get_draft_provider",
    "get_provider",
]
