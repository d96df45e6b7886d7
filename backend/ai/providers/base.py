from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class AutomationSuggestion:
    trigger: str
    action: str
    tool: str
    time_saved: int
    description: str


class DraftProvider(ABC):
    """Abstract base class for the content-generation capability used by the API layer."""

    name: str = "base"

    @abstractmethod
    async def generate_action_item_draft(self, text: str, context: str | None = None) -> str:
        """Produce a first draft (email, checklist, outline) for an action item.

        Args:
            text: The action item text.
            context: Optional transcript or notes the item came from.

        Returns:
            The generated draft as plain text.
        """
        ...

    @abstractmethod
    async def suggest_canned_response(self, title: str, tags: list[str] | None = None) -> str:
        """Suggest body text for a canned response with the given title."""
        ...

    @abstractmethod
    async def extract_action_items(self, transcript: str) -> list[str]:
        """Extract action item texts from a meeting transcript."""
        ...

    @abstractmethod
    async def suggest_automation(self, activity_history: str = "") -> AutomationSuggestion:
        """Suggest one automation based on a free-text activity history."""
        ...
