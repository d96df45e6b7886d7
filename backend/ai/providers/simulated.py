"""Offline stand-in for the OpenAI-backed content generation.

Responses are canned real-estate texts picked by keyword, returned after an
artificial delay so the UI behaves as it would against a real model.
"""
import asyncio
import logging
import random
from dataclasses import replace

from ai.providers.base import AutomationSuggestion, DraftProvider

logger = logging.getLogger(__name__)

DRAFT_DELAY_SECONDS = 0.8
EXTRACT_DELAY_SECONDS = 1.2
SUGGEST_DELAY_SECONDS = 1.0

_ONBOARDING_DRAFT = """Subject: Onboarding Workflow - Initial Draft

Here's a working doc to guide new team members through onboarding:
- Overview of systems/tools
- First 7-day expectations
- Team contacts
- Performance benchmarks

Let me know what else you'd like to include before sharing!"""

_FOLLOW_UP_DRAFT = """Subject: FastCAP Committee Follow-Up

I'd like to schedule a follow-up meeting to discuss:

1. Recent FastCAP session feedback
2. Proposed changes to the curriculum
3. Next quarter's schedule planning
4. Instructor availability and assignments

Would Thursday at 2pm work for everyone? I'll send calendar invites once confirmed."""

_POST_DRAFT = """Subject: LinkedIn Post Draft - AI Challenge Announcement

Excited to announce our upcoming AI Challenge at eXp Realty!

Join us in exploring how AI can transform real estate operations. This competition invites teams to build solutions that:
- Improve client experiences
- Streamline workflows
- Enhance data analysis

Registration opens May 20th. Cash prizes and implementation opportunities for winning solutions!

#AIinRealEstate #eXpInnovation #RealEstateTech"""

_MATERIALS_DRAFT = """Subject: AI Onboarding Materials Update - Draft Plan

Here's my initial plan for updating our AI onboarding materials:

1. Add section on prompt engineering best practices
2. Update ChatGPT examples with GPT-4o capabilities
3. Create quick-reference guide for common AI tasks
4. Develop 3 hands-on exercises for new staff
5. Record walkthrough videos for complex workflows

Target completion: End of month
Reviewers needed: Tech team and 2-3 recent hires"""

_GENERIC_DRAFT = """Subject: {text} - Initial Draft

I've prepared a first draft for this task:

1. Main objectives and scope
2. Key stakeholders to involve
3. Timeline and milestones
4. Resources needed
5. Success metrics

Would you like me to expand any particular section or add other components?"""

# Checked in order; first keyword hit wins.
_DRAFT_RULES: tuple[tuple[tuple[str, ...], str], ...] = (
    (("process doc", "onboarding"), _ONBOARDING_DRAFT),
    (("follow up", "meeting", "fastcap"), _FOLLOW_UP_DRAFT),
    (("draft", "linkedin", "post"), _POST_DRAFT),
    (("update", "materials"), _MATERIALS_DRAFT),
)

_CANNED_TEMPLATES = {
    "faq": """Thank you for your question about [Topic].

This is a common question I receive, and I'm happy to clarify. [Brief 1-2 sentence explanation]

In short, [main answer point]. If you'd like more detailed information, I can provide resources or schedule a quick call to discuss further.

Let me know if you have any other questions!""",
    "showing": """Thank you for your interest in viewing [Property Type/Address].

I'd be delighted to arrange a showing for you. The property is available for viewings on [Days/Times]. Please let me know which of these options works best for you, and I'll confirm the appointment.

To make the most of our time, I recommend having your pre-approval letter ready if you're considering making an offer.

Looking forward to showing you this wonderful property!""",
    "pricing": """Thank you for inquiring about pricing for [Property/Service].

Our current rates are as follows:
- [Item/Service 1]: $X
- [Item/Service 2]: $Y
- [Package option]: $Z

All prices include [what's included] and are valid until [date].

Please let me know if you have any other questions or would like a personalized quote.""",
    "follow_up": """I wanted to follow up on our recent conversation about [Topic/Property].

As promised, I've [action taken]. [Insert 1-2 sentences with findings or updates]

The next steps would be [brief description of next steps]. Would you like to proceed, or do you need any additional information at this point?

I'm here to help in any way I can.""",
}

_CANNED_RULES: tuple[tuple[tuple[str, ...], str], ...] = (
    (("faq", "question"), "faq"),
    (("showing", "tour", "visit"), "showing"),
    (("price", "cost", "fee"), "pricing"),
)

PREDEFINED_ACTION_ITEMS: tuple[str, ...] = (
    "Schedule property viewing for 123 Main St on Tuesday",
    "Follow up with John Smith about financing options",
    "Send market analysis report to the Rodriguez family",
    "Contact home inspector to arrange inspection for 456 Oak Avenue",
    "Prepare listing presentation for Thursday's appointment with the Millers",
    "Call contractor about repair estimate for the kitchen renovation",
    "Update MLS listing for 789 Pine Street with new photos",
    "Reach out to past clients for quarterly check-in",
    "Prepare offer documents for the Jacksons",
    "Research comparable properties in Westlake neighborhood",
)

_STOP_WORDS = {"and", "the", "this", "that", "with", "from", "have", "about"}

AUTOMATION_SUGGESTIONS: tuple[AutomationSuggestion, ...] = (
    AutomationSuggestion(
        trigger="New client inquiry received",
        action="Send welcome email with introduction and schedule initial consultation",
        tool="Gmail",
        time_saved=15,
        description="Respond to new leads with your introduction and calendar link.",
    ),
    AutomationSuggestion(
        trigger="Property showing scheduled",
        action="Send reminder and property details 24 hours before viewing",
        tool="Calendar",
        time_saved=10,
        description="Send clients reminders with property details and directions before each viewing.",
    ),
    AutomationSuggestion(
        trigger="Meeting transcript with action items detected",
        action="Create task assignments in project management tool",
        tool="Slack",
        time_saved=20,
        description="Convert meeting notes into assigned tasks so follow-ups are not missed.",
    ),
    AutomationSuggestion(
        trigger="Contract signed",
        action="Notify team members and start closing process workflow",
        tool="Slack",
        time_saved=12,
        description="Notify the team when a contract is signed and kick off the closing workflow.",
    ),
    AutomationSuggestion(
        trigger="Property listing anniversary (6 months)",
        action="Generate price reduction recommendation email",
        tool="Gmail",
        time_saved=25,
        description="Flag stale listings and prepare price reduction recommendations with market data.",
    ),
)

_TOOL_HINTS: tuple[tuple[tuple[str, ...], str], ...] = (
    (("email", "message"), "Gmail"),
    (("team", "chat"), "Slack"),
    (("meeting", "schedule"), "Calendar"),
)


def _first_match(haystack: str, rules):
    lowered = haystack.lower()
    for keywords, result in rules:
        if any(keyword in lowered for keyword in keywords):
            return result
    return None


class SimulatedOpenAIProvider(DraftProvider):
    """Keyword-driven canned responses with artificial latency."""

    name = "simulated"

    def __init__(self, latency_scale: float = 1.0, rng: random.Random | None = None):
        self.latency_scale = max(float(latency_scale), 0.0)
        self._rng = rng or random.Random()

    async def _delay(self, seconds: float) -> None:
        await asyncio.sleep(seconds * self.latency_scale)

    async def generate_action_item_draft(self, text: str, context: str | None = None) -> str:
        await self._delay(DRAFT_DELAY_SECONDS)
        draft = _first_match(text, _DRAFT_RULES) or _GENERIC_DRAFT.format(text=text)
        if context and context.strip():
            excerpt = context[:100] + ("..." if len(context) > 100 else "")
            draft = f'Based on: "{excerpt}"\n\n{draft}'
        logger.info("Generated simulated draft for action item (%d chars)", len(draft))
        return draft

    async def suggest_canned_response(self, title: str, tags: list[str] | None = None) -> str:
        await self._delay(DRAFT_DELAY_SECONDS)
        key = _first_match(title, _CANNED_RULES) or "follow_up"
        content = _CANNED_TEMPLATES[key]
        if tags:
            content = f"[{'/'.join(tags)}]\n\n{content}"
        return content

    async def extract_action_items(self, transcript: str) -> list[str]:
        await self._delay(EXTRACT_DELAY_SECONDS)
        count = self._rng.randint(3, 5)
        items = self._rng.sample(PREDEFINED_ACTION_ITEMS, count)

        words = transcript.split(" ") if transcript else []
        if len(words) > 3:
            keyword = words[self._rng.randrange(min(len(words), 20))]
            if len(keyword) > 3 and keyword.lower() not in _STOP_WORDS:
                items.append(f"Follow up about {keyword} discussion from the meeting")
        logger.info("Extracted %d simulated action items", len(items))
        return items

    async def suggest_automation(self, activity_history: str = "") -> AutomationSuggestion:
        await self._delay(SUGGEST_DELAY_SECONDS)
        suggestion = self._rng.choice(AUTOMATION_SUGGESTIONS)
        if activity_history:
            tool = _first_match(activity_history, _TOOL_HINTS)
            if tool:
                suggestion = replace(suggestion, tool=tool)
        return suggestion
