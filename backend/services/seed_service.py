import logging
from datetime import timedelta

from auth.utils import hash_password, normalize_email
from db.models import User
from db.repository import Storage

logger = logging.getLogger(__name__)

DEMO_PASSWORD = "password123"

DEMO_USERS = (
    {"email": "sarah@expiestack.com", "mode": "hype", "onboarding_complete": True},
    {"email": "michael@expiestack.com", "mode": "focus", "onboarding_complete": True},
    {"email": "alex@expiestack.com", "mode": "zen", "onboarding_complete": False},
)

DEMO_TOOLS = (
    ("slack", "connected"),
    ("gmail", "connected"),
    ("calendar", "connected"),
    ("openai", "connected"),
    ("fireflies", "pending"),
)

DEMO_CANNED_RESPONSES = (
    {
        "title": "FastCAP Reminder",
        "content": (
            "Good morning everyone!\n\n"
            "Just a friendly reminder that our FastCAP session starts in 30 minutes. "
            "This training is an excellent opportunity to expand your knowledge and skills.\n\n"
            "Join link: https://expuniversity.learnworlds.com/fastcap\n\n"
            "Looking forward to seeing you there!"
        ),
        "tags": ("fastcap", "training", "reminder"),
    },
    {
        "title": "Weekly Check-In",
        "content": (
            "Hi team,\n\n"
            "Hope your week is going well! Please share your updates using the format below:\n\n"
            "- Completed this week\n"
            "- Working on now\n"
            "- Blockers/challenges\n"
            "- Where you need help\n\n"
            "I'll compile responses by EOD Friday. Thanks for keeping our communication flowing!"
        ),
        "tags": ("weekly", "check-in", "team"),
    },
    {
        "title": "Client Follow-Up",
        "content": (
            "Hello [Client Name],\n\n"
            "Thank you for our conversation today! I wanted to follow up with the key points we discussed:\n\n"
            "1. Your property goals and timeline\n"
            "2. Your budget considerations\n"
            "3. Next steps in the process\n\n"
            "I've made a note to check in with you next [Day] to see if you have any questions. "
            "In the meantime, feel free to reach out if you need anything.\n\n"
            "Looking forward to working with you!"
        ),
        "tags": ("client", "follow-up", "sales"),
    },
)

# (text, status, source, due in days, transcript)
DEMO_ACTION_ITEMS = (
    ("Create a process doc for the team onboarding workflow", "pending", "meeting", 2, None),
    (
        "Schedule a follow-up meeting with the FastCAP committee",
        "in_progress",
        "call",
        1,
        "Call with the FastCAP leadership team on Monday discussing future curriculum updates. "
        "Need to schedule a follow-up meeting to finalize changes.",
    ),
    ("Draft copy for a LinkedIn post announcing the AI challenge", "pending", "email", 5, None),
    ("Update the AI onboarding materials for new staff", "completed", "email", -1, None),
)

DEMO_AUTOMATIONS = (
    ("weekly", "Send weekly status check-in message", "slack", True),
    ("transcript", "Follow up on Fireflies transcript", "fireflies", True),
    ("email", "Auto-tag client emails", "gmail", False),
)

DEMO_TIME_SAVED = (
    ("canned_response", 5),
    ("canned_response", 3),
    ("automation", 15),
    ("gpt_draft", 10),
    ("automation", 12),
    ("slack_message", 2),
)

DEMO_BADGES = ("first_login", "tools_connected", "loop_slayer", "time_wizard", "automation_hero")


def _ensure_user(storage: Storage, email: str, password_hash: str, **values) -> tuple[User, bool]:
    existing = storage.users.get_by_email(normalize_email(email))
    if existing:
        logger.info("User %s already exists, skipping", existing.email)
        return existing, False
    user = storage.users.create(email=normalize_email(email), password=password_hash, **values)
    logger.info("Created demo user %s", user.email)
    return user, True


def _seed_main_user(storage: Storage, user: User) -> None:
    user_id = user.id
    now = storage.clock()

    for tool_name, status in DEMO_TOOLS:
        storage.connected_tools.create(user_id=user_id, tool_name=tool_name, status=status)

    for response in DEMO_CANNED_RESPONSES:
        storage.canned_responses.create(user_id=user_id, **response)

    for text, status, source, due_in_days, transcript in DEMO_ACTION_ITEMS:
        storage.action_items.create(
            user_id=user_id,
            text=text,
            status=status,
            source=source,
            transcript=transcript,
            due_date=now + timedelta(days=due_in_days),
        )

    for trigger_type, action, tool, is_enabled in DEMO_AUTOMATIONS:
        storage.automations.create(
            user_id=user_id,
            trigger_type=trigger_type,
            action=action,
            tool=tool,
            is_enabled=is_enabled,
        )

    for action_type, minutes in DEMO_TIME_SAVED:
        storage.time_saved.create(user_id=user_id, action_type=action_type, minutes_saved=minutes)

    for badge in DEMO_BADGES:
        storage.user_achievements.create(user_id=user_id, badge=badge)

    storage.accessibility_preferences.create(user_id=user_id, dark_mode=True)
    logger.info("Seeded demo workspace for %s", user.email)


def seed_demo_data(storage: Storage, password: str = DEMO_PASSWORD) -> list[User]:
    """Populate the demo accounts and the first account's workspace.

    Safe to call repeatedly: users are matched by email, and the workspace of
    the first account is only filled in when that account is newly created.
    """
    logger.info("Seeding demo data")
    password_hash = hash_password(password)
    users: list[User] = []
    main_created = False
    for index, demo in enumerate(DEMO_USERS):
        user, created = _ensure_user(
            storage,
            demo["email"],
            password_hash,
            mode=demo["mode"],
            onboarding_complete=demo["onboarding_complete"],
        )
        users.append(user)
        if index == 0:
            main_created = created

    if main_created:
        _seed_main_user(storage, users[0])
    logger.info("Demo seeding complete (%d users)", len(users))
    return users
