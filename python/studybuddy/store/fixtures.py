"""Sample rows loaded into a fresh store at startup.

Seed contents: one user (alex), three badges (all earned by alex), three
materials, three study sessions, one flashcard, one conversation. Session
times are anchored to the current UTC day so the planner always has
something scheduled.
"""

from datetime import datetime, timedelta

from studybuddy.store.entities import ChatMessage, User, utcnow
from studybuddy.store.memory import MemoryStore

NEURAL_NETWORK_EXPLANATION = (
    "Think of neural networks like a team of friends solving a puzzle:\n"
    "1. Each friend (neuron) specializes in spotting certain patterns\n"
    "2. They pass information to each other through connections\n"
    "3. When they make mistakes, they learn and adjust\n"
    "4. With practice, the team gets better at solving similar puzzles\n\n"
    "Just like your brain learns by strengthening connections between neurons, "
    "artificial neural networks learn by adjusting the strength of connections "
    "between digital neurons.\n\n"
    "Would you like me to explain any specific part in more detail?"
)

BADGE_CATALOG = [
    {
        "name": "Quick Learner",
        "description": "Completed 10 study sessions",
        "icon": "bolt",
        "requirement": "10 study sessions",
    },
    {
        "name": "Consistent",
        "description": "Studied for 7 days in a row",
        "icon": "calendar_today",
        "requirement": "7 day streak",
    },
    {
        "name": "Note Master",
        "description": "Created 50 flashcards",
        "icon": "edit_note",
        "requirement": "50 flashcards",
    },
]


def seed_fixtures(store: MemoryStore, now: datetime | None = None) -> User:
    """Populate an empty store with the sample dataset.

    Args:
        store: Store to fill. Expected to be fresh.
        now: Reference time (defaults to current UTC time).

    Returns:
        The seeded sample user.
    """
    now = now or utcnow()
    today = now.replace(hour=0, minute=0, second=0, microsecond=0)
    tomorrow = today + timedelta(days=1)

    user = store.create_user(
        username="alex",
        password="password123",
        name="Alex Johnson",
        email="alex@example.com",
    )
    user = store.update_user(user.id, level=5, xp=2500, total_study_time=750) or user

    for entry in BADGE_CATALOG:
        badge = store.create_badge(**entry)
        store.assign_badge(user.id, badge.id)

    psychology = store.create_material(
        user_id=user.id,
        title="Introduction to Psychology.pdf",
        description="Comprehensive introduction to psychology concepts",
        file_type="pdf",
        file_path="/uploads/psychology_intro.pdf",
        progress=75,
        last_viewed=now - timedelta(hours=2),
        created_at=now - timedelta(days=7),
    )
    store.create_material(
        user_id=user.id,
        title="Data Structures & Algorithms.pdf",
        description="Computer science fundamentals",
        file_type="pdf",
        file_path="/uploads/dsa.pdf",
        progress=40,
        last_viewed=now - timedelta(days=1),
        created_at=now - timedelta(days=14),
    )
    store.create_material(
        user_id=user.id,
        title="Organic Chemistry Notes.pdf",
        description="Collection of organic chemistry notes",
        file_type="pdf",
        file_path="/uploads/organic_chem.pdf",
        progress=25,
        last_viewed=now - timedelta(days=3),
        created_at=now - timedelta(days=21),
    )

    yesterday = today - timedelta(days=1)
    store.create_session(
        user_id=user.id,
        title="Data Structures & Algorithms",
        subject="Computer Science",
        start_time=today + timedelta(hours=10),
        end_time=today + timedelta(hours=11, minutes=30),
        created_at=yesterday,
    )
    store.create_session(
        user_id=user.id,
        title="Psychology Exam Prep",
        subject="Psychology",
        start_time=today + timedelta(hours=14),
        end_time=today + timedelta(hours=16),
        created_at=yesterday,
    )
    store.create_session(
        user_id=user.id,
        title="Organic Chemistry Review",
        subject="Chemistry",
        start_time=tomorrow + timedelta(hours=9, minutes=30),
        end_time=tomorrow + timedelta(hours=11),
        created_at=yesterday,
    )

    store.create_flashcard(
        user_id=user.id,
        material_id=psychology.id,
        question="What are the key components of a neural network?",
        answer=(
            "A neural network consists of: neurons (nodes), connections (weights), "
            "activation functions, and input, hidden, and output layers."
        ),
        created_at=now - timedelta(days=3),
    )

    store.create_conversation(
        user_id=user.id,
        messages=[
            ChatMessage(
                role="assistant",
                content="Hi Alex! I'm your AI Study Buddy. How can I help with your studies today?",
            ),
            ChatMessage(
                role="user",
                content="Can you explain the concept of neural networks in simple terms?",
            ),
            ChatMessage(role="assistant", content=NEURAL_NETWORK_EXPLANATION),
        ],
        created_at=now - timedelta(minutes=30),
    )

    return user
