"""Provider-agnostic prompt rendering for completion requests.

- prompt.py is provider-agnostic. It produces a list of Turn objects.
- Each adapter handles conversion to provider-specific format.

Prompt structure (chat):
- System turn always first
- History turns (user/assistant only, skip any old system turns)
- Current user message last

Validation:
- Total prompt size must not exceed max_chars (100,000 default)
"""

from studybuddy.services.llm.types import Turn

STUDY_BUDDY_SYSTEM_PROMPT = (
    "You are an AI study assistant helping students learn and understand complex "
    "topics. Provide clear, concise explanations and be supportive."
)

SUMMARIZER_SYSTEM_PROMPT = (
    "You are an AI academic assistant. Summarize the following text to create a "
    "comprehensive study note that captures the key points and important details. "
    "Format with appropriate headings, bullet points, and emphasis."
)

MAX_PROMPT_CHARS = 100_000


class PromptTooLargeError(Exception):
    """Raised when rendered prompt exceeds size limit."""

    def __init__(self, actual_size: int, max_size: int):
        self.actual_size = actual_size
        self.max_size = max_size
        super().__init__(f"Prompt size {actual_size} exceeds max {max_size}")


def render_prompt(
    user_content: str,
    history: list[Turn],
    system_prompt: str = STUDY_BUDDY_SYSTEM_PROMPT,
) -> list[Turn]:
    """Build the turn list for a study-buddy chat request.

    Args:
        user_content: Current user message text.
        history: Stored conversation turns.
        system_prompt: System instructions.

    Returns:
        List of Turn objects ready for adapter consumption.

    Example output:
        [
            Turn(role="system", content="You are an AI study assistant..."),
            Turn(role="user", content="What is X?"),
            Turn(role="assistant", content="X is..."),
            Turn(role="user", content="<current user message>"),
        ]
    """
    turns: list[Turn] = [Turn(role="system", content=system_prompt)]

    for turn in history:
        if turn.role in ("user", "assistant"):
            turns.append(turn)

    turns.append(Turn(role="user", content=user_content))

    return turns


def render_summary_prompt(content: str) -> list[Turn]:
    """Turns for summarizing a material's text into a study note."""
    return [
        Turn(role="system", content=SUMMARIZER_SYSTEM_PROMPT),
        Turn(role="user", content=content),
    ]


def build_flashcard_prompt(topic: str, count: int) -> list[Turn]:
    """Turns asking for `count` question/answer cards about `topic`."""
    return [
        Turn(
            role="user",
            content=(
                f"Generate {count} flashcards for studying the topic: {topic}. "
                "Format the response as a JSON object with a 'flashcards' array of "
                "objects, each with 'question' and 'answer' fields."
            ),
        )
    ]


def build_topic_summary_prompt(topic: str) -> list[Turn]:
    """Turns for a short free-text overview, used when card generation fails."""
    return [
        Turn(role="user", content=f"Provide a concise summary of key concepts about: {topic}"),
    ]


def build_study_plan_prompt(topics: list[str], duration_days: int, hours_per_day: float) -> list[Turn]:
    """Turns asking for a study plan as a JSON object with a sessions array."""
    return [
        Turn(
            role="user",
            content=(
                f"Generate a detailed {duration_days}-day study plan for the following "
                f"topics: {', '.join(topics)}. "
                f"The student can study {hours_per_day:g} hours per day. "
                "Format the response as a JSON object with a 'sessions' array, each "
                "session having fields 'title', 'subject', 'startTime', 'endTime'. "
                "Use ISO date strings for times, starting from tomorrow. Distribute "
                "the sessions appropriately across the specified duration."
            ),
        )
    ]


def validate_prompt_size(turns: list[Turn], max_chars: int = MAX_PROMPT_CHARS) -> None:
    """Validate that total prompt size is within limits.

    Args:
        turns: List of Turn objects to validate.
        max_chars: Maximum allowed total characters.

    Raises:
        PromptTooLargeError: If total chars exceed limit.
    """
    total = sum(len(t.content) for t in turns)
    if total > max_chars:
        raise PromptTooLargeError(total, max_chars)
