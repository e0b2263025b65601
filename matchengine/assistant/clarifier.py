"""Deterministic follow-up questions for under-specified requests."""

from matchengine.assistant.classifier import (
    BUDGET_KEYWORDS,
    SKILL_KEYWORDS,
    TIMELINE_KEYWORDS,
    contains_any,
)

SCOPE_KEYWORDS = ("scope", "deliverable")
LOCATION_KEYWORDS = ("location", "language", "remote")

# Evaluated in this order; a question is asked only when its group is absent.
_RULES: tuple[tuple[tuple[str, ...], str], ...] = (
    (BUDGET_KEYWORDS, "What is your budget for this project?"),
    (TIMELINE_KEYWORDS, "What is your timeline or deadline for this project?"),
    (SKILL_KEYWORDS, "What specific skills or experience are you looking for in a freelancer?"),
    (SCOPE_KEYWORDS, "Can you describe the scope and deliverables for this project in more detail?"),
    (
        LOCATION_KEYWORDS,
        "Do you have any requirements regarding freelancer location, working hours, or language?",
    ),
)

CLARIFICATION_INTRO = (
    "I need a bit more information about your requirements to find the best "
    "freelancers for you. Please answer the following:"
)


def generate_clarifying_questions(message: str, max_questions: int = 3) -> list[str]:
    """Return up to ``max_questions`` questions, in rule order."""
    questions = [question for keywords, question in _RULES if not contains_any(message, keywords)]
    return questions[:max_questions]


def format_clarification(questions: list[str]) -> str:
    """Render the intro and numbered questions as one message."""
    numbered = "\n".join(f"{i}. {q}" for i, q in enumerate(questions, start=1))
    return f"{CLARIFICATION_INTRO}\n\n{numbered}" if numbered else CLARIFICATION_INTRO
