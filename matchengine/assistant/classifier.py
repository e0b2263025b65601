"""Keyword heuristics: is this a freelancer search, and is it under-specified?

All keyword checks are case-insensitive substring matches on the raw
message, so a keyword inside a longer word still counts ("hire" in "hired").
"""

import logging

from matchengine.core.config import ClarificationConfig

logger = logging.getLogger(__name__)

FREELANCER_KEYWORDS = (
    "find freelancer", "looking for", "need someone", "hire",
    "developer", "designer", "writer", "expert", "professional",
    "specialist", "skills", "recommend", "who can", "available freelancers",
    "based in", "similar to", "top rated", "best", "marketplace",
    "i need", "need", "job", "work", "project", "build", "create", "develop",
    "help with", "coding", "programming", "app", "website",
)

# Topic groups checked for the needs-clarification decision.
BUDGET_KEYWORDS = ("budget", "pay", "cost", "price")
TIMELINE_KEYWORDS = ("timeline", "deadline", "by", "due")
SKILL_KEYWORDS = ("skill", "experience", "qualified")

TOPIC_GROUPS: dict[str, tuple[str, ...]] = {
    "budget": BUDGET_KEYWORDS,
    "timeline": TIMELINE_KEYWORDS,
    "skills": SKILL_KEYWORDS,
}


def contains_any(text: str, keywords: tuple[str, ...]) -> bool:
    lowered = text.lower()
    return any(kw in lowered for kw in keywords)


def missing_topics(message: str) -> list[str]:
    """Names of the topic groups with no keyword present, in fixed order."""
    return [name for name, keywords in TOPIC_GROUPS.items() if not contains_any(message, keywords)]


class QueryClassifier:
    """Makes the two independent decisions for one inbound message."""

    def __init__(self, config: ClarificationConfig | None = None) -> None:
        self._config = config or ClarificationConfig()

    def is_freelancer_query(self, message: str) -> bool:
        return contains_any(message, FREELANCER_KEYWORDS)

    def needs_clarification(self, message: str, prior_turns: int | None = None) -> bool:
        """True if any trigger fires.

        Args:
            message: The inbound text.
            prior_turns: Turns already in the user's context window. ``None``
                for stateless requests (job analysis), which disables the
                early-conversation trigger.
        """
        if (
            prior_turns is not None
            and prior_turns <= self._config.early_turns
            and self.is_freelancer_query(message)
        ):
            logger.debug("Clarification: early turn (%d) of a freelancer query", prior_turns)
            return True

        word_count = len(message.split())
        if word_count < self._config.min_words:
            logger.debug("Clarification: only %d words", word_count)
            return True

        missing = missing_topics(message)
        if len(missing) >= self._config.missing_topics_threshold:
            logger.debug("Clarification: missing %s", ", ".join(missing))
            return True
        return False
