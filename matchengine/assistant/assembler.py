"""Builds the ``AssistantResponse`` envelope from a fallback outcome."""

import logging

from matchengine.assistant.clarifier import format_clarification
from matchengine.assistant.fallback import FallbackOutcome
from matchengine.core.schemas import AssistantResponse, MatchResult, ModelMatch, ResponseMetadata

logger = logging.getLogger(__name__)

UNAVAILABLE_ERROR = "all_providers_unavailable"

UNAVAILABLE_MESSAGE = (
    "I'm sorry, but all AI services are currently unavailable. "
    "Please try again later or contact support if the problem persists."
)

JOB_ANALYSIS_UNAVAILABLE_MESSAGE = (
    "Job analysis is temporarily unavailable because no AI service could be reached. "
    "Please try again later."
)


def assemble_response(
    outcome: FallbackOutcome,
    *,
    content: str | None = None,
    matches: list[MatchResult] | None = None,
    suggested_questions: list[str] | None = None,
) -> AssistantResponse:
    """Wrap a successful outcome. ``content`` overrides the provider's raw text."""
    if not outcome.succeeded or outcome.result is None:
        msg = "assemble_response requires a successful outcome"
        raise ValueError(msg)
    return AssistantResponse(
        content=outcome.result.text if content is None else content,
        matches=matches,
        metadata=ResponseMetadata(
            provider=outcome.provider,
            model=outcome.model,
            fallback=outcome.fallback,
            suggested_questions=suggested_questions,
        ),
    )


def clarification_response(questions: list[str]) -> AssistantResponse:
    """Reply with questions instead of calling a provider."""
    return AssistantResponse(
        content=format_clarification(questions),
        matches=[],
        metadata=ResponseMetadata(needs_more_info=True, clarifying_questions=list(questions)),
    )


def unavailable_response(
    content: str = UNAVAILABLE_MESSAGE, matches: list[MatchResult] | None = None,
) -> AssistantResponse:
    """Terminal reply when every provider was skipped or failed.

    Deterministic ``matches`` may still be attached; they never depend on a provider.
    """
    return AssistantResponse(
        content=content,
        matches=list(matches or []),
        metadata=ResponseMetadata(fallback=True, error=UNAVAILABLE_ERROR),
    )


def merge_model_reasoning(
    ranked: list[MatchResult], model_matches: list[ModelMatch],
) -> list[MatchResult]:
    """Append the model's reasoning to each ranked match it mentions.

    Scores and order stay deterministic; model matches for freelancers outside
    ``ranked`` are dropped.
    """
    reasoning = {m.freelancer_id: m.reasoning.strip() for m in model_matches if m.reasoning.strip()}
    unknown = {m.freelancer_id for m in model_matches} - {r.freelancer_id for r in ranked}
    if unknown:
        logger.debug("Ignoring model matches for unranked freelancers: %s", sorted(unknown))

    merged: list[MatchResult] = []
    for match in ranked:
        text = reasoning.get(match.freelancer_id)
        if text and text not in match.reasons:
            match = match.model_copy(update={"reasons": [*match.reasons, text]})
        merged.append(match)
    return merged
