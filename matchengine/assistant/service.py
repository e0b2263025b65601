"""AssistantService: the engine's entry points.

Chat turn:
  1. Validate the request (before any provider or repository call).
  2. Read the user's context window.
  3. Freelancer query that needs clarification and has open questions → questions,
     no provider call.
  4. Freelancer query → retrieve + rank candidates, describe the best in the prompt.
  5. Fallback chain → first successful provider answers.
  6. Append the user/assistant exchange to the context window.

Job analysis follows the same shape with a structured JSON reply; its matches
always come from the deterministic scorer, never from the model.
"""

import logging
from typing import Any

from matchengine.assistant.assembler import (
    JOB_ANALYSIS_UNAVAILABLE_MESSAGE,
    assemble_response,
    clarification_response,
    merge_model_reasoning,
    unavailable_response,
)
from matchengine.assistant.clarifier import generate_clarifying_questions
from matchengine.assistant.classifier import QueryClassifier
from matchengine.assistant.context_store import ContextStore, InMemoryContextStore
from matchengine.assistant.fallback import FallbackOrchestrator
from matchengine.assistant.prompts import (
    JOB_ANALYSIS_SYSTEM_PROMPT,
    SUGGESTED_FOLLOW_UPS,
    build_chat_messages,
    build_job_analysis_message,
    chat_system_prompt,
    render_candidate_block,
)
from matchengine.core.config import Settings
from matchengine.core.repository import FreelancerRepository
from matchengine.core.schemas import (
    AssistantResponse,
    ChatRequest,
    ConversationTurn,
    FreelancerCandidate,
    JobAnalysisPayload,
    JobAnalysisRequest,
    MatchResult,
    ProviderStatus,
)
from matchengine.matching.retriever import CandidateRetriever
from matchengine.matching.scorer import extract_keywords, rank_candidates
from matchengine.providers import build_adapter
from matchengine.providers.base import ProviderAdapter, ProviderCallResult
from matchengine.providers.prober import AvailabilityProber

logger = logging.getLogger(__name__)

_PROMPT_CANDIDATES = 5
_ANALYSIS_CANDIDATES = 10


def _job_text(request: JobAnalysisRequest) -> str:
    """Flatten a structured job request into text for the keyword heuristics."""
    parts = [request.description]
    if request.skills:
        parts.append(f"Required skills: {', '.join(request.skills)}.")
    if request.budget is not None:
        parts.append(f"Budget: ${request.budget:g}.")
    if request.timeline:
        parts.append(f"Timeline: {request.timeline}.")
    return " ".join(parts)


class AssistantService:
    """Chat, job analysis and provider status over one fallback chain.

    Usage::

        service = AssistantService(Settings.from_yaml("config/settings.yaml"), repo)
        response = await service.chat(42, ChatRequest(message="I need a React developer"))
        payload = response.to_payload()
    """

    def __init__(
        self,
        settings: Settings,
        repository: FreelancerRepository,
        *,
        adapters: list[ProviderAdapter] | None = None,
        prober: AvailabilityProber | None = None,
        context_store: ContextStore | None = None,
    ) -> None:
        self._settings = settings
        self._retriever = CandidateRetriever(repository)
        self._classifier = QueryClassifier(settings.clarification)
        self._context = context_store or InMemoryContextStore(settings.context.max_turns)
        self._prober = prober or AvailabilityProber(settings.probe.timeout_seconds)
        if adapters is None:
            adapters = [build_adapter(p) for p in settings.providers]
        self._orchestrator = FallbackOrchestrator(adapters, self._prober)

    @property
    def context_store(self) -> ContextStore:
        return self._context

    def history(self, user_id: int) -> list[ConversationTurn]:
        return self._context.get(user_id)

    def _clarifying_questions(self, text: str, prior_turns: int | None = None) -> list[str]:
        """Questions to ask before contacting a provider; empty means proceed."""
        if not self._classifier.needs_clarification(text, prior_turns):
            return []
        questions = generate_clarifying_questions(text, self._settings.clarification.max_questions)
        if not questions:
            logger.debug("Clarification triggered but every topic is covered; proceeding")
        return questions

    def _rank(
        self, keywords: list[str],
    ) -> tuple[list[FreelancerCandidate], dict[int, str], list[MatchResult]]:
        """All candidates best-first, their display names, and the full ranking."""
        candidates = self._retriever.fetch_all()
        if not candidates:
            return [], {}, []
        names = self._retriever.display_names(candidates)
        ranked = rank_candidates(
            candidates, keywords, self._settings.scoring, names, limit=len(candidates),
        )
        by_id = {c.id: c for c in candidates}
        ordered = [by_id[m.freelancer_id] for m in ranked]
        return ordered, names, ranked

    async def chat(self, user_id: int, request: ChatRequest | str) -> AssistantResponse:
        """Answer one chat message for ``user_id``.

        Raises:
            pydantic.ValidationError: If the message is blank.
        """
        if not isinstance(request, ChatRequest):
            request = ChatRequest(message=request)
        message = request.message

        history = self._context.get(user_id)
        is_freelancer = self._classifier.is_freelancer_query(message)

        questions = self._clarifying_questions(message, len(history)) if is_freelancer else []
        if questions:
            response = clarification_response(questions)
            self._context.append_exchange(
                user_id, [("user", message), ("assistant", response.content)],
            )
            logger.info("Asked user %d %d clarifying question(s)", user_id, len(questions))
            return response

        matches: list[MatchResult] | None = None
        candidate_block = ""
        if is_freelancer:
            ordered, names, ranked = self._rank(extract_keywords(message))
            candidate_block = render_candidate_block(ordered, names, limit=_PROMPT_CANDIDATES)
            matches = ranked[: self._settings.scoring.top_n]

        messages = build_chat_messages(history, message, candidate_block)
        system = chat_system_prompt()

        async def _call(adapter: ProviderAdapter) -> ProviderCallResult:
            return await adapter.complete(messages, system=system)

        outcome = await self._orchestrator.run(_call)
        if not outcome.succeeded:
            return unavailable_response()

        response = assemble_response(outcome, matches=matches)
        self._context.append_exchange(
            user_id, [("user", message), ("assistant", response.content)],
        )
        logger.info(
            "Chat turn for user %d answered by %s (%d match(es))",
            user_id, outcome.provider, len(matches or []),
        )
        return response

    async def analyze_job(
        self, user_id: int, request: JobAnalysisRequest | dict[str, Any],
    ) -> AssistantResponse:
        """Analyze a job description and rank freelancers for it.

        Raises:
            pydantic.ValidationError: If the job request is malformed.
        """
        if not isinstance(request, JobAnalysisRequest):
            request = JobAnalysisRequest.model_validate(request)

        questions = self._clarifying_questions(_job_text(request))
        if questions:
            logger.info("Job analysis for user %d needs more information", user_id)
            return clarification_response(questions)

        ordered, names, ranked = self._rank(extract_keywords(request.description, request.skills))
        top = ranked[: self._settings.scoring.top_n]
        messages = build_job_analysis_message(request, ordered[:_ANALYSIS_CANDIDATES], names)

        async def _call(adapter: ProviderAdapter) -> ProviderCallResult:
            return await adapter.complete_json(
                messages, system=JOB_ANALYSIS_SYSTEM_PROMPT, schema=JobAnalysisPayload,
            )

        outcome = await self._orchestrator.run(_call)
        if not outcome.succeeded or outcome.result is None:
            return unavailable_response(JOB_ANALYSIS_UNAVAILABLE_MESSAGE, matches=top)

        payload: JobAnalysisPayload = outcome.result.data
        response = assemble_response(
            outcome,
            content=payload.analysis,
            matches=merge_model_reasoning(top, payload.matches),
            suggested_questions=list(SUGGESTED_FOLLOW_UPS),
        )
        self._context.append_exchange(
            user_id, [("user", request.description), ("assistant", payload.analysis)],
        )
        logger.info("Job analysis for user %d answered by %s", user_id, outcome.provider)
        return response

    async def status(self) -> ProviderStatus:
        """Probe every provider in priority order."""
        services: dict[str, bool] = {}
        for adapter in self._orchestrator.adapters:
            services[adapter.name] = await self._prober.probe(adapter)
        primary = next((name for name, up in services.items() if up), None)
        return ProviderStatus(available=primary is not None, services=services, primary_service=primary)
