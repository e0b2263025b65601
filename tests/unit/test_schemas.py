"""Tests for core data models."""

import pytest
from pydantic import ValidationError

from matchengine.core.schemas import (
    AssistantResponse,
    ChatRequest,
    ComponentScores,
    FreelancerCandidate,
    JobAnalysisPayload,
    JobAnalysisRequest,
    MatchResult,
    ResponseMetadata,
)


def _match(**overrides: object) -> MatchResult:
    defaults: dict[str, object] = {
        "freelancer_id": 7,
        "score": 88,
        "reasons": ["Skills match: React"],
        "component_scores": ComponentScores(
            performance=45.0, skills=18.0, responsiveness=12.0, fairness=13.0,
        ),
    }
    defaults.update(overrides)
    return MatchResult(**defaults)  # type: ignore[arg-type]


class TestFreelancerCandidate:
    def test_skills_from_list(self) -> None:
        c = FreelancerCandidate(id=1, skills=[" React ", "Node.js", ""])
        assert c.skills == frozenset({"React", "Node.js"})

    def test_skills_from_comma_string(self) -> None:
        c = FreelancerCandidate(id=1, skills="Python, Django ,")
        assert c.skills == frozenset({"Python", "Django"})

    def test_skills_none(self) -> None:
        assert FreelancerCandidate(id=1, skills=None).skills == frozenset()

    def test_frozen(self) -> None:
        c = FreelancerCandidate(id=1)
        with pytest.raises(ValidationError):
            c.profession = "Writer"  # type: ignore[misc]


class TestMatchResult:
    def test_score_bounds(self) -> None:
        with pytest.raises(ValidationError):
            _match(score=101)
        with pytest.raises(ValidationError):
            _match(score=-1)

    def test_requires_a_reason(self) -> None:
        with pytest.raises(ValidationError):
            _match(reasons=[])

    def test_payload_uses_camel_case(self) -> None:
        payload = _match(display_name="Ada").to_payload()
        assert payload["freelancerId"] == 7
        assert payload["displayName"] == "Ada"
        assert payload["componentScores"]["performance"] == 45.0


class TestAssistantResponse:
    def test_payload_shape(self) -> None:
        resp = AssistantResponse(
            content="Hello",
            matches=[_match()],
            metadata=ResponseMetadata(provider="deepseek", model="deepseek-chat"),
        )
        payload = resp.to_payload()
        assert payload["content"] == "Hello"
        assert payload["metadata"] == {
            "provider": "deepseek", "model": "deepseek-chat", "fallback": False,
        }
        assert payload["matches"][0]["score"] == 88

    def test_clarification_metadata_keys(self) -> None:
        meta = ResponseMetadata(needs_more_info=True, clarifying_questions=["Budget?"])
        assert meta.to_payload()["needsMoreInfo"] is True
        assert meta.to_payload()["clarifyingQuestions"] == ["Budget?"]

    def test_is_unavailable(self) -> None:
        assert AssistantResponse(content="x").is_unavailable is False
        down = AssistantResponse(content="x", metadata=ResponseMetadata(error="all_down"))
        assert down.is_unavailable is True


class TestRequests:
    def test_chat_message_stripped(self) -> None:
        assert ChatRequest(message="  hi there ").message == "hi there"

    def test_chat_blank_rejected(self) -> None:
        with pytest.raises(ValidationError, match="must not be empty"):
            ChatRequest(message="   ")

    def test_chat_request_is_message_only(self) -> None:
        req = ChatRequest.model_validate({"message": "hi", "metadata": {"source": "web"}})
        assert req.model_dump() == {"message": "hi"}

    def test_job_description_min_length(self) -> None:
        with pytest.raises(ValidationError, match="at least 10 characters"):
            JobAnalysisRequest(description="  too short ")

    def test_job_negative_budget_rejected(self) -> None:
        with pytest.raises(ValidationError):
            JobAnalysisRequest(description="Build a landing page", budget=-1)

    def test_job_skills_cleaned(self) -> None:
        req = JobAnalysisRequest(description="Build a landing page", skills=[" CSS ", " "])
        assert req.skills == ["CSS"]


class TestJobAnalysisPayload:
    def test_accepts_camel_case_ids(self) -> None:
        payload = JobAnalysisPayload.model_validate({
            "analysis": "Frontend work",
            "matches": [{"freelancerId": 3, "score": 0.9, "reasoning": "React expert"}],
        })
        assert payload.matches[0].freelancer_id == 3
        assert payload.matches[0].reasoning == "React expert"

    def test_matches_optional(self) -> None:
        assert JobAnalysisPayload.model_validate({"analysis": "ok"}).matches == []

    def test_analysis_required(self) -> None:
        with pytest.raises(ValidationError):
            JobAnalysisPayload.model_validate({"matches": []})
