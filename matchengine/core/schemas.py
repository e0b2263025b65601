"""Core data models for the match engine.

Outward-facing models serialize with camelCase aliases via ``to_payload()``;
Python code uses the snake_case field names.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

Role = Literal["user", "assistant"]


class ConversationTurn(BaseModel):
    """One message in a user's context window."""

    model_config = ConfigDict(frozen=True)

    role: Role
    text: str


class FreelancerCandidate(BaseModel):
    """A freelancer record as provided by the repository. Never mutated here."""

    model_config = ConfigDict(frozen=True)

    id: int
    profession: str = ""
    skills: frozenset[str] = Field(default_factory=frozenset)
    job_performance: float = 0.0
    skills_experience: float = 0.0
    responsiveness: float = 0.0
    fairness_score: float = 0.0
    hourly_rate: float = 0.0
    years_of_experience: int = 0
    location: str = ""
    user_id: int | None = None
    bio: str = ""

    @field_validator("skills", mode="before")
    @classmethod
    def clean_skills(cls, v: Any) -> Any:
        if v is None:
            return frozenset()
        if isinstance(v, str):
            v = v.split(",")
        return frozenset(s.strip() for s in v if str(s).strip())


class UserInfo(BaseModel):
    """Display data for the account behind a freelancer."""

    model_config = ConfigDict(frozen=True)

    id: int
    display_name: str | None = None
    username: str | None = None


class _CamelModel(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    def to_payload(self) -> dict[str, Any]:
        """Dump using the camelCase wire names, dropping unset optionals."""
        return self.model_dump(by_alias=True, exclude_none=True)


class ComponentScores(_CamelModel):
    """Weighted contribution of each baseline metric (sums to the baseline)."""

    performance: float = Field(ge=0.0, le=100.0)
    skills: float = Field(ge=0.0, le=100.0)
    responsiveness: float = Field(ge=0.0, le=100.0)
    fairness: float = Field(ge=0.0, le=100.0)


class MatchResult(_CamelModel):
    """A ranked freelancer for one request. Created fresh per request."""

    freelancer_id: int
    score: int = Field(ge=0, le=100)
    reasons: list[str] = Field(min_length=1)
    component_scores: ComponentScores
    display_name: str | None = None


class ResponseMetadata(_CamelModel):
    """Provider and clarification details attached to every response."""

    provider: str | None = None
    model: str | None = None
    fallback: bool = False
    needs_more_info: bool | None = None
    clarifying_questions: list[str] | None = None
    suggested_questions: list[str] | None = None
    error: str | None = None


class AssistantResponse(_CamelModel):
    """The only shape that leaves the engine."""

    content: str
    matches: list[MatchResult] | None = None
    metadata: ResponseMetadata = Field(default_factory=ResponseMetadata)

    @property
    def is_unavailable(self) -> bool:
        return self.metadata.error is not None


class ChatRequest(BaseModel):
    """Inbound assistant chat message."""

    message: str

    @field_validator("message")
    @classmethod
    def message_not_blank(cls, v: str) -> str:
        if not v.strip():
            msg = "message must not be empty"
            raise ValueError(msg)
        return v.strip()


class JobAnalysisRequest(BaseModel):
    """Inbound structured job description."""

    description: str
    skills: list[str] = Field(default_factory=list)
    budget: float | None = Field(default=None, ge=0.0)
    timeline: str | None = None

    @field_validator("description")
    @classmethod
    def description_long_enough(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 10:
            msg = "job description must be at least 10 characters"
            raise ValueError(msg)
        return v

    @field_validator("skills")
    @classmethod
    def strip_skills(cls, v: list[str]) -> list[str]:
        return [s.strip() for s in v if s.strip()]


class ProviderStatus(_CamelModel):
    """Result of probing every configured provider."""

    available: bool
    services: dict[str, bool]
    primary_service: str | None = None


class ModelMatch(BaseModel):
    """One match as proposed by a model in a job-analysis reply."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    freelancer_id: int = Field(alias="freelancerId")
    score: float = 0.0
    reasoning: str = ""


class JobAnalysisPayload(BaseModel):
    """The JSON object a model must return for job analysis."""

    model_config = ConfigDict(extra="ignore")

    analysis: str = Field(min_length=1)
    matches: list[ModelMatch] = Field(default_factory=list)
