"""Configuration models and YAML loader for the match engine."""

import os
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

ProviderKind = Literal["deepseek", "anthropic", "ollama"]

# Per-kind defaults applied when a provider entry omits base_url / model / api_key_env.
_KIND_DEFAULTS: dict[str, dict[str, str | None]] = {
    "deepseek": {
        "base_url": "https://api.deepseek.com/v1",
        "model": "deepseek-chat",
        "api_key_env": "DEEPSEEK_API_KEY",
    },
    "anthropic": {
        "base_url": "https://api.anthropic.com",
        "model": "claude-3-7-sonnet-20250219",
        "api_key_env": "ANTHROPIC_API_KEY",
    },
    "ollama": {
        "base_url": "http://localhost:11434",
        "model": "llama3",
        "api_key_env": None,
    },
}


class ProviderConfig(BaseModel):
    """One entry of the fallback chain. Frozen once loaded."""

    model_config = ConfigDict(frozen=True)

    name: str
    kind: ProviderKind
    base_url: str
    model: str
    priority: int = Field(default=100, ge=0)
    api_key: str | None = None
    api_key_env: str | None = None
    force_available: bool = False
    timeout_seconds: float = Field(default=10.0, ge=1.0, le=60.0)
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    max_tokens: int = Field(default=1024, ge=1)

    @model_validator(mode="before")
    @classmethod
    def apply_kind_defaults(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        defaults = _KIND_DEFAULTS.get(str(data.get("kind", "")), {})
        for key, value in defaults.items():
            if data.get(key) is None:
                data[key] = value
        data.setdefault("name", data.get("kind"))
        if not data.get("api_key") and data.get("api_key_env"):
            data["api_key"] = os.environ.get(data["api_key_env"]) or None
        return data

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        v = v.strip().rstrip("/")
        if not v:
            msg = "base_url must not be empty"
            raise ValueError(msg)
        return v


class ProbeConfig(BaseModel):
    """Availability probe settings."""

    timeout_seconds: float = Field(default=5.0, gt=0.0, le=5.0)


class ContextConfig(BaseModel):
    """Per-user conversation window."""

    max_turns: int = Field(default=10, ge=1)


class ClarificationConfig(BaseModel):
    """Thresholds for the needs-clarification decision.

    missing_topics_threshold = 1 means a single missing topic group
    (budget, timeline or skills) is enough to ask for clarification.
    """

    min_words: int = Field(default=10, ge=1)
    early_turns: int = Field(default=4, ge=0)
    missing_topics_threshold: int = Field(default=1, ge=1, le=3)
    max_questions: int = Field(default=3, ge=1, le=5)


class ScoringConfig(BaseModel):
    """Weights for the deterministic match score."""

    performance_weight: float = Field(default=0.50, ge=0.0, le=1.0)
    skills_weight: float = Field(default=0.20, ge=0.0, le=1.0)
    responsiveness_weight: float = Field(default=0.15, ge=0.0, le=1.0)
    fairness_weight: float = Field(default=0.15, ge=0.0, le=1.0)
    content_weight: float = Field(default=0.7, ge=0.0, le=1.0)
    baseline_weight: float = Field(default=0.3, ge=0.0, le=1.0)
    skill_match_floor: float = Field(default=15.0, ge=0.0, le=100.0)
    profession_bonus: float = Field(default=15.0, ge=0.0, le=100.0)
    top_n: int = Field(default=3, ge=1)
    experience_threshold_years: int = Field(default=5, ge=0)

    @model_validator(mode="after")
    def weights_sum_to_one(self) -> "ScoringConfig":
        total = (
            self.performance_weight
            + self.skills_weight
            + self.responsiveness_weight
            + self.fairness_weight
        )
        if abs(total - 1.0) > 1e-6:
            msg = f"baseline weights must sum to 1.0, got {total:.3f}"
            raise ValueError(msg)
        if abs(self.content_weight + self.baseline_weight - 1.0) > 1e-6:
            msg = "content_weight + baseline_weight must equal 1.0"
            raise ValueError(msg)
        if self.skill_match_floor < self.profession_bonus:
            msg = "skill_match_floor must be at least profession_bonus"
            raise ValueError(msg)
        if self.skill_match_floor + self.profession_bonus > 100.0:
            msg = "skill_match_floor + profession_bonus must not exceed 100"
            raise ValueError(msg)
        return self


class Settings(BaseModel):
    """Top-level settings loaded from YAML."""

    providers: list[ProviderConfig]
    probe: ProbeConfig = Field(default_factory=ProbeConfig)
    context: ContextConfig = Field(default_factory=ContextConfig)
    clarification: ClarificationConfig = Field(default_factory=ClarificationConfig)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)

    @field_validator("providers")
    @classmethod
    def providers_valid(cls, v: list[ProviderConfig]) -> list[ProviderConfig]:
        if not v:
            msg = "at least one provider must be configured"
            raise ValueError(msg)
        names = [p.name for p in v]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            msg = f"provider names must be unique, duplicated: {', '.join(duplicates)}"
            raise ValueError(msg)
        return v

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Settings":
        """Load settings from a YAML file."""
        path = Path(path)
        if not path.exists():
            msg = f"Config file not found: {path}"
            raise FileNotFoundError(msg)
        raw: dict[str, Any] = yaml.safe_load(path.read_text()) or {}
        return cls.model_validate(raw)

    @classmethod
    def default(cls) -> "Settings":
        """DeepSeek first, Anthropic second, local Ollama last."""
        return cls(
            providers=[
                ProviderConfig.model_validate({"name": "deepseek", "kind": "deepseek", "priority": 1}),
                ProviderConfig.model_validate({"name": "anthropic", "kind": "anthropic", "priority": 2}),
                ProviderConfig.model_validate({"name": "ollama", "kind": "ollama", "priority": 3}),
            ],
        )
