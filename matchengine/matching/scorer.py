"""Deterministic freelancer ranking.

Baseline (always):
    clamp(job_performance)*0.50 + clamp(skills_experience)*0.20
    + clamp(responsiveness)*0.15 + clamp(fairness_score)*0.15

Content score (0-100, when the request has keywords):
    skill_match_floor  if any skill overlaps
    + (100 - skill_match_floor - profession_bonus) * matched_skills / skills
    + profession_bonus if the profession overlaps

A profession-only overlap scores below any skill overlap, so at equal metrics
a generic word like "developer" never outranks a real skill match.

Final: round(content*0.7 + baseline*0.3) with any overlap, else round(baseline),
clamped to 0-100. Sorted by score desc, then freelancer id asc.
"""

import logging
import math
import re
from collections.abc import Iterable

from matchengine.core.config import ScoringConfig
from matchengine.core.schemas import ComponentScores, FreelancerCandidate, MatchResult

logger = logging.getLogger(__name__)

_TOKEN_RE = re.compile(r"[a-z][a-z0-9+#.]*")

_STOPWORDS = frozenset({
    "a", "about", "an", "and", "any", "are", "as", "at", "be", "budget", "but", "can",
    "could", "days", "deadline", "do", "due", "experience", "find", "for", "from",
    "get", "have", "help", "hire", "i", "in", "is", "it", "looking", "me", "month",
    "months", "my", "need", "needs", "of", "on", "or", "our", "please", "project",
    "someone", "that", "the", "their", "them", "they", "this", "to", "us", "want",
    "we", "week", "weeks", "what", "when", "where", "who", "will", "with", "within",
    "would", "year", "years", "you", "your",
})

GENERIC_REASON = "Ranked on overall platform performance metrics"


def clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def component_scores(candidate: FreelancerCandidate, config: ScoringConfig) -> ComponentScores:
    """Weighted contribution of each metric, after clamping inputs to 0-100."""
    return ComponentScores(
        performance=clamp(candidate.job_performance) * config.performance_weight,
        skills=clamp(candidate.skills_experience) * config.skills_weight,
        responsiveness=clamp(candidate.responsiveness) * config.responsiveness_weight,
        fairness=clamp(candidate.fairness_score) * config.fairness_weight,
    )


def baseline_score(candidate: FreelancerCandidate, config: ScoringConfig | None = None) -> float:
    """Provider-independent weighted score, always within 0-100."""
    c = component_scores(candidate, config or ScoringConfig())
    return clamp(c.performance + c.skills + c.responsiveness + c.fairness)


def extract_keywords(text: str, skills: Iterable[str] | None = None) -> list[str]:
    """Lower-cased profession/skill-like terms from free text, in first-seen order.

    Explicit ``skills`` are kept whole (multi-word skills stay one keyword).
    """
    keywords: list[str] = []
    seen: set[str] = set()

    def _add(term: str) -> None:
        if term and term not in seen:
            seen.add(term)
            keywords.append(term)

    for skill in skills or []:
        _add(skill.strip().lower())
    for token in _TOKEN_RE.findall(text.lower()):
        token = token.rstrip(".")
        if len(token) >= 2 and token not in _STOPWORDS:
            _add(token)
    return keywords


def _overlaps(term: str, keyword: str) -> bool:
    if term == keyword:
        return True
    return (len(keyword) >= 3 and keyword in term) or (len(term) >= 3 and term in keyword)


def content_match(
    candidate: FreelancerCandidate,
    keywords: list[str],
    config: ScoringConfig | None = None,
) -> tuple[float, list[str], bool]:
    """Return (content score 0-100, matched skills, profession matched)."""
    if not keywords:
        return 0.0, [], False
    cfg = config or ScoringConfig()

    skills = sorted(candidate.skills, key=str.lower)
    matched_skills = [s for s in skills if any(_overlaps(s.lower(), kw) for kw in keywords)]

    profession = candidate.profession.strip().lower()
    profession_matched = bool(profession) and any(_overlaps(profession, kw) for kw in keywords)

    content = 0.0
    if matched_skills:
        span = 100.0 - cfg.skill_match_floor - cfg.profession_bonus
        content += cfg.skill_match_floor + span * len(matched_skills) / len(skills)
    if profession_matched:
        content += cfg.profession_bonus
    return clamp(content), matched_skills, profession_matched


def _reasons(
    candidate: FreelancerCandidate,
    matched_skills: list[str],
    profession_matched: bool,
    config: ScoringConfig,
    display_name: str,
) -> list[str]:
    reasons: list[str] = []
    if profession_matched:
        reasons.append(f"Profession match: {candidate.profession}")
    if matched_skills:
        shown = ", ".join(matched_skills[:3])
        more = "..." if len(matched_skills) > 3 else ""
        reasons.append(f"Skills match: {shown}{more}")
    if candidate.years_of_experience > config.experience_threshold_years:
        reasons.append(f"{candidate.years_of_experience} years of professional experience")
    if candidate.job_performance > 90:
        reasons.append(
            f"{display_name} has exceptional job performance ratings "
            f"({clamp(candidate.job_performance):g}%)",
        )
    elif candidate.job_performance > 80:
        reasons.append(
            f"{display_name} has strong job performance ratings "
            f"({clamp(candidate.job_performance):g}%)",
        )
    if not reasons:
        reasons.append(GENERIC_REASON)
    return reasons


def score_candidate(
    candidate: FreelancerCandidate,
    keywords: list[str],
    config: ScoringConfig,
    display_name: str | None = None,
) -> MatchResult:
    """Score one candidate against the request keywords."""
    components = component_scores(candidate, config)
    baseline = baseline_score(candidate, config)
    content, matched_skills, profession_matched = content_match(candidate, keywords, config)

    if content > 0:
        raw = content * config.content_weight + baseline * config.baseline_weight
    else:
        raw = baseline
    score = int(clamp(round_half_up(raw)))

    name = display_name or f"Freelancer {candidate.id}"
    logger.debug(
        "Freelancer %d: baseline=%.2f content=%.2f final=%d", candidate.id, baseline, content, score,
    )
    return MatchResult(
        freelancer_id=candidate.id,
        score=score,
        reasons=_reasons(candidate, matched_skills, profession_matched, config, name),
        component_scores=components,
        display_name=display_name,
    )


def rank_candidates(
    candidates: list[FreelancerCandidate],
    keywords: list[str],
    config: ScoringConfig,
    display_names: dict[int, str] | None = None,
    limit: int | None = None,
) -> list[MatchResult]:
    """Score every candidate and return the best ``limit`` (default ``config.top_n``)."""
    names = display_names or {}
    scored = [score_candidate(c, keywords, config, names.get(c.id)) for c in candidates]
    scored.sort(key=lambda m: (-m.score, m.freelancer_id))
    return scored[: config.top_n if limit is None else limit]
