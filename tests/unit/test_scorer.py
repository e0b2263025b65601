"""Tests for the deterministic match scorer."""

import pytest

from matchengine.core.config import ScoringConfig
from matchengine.core.schemas import FreelancerCandidate
from matchengine.matching.scorer import (
    GENERIC_REASON,
    baseline_score,
    clamp,
    content_match,
    extract_keywords,
    rank_candidates,
    round_half_up,
    score_candidate,
)

CONFIG = ScoringConfig()


def _candidate(**overrides: object) -> FreelancerCandidate:
    defaults: dict[str, object] = {
        "id": 1,
        "profession": "Frontend Developer",
        "skills": ["React", "TypeScript", "CSS"],
        "job_performance": 80,
        "skills_experience": 80,
        "responsiveness": 80,
        "fairness_score": 80,
        "years_of_experience": 3,
    }
    defaults.update(overrides)
    return FreelancerCandidate(**defaults)  # type: ignore[arg-type]


class TestHelpers:
    def test_clamp(self) -> None:
        assert clamp(-5) == 0
        assert clamp(150) == 100
        assert clamp(42.5) == 42.5

    def test_round_half_up(self) -> None:
        assert round_half_up(72.5) == 73
        assert round_half_up(72.49) == 72
        assert round_half_up(0.5) == 1


class TestBaselineScore:
    def test_all_perfect_is_exactly_100(self) -> None:
        c = _candidate(job_performance=100, skills_experience=100, responsiveness=100, fairness_score=100)
        assert baseline_score(c) == 100

    def test_weighted_sum(self) -> None:
        c = _candidate(job_performance=90, skills_experience=70, responsiveness=60, fairness_score=50)
        assert baseline_score(c) == pytest.approx(45 + 14 + 9 + 7.5)

    @pytest.mark.parametrize(
        "values",
        [(-50, -1, -300, -0.1), (150, 200, 101, 1000), (-20, 130, 50, 500)],
    )
    def test_out_of_range_inputs_clamped(self, values: tuple[float, ...]) -> None:
        perf, skills, resp, fair = values
        c = _candidate(
            job_performance=perf, skills_experience=skills, responsiveness=resp, fairness_score=fair,
        )
        assert 0 <= baseline_score(c) <= 100


class TestExtractKeywords:
    def test_stopwords_and_numbers_dropped(self) -> None:
        text = "Need a React developer for $500 budget due in 2 weeks with 5 years experience"
        assert extract_keywords(text) == ["react", "developer"]

    def test_explicit_skills_kept_whole(self) -> None:
        kws = extract_keywords("Landing page", skills=["Machine Learning", "react"])
        assert kws[:2] == ["machine learning", "react"]
        assert "landing" in kws

    def test_symbols_kept(self) -> None:
        assert extract_keywords("C# and node.js.") == ["c#", "node.js"]


class TestContentMatch:
    def test_no_keywords(self) -> None:
        assert content_match(_candidate(), []) == (0.0, [], False)

    def test_skill_and_profession_overlap(self) -> None:
        content, skills, profession = content_match(_candidate(), ["react", "developer"])
        # floor 15 + 70 * 1/3 skills + profession bonus 15
        assert content == pytest.approx(15 + 70 / 3 + 15)
        assert skills == ["React"]
        assert profession is True

    def test_short_keywords_need_exact_match(self) -> None:
        content, _, _ = content_match(_candidate(skills=["Go"], profession=""), ["go"])
        assert content == 85.0
        content, _, _ = content_match(_candidate(skills=["Django"], profession=""), ["go"])
        assert content == 0.0

    def test_profession_only_gets_bonus(self) -> None:
        content, skills, profession = content_match(
            _candidate(profession="Web Developer", skills=["Vue"]), ["react", "developer"],
        )
        assert content == 15.0
        assert skills == []
        assert profession is True

    def test_any_skill_overlap_beats_profession_only(self) -> None:
        many = [f"Skill{i}" for i in range(19)] + ["React"]
        skill_only, _, _ = content_match(_candidate(profession="Designer", skills=many), ["react", "developer"])
        profession_only, _, _ = content_match(
            _candidate(profession="Web Developer", skills=["Vue"]), ["react", "developer"],
        )
        assert skill_only > profession_only

    def test_all_skills_and_profession_is_100(self) -> None:
        content, _, _ = content_match(_candidate(skills=["React"]), ["react", "developer"])
        assert content == 100.0

    def test_custom_bonus(self) -> None:
        config = ScoringConfig(skill_match_floor=20, profession_bonus=10)
        content, _, _ = content_match(_candidate(skills=["React"], profession=""), ["react"], config)
        assert content == 90.0


class TestScoreCandidate:
    def test_blended_when_overlap(self) -> None:
        c = _candidate()
        result = score_candidate(c, ["react", "developer"], CONFIG)
        # content 53.33, baseline 80 -> 37.33 + 24
        assert result.score == 61
        assert result.reasons[0] == "Profession match: Frontend Developer"
        assert result.reasons[1] == "Skills match: React"

    def test_baseline_only_without_overlap(self) -> None:
        result = score_candidate(_candidate(), ["accounting"], CONFIG)
        assert result.score == 80

    def test_profession_only_blended(self) -> None:
        c = _candidate(profession="Web Developer", skills=["Vue"])
        result = score_candidate(c, ["react", "developer"], CONFIG)
        # content 15, baseline 80 -> 10.5 + 24
        assert result.score == 35
        assert result.reasons[0] == "Profession match: Web Developer"

    def test_component_scores_sum_to_baseline(self) -> None:
        c = _candidate(job_performance=95, skills_experience=60, responsiveness=70, fairness_score=40)
        cs = score_candidate(c, [], CONFIG).component_scores
        total = cs.performance + cs.skills + cs.responsiveness + cs.fairness
        assert total == pytest.approx(baseline_score(c))

    def test_generic_reason(self) -> None:
        c = _candidate(job_performance=50)
        assert score_candidate(c, ["accounting"], CONFIG).reasons == [GENERIC_REASON]

    def test_experience_and_performance_reasons(self) -> None:
        c = _candidate(years_of_experience=8, job_performance=95)
        reasons = score_candidate(c, [], CONFIG, display_name="Ada").reasons
        assert "8 years of professional experience" in reasons
        assert any(r.startswith("Ada has exceptional job performance") for r in reasons)

    def test_many_skills_truncated(self) -> None:
        c = _candidate(skills=["react", "react native", "react query", "react router"])
        reasons = score_candidate(c, ["react"], CONFIG).reasons
        assert "Skills match: react, react native, react query..." in reasons


class TestRankCandidates:
    def test_top_three_sorted(self) -> None:
        candidates = [
            _candidate(id=i, job_performance=p, skills=[], profession="")
            for i, p in [(1, 10), (2, 90), (3, 50), (4, 70), (5, 30)]
        ]
        ranked = rank_candidates(candidates, [], CONFIG)
        assert [m.freelancer_id for m in ranked] == [2, 4, 3]

    def test_ties_broken_by_id(self) -> None:
        candidates = [_candidate(id=i) for i in (9, 3, 7)]
        ranked = rank_candidates(candidates, ["react"], CONFIG)
        assert [m.freelancer_id for m in ranked] == [3, 7, 9]

    def test_keyword_overlap_outranks_metrics(self) -> None:
        react_dev = _candidate(id=2, skills=["React"], profession="Frontend Developer", job_performance=70)
        writer = _candidate(id=1, skills=["Copywriting"], profession="Writer", job_performance=100)
        ranked = rank_candidates([writer, react_dev], ["react", "developer"], CONFIG)
        assert ranked[0].freelancer_id == 2

    def test_react_skills_outrank_generic_developer_profession(self) -> None:
        react_dev = _candidate(
            id=1, profession="Frontend Developer", skills=["React", "Redux", "TypeScript", "Node.js"],
        )
        vue_dev = _candidate(id=2, profession="Web Developer", skills=["Vue"])
        keywords = extract_keywords("Need a React developer for $500 budget due in 2 weeks")
        ranked = rank_candidates([vue_dev, react_dev], keywords, CONFIG)
        assert [m.freelancer_id for m in ranked] == [1, 2]
        assert ranked[0].score == 57
        assert ranked[1].score == 35

    def test_scores_within_bounds(self) -> None:
        candidates = [
            _candidate(id=1, job_performance=500, skills_experience=500),
            _candidate(id=2, job_performance=-500, responsiveness=-10),
        ]
        for match in rank_candidates(candidates, ["react"], CONFIG, limit=10):
            assert 0 <= match.score <= 100

    def test_display_names_attached(self) -> None:
        ranked = rank_candidates([_candidate(id=4)], [], CONFIG, display_names={4: "Grace"})
        assert ranked[0].display_name == "Grace"

    def test_empty(self) -> None:
        assert rank_candidates([], ["react"], CONFIG) == []
