"""Tests for the ranking engine."""

from unittest.mock import MagicMock

import pytest

from resume_ranker.core.errors import ModelRateLimited
from resume_ranker.core.schemas import JobRequirement, ScoreBreakdown
from resume_ranker.pipeline.ranking import (
    final_score,
    format_explanation,
    rank,
    rank_candidate,
    round_half_up,
)
from resume_ranker.profile.llm.base import LLMProvider
from resume_ranker.profile.schema import CandidateProfile


def _breakdown(**kwargs: object) -> ScoreBreakdown:
    defaults: dict[str, object] = {
        "rule_score": 50.0,
        "semantic_score": 20.0,
        "experience_score": 30.0,
        "skills_score": 20.0,
        "candidate_experience": 8,
        "required_experience": 5,
        "matched_skills": ["Python", "SQL"],
        "missing_skills": ["React", "Kubernetes"],
        "penalties": ["Missing skills: React, Kubernetes"],
        "reasoning": "Solid backend background.",
    }
    defaults.update(kwargs)
    return ScoreBreakdown.model_validate(defaults)


class TestRoundHalfUp:
    @pytest.mark.parametrize(
        ("value", "expected"), [(0.5, 1), (1.5, 2), (2.5, 3), (2.49, 2), (70.0, 70)],
    )
    def test_half_up(self, value: float, expected: int) -> None:
        assert round_half_up(value) == expected


class TestFinalScore:
    def test_sum(self) -> None:
        assert final_score(_breakdown()) == 70

    def test_maximum(self) -> None:
        assert final_score(_breakdown(rule_score=70, semantic_score=30)) == 100

    def test_semantic_out_of_range_clamped(self) -> None:
        assert final_score(_breakdown(rule_score=70, semantic_score=45)) == 100
        assert final_score(_breakdown(rule_score=40, semantic_score=45)) == 70

    def test_negative_subscores_clamped(self) -> None:
        assert final_score(_breakdown(rule_score=-10, semantic_score=-5)) == 0

    def test_half_rounds_up(self) -> None:
        assert final_score(_breakdown(rule_score=42.5, semantic_score=20)) == 63


class TestFormatExplanation:
    def test_sections(self) -> None:
        text = format_explanation(_breakdown(), 70)
        sections = text.split("\n\n")
        assert sections[0] == "**Overall Score: 70/100**"
        assert sections[1] == (
            "**Rule-Based Analysis (50/70):**\n"
            "- Experience Match: ✓ (8 vs 5 years required)\n"
            "- Skills Match: 2/4 required skills"
        )
        assert sections[2] == "**Issues:**\n- Missing skills: React, Kubernetes"
        assert sections[3] == "**AI Semantic Analysis (20/30):**\nSolid backend background."
        assert sections[4] == "**Matched Skills:** Python, SQL"
        assert sections[5] == "**Missing Skills:** React, Kubernetes"

    def test_experience_shortfall_marked(self) -> None:
        text = format_explanation(_breakdown(candidate_experience=2), 60)
        assert "- Experience Match: ✗ (2 vs 5 years required)" in text

    def test_optional_sections_omitted(self) -> None:
        text = format_explanation(
            _breakdown(penalties=[], missing_skills=[], matched_skills=[], reasoning=""), 50,
        )
        assert "**Issues:**" not in text
        assert "**Missing Skills:**" not in text
        assert "**Matched Skills:** None" in text
        assert "No reasoning provided." in text

    def test_deterministic(self) -> None:
        b = _breakdown()
        assert format_explanation(b, 70).encode() == format_explanation(b, 70).encode()


class TestRank:
    def test_result_fields(self) -> None:
        result = rank(_breakdown())
        assert result.score == 70
        assert result.matched_skills == 2
        assert result.total_skills == 4
        assert result.explanation.startswith("**Overall Score: 70/100**")


class TestRankCandidate:
    def _provider(self, response: str) -> MagicMock:
        provider = MagicMock(spec=LLMProvider)
        provider.provider_id = "mock"
        provider.complete.return_value = response
        return provider

    def test_end_to_end(self) -> None:
        job = JobRequirement(
            title="Backend Engineer",
            required_skills=["Python", "SQL"],
            required_experience=5,
        )
        profile = CandidateProfile(skills=["python developer", "sql"], experience=8)
        provider = self._provider('{"aiScore": 30, "reasoning": "Perfect fit"}')

        result = rank_candidate(job, profile, provider)

        assert result.score == 100
        assert result.matched_skills == 2
        assert result.total_skills == 2
        assert "Perfect fit" in result.explanation

    def test_identical_inputs_identical_results(self) -> None:
        job = JobRequirement(title="Engineer", required_skills=["Go"], required_experience=3)
        profile = CandidateProfile(skills=["Python"], experience=1)
        first = rank_candidate(job, profile, self._provider('{"aiScore": 7, "reasoning": "x"}'))
        second = rank_candidate(job, profile, self._provider('{"aiScore": 7, "reasoning": "x"}'))
        assert first == second

    def test_service_error_propagates(self) -> None:
        provider = self._provider("")
        provider.complete.side_effect = ModelRateLimited("Rate limit exceeded.")
        with pytest.raises(ModelRateLimited):
            rank_candidate(JobRequirement(title="Engineer"), CandidateProfile(), provider)
