"""Ranking engine: blends rule and semantic subscores into a final score.

The explanation is persisted and shown verbatim, so it is built only from
the breakdown: same breakdown, same bytes.
"""

import logging
import math

from resume_ranker.core.config import RULE_SCORE_MAX, SEMANTIC_SCORE_MAX, ScoringConfig
from resume_ranker.core.schemas import JobRequirement, RankingResult, ScoreBreakdown
from resume_ranker.pipeline.llm_scorer import SemanticScore, score_semantic
from resume_ranker.pipeline.scorer import RuleScore, score_rules
from resume_ranker.profile.llm.base import LLMProvider
from resume_ranker.profile.schema import CandidateProfile

logger = logging.getLogger(__name__)

FINAL_SCORE_MAX = 100


def round_half_up(value: float) -> int:
    """Round .5 away from zero for non-negative scores (not banker's rounding)."""
    return math.floor(value + 0.5)


def _clamp(value: float, upper: float) -> float:
    return max(0.0, min(upper, value))


def build_breakdown(
    rule: RuleScore,
    semantic: SemanticScore,
    candidate_experience: int,
    required_experience: int,
) -> ScoreBreakdown:
    """Combine both scorer outputs into one auditable breakdown."""
    return ScoreBreakdown(
        rule_score=rule.score,
        semantic_score=semantic.score,
        experience_score=rule.experience_score,
        skills_score=rule.skills_score,
        candidate_experience=candidate_experience,
        required_experience=required_experience,
        penalties=list(rule.penalties),
        matched_skills=list(rule.matched_skills),
        missing_skills=list(rule.missing_skills),
        reasoning=semantic.reasoning,
    )


def final_score(breakdown: ScoreBreakdown) -> int:
    """Clamp each subscore to its range, sum, round, and clamp to 0-100."""
    rule = _clamp(breakdown.rule_score, RULE_SCORE_MAX)
    semantic = _clamp(breakdown.semantic_score, SEMANTIC_SCORE_MAX)
    return max(0, min(FINAL_SCORE_MAX, round_half_up(rule + semantic)))


def format_explanation(breakdown: ScoreBreakdown, score: int) -> str:
    """Render the human-readable explanation for a ranking."""
    rule = round_half_up(_clamp(breakdown.rule_score, RULE_SCORE_MAX))
    semantic = round_half_up(_clamp(breakdown.semantic_score, SEMANTIC_SCORE_MAX))
    experience_ok = breakdown.candidate_experience >= breakdown.required_experience

    rule_lines = [
        f"**Rule-Based Analysis ({rule}/{RULE_SCORE_MAX}):**",
        f"- Experience Match: {'✓' if experience_ok else '✗'} "
        f"({breakdown.candidate_experience} vs {breakdown.required_experience} years required)",
        f"- Skills Match: {len(breakdown.matched_skills)}/{breakdown.total_skills} required skills",
    ]

    sections = [
        f"**Overall Score: {score}/{FINAL_SCORE_MAX}**",
        "\n".join(rule_lines),
    ]
    if breakdown.penalties:
        sections.append("\n".join(["**Issues:**", *(f"- {p}" for p in breakdown.penalties)]))

    reasoning = breakdown.reasoning.strip() or "No reasoning provided."
    sections.append(f"**AI Semantic Analysis ({semantic}/{SEMANTIC_SCORE_MAX}):**\n{reasoning}")
    sections.append(f"**Matched Skills:** {', '.join(breakdown.matched_skills) or 'None'}")
    if breakdown.missing_skills:
        sections.append(f"**Missing Skills:** {', '.join(breakdown.missing_skills)}")

    return "\n\n".join(sections)


def rank(breakdown: ScoreBreakdown) -> RankingResult:
    """Turn a ScoreBreakdown into the final RankingResult."""
    score = final_score(breakdown)
    return RankingResult(
        score=score,
        explanation=format_explanation(breakdown, score),
        matched_skills=len(breakdown.matched_skills),
        total_skills=breakdown.total_skills,
    )


def rank_candidate(
    job: JobRequirement,
    profile: CandidateProfile,
    provider: LLMProvider,
    *,
    scoring: ScoringConfig | None = None,
    model: str | None = None,
) -> RankingResult:
    """Score a candidate against a job with rules plus the semantic judgment.

    Completion-service errors propagate; there is no rule-only fallback.
    """
    rule = score_rules(
        profile.experience,
        job.required_experience,
        profile.skills,
        job.required_skills,
        scoring,
    )
    semantic = score_semantic(job, profile, provider, model=model)
    breakdown = build_breakdown(rule, semantic, profile.experience, job.required_experience)
    result = rank(breakdown)
    logger.info(
        "Ranked %s for '%s': %d/100 (rule %.1f, semantic %.1f)",
        profile.name or "candidate", job.title, result.score, rule.score, semantic.score,
    )
    return result
