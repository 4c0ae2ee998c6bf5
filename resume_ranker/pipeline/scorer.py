"""Rule-based subscore from experience and skill overlap.

Score range: 0-70. Experience contributes up to 30 points, losing 5 per year
of shortfall; skills contribute up to 40 points in proportion to matched
required skills, or a neutral 20 when the job lists none.
"""

import logging

from pydantic import BaseModel, ConfigDict, Field

from resume_ranker.core.config import ScoringConfig

logger = logging.getLogger(__name__)


class RuleScore(BaseModel):
    """Rule-based part of a ScoreBreakdown."""

    model_config = ConfigDict(frozen=True)

    score: float
    experience_score: float
    skills_score: float
    penalties: list[str] = Field(default_factory=list)
    matched_skills: list[str] = Field(default_factory=list)
    missing_skills: list[str] = Field(default_factory=list)


def match_skills(
    candidate_skills: list[str],
    required_skills: list[str],
) -> tuple[list[str], list[str]]:
    """Split required skills into (matched, missing).

    A required skill matches when it is a case-insensitive substring of, or
    contains, any candidate skill ("React" matches "React.js"). Both lists keep
    the job's spelling and order.
    """
    candidates = [s.lower().strip() for s in candidate_skills if s.strip()]
    matched: list[str] = []
    missing: list[str] = []
    for skill in required_skills:
        needle = skill.lower().strip()
        if not needle:
            continue
        if any(needle in c or c in needle for c in candidates):
            matched.append(skill)
        else:
            missing.append(skill)
    return matched, missing


def experience_component(
    candidate_years: int,
    required_years: int,
    config: ScoringConfig,
) -> float:
    if candidate_years >= required_years:
        return config.experience_points
    deficit = required_years - candidate_years
    return max(0.0, config.experience_points - config.experience_penalty_per_year * deficit)


def skills_component(matched: int, total: int, config: ScoringConfig) -> float:
    if total == 0:
        return config.neutral_skills_points
    return matched / total * config.skills_points


def score_rules(
    candidate_experience: int,
    required_experience: int,
    candidate_skills: list[str],
    required_skills: list[str],
    config: ScoringConfig | None = None,
) -> RuleScore:
    """Compute the deterministic rule subscore.

    Args:
        candidate_experience: Candidate's total years of experience.
        required_experience: Years the job requires.
        candidate_skills: Skills extracted from the resume.
        required_skills: Skills the job requires.
        config: Point weights. Defaults to 30/5/40/20.

    Returns:
        RuleScore with the subscore in [0, 70] and the evidence behind it.
    """
    config = config or ScoringConfig()
    penalties: list[str] = []

    experience = experience_component(candidate_experience, required_experience, config)
    if candidate_experience < required_experience:
        deficit = required_experience - candidate_experience
        unit = "year" if deficit == 1 else "years"
        penalties.append(f"{deficit} {unit} less experience than required")

    matched, missing = match_skills(candidate_skills, required_skills)
    skills = skills_component(len(matched), len(matched) + len(missing), config)
    if missing:
        penalties.append(f"Missing skills: {', '.join(missing)}")

    score = experience + skills
    logger.debug(
        "Rule score %.2f (experience %.2f, skills %.2f, %d/%d matched)",
        score, experience, skills, len(matched), len(matched) + len(missing),
    )
    return RuleScore(
        score=score,
        experience_score=experience,
        skills_score=skills,
        penalties=penalties,
        matched_skills=matched,
        missing_skills=missing,
    )
