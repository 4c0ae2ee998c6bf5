"""LLM-assisted semantic fit scoring (0-30 points)."""

import json
import logging
import math

from pydantic import BaseModel, ConfigDict

from resume_ranker.core.config import SEMANTIC_SCORE_MAX
from resume_ranker.core.errors import MalformedModelOutput
from resume_ranker.core.schemas import JobRequirement
from resume_ranker.profile.llm.base import LLMProvider, parse_json_object
from resume_ranker.profile.schema import CandidateProfile

logger = logging.getLogger(__name__)

_SCORING_SYSTEM_PROMPT = "You are an expert recruiter. Return only valid JSON."


class SemanticScore(BaseModel):
    model_config = ConfigDict(frozen=True)

    score: float
    reasoning: str = ""


def _build_user_prompt(job: JobRequirement, profile: CandidateProfile) -> str:
    """Assemble the comparison prompt from job and candidate data."""
    required = ", ".join(job.required_skills) if job.required_skills else "not specified"
    skills = ", ".join(profile.skills) if profile.skills else "not specified"
    education = json.dumps(
        [e.model_dump() for e in profile.education], ensure_ascii=False
    )
    certifications = (
        ", ".join(profile.certifications) if profile.certifications else "none"
    )

    job_section = (
        f"Job: {job.title}\n"
        f"Description: {job.description or 'not provided'}\n"
        f"Required Skills: {required}\n"
        f"Required Experience: {job.required_experience} years\n"
    )
    if job.required_degree:
        job_section += f"Required Degree: {job.required_degree}\n"

    candidate_section = (
        "Candidate:\n"
        f"Name: {profile.name or 'not provided'}\n"
        f"Skills: {skills}\n"
        f"Experience: {profile.experience} years\n"
        f"Education: {education}\n"
        f"Certifications: {certifications}\n"
    )

    return (
        "You are an expert recruiter. Analyze the semantic match between this "
        "candidate and job.\n\n"
        f"{job_section}\n"
        f"{candidate_section}\n"
        f"Rate the semantic fit on a scale of 0-{SEMANTIC_SCORE_MAX} points. Consider:\n"
        "- Transferable skills\n"
        "- Industry relevance\n"
        "- Career trajectory\n"
        "- Education alignment\n\n"
        "Return ONLY a JSON object:\n"
        "{\n"
        f'  "aiScore": <number 0-{SEMANTIC_SCORE_MAX}>,\n'
        '  "reasoning": "<brief explanation>"\n'
        "}"
    )


def clamp_semantic(score: float) -> float:
    return max(0.0, min(float(SEMANTIC_SCORE_MAX), score))


def parse_semantic_score(raw_text: str | None) -> SemanticScore:
    """Parse the model's JSON into a SemanticScore.

    The score is clamped to 0-30 whatever the model claims.

    Raises:
        MalformedModelOutput: If the response is not JSON or lacks a numeric aiScore.
    """
    data = parse_json_object(raw_text, "semantic score response")

    if "aiScore" not in data:
        msg = "Semantic score response missing 'aiScore' field"
        raise MalformedModelOutput(msg)

    raw_score = data["aiScore"]
    if isinstance(raw_score, bool):
        msg = f"Semantic score 'aiScore' must be a number, got {raw_score!r}"
        raise MalformedModelOutput(msg)
    try:
        value = float(raw_score)
    except (TypeError, ValueError) as e:
        msg = f"Semantic score 'aiScore' must be a number, got {raw_score!r}"
        raise MalformedModelOutput(msg) from e
    if not math.isfinite(value):
        msg = f"Semantic score 'aiScore' must be finite, got {raw_score!r}"
        raise MalformedModelOutput(msg)

    clamped = clamp_semantic(value)
    if clamped != value:
        logger.warning("Semantic score %s out of range; clamped to %s", value, clamped)

    reasoning = data.get("reasoning")
    return SemanticScore(score=clamped, reasoning="" if reasoning is None else str(reasoning))


def score_semantic(
    job: JobRequirement,
    profile: CandidateProfile,
    provider: LLMProvider,
    model: str | None = None,
) -> SemanticScore:
    """Ask the completion service how well the candidate fits the job.

    Service and parse failures propagate to the caller.
    """
    logger.info("Scoring semantic fit of %s for '%s'", profile.name or "candidate", job.title)
    raw = provider.complete(
        _build_user_prompt(job, profile),
        model=model,
        system=_SCORING_SYSTEM_PROMPT,
    )
    return parse_semantic_score(raw)
