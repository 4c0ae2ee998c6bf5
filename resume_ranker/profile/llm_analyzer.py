"""LLM-based resume analysis to extract a CandidateProfile."""

import logging

from pydantic import ValidationError

from resume_ranker.core.errors import MalformedModelOutput
from resume_ranker.profile.llm import get_provider
from resume_ranker.profile.llm.base import LLMProvider, parse_json_object
from resume_ranker.profile.schema import CandidateProfile

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are an expert resume parser. Extract structured information from the "
    "resume text provided and return ONLY valid JSON.\n\n"
    "Return format:\n"
    "{\n"
    '  "name": "Full Name or null",\n'
    '  "email": "email@example.com or null",\n'
    '  "phone": "phone number or null",\n'
    '  "education": [{"degree": "...", "institution": "...", "year": "..."}],\n'
    '  "skills": ["skill1", "skill2"],\n'
    '  "experience": <integer years>,\n'
    '  "certifications": ["cert1", "cert2"],\n'
    '  "projects": [{"name": "...", "description": "...", "technologies": ["..."]}]\n'
    "}\n\n"
    "Rules:\n"
    "- Extract ALL data present in the resume; do not invent anything.\n"
    "- experience is the total number of years across all work, internship "
    "and project date ranges. Use 0 for students with no such ranges.\n"
    "- Never return null or an empty list for a field that is clearly present "
    "in the text.\n"
    "- Return ONLY the JSON object, no markdown formatting, no explanations."
)

REQUIRED_KEYS = ("skills", "experience")


def build_user_message(resume_text: str, filename: str | None = None) -> str:
    """Assemble the user message carrying the full resume text."""
    header = f"Parse this resume (file: {filename}):" if filename else "Parse this resume:"
    return f"{header}\n\n{resume_text}"


def parse_profile(raw_text: str | None) -> CandidateProfile:
    """Parse a model response into a CandidateProfile.

    Missing required keys and schema violations are errors, never defaults,
    so the caller can retry or flag the document for manual review.

    Raises:
        MalformedModelOutput: If the response is not a valid profile object.
    """
    data = parse_json_object(raw_text, "resume profile response")

    missing = [key for key in REQUIRED_KEYS if key not in data]
    if missing:
        msg = f"Resume profile response missing required field(s): {', '.join(missing)}"
        raise MalformedModelOutput(msg)

    try:
        return CandidateProfile.model_validate(data)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        msg = f"Resume profile response failed validation: {problems}"
        raise MalformedModelOutput(msg) from e


def analyze_resume(
    resume_text: str,
    provider: str | LLMProvider = "gateway",
    model: str | None = None,
    *,
    filename: str | None = None,
) -> CandidateProfile:
    """Analyze resume text with a completion provider.

    Args:
        resume_text: Plain text extracted from a resume document.
        provider: Provider name (see ``available_providers``) or an instance.
        model: Override the provider's default model.
        filename: Original file name, passed to the model as a hint.

    Returns:
        CandidateProfile with extracted fields.

    Raises:
        ModelRateLimited, ModelQuotaExceeded, ModelUnavailable: Service failures.
        MalformedModelOutput: The response could not be parsed.
    """
    llm = get_provider(provider) if isinstance(provider, str) else provider

    logger.info("Extracting profile from %s via %s", filename or "resume", llm.provider_id)
    raw = llm.complete(
        build_user_message(resume_text, filename),
        model=model,
        system=SYSTEM_PROMPT,
    )
    profile = parse_profile(raw)
    logger.debug(
        "Profile for %s: %d skills, %d years experience",
        filename or "resume", len(profile.skills), profile.experience,
    )
    return profile
