"""Tests for model-based resume profile extraction."""

import json
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from resume_ranker.core.errors import MalformedModelOutput, ModelRateLimited
from resume_ranker.profile.llm.base import LLMProvider
from resume_ranker.profile.llm_analyzer import (
    SYSTEM_PROMPT,
    analyze_resume,
    build_user_message,
    parse_profile,
)

FIXTURES_DIR = Path(__file__).parent.parent / "fixtures"


def _load_sample_response() -> str:
    return (FIXTURES_DIR / "sample_profile_response.json").read_text()


def _mock_provider(response: str) -> MagicMock:
    provider = MagicMock(spec=LLMProvider)
    provider.provider_id = "mock"
    provider.complete.return_value = response
    return provider


class TestParseProfile:
    def test_plain_json(self) -> None:
        profile = parse_profile(_load_sample_response())
        assert profile.name == "Jane Doe"
        assert "Python" in profile.skills
        assert profile.experience == 8

    def test_markdown_wrapped_json(self) -> None:
        profile = parse_profile("```json\n" + _load_sample_response() + "\n```")
        assert profile.name == "Jane Doe"

    def test_malformed_json_raises(self) -> None:
        with pytest.raises(MalformedModelOutput, match="Failed to parse resume profile response"):
            parse_profile("this is not json {{{")

    def test_empty_response_raises(self) -> None:
        with pytest.raises(MalformedModelOutput, match="was empty"):
            parse_profile("")

    def test_missing_required_field_raises(self) -> None:
        data = json.loads(_load_sample_response())
        del data["experience"]
        with pytest.raises(MalformedModelOutput, match="missing required field"):
            parse_profile(json.dumps(data))

    def test_lists_missing_fields(self) -> None:
        with pytest.raises(MalformedModelOutput, match="skills, experience"):
            parse_profile('{"name": "Jane"}')

    def test_validation_failure_raises(self) -> None:
        with pytest.raises(MalformedModelOutput, match="failed validation"):
            parse_profile('{"skills": ["Python"], "experience": -3}')

    def test_null_skill_entry_ignored(self) -> None:
        profile = parse_profile('{"skills": ["Python", null], "experience": 3}')
        assert profile.skills == ["Python"]

    def test_minimal_profile(self) -> None:
        profile = parse_profile('{"skills": [], "experience": 0}')
        assert profile.name is None
        assert profile.skills == []


class TestBuildUserMessage:
    def test_with_filename(self) -> None:
        msg = build_user_message("resume body", "cv.pdf")
        assert msg == "Parse this resume (file: cv.pdf):\n\nresume body"

    def test_without_filename(self) -> None:
        assert build_user_message("resume body") == "Parse this resume:\n\nresume body"


class TestAnalyzeResume:
    def test_with_provider_instance(self) -> None:
        provider = _mock_provider(_load_sample_response())

        profile = analyze_resume("Jane Doe resume text", provider, filename="cv.pdf")

        assert profile.name == "Jane Doe"
        provider.complete.assert_called_once_with(
            "Parse this resume (file: cv.pdf):\n\nJane Doe resume text",
            model=None,
            system=SYSTEM_PROMPT,
        )

    def test_model_override_forwarded(self) -> None:
        provider = _mock_provider(_load_sample_response())
        analyze_resume("text", provider, model="custom-model")
        assert provider.complete.call_args.kwargs["model"] == "custom-model"

    def test_with_provider_name(self) -> None:
        provider = _mock_provider(_load_sample_response())
        with patch(
            "resume_ranker.profile.llm_analyzer.get_provider", return_value=provider,
        ) as mock_get:
            profile = analyze_resume("text", "openai")

        mock_get.assert_called_once_with("openai")
        assert profile.experience == 8

    def test_provider_errors_propagate(self) -> None:
        provider = _mock_provider("")
        provider.complete.side_effect = ModelRateLimited("Rate limit exceeded.")
        with pytest.raises(ModelRateLimited):
            analyze_resume("text", provider)

    def test_malformed_output_propagates(self) -> None:
        provider = _mock_provider("I could not parse this resume, sorry.")
        with pytest.raises(MalformedModelOutput):
            analyze_resume("text", provider)
