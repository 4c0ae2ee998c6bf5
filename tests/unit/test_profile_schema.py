"""Tests for the CandidateProfile model."""

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from resume_ranker.profile.schema import CandidateProfile, EducationEntry, ProjectEntry

FIXTURES_DIR = Path(__file__).parent.parent / "fixtures"


def _sample() -> dict[str, object]:
    return json.loads((FIXTURES_DIR / "sample_profile_response.json").read_text())


class TestCandidateProfile:
    def test_all_fields(self) -> None:
        p = CandidateProfile.model_validate(_sample())
        assert p.name == "Jane Doe"
        assert p.email == "jane.doe@example.com"
        assert p.experience == 8
        assert p.education == [
            EducationEntry(degree="BSc Computer Science", institution="State University", year="2016"),
        ]
        assert p.projects[0].technologies == ["Python", "Elasticsearch"]
        assert p.certifications == ["AWS Certified Developer"]

    def test_defaults(self) -> None:
        p = CandidateProfile()
        assert p.name is None
        assert p.skills == []
        assert p.experience == 0
        assert p.projects == []

    def test_nulls_become_empty(self) -> None:
        p = CandidateProfile.model_validate(
            {"skills": None, "education": None, "certifications": None, "projects": None,
             "experience": None},
        )
        assert p.skills == []
        assert p.education == []
        assert p.experience == 0

    def test_null_entries_dropped(self) -> None:
        p = CandidateProfile.model_validate(
            {"skills": ["Python", None, "SQL"], "certifications": [None],
             "education": [None, {"degree": "BSc"}],
             "projects": [{"name": "x", "technologies": ["Go", None]}]},
        )
        assert p.skills == ["Python", "SQL"]
        assert p.certifications == []
        assert [e.degree for e in p.education] == ["BSc"]
        assert p.projects[0].technologies == ["Go"]

    def test_fractional_experience_rounds_half_up(self) -> None:
        assert CandidateProfile(experience=2.5).experience == 3  # type: ignore[arg-type]
        assert CandidateProfile(experience=2.4).experience == 2  # type: ignore[arg-type]

    def test_negative_experience_rejected(self) -> None:
        with pytest.raises(ValidationError):
            CandidateProfile(experience=-1)

    def test_skills_deduplicated(self) -> None:
        p = CandidateProfile(skills=["Python", "python", " ", "SQL"])
        assert p.skills == ["Python", "SQL"]

    def test_education_year_as_int(self) -> None:
        entry = EducationEntry.model_validate({"degree": "MSc", "year": 2019})
        assert entry.year == "2019"

    def test_project_null_technologies(self) -> None:
        assert ProjectEntry.model_validate({"name": "x", "technologies": None}).technologies == []

    def test_frozen(self) -> None:
        p = CandidateProfile()
        with pytest.raises(ValidationError):
            p.experience = 3  # type: ignore[misc]

    def test_yaml_roundtrip(self, tmp_path: Path) -> None:
        p = CandidateProfile.model_validate(_sample())
        path = tmp_path / "out" / "profile.yaml"
        p.to_yaml(path)
        assert CandidateProfile.from_yaml(path) == p

    def test_from_yaml_missing(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError, match="Profile file not found"):
            CandidateProfile.from_yaml(tmp_path / "nope.yaml")
