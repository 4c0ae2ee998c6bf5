"""CandidateProfile model extracted from a resume."""

import math
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from resume_ranker.core.schemas import dedupe_strings


class EducationEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    degree: str | None = None
    institution: str | None = None
    year: str | None = None

    @field_validator("year", mode="before")
    @classmethod
    def year_as_text(cls, v: Any) -> Any:
        # Models often answer 2019 instead of "2019".
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v


class ProjectEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str | None = None
    description: str | None = None
    technologies: list[str] = Field(default_factory=list)

    @field_validator("technologies", mode="before")
    @classmethod
    def technologies_list(cls, v: Any) -> Any:
        if v is None:
            return []
        if isinstance(v, list):
            return [item for item in v if item is not None]
        return v


class CandidateProfile(BaseModel):
    """Structured profile extracted from a resume.

    Field names match the JSON keys the extraction prompt asks for.
    """

    model_config = ConfigDict(frozen=True)

    name: str | None = None
    email: str | None = None
    phone: str | None = None
    education: list[EducationEntry] = Field(default_factory=list)
    skills: list[str] = Field(default_factory=list)
    experience: int = Field(default=0, ge=0)
    certifications: list[str] = Field(default_factory=list)
    projects: list[ProjectEntry] = Field(default_factory=list)

    @field_validator("education", "skills", "certifications", "projects", mode="before")
    @classmethod
    def drop_nulls(cls, v: Any) -> Any:
        if v is None:
            return []
        if isinstance(v, list):
            return [item for item in v if item is not None]
        return v

    @field_validator("skills", "certifications")
    @classmethod
    def dedupe(cls, v: list[str]) -> list[str]:
        return dedupe_strings(v)

    @field_validator("experience", mode="before")
    @classmethod
    def whole_years(cls, v: Any) -> Any:
        if v is None:
            return 0
        if isinstance(v, float):
            if not math.isfinite(v):
                msg = "experience must be a finite number"
                raise ValueError(msg)
            return math.floor(v + 0.5)
        return v

    @classmethod
    def from_yaml(cls, path: str | Path) -> "CandidateProfile":
        """Load a profile from a YAML file."""
        path = Path(path)
        if not path.exists():
            msg = f"Profile file not found: {path}"
            raise FileNotFoundError(msg)
        raw: dict[str, Any] = yaml.safe_load(path.read_text()) or {}
        return cls.model_validate(raw)

    def to_yaml(self, path: str | Path) -> None:
        """Write profile to a YAML file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        data = self.model_dump()
        path.write_text(yaml.dump(data, default_flow_style=False, sort_keys=False))
