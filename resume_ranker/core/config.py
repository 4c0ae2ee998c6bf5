"""Configuration models and YAML loader for the resume ranker."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

RULE_SCORE_MAX = 70
SEMANTIC_SCORE_MAX = 30


class LLMConfig(BaseModel):
    """Completion-service selection. API keys are read from the environment."""

    provider: str = "gateway"
    model: str | None = None
    profile_model: str | None = None
    scoring_model: str | None = None

    @field_validator("provider")
    @classmethod
    def provider_registered(cls, v: str) -> str:
        from resume_ranker.profile.llm import available_providers

        v = v.strip().lower()
        if v not in available_providers():
            msg = f"provider must be one of {available_providers()}, got '{v}'"
            raise ValueError(msg)
        return v

    def model_for_profile(self) -> str | None:
        return self.profile_model or self.model

    def model_for_scoring(self) -> str | None:
        return self.scoring_model or self.model


class ExtractionConfig(BaseModel):
    """Limits applied by the text extractor."""

    min_text_length: int = Field(default=50, ge=1)
    max_file_size_mb: float = Field(default=10.0, gt=0)

    @property
    def max_file_size_bytes(self) -> int:
        return int(self.max_file_size_mb * 1024 * 1024)


class ScoringConfig(BaseModel):
    """Weights for the rule-based subscore (experience + skills = 70 points)."""

    experience_points: float = Field(default=30.0, ge=0.0)
    experience_penalty_per_year: float = Field(default=5.0, ge=0.0)
    skills_points: float = Field(default=40.0, ge=0.0)
    neutral_skills_points: float = Field(default=20.0, ge=0.0)

    @model_validator(mode="after")
    def points_add_up(self) -> "ScoringConfig":
        total = self.experience_points + self.skills_points
        if abs(total - RULE_SCORE_MAX) > 1e-9:
            msg = (
                f"experience_points + skills_points must equal {RULE_SCORE_MAX}, "
                f"got {total:g}"
            )
            raise ValueError(msg)
        if self.neutral_skills_points > self.skills_points:
            msg = "neutral_skills_points must not exceed skills_points"
            raise ValueError(msg)
        return self


class Settings(BaseModel):
    """Top-level settings loaded from YAML."""

    llm: LLMConfig = Field(default_factory=LLMConfig)
    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Settings":
        """Load settings from a YAML file."""
        path = Path(path)
        if not path.exists():
            msg = f"Config file not found: {path}"
            raise FileNotFoundError(msg)
        raw: dict[str, Any] = yaml.safe_load(path.read_text()) or {}
        return cls.model_validate(raw)
