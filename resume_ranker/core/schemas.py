"""Core data models for the resume ranking pipeline."""

from enum import Enum
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from resume_ranker.core.errors import UnsupportedFormat


class MediaType(str, Enum):
    """Document formats the text extractor understands."""

    PDF = "application/pdf"
    DOCX = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
    DOC = "application/msword"
    TEXT = "text/plain"

    @classmethod
    def parse(cls, value: "str | MediaType") -> "MediaType":
        """Resolve a declared MIME string, raising UnsupportedFormat if unknown."""
        if isinstance(value, MediaType):
            return value
        normalized = value.split(";", 1)[0].strip().lower()
        for member in cls:
            if member.value == normalized:
                return member
        msg = f"Unsupported media type '{value}'. Please upload a PDF, DOC, DOCX, or TXT file"
        raise UnsupportedFormat(msg)

    @classmethod
    def from_filename(cls, filename: str) -> "MediaType":
        """Infer the media type from a file extension."""
        suffix = Path(filename).suffix.lower()
        if suffix not in _EXTENSIONS:
            msg = (
                f"Unsupported file type '{suffix or filename}'. "
                "Please upload a PDF, DOC, DOCX, or TXT file"
            )
            raise UnsupportedFormat(msg)
        return _EXTENSIONS[suffix]


_EXTENSIONS: dict[str, MediaType] = {
    ".pdf": MediaType.PDF,
    ".docx": MediaType.DOCX,
    ".doc": MediaType.DOC,
    ".txt": MediaType.TEXT,
}


class RawDocument(BaseModel):
    """Unprocessed file bytes plus declared media type."""

    model_config = ConfigDict(frozen=True)

    content: bytes
    media_type: MediaType
    filename: str

    @field_validator("media_type", mode="before")
    @classmethod
    def parse_media_type(cls, v: Any) -> Any:
        if isinstance(v, str):
            return MediaType.parse(v)
        return v

    @property
    def size(self) -> int:
        return len(self.content)


class ExtractedText(BaseModel):
    """Plain text recovered from a RawDocument.

    ``lossy`` marks text produced by the best-effort legacy Word decoder,
    which may contain fragments of binary noise or miss formatted runs.
    """

    model_config = ConfigDict(frozen=True)

    text: str
    media_type: MediaType
    filename: str
    page_count: int | None = None
    lossy: bool = False


def dedupe_strings(values: list[str]) -> list[str]:
    """Strip, drop blanks and case-insensitive duplicates, keep first spelling."""
    seen: set[str] = set()
    result: list[str] = []
    for value in values:
        cleaned = value.strip()
        key = cleaned.lower()
        if not cleaned or key in seen:
            continue
        seen.add(key)
        result.append(cleaned)
    return result


class JobRequirement(BaseModel):
    """A job opening candidates are ranked against. Read-only to the pipeline."""

    model_config = ConfigDict(frozen=True)

    title: str
    description: str = ""
    required_skills: list[str] = Field(default_factory=list)
    required_experience: int = Field(default=0, ge=0)
    required_degree: str | None = None

    @field_validator("title")
    @classmethod
    def title_not_empty(cls, v: str) -> str:
        if not v.strip():
            msg = "title must not be empty"
            raise ValueError(msg)
        return v.strip()

    @field_validator("required_skills")
    @classmethod
    def dedupe_skills(cls, v: list[str]) -> list[str]:
        return dedupe_strings(v)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "JobRequirement":
        """Load a job requirement from a YAML file."""
        path = Path(path)
        if not path.exists():
            msg = f"Job file not found: {path}"
            raise FileNotFoundError(msg)
        raw: dict[str, Any] = yaml.safe_load(path.read_text()) or {}
        return cls.model_validate(raw)


class ScoreBreakdown(BaseModel):
    """Both subscores plus the evidence behind them.

    Subscores are not bound-checked here; the ranking engine clamps them.
    """

    model_config = ConfigDict(frozen=True)

    rule_score: float
    semantic_score: float
    experience_score: float = 0.0
    skills_score: float = 0.0
    candidate_experience: int = 0
    required_experience: int = 0
    penalties: list[str] = Field(default_factory=list)
    matched_skills: list[str] = Field(default_factory=list)
    missing_skills: list[str] = Field(default_factory=list)
    reasoning: str = ""

    @property
    def total_skills(self) -> int:
        return len(self.matched_skills) + len(self.missing_skills)


class RankingResult(BaseModel):
    """Final score and explanation handed back to the caller for persistence."""

    model_config = ConfigDict(frozen=True)

    score: int = Field(ge=0, le=100)
    explanation: str
    matched_skills: int = Field(ge=0)
    total_skills: int = Field(ge=0)


class ItemState(str, Enum):
    """Lifecycle of one document inside a batch."""

    PENDING = "pending"
    EXTRACTING = "extracting"
    PROFILING = "profiling"
    SCORING = "scoring"
    SUCCESS = "success"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (ItemState.SUCCESS, ItemState.ERROR)


class BatchItemStatus(BaseModel):
    """Live status of one batch item. Only the orchestrator mutates it."""

    item_id: str
    filename: str = ""
    state: ItemState = ItemState.PENDING
    progress: int = Field(default=0, ge=0, le=100)
    error: str | None = None
    retryable: bool = False
    score: int | None = None
