"""Orchestrator: runs download, extraction, profiling and ranking per document.

Data flow per item, strictly one item at a time:
  1. Object store download → RawDocument
  2. Text extraction        → ExtractedText
  3. Profile extraction     → CandidateProfile   (completion service)
  4. Rule + semantic rank   → RankingResult      (completion service)

A failure anywhere in an item marks that item ``error`` and the batch moves
on. Items never run concurrently so the completion service sees at most one
request at a time.
"""

import json
import logging
from collections.abc import Callable, Iterable
from pathlib import PurePosixPath

from pydantic import BaseModel, ConfigDict

from resume_ranker.core.config import Settings
from resume_ranker.core.errors import PipelineError
from resume_ranker.core.schemas import (
    BatchItemStatus,
    ItemState,
    JobRequirement,
    MediaType,
    RankingResult,
    RawDocument,
)
from resume_ranker.core.storage import ObjectStore
from resume_ranker.pipeline.ranking import rank_candidate
from resume_ranker.profile.extractor import extract_text
from resume_ranker.profile.llm import get_provider
from resume_ranker.profile.llm.base import LLMProvider
from resume_ranker.profile.llm_analyzer import analyze_resume
from resume_ranker.profile.schema import CandidateProfile

logger = logging.getLogger(__name__)

# Progress milestones reported to callers.
PROGRESS_EXTRACTING = 10
PROGRESS_EXTRACTED = 30
PROGRESS_PROFILING = 40
PROGRESS_PROFILED = 60
PROGRESS_SCORING = 70
PROGRESS_DONE = 100

_TRANSITIONS: dict[ItemState, frozenset[ItemState]] = {
    ItemState.PENDING: frozenset({ItemState.EXTRACTING, ItemState.ERROR}),
    ItemState.EXTRACTING: frozenset({ItemState.PROFILING, ItemState.ERROR}),
    ItemState.PROFILING: frozenset({ItemState.SCORING, ItemState.ERROR}),
    ItemState.SCORING: frozenset({ItemState.SUCCESS, ItemState.ERROR}),
    ItemState.SUCCESS: frozenset(),
    ItemState.ERROR: frozenset(),
}

ProgressCallback = Callable[[BatchItemStatus], None]


class BatchItem(BaseModel):
    """One document to process, addressed by its object-store path."""

    model_config = ConfigDict(frozen=True)

    item_id: str
    path: str
    filename: str | None = None
    media_type: MediaType | None = None

    @property
    def display_name(self) -> str:
        return self.filename or PurePosixPath(self.path).name


class ItemOutcome(BaseModel):
    """Everything a successful item produced, for the caller to persist."""

    model_config = ConfigDict(frozen=True)

    item_id: str
    filename: str
    profile: CandidateProfile
    ranking: RankingResult
    lossy_text: bool = False


class BatchTracker:
    """Status table for a batch, keyed by item id.

    The orchestrator is the only writer. Transitions follow
    pending → extracting → profiling → scoring → success, with error reachable
    from any non-terminal state; progress never decreases.
    """

    def __init__(
        self,
        items: Iterable[BatchItem],
        on_progress: ProgressCallback | None = None,
    ) -> None:
        self._statuses: dict[str, BatchItemStatus] = {}
        for item in items:
            if item.item_id in self._statuses:
                msg = f"Duplicate batch item id: {item.item_id}"
                raise ValueError(msg)
            self._statuses[item.item_id] = BatchItemStatus(
                item_id=item.item_id, filename=item.display_name,
            )
        self._on_progress = on_progress

    def status(self, item_id: str) -> BatchItemStatus:
        return self._statuses[item_id].model_copy()

    @property
    def statuses(self) -> dict[str, BatchItemStatus]:
        return {key: s.model_copy() for key, s in self._statuses.items()}

    def advance(
        self,
        item_id: str,
        state: ItemState,
        progress: int,
        *,
        score: int | None = None,
    ) -> None:
        status = self._statuses[item_id]
        if state not in _TRANSITIONS[status.state]:
            msg = f"Illegal transition for {item_id}: {status.state.value} -> {state.value}"
            raise ValueError(msg)
        self._check_progress(status, progress)
        status.state = state
        status.progress = progress
        if score is not None:
            status.score = score
        self._notify(status)

    def set_progress(self, item_id: str, progress: int) -> None:
        status = self._statuses[item_id]
        if status.state.is_terminal:
            msg = f"Item {item_id} already finished ({status.state.value})"
            raise ValueError(msg)
        self._check_progress(status, progress)
        status.progress = progress
        self._notify(status)

    def succeed(self, item_id: str, score: int) -> None:
        self.advance(item_id, ItemState.SUCCESS, PROGRESS_DONE, score=score)

    def fail(self, item_id: str, error: BaseException) -> None:
        status = self._statuses[item_id]
        if status.state.is_terminal:
            msg = f"Item {item_id} already finished ({status.state.value})"
            raise ValueError(msg)
        status.state = ItemState.ERROR
        status.error = str(error) or type(error).__name__
        status.retryable = bool(getattr(error, "retryable", False))
        self._notify(status)

    @staticmethod
    def _check_progress(status: BatchItemStatus, progress: int) -> None:
        if progress < status.progress or progress > PROGRESS_DONE:
            msg = (
                f"Progress for {status.item_id} must stay monotonic: "
                f"{status.progress} -> {progress}"
            )
            raise ValueError(msg)

    def _notify(self, status: BatchItemStatus) -> None:
        logger.debug("%s: %s (%d%%)", status.item_id, status.state.value, status.progress)
        if self._on_progress is None:
            return
        try:
            self._on_progress(status.model_copy())
        except Exception:
            logger.exception("Progress callback failed for %s", status.item_id)


class BatchReport:
    """Final statuses and outcomes of a batch run."""

    def __init__(
        self,
        statuses: dict[str, BatchItemStatus],
        outcomes: dict[str, ItemOutcome],
        cancelled: bool = False,
    ) -> None:
        self.statuses = statuses
        self.outcomes = outcomes
        self.cancelled = cancelled

    def _count(self, state: ItemState) -> int:
        return sum(1 for s in self.statuses.values() if s.state is state)

    @property
    def success_count(self) -> int:
        return self._count(ItemState.SUCCESS)

    @property
    def error_count(self) -> int:
        return self._count(ItemState.ERROR)

    @property
    def pending_count(self) -> int:
        return self._count(ItemState.PENDING)

    def failures(self) -> list[BatchItemStatus]:
        return [s for s in self.statuses.values() if s.state is ItemState.ERROR]

    def ranked(self) -> list[ItemOutcome]:
        """Successful outcomes, best score first; ties keep batch order."""
        return sorted(self.outcomes.values(), key=lambda o: o.ranking.score, reverse=True)


def run_batch(
    items: list[BatchItem],
    job: JobRequirement,
    store: ObjectStore,
    provider: str | LLMProvider | None = None,
    settings: Settings | None = None,
    *,
    on_progress: ProgressCallback | None = None,
    should_continue: Callable[[], bool] | None = None,
) -> BatchReport:
    """Run every item through the pipeline, one after another.

    Args:
        items: Documents to process, in order.
        job: Requirement every candidate is ranked against.
        store: Where raw document bytes are downloaded from.
        provider: Provider name or instance. None uses ``settings.llm.provider``.
        settings: Extraction, scoring and model settings. Defaults apply when None.
        on_progress: Called with a copy of an item's status after every change.
            Exceptions it raises are logged and never fail the item.
        should_continue: Checked before each item; returning False abandons the
            rest of the batch, leaving those items pending.

    Returns:
        BatchReport with one status per item and outcomes for the successes.
    """
    settings = settings or Settings()
    tracker = BatchTracker(items, on_progress)
    if isinstance(provider, LLMProvider):
        llm = provider
    else:
        llm = get_provider(provider or settings.llm.provider)

    logger.info("Starting batch of %d documents for '%s'", len(items), job.title)
    outcomes: dict[str, ItemOutcome] = {}
    cancelled = False

    for position, item in enumerate(items):
        if should_continue is not None and not should_continue():
            cancelled = True
            logger.info("Batch cancelled; %d items left pending", len(items) - position)
            break

        try:
            outcome = _run_item(item, job, store, llm, settings, tracker)
        except PipelineError as e:
            logger.warning("Item %s (%s) failed: %s", item.item_id, item.display_name, e)
            _record_failure(tracker, item.item_id, e)
        except Exception as e:
            logger.error(
                "Unexpected error processing %s (%s)",
                item.item_id, item.display_name,
                exc_info=True,
            )
            _record_failure(tracker, item.item_id, e)
        else:
            outcomes[item.item_id] = outcome

    report = BatchReport(tracker.statuses, outcomes, cancelled=cancelled)
    logger.info(
        "Batch complete: %d succeeded, %d failed, %d pending",
        report.success_count, report.error_count, report.pending_count,
    )
    return report


def _record_failure(tracker: BatchTracker, item_id: str, error: Exception) -> None:
    if tracker.status(item_id).state.is_terminal:
        logger.warning("Item %s already finished; ignoring late error: %s", item_id, error)
        return
    tracker.fail(item_id, error)


def _run_item(
    item: BatchItem,
    job: JobRequirement,
    store: ObjectStore,
    llm: LLMProvider,
    settings: Settings,
    tracker: BatchTracker,
) -> ItemOutcome:
    item_id = item.item_id
    filename = item.display_name

    tracker.advance(item_id, ItemState.EXTRACTING, PROGRESS_EXTRACTING)
    media_type = item.media_type or MediaType.from_filename(filename)
    content = store.download(item.path)
    document = RawDocument(content=content, media_type=media_type, filename=filename)
    extracted = extract_text(document, settings.extraction)
    tracker.set_progress(item_id, PROGRESS_EXTRACTED)

    tracker.advance(item_id, ItemState.PROFILING, PROGRESS_PROFILING)
    profile = analyze_resume(
        extracted.text,
        llm,
        settings.llm.model_for_profile(),
        filename=filename,
    )
    tracker.set_progress(item_id, PROGRESS_PROFILED)

    tracker.advance(item_id, ItemState.SCORING, PROGRESS_SCORING)
    ranking = rank_candidate(
        job,
        profile,
        llm,
        scoring=settings.scoring,
        model=settings.llm.model_for_scoring(),
    )
    outcome = ItemOutcome(
        item_id=item_id,
        filename=filename,
        profile=profile,
        ranking=ranking,
        lossy_text=extracted.lossy,
    )
    tracker.succeed(item_id, ranking.score)
    return outcome


def export_results_json(report: BatchReport) -> str:
    """Export a batch report as a JSON string, best scores first, then failures."""
    data = []
    for outcome in report.ranked():
        status = report.statuses[outcome.item_id]
        data.append({
            "item_id": outcome.item_id,
            "filename": outcome.filename,
            "state": status.state.value,
            "score": outcome.ranking.score,
            "matched_skills": outcome.ranking.matched_skills,
            "total_skills": outcome.ranking.total_skills,
            "explanation": outcome.ranking.explanation,
            "lossy_text": outcome.lossy_text,
            "profile": outcome.profile.model_dump(),
        })
    for status in report.statuses.values():
        if status.state is ItemState.SUCCESS:
            continue
        data.append({
            "item_id": status.item_id,
            "filename": status.filename,
            "state": status.state.value,
            "error": status.error,
            "retryable": status.retryable,
        })
    return json.dumps(data, indent=2, ensure_ascii=False)
