"""Error taxonomy for the ingestion-and-ranking pipeline.

Every error carries a display-ready message and a ``retryable`` flag so the
caller can decide between backing off and flagging a document for review.

  PipelineError
    StorageError            download/upload of raw document bytes failed
    ExtractionError         document could not be turned into usable text
      UnsupportedFormat
      CorruptDocument
      EmptyContent
      DocumentTooLarge
    ModelError              completion-service call failed
      MalformedModelOutput
      ModelRateLimited
      ModelQuotaExceeded
      ModelUnavailable
"""


class PipelineError(Exception):
    """Base class for every failure surfaced by the pipeline."""

    retryable = False

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class StorageError(PipelineError):
    """The object store could not provide the requested document."""

    retryable = True


class ExtractionError(PipelineError):
    """Base class for text extraction failures."""


class UnsupportedFormat(ExtractionError):
    """Declared media type or file extension is not one we can read."""


class CorruptDocument(ExtractionError):
    """Document could not be parsed, is encrypted, or has no text layer."""


class EmptyContent(ExtractionError):
    """Document is empty or yields too little text to profile."""


class DocumentTooLarge(ExtractionError):
    """Document exceeds the configured size limit."""


class ModelError(PipelineError):
    """Base class for completion-service failures."""


class MalformedModelOutput(ModelError, ValueError):
    """Model response was not the JSON object the prompt asked for."""


class ModelRateLimited(ModelError):
    """Completion service answered 429; back off and retry later."""

    retryable = True


class ModelQuotaExceeded(ModelError):
    """Completion service answered 402; credits are exhausted."""


class ModelUnavailable(ModelError):
    """Completion service failed for any other reason."""

    retryable = True
