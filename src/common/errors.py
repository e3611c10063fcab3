"""Error kinds raised by the distillation pipeline."""


class DistillError(Exception):
    """Base class for pipeline failures. `kind` tags the failure for callers."""

    kind = "distill_error"


class MalformedInputError(DistillError):
    """The page source could not be decoded or parsed as HTML."""

    kind = "malformed_input"


class ExtractionError(DistillError):
    """The boilerplate-removal algorithm failed internally."""

    kind = "extraction_failed"


class ModelUnavailableError(DistillError):
    """A required spaCy pipeline is missing, corrupt, or lacks a component."""

    kind = "model_unavailable"


class SourceUnreachableError(DistillError):
    """Fetching a page URL failed."""

    kind = "source_unreachable"


class PipelineTimeoutError(DistillError):
    """The request deadline passed between pipeline steps."""

    kind = "timeout"
