class MergeError(Exception):
    """Base exception for merge pipeline failures."""


class StructuralError(MergeError):
    """Raised when a record lacks a field required to compute its key."""


class CorpusLoadError(MergeError):
    """Raised when a corpus file cannot be read or parsed."""

    def __init__(self, stage: str, path, reason: str = ""):
        self.stage = stage
        self.path = path
        self.reason = reason
        message = f"[{stage}] failed to load {path}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class MergeExecutionError(MergeError):
    """Raised when the pipeline fails for an unexpected reason."""
