"""
Exceptions raised by the snapshot pipeline.
"""

from typing import Dict, Optional


class ArtrecError(Exception):
    """Base class for pipeline errors."""


class DataReadError(ArtrecError):
    """A collaborator store could not be read (missing, unreachable, timed out)."""


class MalformedRecordError(DataReadError):
    """A record failed validation."""

    def __init__(self, message: str, source: Optional[str] = None, row: Optional[int] = None):
        self.source = source
        self.row = row
        location = ""
        if source is not None:
            location = f" [{source}" + (f" row {row}" if row is not None else "") + "]"
        super().__init__(f"{message}{location}")


class SnapshotWriteError(ArtrecError):
    """The snapshot could not be written; any previous snapshot is left in place."""


class PipelineError(ArtrecError):
    """
    A run failed. Carries the stage reached, the counts gathered so far and
    the failed run record so operators can tell how far the run got.
    """

    def __init__(self, stage: str, counts: Dict[str, int], cause: BaseException, status=None):
        self.stage = stage
        self.counts = dict(counts)
        self.cause = cause
        self.status = status
        summary = ", ".join(f"{k}={v}" for k, v in self.counts.items()) or "no counts"
        super().__init__(f"pipeline failed at stage '{stage}' ({summary}): {cause}")
