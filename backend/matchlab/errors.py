"""Error taxonomy for the submission flow.

Only ``InsufficientDataError`` and ``AnalysisFailure`` ever reach the
user.  Image and archive failures are logged and swallowed by the
pipeline.
"""

from __future__ import annotations


class MatchLabError(Exception):
    """Base class for all matchlab errors."""


class InsufficientDataError(MatchLabError):
    """The profile did not pass the completeness gate."""

    def __init__(self, score: int, threshold: int) -> None:
        super().__init__(f"Profile completeness {score}% is below the {threshold}% threshold")
        self.score = score
        self.threshold = threshold


class AnalysisFailure(MatchLabError):
    """The remote analysis call failed or returned an unusable reply."""


class ImageGenerationFailure(MatchLabError):
    """The remote image call failed or returned no image part."""


class ArchiveWriteFailure(MatchLabError):
    """A submission record could not be persisted."""


class InvalidTransition(MatchLabError):
    """An event was sent to a session in a view that does not accept it."""
