"""
Engine errors. All are ValueErrors: the engine rejects a submission rather
than guessing what the caller meant.
"""


class ScoringError(ValueError):
    """Base class for rejected scoring operations."""


class MatchNotStartedError(ScoringError):
    """An event arrived before start_match()."""


class MatchOverError(ScoringError):
    """An event arrived after the match was completed or ended."""


class PointSequenceError(ScoringError):
    """An event arrived out of order for the point in progress."""
