"""Exception types raised by the pattern engine."""

from typing import Optional


class PatternEngineError(Exception):
    """Base class for pattern engine failures."""


class AnalysisInProgressError(PatternEngineError):
    """Another analysis run is still in progress.

    ``run_id`` is None when the competing run claimed the slot and already
    finished before it could be looked up.
    """

    def __init__(self, run_id: Optional[int] = None):
        self.run_id = run_id
        if run_id is None:
            super().__init__("Another analysis run is still running")
        else:
            super().__init__(f"Analysis run {run_id} is still running")


class PatternNotFoundError(PatternEngineError):
    def __init__(self, pattern_id: int):
        self.pattern_id = pattern_id
        super().__init__(f"Pattern {pattern_id} not found")
