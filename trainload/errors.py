"""
Error taxonomy for the load and periodization engine.

All engine errors are local validation failures: the same input always fails
the same way, so there is nothing to retry. Callers fix the input and
recompute.
"""

from typing import Optional


class EngineError(ValueError):
    """Base class for input the engine refuses to compute on."""


class InvalidProfile(EngineError):
    """Physiological inputs are missing or inconsistent for the requested computation."""


class InvalidBlock(EngineError):
    """
    A workout block is structurally invalid.

    Raised before aggregation so that one bad block refuses the whole
    session score instead of silently corrupting the totals.
    """

    def __init__(self, message: str, block_index: Optional[int] = None):
        if block_index is not None:
            message = f"Block {block_index}: {message}"
        super().__init__(message)
        self.block_index = block_index


class UnplannableSeason(EngineError):
    """No goal date can be resolved for a season, so no mesocycle can be planned."""
