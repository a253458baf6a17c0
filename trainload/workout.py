"""
Structured workout helpers.

Effective block duration plus pure editing functions for sessions. Sessions
are immutable: every edit returns a new Session and leaves the input as it
was, so callers can keep the previous version for undo or comparison.
"""

import math
from typing import Iterable, Literal, Optional

from trainload.plan_schemas import Session, WorkoutBlock


def effective_duration_minutes(block: WorkoutBlock) -> float:
    """
    Duration a block actually occupies.

    Simple blocks return total_duration_minutes. Interval blocks are
    ceil((work + rest) / 60) minutes, with rest counted only between
    repetitions, never after the last one.

    Args:
        block: Workout block (interval fields are assumed validated)

    Returns:
        Effective duration in minutes
    """
    if not block.has_intervals:
        return block.total_duration_minutes

    work_seconds = (block.interval_duration_seconds or 0) * block.num_intervals
    rest_seconds = (block.rest_between_intervals_seconds or 0) * max(block.num_intervals - 1, 0)
    return math.ceil((work_seconds + rest_seconds) / 60)


def total_duration(blocks: Iterable[WorkoutBlock]) -> float:
    """Sum of effective durations over ordered blocks."""
    return sum(effective_duration_minutes(block) for block in blocks)


def session_duration(session: Session) -> float:
    """Total effective duration of a session in minutes."""
    return total_duration(session.blocks)


def _check_index(session: Session, index: int) -> None:
    if not 0 <= index < len(session.blocks):
        raise IndexError(
            f"Block index {index} out of range for session with {len(session.blocks)} blocks"
        )


def add_block(
    session: Session, block: WorkoutBlock, position: Optional[int] = None
) -> Session:
    """
    Insert a block.

    Args:
        session: Session to edit
        block: Block to insert
        position: Index to insert at (appends when None)

    Returns:
        New session with the block inserted

    Raises:
        IndexError: If position is outside 0..len(blocks)
    """
    blocks = list(session.blocks)
    if position is None:
        blocks.append(block)
    else:
        if not 0 <= position <= len(blocks):
            raise IndexError(
                f"Insert position {position} out of range for session with {len(blocks)} blocks"
            )
        blocks.insert(position, block)
    return session.model_copy(update={"blocks": tuple(blocks)})


def remove_block(session: Session, index: int) -> Session:
    """
    Remove the block at index.

    Raises:
        IndexError: If index is out of range
    """
    _check_index(session, index)
    blocks = session.blocks[:index] + session.blocks[index + 1:]
    return session.model_copy(update={"blocks": blocks})


def update_block(session: Session, index: int, **changes) -> Session:
    """
    Replace fields on one block.

    The changed block is re-validated as a WorkoutBlock, so an unknown zone
    or a negative duration is rejected here.

    Args:
        session: Session to edit
        index: Block index
        **changes: WorkoutBlock fields to replace

    Returns:
        New session with the block updated

    Raises:
        IndexError: If index is out of range
        ValueError: If a change names an unknown field
    """
    _check_index(session, index)
    unknown = set(changes) - set(WorkoutBlock.model_fields)
    if unknown:
        raise ValueError(f"Unknown block fields: {', '.join(sorted(unknown))}")

    current = session.blocks[index]
    updated = WorkoutBlock.model_validate({**current.model_dump(), **changes})
    blocks = session.blocks[:index] + (updated,) + session.blocks[index + 1:]
    return session.model_copy(update={"blocks": blocks})


def move_block(session: Session, index: int, direction: Literal["up", "down"]) -> Session:
    """
    Swap a block with its neighbour.

    Moving the first block up or the last block down returns the session
    unchanged.

    Raises:
        IndexError: If index is out of range
        ValueError: If direction is not "up" or "down"
    """
    _check_index(session, index)
    if direction not in ("up", "down"):
        raise ValueError(f"direction must be 'up' or 'down', got {direction!r}")

    target = index - 1 if direction == "up" else index + 1
    if not 0 <= target < len(session.blocks):
        return session

    blocks = list(session.blocks)
    blocks[index], blocks[target] = blocks[target], blocks[index]
    return session.model_copy(update={"blocks": tuple(blocks)})
