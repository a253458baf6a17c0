"""
Session scoring.

Combines effective block durations with the load model. TSS is summed block
by block rather than derived from an average intensity, because TSS is
quadratic in intensity.
"""

from typing import List, Optional, Tuple

from loguru import logger

from trainload.load_model import LoadModel
from trainload.plan_schemas import Session, SessionScore, WorkoutBlock
from trainload.schemas import EngineConfig, PhysiologicalProfile
from trainload.validator import validate_block
from trainload.workout import effective_duration_minutes


class SessionAggregator:
    """
    Scores sessions against a physiological profile.

    Stateless: a score is recomputed from the blocks on every call, so an
    edited session always gets fresh numbers.
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        """
        Initialize the aggregator.

        Args:
            config: Engine configuration (defaults if omitted)
        """
        self.config = config or EngineConfig()
        self.load_model = LoadModel(self.config)

    def block_breakdown(self, session: Session) -> List[Tuple[WorkoutBlock, float, float]]:
        """
        Per-block effective duration and TSS.

        Args:
            session: Session to break down

        Returns:
            List of (block, effective_minutes, tss) in block order

        Raises:
            InvalidBlock: If any block has inconsistent interval fields
        """
        for i, block in enumerate(session.blocks):
            validate_block(block, block_index=i)

        rows = []
        for block in session.blocks:
            duration = effective_duration_minutes(block)
            rows.append((block, duration, self.load_model.tss(duration, block.zone)))
        return rows

    def score(self, session: Session, profile: PhysiologicalProfile) -> SessionScore:
        """
        Compute duration, TSS, IF, average power and kcal for a session.

        Args:
            session: Session to score
            profile: Physiological inputs (FTP drives power and kcal)

        Returns:
            Unrounded SessionScore

        Raises:
            InvalidBlock: If any block is invalid; nothing is scored then
        """
        rows = self.block_breakdown(session)

        total_minutes = sum(duration for _, duration, _ in rows)
        total_tss = sum(tss for _, _, tss in rows)
        intensity = self.load_model.session_intensity_factor(total_tss, total_minutes)

        if not rows:
            logger.warning(f"Scoring session '{session.title}' with no blocks")

        if profile.ftp_watts is not None:
            avg_power: Optional[float] = self.load_model.estimate_average_power_watts(
                session.blocks, profile.ftp_watts
            )
            kcal = self.load_model.estimate_kcal(avg_power, total_minutes)
        else:
            avg_power = None
            kcal = self.load_model.estimate_kcal_from_duration(
                total_minutes, profile.effective_weight_kg(self.config.default_weight_kg)
            )

        logger.debug(
            f"Scored session '{session.title}': {total_minutes:.0f} min, "
            f"TSS {total_tss:.1f}, IF {intensity:.2f}"
        )

        return SessionScore(
            total_duration_minutes=total_minutes,
            tss=total_tss,
            intensity_factor=intensity,
            average_power_watts=avg_power,
            kcal=kcal,
        )
