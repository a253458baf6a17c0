"""
Training load formulas.

One canonical intensity-factor table (from EngineConfig) drives TSS, target
power and energy estimates for both season planning and single sessions.
"""

import math
from typing import Iterable, Optional, Union

from trainload.errors import InvalidProfile
from trainload.plan_schemas import WorkoutBlock
from trainload.schemas import EngineConfig, TrainingZone
from trainload.workout import effective_duration_minutes

KCAL_PER_KJ = 4.184
REFERENCE_WEIGHT_KG = 70.0
# Heart-rate-only energy fallback, kcal per minute at the reference weight.
KCAL_PER_MINUTE_FALLBACK = 10.0


def _check_duration(duration_minutes: float) -> None:
    if duration_minutes < 0:
        raise ValueError(f"Duration cannot be negative, got {duration_minutes}")


class LoadModel:
    """Pure load formulas parameterised by an EngineConfig."""

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig()

    def intensity_factor(self, zone: Union[str, TrainingZone]) -> float:
        """
        Intensity factor for a zone.

        Args:
            zone: Zone id (case-insensitive)

        Returns:
            IF from the canonical table

        Raises:
            ValueError: If the zone id is unknown
        """
        return self.config.intensity_factors[TrainingZone(zone)]

    def tss(self, duration_minutes: float, zone: Union[str, TrainingZone]) -> float:
        """
        Training Stress Score for a steady effort.

        TSS = duration_seconds x IF^2 / 3600 x 100: linear in duration,
        quadratic in intensity.
        """
        _check_duration(duration_minutes)
        intensity = self.intensity_factor(zone)
        return duration_minutes * 60 * intensity ** 2 / 3600 * 100

    def session_intensity_factor(self, tss: float, duration_minutes: float) -> float:
        """
        Session-level IF implied by a TSS over a duration.

        Inverse of the TSS formula; 0 for a zero-length session.
        """
        _check_duration(duration_minutes)
        if duration_minutes == 0:
            return 0.0
        return math.sqrt(tss * 3600 / (duration_minutes * 60 * 100))

    def estimate_average_power_watts(
        self, blocks: Iterable[WorkoutBlock], ftp_watts: Optional[float]
    ) -> float:
        """
        Duration-weighted mean of per-block target power.

        Args:
            blocks: Ordered workout blocks
            ftp_watts: Functional Threshold Power

        Returns:
            Average power in watts; 0 when the blocks have no duration

        Raises:
            InvalidProfile: If FTP is missing or not positive
        """
        if ftp_watts is None or ftp_watts <= 0:
            raise InvalidProfile("Average power estimate needs a positive ftp_watts")

        weighted = 0.0
        total = 0.0
        for block in blocks:
            duration = effective_duration_minutes(block)
            weighted += self.intensity_factor(block.zone) * ftp_watts * duration
            total += duration

        if total == 0:
            return 0.0
        return weighted / total

    def estimate_kcal(
        self,
        avg_power_watts: float,
        duration_minutes: float,
        efficiency: Optional[float] = None,
    ) -> float:
        """
        Energy expenditure from mechanical work.

        kcal = (avg_power x seconds / 1000) kJ / efficiency / 4.184

        Args:
            avg_power_watts: Average power
            duration_minutes: Duration
            efficiency: Gross mechanical efficiency (config default 0.25)
        """
        _check_duration(duration_minutes)
        if efficiency is None:
            efficiency = self.config.mechanical_efficiency
        if efficiency <= 0:
            raise ValueError(f"Efficiency must be positive, got {efficiency}")
        work_kj = avg_power_watts * duration_minutes * 60 / 1000
        return work_kj / efficiency / KCAL_PER_KJ

    def estimate_kcal_from_duration(
        self, duration_minutes: float, weight_kg: Optional[float] = None
    ) -> float:
        """Energy estimate when no power is available: 10 kcal/min at 70 kg, scaled by weight."""
        _check_duration(duration_minutes)
        if weight_kg is None:
            weight_kg = self.config.default_weight_kg
        return duration_minutes * KCAL_PER_MINUTE_FALLBACK * (weight_kg / REFERENCE_WEIGHT_KG)
