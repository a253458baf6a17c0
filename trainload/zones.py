"""
Heart-rate and power training zone calculation.

Power zones are fractions of FTP. Heart-rate zones are fractions of a
reference heart rate (threshold HR by default, or HR max), anchored at
resting HR for the bottom of Z1 and at HR max for the top of Z5, and carry
an estimate of substrate oxidation and energy cost for riding in each zone.
The breakpoints come from EngineConfig so a coach can set custom zones.

Bounds are rounded half-up to whole watts / bpm, and each zone's upper bound
equals the next zone's lower bound.
"""

from typing import Dict, List, Optional, Sequence, Tuple

from loguru import logger

from trainload.errors import InvalidProfile
from trainload.plan_schemas import SubstrateEstimate, ZoneBand, ZoneTable
from trainload.rounding import round_int
from trainload.schemas import (
    DEFAULT_HR_ZONE_BREAKPOINTS,
    DEFAULT_POWER_ZONE_BREAKPOINTS,
    EngineConfig,
    HRZoneModel,
    PhysiologicalProfile,
    TrainingZone,
    ZoneKind,
)
from trainload.validator import require_ftp, validate_hr_profile


POWER_ZONE_NAMES: List[str] = [
    "Active Recovery", "Endurance", "Tempo", "Threshold", "VO2max", "Anaerobic", "Neuromuscular"
]

HR_ZONE_NAMES: List[str] = ["Recovery", "Endurance", "Tempo", "Threshold", "VO2max"]

# Upper edge of relative intensity (avg HR / threshold HR) -> (fat %, CHO %).
# The last bucket has no upper edge. Protein is the remainder.
SUBSTRATE_BUCKETS: List[Tuple[Optional[float], int, int]] = [
    (0.70, 70, 28),
    (0.85, 60, 38),
    (0.95, 45, 53),
    (1.05, 30, 68),
    (None, 15, 83),
]

KCAL_PER_G_FAT = 9
KCAL_PER_G_CHO = 4
KCAL_PER_G_PRO = 4


def compute_power_zones(
    ftp_watts: Optional[float],
    breakpoints: Sequence[float] = DEFAULT_POWER_ZONE_BREAKPOINTS,
) -> Optional[ZoneTable]:
    """
    Derive the 7 power zones from FTP.

    Args:
        ftp_watts: Functional Threshold Power, or None
        breakpoints: Six FTP fractions separating Z1|Z2 ... Z6|Z7

    Returns:
        ZoneTable of kind power, or None when FTP is not known
    """
    if ftp_watts is None:
        return None
    if ftp_watts <= 0:
        raise InvalidProfile(f"ftp_watts must be positive, got {ftp_watts}")

    edges: List[Optional[int]] = [0]
    edges += [round_int(ftp_watts * fraction) for fraction in breakpoints]
    edges.append(None)

    bands = []
    for i, name in enumerate(POWER_ZONE_NAMES):
        bands.append(
            ZoneBand(zone=list(TrainingZone)[i], name=name, min=edges[i], max=edges[i + 1])
        )

    logger.debug(f"Computed power zones for FTP={ftp_watts}W")
    return ZoneTable(kind=ZoneKind.POWER, zones=bands)


def estimate_substrates(
    zone_min: float,
    zone_max: float,
    hr_max: int,
    hr_threshold: int,
    weight_kg: float,
) -> SubstrateEstimate:
    """
    Estimate substrate oxidation for riding at the middle of an HR zone.

    VO2 is approximated from %HRmax as max(20, 1.5 x %HRmax - 50) ml/kg/min,
    energy as VO2 x weight x 0.005 kcal/min. The fat/CHO split comes from
    the zone's intensity relative to threshold HR.

    Args:
        zone_min: Lower zone bound (bpm)
        zone_max: Upper zone bound (bpm)
        hr_max: Maximum heart rate
        hr_threshold: Threshold heart rate
        weight_kg: Body weight

    Returns:
        SubstrateEstimate with percentages and g/h figures
    """
    avg_hr = (zone_min + zone_max) / 2
    intensity = avg_hr / hr_threshold

    vo2 = max(20.0, 1.5 * (avg_hr / hr_max * 100) - 50)
    kcal_h = vo2 * weight_kg * 0.005 * 60

    fat_pct, cho_pct = SUBSTRATE_BUCKETS[-1][1], SUBSTRATE_BUCKETS[-1][2]
    for upper, fat, cho in SUBSTRATE_BUCKETS:
        if upper is not None and intensity < upper:
            fat_pct, cho_pct = fat, cho
            break
    pro_pct = 100 - fat_pct - cho_pct

    # Grams derive from the unrounded energy rate; only outputs are rounded.
    return SubstrateEstimate(
        fat_pct=fat_pct,
        cho_pct=cho_pct,
        pro_pct=pro_pct,
        fat_g_h=round_int(kcal_h * fat_pct / 100 / KCAL_PER_G_FAT),
        cho_g_h=round_int(kcal_h * cho_pct / 100 / KCAL_PER_G_CHO),
        pro_g_h=round_int(kcal_h * pro_pct / 100 / KCAL_PER_G_PRO),
        kcal_h=round_int(kcal_h),
    )


def compute_hr_zones(
    hr_max: Optional[int],
    hr_threshold: Optional[int],
    hr_rest: Optional[int],
    weight_kg: float = 70.0,
    model: HRZoneModel = HRZoneModel.THRESHOLD,
    breakpoints: Optional[Sequence[float]] = None,
) -> Optional[ZoneTable]:
    """
    Derive the 5 heart-rate zones with substrate estimates.

    Z1 always starts halfway between resting and threshold HR, and Z5
    always ends at HR max. The four inner boundaries are the breakpoints
    times the model's reference HR.

    Args:
        hr_max: Maximum heart rate
        hr_threshold: Threshold (LTHR) heart rate
        hr_rest: Resting heart rate
        weight_kg: Body weight for energy estimates
        model: Reference HR the breakpoints are fractions of
        breakpoints: Four fractions separating Z1|Z2 ... Z4|Z5
            (the model's default set if omitted)

    Returns:
        ZoneTable of kind hr, or None when any anchor is missing

    Raises:
        InvalidProfile: If the anchors are inconsistent or would give a
            negative-width zone
    """
    if None in (hr_max, hr_threshold, hr_rest):
        return None

    validate_hr_profile(
        PhysiologicalProfile(hr_max=hr_max, hr_threshold=hr_threshold, hr_rest=hr_rest)
    )

    if breakpoints is None:
        breakpoints = DEFAULT_HR_ZONE_BREAKPOINTS[model]
    reference = hr_threshold if model == HRZoneModel.THRESHOLD else hr_max
    reference_name = "hr_threshold" if model == HRZoneModel.THRESHOLD else "hr_max"

    edges = [round_int(hr_rest + (hr_threshold - hr_rest) * 0.5)]
    edges += [round_int(reference * fraction) for fraction in breakpoints]
    edges.append(hr_max)

    if edges[-2] > hr_max:
        raise InvalidProfile(
            f"HR zone Z5 would start at {edges[-2]} bpm, above hr_max={hr_max}; "
            f"hr_max must be at least {breakpoints[-1]} x {reference_name} "
            f"({reference}) for the {model.value} zone model"
        )
    for i, name in enumerate(HR_ZONE_NAMES):
        if edges[i] > edges[i + 1]:
            raise InvalidProfile(
                f"HR zone Z{i + 1} ({name}) would span {edges[i]}..{edges[i + 1]} bpm; "
                f"check hr_rest={hr_rest}, hr_threshold={hr_threshold}, hr_max={hr_max}"
            )

    bands = []
    for i, name in enumerate(HR_ZONE_NAMES):
        zone_min, zone_max = edges[i], edges[i + 1]
        bands.append(
            ZoneBand(
                zone=list(TrainingZone)[i],
                name=name,
                min=zone_min,
                max=zone_max,
                substrates=estimate_substrates(
                    zone_min, zone_max, hr_max, hr_threshold, weight_kg
                ),
            )
        )

    logger.debug(
        f"Computed HR zones for max={hr_max} threshold={hr_threshold} rest={hr_rest}"
    )
    return ZoneTable(kind=ZoneKind.HR, zones=bands)


class ZoneCalculator:
    """
    Derives zone tables from a physiological profile.

    Stateless apart from the profile and configuration it was built with;
    every call recomputes from those inputs.
    """

    def __init__(
        self,
        profile: PhysiologicalProfile,
        config: Optional[EngineConfig] = None,
    ):
        """
        Initialize the calculator.

        Args:
            profile: Physiological inputs
            config: Engine configuration (defaults if omitted)
        """
        self.profile = profile
        self.config = config or EngineConfig()

    def power_zones(self, required: bool = False) -> Optional[ZoneTable]:
        """
        Power zones from the profile's FTP.

        Args:
            required: Raise instead of returning None when FTP is missing

        Returns:
            ZoneTable or None

        Raises:
            InvalidProfile: If required and FTP is missing
        """
        if required:
            require_ftp(self.profile)
        return compute_power_zones(self.profile.ftp_watts, self.config.power_zone_breakpoints)

    def hr_zones(self, required: bool = False) -> Optional[ZoneTable]:
        """
        Heart-rate zones from the profile's HR anchors.

        Args:
            required: Raise instead of returning None when anchors are missing

        Returns:
            ZoneTable or None

        Raises:
            InvalidProfile: If anchors are inconsistent, or missing and required
        """
        if required:
            validate_hr_profile(self.profile)
        return compute_hr_zones(
            self.profile.hr_max,
            self.profile.hr_threshold,
            self.profile.hr_rest,
            self.profile.effective_weight_kg(self.config.default_weight_kg),
            model=self.config.hr_zone_model,
            breakpoints=self.config.hr_breakpoints(),
        )

    def zones_for(self, kind: ZoneKind, required: bool = False) -> Optional[ZoneTable]:
        """Zone table for one signal."""
        if kind == ZoneKind.POWER:
            return self.power_zones(required=required)
        return self.hr_zones(required=required)

    def all_zones(self) -> Dict[ZoneKind, ZoneTable]:
        """Every zone table the profile supports, keyed by kind."""
        tables = {}
        for kind in ZoneKind:
            table = self.zones_for(kind)
            if table is not None:
                tables[kind] = table
        return tables

    def estimate_weekly_tss_capacity(self) -> Optional[int]:
        """
        Rough weekly TSS capacity from FTP.

        Returns:
            round(1.5 x FTP) with the default coefficient, or None without FTP
        """
        if self.profile.ftp_watts is None:
            return None
        return round_int(self.profile.ftp_watts * self.config.tss_capacity_per_ftp_watt)
