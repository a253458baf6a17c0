"""
Zones API Routes

Endpoint for power and heart-rate zone calculation.
"""

from fastapi import APIRouter, Depends

from trainload.api.dependencies import get_engine_config
from trainload.api.models.requests import ZonesRequest
from trainload.api.models.responses import ZonesResponse
from trainload.schemas import EngineConfig
from trainload.zones import ZoneCalculator

router = APIRouter()


@router.post("/zones", response_model=ZonesResponse)
async def compute_zones(
    request: ZonesRequest,
    config: EngineConfig = Depends(get_engine_config),
) -> ZonesResponse:
    """
    Compute every zone table the profile supports.

    Missing inputs leave the corresponding table empty; inconsistent
    heart-rate anchors are refused with 400.

    Args:
        request: ZonesRequest with the physiological profile and optional HR zone model
        config: Engine configuration

    Returns:
        ZonesResponse with power and HR tables
    """
    if request.hr_zone_model is not None:
        config = config.model_copy(update={"hr_zone_model": request.hr_zone_model})
    calculator = ZoneCalculator(request.profile, config)
    return ZonesResponse(
        power=calculator.power_zones(),
        hr=calculator.hr_zones(),
        weekly_tss_capacity=calculator.estimate_weekly_tss_capacity(),
    )
