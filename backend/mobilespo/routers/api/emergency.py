from fastapi import APIRouter

from mobilespo.schemas.emergency import EmergencyResourcesOut
from mobilespo.services.emergency_service import get_emergency_resources

router = APIRouter(prefix="/api/v1/emergency", tags=["Emergency"])


@router.get("/resources", response_model=EmergencyResourcesOut)
def emergency_resources():
    return EmergencyResourcesOut(data=get_emergency_resources())
