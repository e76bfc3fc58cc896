from pydantic import BaseModel
from typing import Dict, Optional


class EmergencyResource(BaseModel):
    name: str
    number: Optional[str] = None
    description: str
    available: Optional[str] = None
    hours: Optional[str] = None


class EmergencyResourcesOut(BaseModel):
    success: bool = True
    data: Dict[str, EmergencyResource]
