from pydantic import BaseModel, Field, field_validator
from typing import Any, Dict, List, Optional

from mobilespo.core.constants import CHAT_MESSAGE_MAX_LENGTH


class ChatTurn(BaseModel):
    role: str
    content: str


class ChatMessageCreate(BaseModel):
    message: str
    conversation_id: Optional[str] = None
    history: List[ChatTurn] = Field(default_factory=list)

    @field_validator("message")
    @classmethod
    def message_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value or len(value) > CHAT_MESSAGE_MAX_LENGTH:
            raise ValueError("Message must be between 1 and 1000 characters")
        return value


class EmergencyInfo(BaseModel):
    level: str
    resources: Dict[str, Any]
    actions: Optional[List[Dict[str, Any]]] = None


class ChatReply(BaseModel):
    conversation_id: Optional[str] = None
    message: str
    confidence: float
    medical_topics: List[str]
    recommendations: List[str]
    disclaimers: List[str]
    is_emergency: bool
    emergency_level: str
    timestamp: str
    emergency: Optional[EmergencyInfo] = None


class ChatResponse(BaseModel):
    success: bool = True
    data: ChatReply
