from pydantic import BaseModel, Field
from typing import Any, Dict, Optional

from mobilespo.ussd.states import ResponseType


class UssdRequest(BaseModel):
    # Optional so missing fields reach the gateway's own 400 response
    phone_number: Optional[str] = Field(None, alias="phoneNumber")
    text: Optional[str] = ""
    session_id: Optional[str] = Field(None, alias="sessionId")

    class Config:
        populate_by_name = True


class UssdResponse(BaseModel):
    message: str
    continue_session: bool = Field(alias="continueSession")
    type: ResponseType

    class Config:
        populate_by_name = True

    @classmethod
    def build(cls, response_type: ResponseType, message: str) -> "UssdResponse":
        return cls(message=message, continue_session=response_type.continues, type=response_type)

    @classmethod
    def menu(cls, message: str) -> "UssdResponse":
        return cls.build(ResponseType.MENU, message)

    @classmethod
    def input(cls, message: str) -> "UssdResponse":
        return cls.build(ResponseType.INPUT, message)

    @classmethod
    def end(cls, message: str) -> "UssdResponse":
        return cls.build(ResponseType.END, message)

    @classmethod
    def error(cls, message: str) -> "UssdResponse":
        return cls.build(ResponseType.ERROR, message)


class UssdWebhookEvent(BaseModel):
    event: str
    session_id: Optional[str] = Field(None, alias="sessionId")
    phone_number: Optional[str] = Field(None, alias="phoneNumber")
    data: Dict[str, Any] = Field(default_factory=dict)

    class Config:
        populate_by_name = True


class UssdTestRequest(BaseModel):
    phone_number: str = Field("+27123456789", alias="phoneNumber")
    text: str = ""
    session_id: str = Field("test_session", alias="sessionId")

    class Config:
        populate_by_name = True
