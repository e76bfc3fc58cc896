from enum import Enum


class UssdState(str, Enum):
    """Where the next USSD input is interpreted."""
    MAIN_MENU = "main_menu"
    LANGUAGE_SELECTION = "language_selection"
    HEALTH_CHAT = "health_chat"
    EMERGENCY = "emergency"
    APPOINTMENT_BOOKING = "appointment_booking"
    HEALTH_TIPS = "health_tips"


class Language(str, Enum):
    ENGLISH = "english"
    AFRIKAANS = "afrikaans"
    ISIZULU = "isizulu"
    SESOTHO = "sesotho"
    ISIXHOSA = "isixhosa"


class ResponseType(str, Enum):
    MENU = "menu"
    INPUT = "input"
    END = "end"
    ERROR = "error"

    @property
    def continues(self) -> bool:
        return self in (ResponseType.MENU, ResponseType.INPUT)
