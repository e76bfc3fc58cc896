import re

from mobilespo.core.constants import DEFAULT_COUNTRY_CODE

NON_DIGITS = re.compile(r"\D")


def normalize_phone(phone: str) -> str:
    """
    Normalize a gateway phone number to leading-plus international form.

    0821234567 -> +27821234567, 821234567 -> +27821234567,
    anything else keeps its digits behind a plus sign.
    """
    cleaned = NON_DIGITS.sub("", phone or "")

    if len(cleaned) == 10 and cleaned.startswith("0"):
        cleaned = DEFAULT_COUNTRY_CODE + cleaned[1:]
    elif len(cleaned) == 9:
        cleaned = DEFAULT_COUNTRY_CODE + cleaned

    return "+" + cleaned


def valid_phone(phone: str) -> bool:
    return len(NON_DIGITS.sub("", phone or "")) > 0


def mask_phone(phone: str) -> str:
    if not phone:
        return "unknown"
    return phone[:6] + "***"
