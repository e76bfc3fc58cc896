DEFAULT_COUNTRY_CODE = "27"

# USSD language menu code -> language key
SUPPORTED_LANGUAGES = {
    "1": "english",
    "2": "afrikaans",
    "3": "isizulu",
    "4": "sesotho",
    "5": "isixhosa",
}

LANGUAGE_NAMES = [
    "English",
    "Afrikaans",
    "isiZulu",
    "Sesotho",
    "isiXhosa",
]

# language key -> display name
LANGUAGE_DISPLAY = dict(zip(SUPPORTED_LANGUAGES.values(), LANGUAGE_NAMES))

USSD_FEATURES = [
    "Health Chat",
    "Emergency Support",
    "Appointment Booking",
    "Health Tips",
    "Multi-language Support",
]

CHAT_MESSAGE_MAX_LENGTH = 1000
USSD_REPLY_MAX_LENGTH = 140
