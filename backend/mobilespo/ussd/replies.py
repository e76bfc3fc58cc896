"""
USSD screen texts, keyed by language then message key.

Only English is complete. Missing (language, key) pairs fall back to
English, and unknown keys to SERVICE_UNAVAILABLE.
"""

import random

SERVICE_UNAVAILABLE = "Service unavailable"

TEXTS = {
    "english": {
        "main_menu": (
            "🏥 Mobile Spo Health Assistant\n"
            "1. Health Chat\n"
            "2. Emergency Help\n"
            "3. Book Appointment\n"
            "4. Health Tips\n"
            "5. Change Language\n"
            "0. Exit"
        ),
        "health_chat_prompt": "Describe your symptoms or health question:",
        "chat_footer": "0. Back to menu\n*. Ask another question",
        "tips_footer": "0. Back to menu\n*. Another tip",
        "emergency_info": (
            "🚨 EMERGENCY CONTACTS:\n"
            "Crisis: 0800567567\n"
            "Emergency: 10177\n"
            "Suicide Prevention: 0800121314\n"
            "SMS Support: 31393\n\n"
            "If immediate danger, call 10177 now!"
        ),
        "appointment_menu": (
            "📅 Book Appointment\n"
            "1. General check-up\n"
            "2. Mental health support\n"
            "3. Chronic care follow-up\n"
            "0. Back to menu"
        ),
        "appointment_info": (
            "📅 APPOINTMENT BOOKING:\n"
            "Call: 0800123456\n"
            "SMS: Send \"BOOK\" to 12345\n"
            "Online: mobilespo.co.za\n\n"
            "Available 24/7 for urgent care."
        ),
        "language_menu": (
            "Select Language:\n"
            "1. English\n"
            "2. Afrikaans\n"
            "3. isiZulu\n"
            "4. Sesotho\n"
            "5. isiXhosa"
        ),
        "language_changed": "Language updated successfully!",
        "invalid_option": "Invalid option. Please try again.",
        "invalid_selection": "Invalid selection. Please try again.",
        "goodbye": "Thank you for using Mobile Spo. Stay healthy! 💚",
        "ai_error": "Service temporarily unavailable. For emergencies call 10177.",
        "service_error": (
            "Service temporarily unavailable. Please try again later.\n"
            "For emergencies call 10177."
        ),
        "rate_limited": "Too many requests. Please wait before trying again.",
        "missing_fields": "Missing required fields: phoneNumber and sessionId",
        "unauthorized": "Authentication required",
    },
    "afrikaans": {
        "main_menu": (
            "🏥 Mobile Spo Gesondheidsassistent\n"
            "1. Gesondheidskletsie\n"
            "2. Noodhulp\n"
            "3. Maak Afspraak\n"
            "4. Gesondheidswenke\n"
            "5. Verander Taal\n"
            "0. Verlaat"
        ),
    },
    "isizulu": {},
    "sesotho": {},
    "isixhosa": {},
}

HEALTH_TIPS = {
    "english": [
        "💧 Drink 8 glasses of water daily for better health.",
        "🚶 Walk 30 minutes daily to boost your mood.",
        "😴 Get 7-9 hours of sleep for better immunity.",
        "🥗 Eat 5 servings of fruits & vegetables daily.",
        "🧘 Practice deep breathing to reduce stress.",
        "🤝 Stay connected with friends and family.",
        "☀️ Get sunlight exposure for vitamin D.",
        "🚭 Avoid smoking and excessive alcohol.",
    ],
}


def render(language, key: str) -> str:
    language = getattr(language, "value", language)
    localized = TEXTS.get(language) or {}
    if key in localized:
        return localized[key]
    return TEXTS["english"].get(key, SERVICE_UNAVAILABLE)


def health_tips(language) -> list:
    language = getattr(language, "value", language)
    return HEALTH_TIPS.get(language) or HEALTH_TIPS["english"]


def random_tip(language, chooser=random.choice) -> str:
    return chooser(health_tips(language))


def with_footer(text: str, language, footer_key: str) -> str:
    return text + "\n\n" + render(language, footer_key)
