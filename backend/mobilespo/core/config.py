# mobilespo/core/config.py
import os
from dotenv import load_dotenv

load_dotenv()


class Settings:
    """
    Central configuration for the Mobile Spo backend.

    Values are read once from environment variables (or a .env file)
    and exposed as plain attributes.
    """

    def __init__(self) -> None:
        # Server
        self.APP_ENV = os.getenv("APP_ENV", "development")
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
        self.SERVICE_NAME = "mobile-spo-backend"
        self.VERSION = "1.0.0"

        # Auth
        self.SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-change-me")
        self.JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
        self.ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))

        # Database
        self.DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./mobilespo.db")

        # USSD
        self.USSD_SESSION_BACKEND = os.getenv("USSD_SESSION_BACKEND", "memory")
        self.USSD_SESSION_TIMEOUT = int(os.getenv("USSD_SESSION_TIMEOUT", "300"))
        self.USSD_SWEEP_INTERVAL = int(os.getenv("USSD_SWEEP_INTERVAL", "300"))
        self.USSD_RATE_LIMIT = int(os.getenv("USSD_RATE_LIMIT", "20"))
        self.USSD_RATE_WINDOW = int(os.getenv("USSD_RATE_WINDOW", "60"))
        self.USSD_PROVIDER_API_KEY = os.getenv("USSD_PROVIDER_API_KEY")

        # Notifications
        self.NOTIFICATION_TIMEOUT = float(os.getenv("NOTIFICATION_TIMEOUT", "10"))
        self.SMS_PROVIDER = os.getenv("SMS_PROVIDER", "mock")
        # channel for USSD emergency escalation: sms or whatsapp
        self.USSD_ESCALATION_CHANNEL = os.getenv("USSD_ESCALATION_CHANNEL", "sms")

        # Twilio
        self.TWILIO_SID = os.getenv("TWILIO_SID")
        self.TWILIO_TOKEN = os.getenv("TWILIO_TOKEN")
        self.TWILIO_SMS_NUMBER = os.getenv("TWILIO_SMS_NUMBER")

        # WhatsApp Cloud API
        self.WHATSAPP_ACCESS_TOKEN = os.getenv("WHATSAPP_ACCESS_TOKEN")
        self.WHATSAPP_PHONE_NUMBER_ID = os.getenv("WHATSAPP_PHONE_NUMBER_ID")

        # Emergency hotlines (South Africa)
        self.EMERGENCY_CRISIS_LINE = os.getenv("EMERGENCY_CRISIS_LINE", "0800 567 567")
        self.EMERGENCY_SUICIDE_PREVENTION = os.getenv("EMERGENCY_SUICIDE_PREVENTION", "0800 12 13 14")
        self.EMERGENCY_SERVICES = os.getenv("EMERGENCY_SERVICES", "10177")
        self.EMERGENCY_SMS = os.getenv("EMERGENCY_SMS", "31393")

    @property
    def is_production(self) -> bool:
        return self.APP_ENV == "production"


settings = Settings()
