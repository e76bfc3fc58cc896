import asyncio
import logging
from datetime import datetime, timezone

import requests
from twilio.rest import Client

from mobilespo.core.config import settings
from mobilespo.core.exceptions import NotificationError
from mobilespo.services.realtime import manager as realtime_manager
from mobilespo.ussd.validators import mask_phone

logger = logging.getLogger(__name__)

WHATSAPP_API_URL = "https://graph.facebook.com/v19.0"

CHANNELS = ("sms", "whatsapp", "realtime")


def send_whatsapp_text(phone_number: str, message: str, timeout: float = 10):
    access_token = settings.WHATSAPP_ACCESS_TOKEN
    phone_number_id = settings.WHATSAPP_PHONE_NUMBER_ID

    if not access_token or not phone_number_id:
        raise NotificationError("whatsapp", "WhatsApp credentials missing")

    url = f"{WHATSAPP_API_URL}/{phone_number_id}/messages"

    payload = {
        "messaging_product": "whatsapp",
        "to": phone_number,
        "type": "text",
        "text": {
            "body": message
        }
    }

    headers = {
        "Authorization": f"Bearer {access_token}",
        "Content-Type": "application/json",
    }

    response = requests.post(url, json=payload, headers=headers, timeout=timeout)

    if response.status_code != 200:
        logger.error("WhatsApp text error: %s", response.text)
        response.raise_for_status()

    return response.json()


def send_twilio_sms(phone_number: str, message: str):
    if not settings.TWILIO_SID or not settings.TWILIO_TOKEN or not settings.TWILIO_SMS_NUMBER:
        raise NotificationError("sms", "Twilio credentials missing")

    client = Client(settings.TWILIO_SID, settings.TWILIO_TOKEN)
    sent = client.messages.create(
        from_=settings.TWILIO_SMS_NUMBER,
        body=message,
        to=phone_number,
    )
    return sent.sid


class NotificationService:
    """
    Fire-and-forget delivery over SMS, WhatsApp or the realtime socket.

    `realtime` messages are dicts sent as event payloads; the other
    channels take plain text.
    """

    def __init__(self, sms_provider: str = None, realtime=None):
        self.sms_provider = sms_provider or settings.SMS_PROVIDER
        self.realtime = realtime or realtime_manager

    async def notify(self, recipient: str, channel: str, message, event: str = "notification") -> dict:
        if channel == "sms":
            return await self.send_sms(recipient, message)
        if channel == "whatsapp":
            return await self.send_whatsapp(recipient, message)
        if channel == "realtime":
            return await self.push(recipient, event, message)
        raise NotificationError(channel, f"Unsupported channel: {channel}")

    async def send_sms(self, phone_number: str, message: str) -> dict:
        logger.info("Sending SMS to %s (%d chars)", mask_phone(phone_number), len(message))

        if self.sms_provider == "mock":
            return {
                "success": True,
                "channel": "sms",
                "status": "sent",
                "provider": "mock",
                "message_id": "sms_" + datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S%f"),
            }

        message_id = await asyncio.to_thread(send_twilio_sms, phone_number, message)
        return {
            "success": True,
            "channel": "sms",
            "status": "sent",
            "provider": self.sms_provider,
            "message_id": message_id,
        }

    async def send_whatsapp(self, phone_number: str, message: str) -> dict:
        logger.info("Sending WhatsApp message to %s", mask_phone(phone_number))
        await asyncio.to_thread(send_whatsapp_text, phone_number, message)
        return {"success": True, "channel": "whatsapp", "status": "sent", "provider": "whatsapp"}

    async def push(self, user_id: str, event: str, data: dict) -> dict:
        delivered = await self.realtime.emit(user_id, event, data)
        return {
            "success": delivered > 0,
            "channel": "realtime",
            "status": "delivered" if delivered else "no_listeners",
            "provider": "websocket",
        }
