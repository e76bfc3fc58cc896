"""
Emergency escalation.

Given an emergency level from the keyword classifier, build the tiered
action plan (messages, hotlines, safety steps) and alert the user on
their notification channel. The alert is awaited but bounded by the
notification timeout, and its failure never fails the caller.
"""

import asyncio
import logging
from datetime import datetime, timezone

from mobilespo.core.config import settings
from mobilespo.services.notification_service import NotificationService
from mobilespo.utils import audit

logger = logging.getLogger(__name__)

EMERGENCY_EVENT = "emergency_detected"


def get_emergency_resources() -> dict:
    """Emergency resources for South Africa."""
    return {
        "crisis": {
            "name": "Crisis Helpline",
            "number": settings.EMERGENCY_CRISIS_LINE,
            "description": "Free 24/7 mental health crisis support",
            "available": "24/7",
        },
        "suicide": {
            "name": "Suicide Prevention Lifeline",
            "number": settings.EMERGENCY_SUICIDE_PREVENTION,
            "description": "Immediate suicide prevention support",
            "available": "24/7",
        },
        "emergency": {
            "name": "Emergency Services",
            "number": settings.EMERGENCY_SERVICES,
            "description": "Police, ambulance, fire services",
            "available": "24/7",
        },
        "sms": {
            "name": "SMS Counseling",
            "number": settings.EMERGENCY_SMS,
            "description": "Text \"Hi\" for confidential support",
            "available": "24/7",
        },
        "local": {
            "name": "Nearest Clinic",
            "description": "Serenity Wellness Center - 2.3km away",
            "hours": "Open 24/7 • Walk-ins welcome",
        },
    }


def _contact(resource: dict, **extra) -> dict:
    contact = {"name": resource["name"], "number": resource["number"], "available": resource["available"]}
    contact.update(extra)
    return contact


def critical_actions(resources: dict) -> list:
    return [
        {
            "type": "immediate_intervention",
            "message": "🚨 IMMEDIATE HELP NEEDED - You are not alone. Please reach out for help right now.",
            "priority": "critical",
        },
        {
            "type": "emergency_contacts",
            "message": "Please call one of these numbers immediately:",
            "contacts": [
                _contact(resources["suicide"]),
                _contact(resources["crisis"]),
                _contact(resources["emergency"]),
            ],
        },
        {
            "type": "safety_plan",
            "message": "If you are in immediate danger, please:",
            "steps": [
                f"Call emergency services ({resources['emergency']['number']}) immediately",
                "Go to your nearest hospital emergency room",
                "Call a trusted friend or family member",
                "Remove any means of self-harm from your immediate area",
            ],
        },
    ]


def high_actions(resources: dict) -> list:
    return [
        {
            "type": "urgent_support",
            "message": "I'm concerned about you. Please consider reaching out for professional help.",
            "priority": "high",
        },
        {
            "type": "crisis_resources",
            "message": "Here are some resources that can help:",
            "contacts": [
                _contact(resources["crisis"]),
                _contact(resources["sms"], note="Text \"Hi\""),
            ],
        },
        {
            "type": "safety_check",
            "message": "Are you in a safe place right now? Do you have someone you can talk to?",
        },
    ]


def moderate_actions(resources: dict) -> list:
    return [
        {
            "type": "supportive_response",
            "message": "I understand you're going through a difficult time. Help is available.",
            "priority": "moderate",
        },
        {
            "type": "resources",
            "message": "Consider these support options:",
            "contacts": [
                _contact(resources["crisis"]),
                {"name": "Mental Health Support", "note": "Speak with a healthcare provider"},
            ],
        },
        {
            "type": "coping_strategies",
            "message": "Some immediate coping strategies:",
            "strategies": [
                "Take slow, deep breaths",
                "Reach out to a trusted friend or family member",
                "Consider professional counseling",
                "Use grounding techniques (5-4-3-2-1 method)",
            ],
        },
    ]


ACTION_BUILDERS = {
    "critical": critical_actions,
    "high": high_actions,
    "moderate": moderate_actions,
}


def build_action_plan(user_id, level: str) -> dict:
    resources = get_emergency_resources()
    builder = ACTION_BUILDERS.get(level)

    return {
        "user_id": str(user_id),
        "emergency_level": level,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "resources": resources,
        "actions": builder(resources) if builder else [],
    }


def format_plan_text(plan: dict) -> str:
    """Short plain-text rendering of a plan for SMS/WhatsApp."""
    lines = []
    for action in plan["actions"]:
        lines.append(action["message"])
        for contact in action.get("contacts", []):
            if contact.get("number"):
                lines.append(f"- {contact['name']}: {contact['number']}")
        for step in action.get("steps", []):
            lines.append(f"- {step}")
    return "\n".join(lines)


class EmergencyService:
    def __init__(self, notifier: NotificationService = None, timeout: float = None):
        self.notifier = notifier or NotificationService()
        self.timeout = timeout if timeout is not None else settings.NOTIFICATION_TIMEOUT

    async def handle_emergency_response(self, user_id, message: str, level: str, channel: str = "realtime") -> dict:
        audit.record(
            "Emergency event detected",
            "emergency",
            level=logging.WARNING,
            user_id=str(user_id),
            emergency_type="crisis_detected",
            emergency_level=level,
            channel=channel,
            message_length=len(message or ""),
        )

        plan = build_action_plan(user_id, level)
        if not plan["actions"]:
            return plan

        await self._notify(user_id, channel, plan)

        logger.warning("Emergency response activated for user %s: %s", user_id, level)
        return plan

    async def _notify(self, user_id, channel: str, plan: dict):
        if channel == "realtime":
            payload = {
                "level": plan["emergency_level"],
                "message": "Emergency support resources have been activated",
                "timestamp": plan["timestamp"],
                "plan": plan,
            }
        else:
            payload = format_plan_text(plan)

        try:
            outcome = await asyncio.wait_for(
                self.notifier.notify(str(user_id), channel, payload, event=EMERGENCY_EVENT),
                timeout=self.timeout,
            )
            logger.info("Emergency notification via %s: %s", channel, outcome.get("status"))
        except asyncio.TimeoutError:
            logger.error("Emergency notification via %s timed out after %ss", channel, self.timeout)
        except Exception:
            logger.exception("Emergency notification via %s failed", channel)
