import logging
from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from typing import List, Optional

from mobilespo.ai.classifier import classify
from mobilespo.utils import audit

logger = logging.getLogger(__name__)

DEFAULT_CONFIDENCE = 0.8

MEDICAL_DISCLAIMERS = [
    "This AI assistant provides general health information only and is not a substitute for professional medical advice.",
    "Always consult with a qualified healthcare provider for medical concerns.",
    "In case of emergency, contact your local emergency services immediately.",
    "This information is processed locally to protect your privacy.",
]


@dataclass
class HealthQueryResult:
    response: str
    confidence: float
    is_emergency: bool = False
    emergency_level: str = "none"
    matched_keyword: Optional[str] = None
    medical_topics: List[str] = field(default_factory=list)
    sentiment: str = "neutral"
    complexity: str = "low"
    medical_terms: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)
    disclaimers: List[str] = field(default_factory=lambda: list(MEDICAL_DISCLAIMERS))
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def to_dict(self) -> dict:
        return asdict(self)


def mental_health_reply(sentiment: str) -> str:
    if sentiment == "negative":
        return (
            "I understand you're going through a difficult time. It's important to know "
            "that you're not alone, and there are people who want to help. Would you like "
            "to talk about what's been troubling you? Remember, seeking professional help "
            "is a sign of strength, not weakness."
        )
    return (
        "It's great that you're taking care of your mental health. Mental wellness is "
        "just as important as physical health. What specific aspects of your mental "
        "health would you like to discuss?"
    )


def pain_management_reply() -> str:
    return (
        "I understand you're experiencing pain, which can be very challenging. Pain can "
        "have many causes and affects everyone differently. Can you describe the type of "
        "pain you're experiencing and when it started? This information can help "
        "determine the best approach for management."
    )


def illness_reply() -> str:
    return (
        "I'm sorry to hear you're not feeling well. Many illnesses are common and "
        "treatable, but it's important to monitor your symptoms. Can you tell me more "
        "about what symptoms you're experiencing and how long you've had them?"
    )


def general_health_reply() -> str:
    return (
        "Thank you for reaching out about your health. I'm here to provide general "
        "health information and support. What specific health topic would you like "
        "to discuss today?"
    )


def generate_reply(topics, sentiment):
    """Pick the reply and recommendations for the highest-priority topic."""
    if "mental_health" in topics:
        return mental_health_reply(sentiment), [
            "Consider speaking with a mental health professional",
            "Practice stress-reduction techniques",
        ]
    if "pain_management" in topics:
        return pain_management_reply(), [
            "Monitor pain levels and triggers",
            "Consider consulting a healthcare provider if pain persists",
        ]
    if "illness" in topics:
        return illness_reply(), [
            "Rest and stay hydrated",
            "Monitor symptoms and seek medical care if they worsen",
        ]
    return general_health_reply(), [
        "Maintain a healthy lifestyle",
        "Regular check-ups with healthcare providers are important",
    ]


def process_health_query(message: str, history: Optional[list] = None, profile: Optional[dict] = None) -> HealthQueryResult:
    """
    Classify a health question and build the assistant's reply.

    `history` and `profile` are accepted for callers that carry
    conversation context; the rule-based replies do not depend on them.
    """
    analysis = classify(message)
    emergency = analysis.emergency
    reply, recommendations = generate_reply(analysis.topics, analysis.sentiment)

    audit.record(
        "Medical AI interaction",
        "medical_ai",
        query_length=len(message or ""),
        history_turns=len(history or []),
        interface=(profile or {}).get("interface", "api"),
        topics=analysis.topics,
        is_emergency=emergency.is_emergency,
    )

    return HealthQueryResult(
        response=reply,
        confidence=DEFAULT_CONFIDENCE,
        is_emergency=emergency.is_emergency,
        emergency_level=emergency.level,
        matched_keyword=emergency.matched_keyword,
        medical_topics=analysis.topics,
        sentiment=analysis.sentiment,
        complexity=analysis.complexity,
        medical_terms=analysis.medical_terms,
        recommendations=recommendations,
    )


def fallback_result() -> HealthQueryResult:
    return HealthQueryResult(
        response=(
            "I apologize, but I'm having trouble processing your request right now. "
            "For immediate health concerns, please contact a healthcare professional "
            "or emergency services."
        ),
        confidence=0.0,
        recommendations=["Contact a healthcare provider for medical concerns"],
    )
