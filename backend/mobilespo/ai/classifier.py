"""
Keyword classifier for free-text health messages.

Maps a message to medical topic tags, a coarse sentiment, a length-based
complexity tier and an emergency assessment. Pure functions over the
tables in ai/keywords.py; no I/O.
"""

from dataclasses import dataclass, field, asdict
from typing import List, Optional

from mobilespo.ai.keywords import (
    EMERGENCY_TIERS,
    MEDICAL_VOCABULARY,
    NEGATIVE_WORDS,
    POSITIVE_WORDS,
    TOPIC_RULES,
)

EMERGENCY_LEVELS = ["none", "moderate", "high", "critical"]

LEVEL_ACTIONS = {
    "critical": "immediate_intervention",
    "high": "urgent_response",
    "moderate": "monitor_and_support",
}


@dataclass
class EmergencyAssessment:
    is_emergency: bool = False
    level: str = "none"
    matched_keyword: Optional[str] = None
    confidence: float = 0.0

    @property
    def action(self) -> Optional[str]:
        return LEVEL_ACTIONS.get(self.level)

    def to_dict(self) -> dict:
        data = asdict(self)
        data["action"] = self.action
        return data


@dataclass
class Classification:
    topics: List[str] = field(default_factory=list)
    sentiment: str = "neutral"
    complexity: str = "low"
    medical_terms: List[str] = field(default_factory=list)
    emergency: EmergencyAssessment = field(default_factory=EmergencyAssessment)


def severity(level: str) -> int:
    """Rank of an emergency level; higher is more severe."""
    return EMERGENCY_LEVELS.index(level)


def detect_emergency(text: str) -> EmergencyAssessment:
    """
    Scan the tiers in order and stop at the first keyword hit.

    A message holding both a critical and a moderate keyword is critical:
    lower tiers are never consulted once a higher tier matches.
    """
    lowered = (text or "").lower()

    for level, keywords, confidence in EMERGENCY_TIERS:
        for keyword in keywords:
            if keyword in lowered:
                return EmergencyAssessment(
                    is_emergency=True,
                    level=level,
                    matched_keyword=keyword,
                    confidence=confidence,
                )

    return EmergencyAssessment()


def identify_topics(lowered: str) -> List[str]:
    topics = []
    for topic, triggers in TOPIC_RULES:
        if any(trigger in lowered for trigger in triggers) and topic not in topics:
            topics.append(topic)
    return topics


def analyze_sentiment(lowered: str) -> str:
    positive = sum(1 for word in POSITIVE_WORDS if word in lowered)
    negative = sum(1 for word in NEGATIVE_WORDS if word in lowered)

    if positive > negative:
        return "positive"
    if negative > positive:
        return "negative"
    return "neutral"


def assess_complexity(text: str) -> str:
    if len(text) > 200:
        return "high"
    if len(text) > 100:
        return "medium"
    return "low"


def extract_medical_terms(lowered: str) -> List[str]:
    return [word for word in lowered.split() if word in MEDICAL_VOCABULARY]


def classify(text: str) -> Classification:
    text = text or ""
    lowered = text.lower()

    return Classification(
        topics=identify_topics(lowered),
        sentiment=analyze_sentiment(lowered),
        complexity=assess_complexity(text),
        medical_terms=extract_medical_terms(lowered),
        emergency=detect_emergency(text),
    )
