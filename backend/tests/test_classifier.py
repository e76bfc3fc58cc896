from mobilespo.ai.classifier import (
    assess_complexity,
    classify,
    detect_emergency,
    severity,
)


def test_critical_keyword_outranks_moderate():
    result = detect_emergency("I feel anxious and want to end my life")
    assert result.is_emergency
    assert result.level == "critical"
    assert result.matched_keyword == "end my life"


def test_critical_overdose_has_fixed_confidence():
    result = detect_emergency("I want to overdose")
    assert result.is_emergency is True
    assert result.level == "critical"
    assert result.confidence == 0.95
    assert result.action == "immediate_intervention"


def test_clean_text_is_not_an_emergency():
    result = detect_emergency("I have a mild headache")
    assert result.is_emergency is False
    assert result.level == "none"
    assert result.confidence == 0
    assert result.matched_keyword is None


def test_high_and_moderate_tiers():
    high = detect_emergency("Sudden CHEST PAIN since this morning")
    assert (high.level, high.confidence, high.matched_keyword) == ("high", 0.85, "chest pain")

    moderate = detect_emergency("this is urgent, please")
    assert (moderate.level, moderate.confidence) == ("moderate", 0.75)


def test_high_keyword_beats_moderate_in_same_message():
    assert detect_emergency("emergency! I can't breathe").level == "high"


def test_empty_text_is_safe():
    assert detect_emergency("").level == "none"
    assert detect_emergency(None).level == "none"


def test_severity_ordering():
    assert severity("critical") > severity("high") > severity("moderate") > severity("none")


def test_topics_follow_rule_order_without_duplicates():
    result = classify("Stress keeps me from sleep and my back pain hurts")
    assert result.topics == ["pain_management", "mental_health", "sleep_health"]


def test_medication_and_illness_topics():
    result = classify("I feel sick, which medicine should I take?")
    assert result.topics == ["illness", "medication"]


def test_sentiment_counts_and_ties():
    assert classify("I am feeling better and happy").sentiment == "positive"
    assert classify("Things are bad and getting worse").sentiment == "negative"
    assert classify("good day, bad night").sentiment == "neutral"
    assert classify("my knee").sentiment == "neutral"


def test_complexity_tiers():
    assert assess_complexity("x" * 100) == "low"
    assert assess_complexity("x" * 101) == "medium"
    assert assess_complexity("x" * 201) == "high"


def test_classification_folds_in_emergency_and_terms():
    result = classify("Severe pain in my chest")
    assert result.emergency.level == "moderate"
    assert "chest" in result.medical_terms
    assert "pain" in result.medical_terms
