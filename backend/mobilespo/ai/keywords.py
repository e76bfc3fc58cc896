"""
Keyword tables for the rule-based health assistant.

This is the single source for every keyword list used by the chat path
and the USSD path. Matching is case-insensitive substring containment,
so entries are lower-case.
"""

# Emergency tiers, scanned critical -> high -> moderate. Order inside a
# tier decides which keyword is reported as the match.
CRITICAL_KEYWORDS = [
    "suicide",
    "kill myself",
    "end my life",
    "want to die",
    "better off dead",
    "overdose",
    "pills",
    "hanging",
    "jumping",
    "cutting deep",
]

HIGH_KEYWORDS = [
    "hurt myself",
    "self harm",
    "cutting",
    "burning myself",
    "chest pain",
    "can't breathe",
    "cannot breathe",
    "heart attack",
    "stroke",
    "seizure",
    "poisoning",
]

MODERATE_KEYWORDS = [
    "emergency",
    "urgent",
    "crisis",
    "help me",
    "severe pain",
    "bleeding",
    "unconscious",
    "allergic reaction",
]

EMERGENCY_TIERS = [
    ("critical", CRITICAL_KEYWORDS, 0.95),
    ("high", HIGH_KEYWORDS, 0.85),
    ("moderate", MODERATE_KEYWORDS, 0.75),
]

# Topic tag -> trigger substrings, in detection order.
TOPIC_RULES = [
    ("pain_management", ["pain", "hurt"]),
    ("mental_health", ["anxiety", "stress"]),
    ("illness", ["fever", "sick"]),
    ("medication", ["medication", "medicine"]),
    ("sleep_health", ["sleep", "insomnia"]),
]

POSITIVE_WORDS = ["good", "better", "fine", "well", "happy", "improving"]
NEGATIVE_WORDS = ["bad", "worse", "terrible", "awful", "depressed", "anxious"]

MEDICAL_VOCABULARY = frozenset([
    # Symptoms
    "pain", "headache", "fever", "nausea", "vomiting", "diarrhea", "constipation",
    "fatigue", "weakness", "dizziness", "cough", "congestion", "rash", "itching",
    "swelling",
    # Mental health
    "anxiety", "depression", "stress", "panic", "worry", "sad", "hopeless",
    "overwhelmed", "insomnia", "irritable",
    # Conditions
    "diabetes", "hypertension", "asthma", "allergies", "migraine", "arthritis",
    "stroke", "cancer", "infection", "flu", "cold",
    # Body parts
    "head", "neck", "chest", "abdomen", "back", "arms", "legs", "hands", "feet",
    "heart", "lungs", "stomach", "liver", "kidneys", "brain", "eyes", "ears",
])
