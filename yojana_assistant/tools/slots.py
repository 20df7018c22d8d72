"""
Slot Extraction Rules
Rule-based extraction of age, disability category and percentage,
plus keyword intent detection, for Marathi / Hindi / English messages.

Each rule is independent. For every slot the first rule that matches wins,
and slots never clear a value remembered from earlier turns.
"""
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Pattern, Set


DEVANAGARI_DIGITS = str.maketrans("०१२३४५६७८९", "0123456789")

SLOT_AGE = "age"
SLOT_DISABILITY = "disabilityCategory"
SLOT_PERCENTAGE = "percentage"

INTENT_LOGIN = "login"
INTENT_REGISTER = "register"
INTENT_SCHEME = "scheme"

_PERCENT_MARKER = r"(?:\s*%|\s*percent|\s*per\s*cent|\s*टक्के|\s*टक्का|\s*प्रतिशत)"
_PERCENT_LABEL = re.compile(r"(?:percentage|percent|टक्केवारी|प्रतिशत)\s*(?:is|:|-|=)?\s*$")


def normalize_text(text: str) -> str:
    """Lowercase and fold Devanagari digits to ASCII"""
    return (text or "").translate(DEVANAGARI_DIGITS).lower()


def _in_range(value: int) -> bool:
    return 1 <= value <= 100


@dataclass
class SlotRule:
    """A single pattern -> slot update rule"""
    slot: str
    pattern: Pattern
    convert: Callable[[re.Match], Any]
    accept: Optional[Callable[[re.Match, str], bool]] = None
    name: str = ""

    def apply(self, text: str) -> Optional[Any]:
        for match in self.pattern.finditer(text):
            if self.accept is not None and not self.accept(match, text):
                continue
            value = self.convert(match)
            if value is not None:
                return value
        return None


def _number(match: re.Match) -> Optional[int]:
    value = int(match.group(1))
    return value if _in_range(value) else None


def _constant(value: str) -> Callable[[re.Match], str]:
    return lambda match: value


def _not_a_percentage(match: re.Match, text: str) -> bool:
    """Reject bare numbers that are written as a percentage"""
    after = text[match.end():]
    if re.match(_PERCENT_MARKER, after):
        return False
    before = text[:match.start()]
    if _PERCENT_LABEL.search(before):
        return False
    return True


def _keyword_pattern(english: List[str], devanagari: List[str]) -> Pattern:
    parts = [r"\b" + word for word in english] + [re.escape(word) for word in devanagari]
    return re.compile("|".join(parts))


# Disability categories, checked in order (more specific first)
DISABILITY_KEYWORDS = [
    ("cerebral palsy", ["cerebral palsy"], ["सेरेब्रल पाल्सी", "मेंदूचा पक्षाघात", "प्रमस्तिष्क पक्षाघात"]),
    ("autism", ["autis"], ["ऑटिझम", "ऑटिज्म", "स्वमग्न"]),
    ("intellectual", ["intellectual", "mental retardation", "mentally retarded", "learning disab"], ["मतिमंद", "बौद्धिक"]),
    ("mental", ["mental"], ["मानसिक"]),
    ("multiple", ["multiple disab"], ["बहुविकलांग", "बहुविकलांगता"]),
    ("hearing", ["hearing", "deaf"], ["कर्णबधिर", "बहिरा", "बहिरे", "श्रवण", "बधिर", "सुनने"]),
    ("speech", ["speech", "mute", "dumb"], ["मूक", "बोलण्या", "वाणी"]),
    ("vision", ["vision", "visual", "blind", "low vision"], ["अंध", "दृष्टी", "दृष्टिहीन", "नेत्रहीन"]),
    ("physical", ["physical", "locomotor", "orthop", "wheelchair"], ["अस्थिव्यंग", "शारीरिक", "लंगडा"]),
]

DISABILITY_CATEGORIES = [category for category, _, _ in DISABILITY_KEYWORDS]

DISABILITY_PATTERNS = {
    category: _keyword_pattern(english, devanagari)
    for category, english, devanagari in DISABILITY_KEYWORDS
}


def mentions_disability(text: str, category: str) -> bool:
    """True if text names the category in any of its keywords"""
    pattern = DISABILITY_PATTERNS.get(category)
    return bool(pattern and pattern.search((text or "").lower()))


SLOT_RULES: List[SlotRule] = [
    SlotRule(
        slot=SLOT_AGE,
        name="labelled_age",
        pattern=re.compile(r"(?:\bage\b|\bumra?\b|वय|उम्र|आयु)\s*(?:is|:|-|=)?\s*(?:आहे\s*|है\s*)?(\d{1,3})(?!\d)"),
        convert=_number,
    ),
    SlotRule(
        slot=SLOT_AGE,
        name="years_suffix",
        pattern=re.compile(r"(?<!\d)(\d{1,3})\s*(?:years?\b|yrs?\b|y/o\b|वर्ष|साल)"),
        convert=_number,
    ),
    SlotRule(
        slot=SLOT_AGE,
        name="bare_number",
        pattern=re.compile(r"(?<![\d.])(\d{1,2})(?![\d.])"),
        convert=_number,
        accept=_not_a_percentage,
    ),
    SlotRule(
        slot=SLOT_PERCENTAGE,
        name="percent_suffix",
        pattern=re.compile(r"(?<!\d)(\d{1,3})" + _PERCENT_MARKER),
        convert=_number,
    ),
    SlotRule(
        slot=SLOT_PERCENTAGE,
        name="labelled_percentage",
        pattern=re.compile(r"(?:percentage|percent|टक्केवारी|प्रतिशत)\s*(?:is|:|-|=)?\s*(\d{1,3})(?!\d)"),
        convert=_number,
    ),
] + [
    SlotRule(
        slot=SLOT_DISABILITY,
        name=f"disability_{category.replace(' ', '_')}",
        pattern=DISABILITY_PATTERNS[category],
        convert=_constant(category),
    )
    for category in DISABILITY_CATEGORIES
]


@dataclass
class IntentRule:
    intent: str
    pattern: Pattern


INTENT_RULES: List[IntentRule] = [
    IntentRule(INTENT_LOGIN, _keyword_pattern(
        [r"log\s?-?in\b", r"sign\s?-?in\b", "password"],
        ["लॉगिन", "लॉग इन", "लॉगइन", "पासवर्ड"]
    )),
    IntentRule(INTENT_REGISTER, _keyword_pattern(
        ["regist", r"sign\s?-?up\b", "enrol"],
        ["नोंदणी", "रजिस्टर", "रजिस्ट्रेशन", "पंजीकरण", "पंजीयन", "नोंद करा"]
    )),
    IntentRule(INTENT_SCHEME, _keyword_pattern(
        ["yojana", "scheme", "scholarship", "pension", "benefit", "eligib", "fellowship", "insurance"],
        ["योजना", "योजने", "योजनां", "शिष्यवृत्ती", "पेन्शन", "लाभ", "पात्र", "छात्रवृत्ति"]
    )),
]


@dataclass
class Extraction:
    """Result of running all rules over one message"""
    slots: Dict[str, Any] = field(default_factory=dict)
    intents: Set[str] = field(default_factory=set)

    def has_intent(self, intent: str) -> bool:
        return intent in self.intents


def extract_slots(text: str,
                  awaiting_age: bool = False,
                  rules: Optional[List[SlotRule]] = None) -> Dict[str, Any]:
    """Run slot rules over the message; the first match per slot wins"""
    normalized = normalize_text(text)
    slots: Dict[str, Any] = {}

    if awaiting_age:
        bare = re.fullmatch(r"\s*(\d{1,3})\s*", normalized)
        if bare and _in_range(int(bare.group(1))):
            slots[SLOT_AGE] = int(bare.group(1))

    for rule in rules if rules is not None else SLOT_RULES:
        if rule.slot in slots:
            continue
        value = rule.apply(normalized)
        if value is not None:
            slots[rule.slot] = value

    return slots


def detect_intents(text: str) -> Set[str]:
    normalized = normalize_text(text)
    return {rule.intent for rule in INTENT_RULES if rule.pattern.search(normalized)}


def extract(text: str, awaiting_age: bool = False) -> Extraction:
    """Extract slots and intents; any slot implies a scheme query"""
    slots = extract_slots(text, awaiting_age=awaiting_age)
    intents = detect_intents(text)
    if slots:
        intents.add(INTENT_SCHEME)
    return Extraction(slots=slots, intents=intents)
