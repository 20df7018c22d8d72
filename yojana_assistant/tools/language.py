"""Response language detection for Marathi / Hindi / English input."""
import re
from typing import Optional


_DEVANAGARI = re.compile(r"[ऀ-ॿ]")

# Frequent function words that separate Marathi from Hindi text
MARATHI_MARKERS = ["आहे", "आहेत", "मला", "माझे", "माझी", "माझा", "काय", "कसे", "करा", "नाही", "आणि", "किंवा", "साठी"]
HINDI_MARKERS = ["है", "हैं", "मुझे", "मेरा", "मेरी", "क्या", "कैसे", "करें", "नहीं", "और", "या", "के लिए"]


def contains_devanagari(text: str) -> bool:
    return bool(_DEVANAGARI.search(text or ""))


def _count_words(text: str, words) -> int:
    tokens = re.findall(r"[ऀ-ॿ]+", text)
    padded = " " + " ".join(tokens) + " "
    return sum(1 for w in words if f" {w} " in padded)


def detect_language(text: str, fallback: Optional[str] = None) -> Optional[str]:
    """
    Guess the reply language from the message script.
    Returns the fallback for Devanagari text with no clear markers,
    since Marathi and Hindi share the script.
    """
    if not text or not text.strip():
        return fallback

    if not contains_devanagari(text):
        if re.search(r"[A-Za-z]", text):
            return "english"
        return fallback

    marathi = _count_words(text, MARATHI_MARKERS)
    hindi = _count_words(text, HINDI_MARKERS)
    if marathi > hindi:
        return "marathi"
    if hindi > marathi:
        return "hindi"
    return fallback if fallback in ("marathi", "hindi") else "marathi"
