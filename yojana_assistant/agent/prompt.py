"""
Prompt Builder
Serializes portal links, candidate yojanas and conversation context
into instructions for the model
"""
import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from ..schemas import Link, Scheme

OUT_OF_SCOPE_MESSAGES = {
    "marathi": "मी फक्त दिव्यांग पोर्टल संबंधी प्रश्न (लॉगिन, नोंदणी, किंवा योजना) यांच्या उत्तरे देऊ शकतो.",
    "hindi": "मैं केवल दिव्यांग पोर्टल से जुड़े प्रश्नों (लॉगिन, पंजीकरण या योजनाएँ) का उत्तर दे सकता हूँ।",
    "english": "I can only answer Divyang Portal questions (login, registration or yojanas).",
}

LANGUAGE_NAMES = {
    "marathi": "Marathi",
    "hindi": "Hindi",
    "english": "English",
}

SYSTEM_PROMPT_TEMPLATE = """You are a helpful assistant for the Divyang Portal in India.
Reply in {language_name}.
Focus only on portal-related queries: login, registration, or yojanas (schemes) for persons with disabilities.
If the query is about login, include the login link from the portal links below.
If the query is about registration, include the registration link from the portal links below.
For yojana queries, use ONLY the yojanas listed below. They are already filtered for the user's known details.
Mention eligibility (age range, disability type, required percentage) when it helps the user.
If the list is empty or nothing fits, say so politely and suggest sharing age, disability type and percentage.
If the query is outside scope, respond: "{out_of_scope}" and include the login and registration links.
Never invent links or yojanas.

Portal links (JSON):
{links_json}

Yojanas (JSON array):
{yojanas_json}

Respond strictly in this JSON format:
{{
  "message": "your response text",
  "links": [] or links copied exactly from the portal links,
  "yojanas": [] or an array of ids of the matching yojanas from the list, e.g. ["1", "3"]
}}
Do not add extra text outside JSON."""


@dataclass
class BuiltPrompt:
    system: str
    user: str

    @property
    def text(self) -> str:
        """Single-blob form for providers without a system role"""
        return f"{self.system}\n\n{self.user}"


def _format_turns(turns: List[Dict[str, Any]]) -> str:
    lines = []
    for turn in turns:
        role_label = "User" if turn.get("role") == "user" else "Assistant"
        lines.append(f"{role_label}: {turn.get('content', '')}")
    return "\n".join(lines)


def _serialize_scheme(scheme: Scheme) -> Dict[str, Any]:
    return scheme.model_dump(by_alias=True, exclude_none=True)


def build_prompt(message: str,
                 links: List[Link],
                 schemes: List[Scheme],
                 language: str = "marathi",
                 slots: Optional[Dict[str, Any]] = None,
                 history: Optional[List[Dict[str, Any]]] = None,
                 max_schemes: int = 15) -> BuiltPrompt:
    """Build the model prompt; the scheme list is capped again at max_schemes"""
    system = SYSTEM_PROMPT_TEMPLATE.format(
        language_name=LANGUAGE_NAMES.get(language, "Marathi"),
        out_of_scope=OUT_OF_SCOPE_MESSAGES.get(language, OUT_OF_SCOPE_MESSAGES["marathi"]),
        links_json=json.dumps([link.model_dump() for link in links], ensure_ascii=False),
        yojanas_json=json.dumps(
            [_serialize_scheme(s) for s in schemes[:max_schemes]],
            ensure_ascii=False
        ),
    )

    parts = []
    if slots:
        parts.append(f"Known user details: {json.dumps(slots, ensure_ascii=False)}")
    if history:
        parts.append(f"Recent conversation:\n{_format_turns(history)}")
    parts.append(f"User message: {json.dumps(message, ensure_ascii=False)}")

    return BuiltPrompt(system=system, user="\n\n".join(parts))
