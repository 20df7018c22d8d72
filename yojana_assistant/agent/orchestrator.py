"""
Chat Orchestrator
Runs one chat request through slot filling, scheme filtering, the model
and output sanitization
"""
import logging
from typing import Any, Dict, List, Optional

from ..config import settings
from ..llm import BaseLLMClient, LLMError
from ..memory import ANONYMOUS_USER, SessionMemory, SessionStore
from ..schemas import ChatRequest, ChatResponse, Link, Scheme
from ..tools.language import detect_language
from ..tools.links import LINK_CATALOG, LOGIN_LINK, REGISTER_LINK, sanitize_links
from ..tools.schemes import SchemeCriteria, SchemeSource, select_schemes
from ..tools.slots import INTENT_LOGIN, INTENT_REGISTER, INTENT_SCHEME, Extraction, extract
from .coercion import coerce_model_output
from .prompt import build_prompt

logger = logging.getLogger(__name__)


MESSAGES = {
    "marathi": {
        "login": "दिव्यांग पोर्टलवर लॉगिन करण्यासाठी खालील लिंक वापरा.",
        "register": "दिव्यांग पोर्टलवर नोंदणी करण्यासाठी खालील लिंक वापरा.",
        "login_register": "लॉगिन आणि नोंदणीसाठी खालील लिंक वापरा.",
        "apology": "माफ करा, काहीतरी चुकलं.",
    },
    "hindi": {
        "login": "दिव्यांग पोर्टल पर लॉगिन करने के लिए नीचे दिया गया लिंक उपयोग करें।",
        "register": "दिव्यांग पोर्टल पर पंजीकरण करने के लिए नीचे दिया गया लिंक उपयोग करें।",
        "login_register": "लॉगिन और पंजीकरण के लिए नीचे दिए गए लिंक उपयोग करें।",
        "apology": "क्षमा करें, कुछ गलत हो गया।",
    },
    "english": {
        "login": "Use the link below to log in to the Divyang Portal.",
        "register": "Use the link below to register on the Divyang Portal.",
        "login_register": "Use the links below to log in or register on the Divyang Portal.",
        "apology": "Sorry, something went wrong.",
    },
}


def localized(key: str, language: Optional[str]) -> str:
    table = MESSAGES.get(language or "", MESSAGES["marathi"])
    return table[key]


class ChatProcessingError(Exception):
    """The model could not produce an answer; carries the reply language"""

    def __init__(self, message: str, language: str):
        super().__init__(message)
        self.language = language

    @property
    def apology(self) -> str:
        return localized("apology", self.language)


class ChatAgent:
    """
    Handles chat requests for the Divyang Portal assistant.
    Rule-based slot filling answers login/registration directly and
    falls back to the model for scheme and free-form questions.
    """

    def __init__(self,
                 llm_client: BaseLLMClient,
                 scheme_source: SchemeSource,
                 session_store: SessionStore,
                 link_catalog: Optional[List[Link]] = None,
                 scheme_cap: Optional[int] = None,
                 fallback_on_empty: Optional[bool] = None,
                 history_window: Optional[int] = None):
        self.llm_client = llm_client
        self.scheme_source = scheme_source
        self.session_store = session_store
        self.link_catalog = link_catalog or LINK_CATALOG
        self.scheme_cap = scheme_cap if scheme_cap is not None else settings.scheme_result_cap
        self.fallback_on_empty = (
            fallback_on_empty if fallback_on_empty is not None else settings.scheme_fallback_on_empty
        )
        self.history_window = history_window if history_window is not None else settings.history_window

    async def handle(self, request: ChatRequest) -> ChatResponse:
        context = request.context
        user_id = (context.userId if context and context.userId else None) or ANONYMOUS_USER

        async with self.session_store.lock(user_id):
            session = self.session_store.get_or_create(user_id)
            return await self._handle_locked(request, session)

    async def _handle_locked(self, request: ChatRequest, session: SessionMemory) -> ChatResponse:
        context = request.context
        message = request.message

        language = self._resolve_language(message, context.locale if context else None, session)
        session.language = language

        extraction = extract(message, awaiting_age=bool(context and context.awaitingAge))
        slots = session.update_slots(extraction.slots)
        history = session.get_recent_turns(self.history_window)
        session.add_user_message(message)

        logger.debug("user=%s intents=%s slots=%s", session.user_id, sorted(extraction.intents), slots)

        direct = self._direct_reply(extraction, language)
        if direct is not None:
            session.add_assistant_message(direct.message)
            return direct

        response = await self._model_reply(message, language, slots, history)
        session.add_assistant_message(response.message)
        return response

    def _resolve_language(self,
                          message: str,
                          locale: Optional[str],
                          session: SessionMemory) -> str:
        from_locale = settings.get_language_for_locale(locale)
        if from_locale:
            return from_locale
        fallback = session.language or settings.default_language.value
        return detect_language(message, fallback=fallback) or fallback

    def _direct_reply(self, extraction: Extraction, language: str) -> Optional[ChatResponse]:
        """Answer pure login/registration requests without the model"""
        if extraction.has_intent(INTENT_SCHEME):
            return None

        wants_login = extraction.has_intent(INTENT_LOGIN)
        wants_register = extraction.has_intent(INTENT_REGISTER)
        if wants_login and wants_register:
            return ChatResponse(
                message=localized("login_register", language),
                links=[LOGIN_LINK, REGISTER_LINK]
            )
        if wants_login:
            return ChatResponse(message=localized("login", language), links=[LOGIN_LINK])
        if wants_register:
            return ChatResponse(message=localized("register", language), links=[REGISTER_LINK])
        return None

    async def _model_reply(self,
                           message: str,
                           language: str,
                           slots: Dict[str, Any],
                           history: List[Dict[str, Any]]) -> ChatResponse:
        all_schemes = await self.scheme_source.fetch()
        candidates, _ = select_schemes(
            all_schemes,
            SchemeCriteria.from_slots(slots),
            cap=self.scheme_cap,
            fallback_on_empty=self.fallback_on_empty
        )

        prompt = build_prompt(
            message=message,
            links=self.link_catalog,
            schemes=candidates,
            language=language,
            slots=slots,
            history=history,
            max_schemes=self.scheme_cap
        )

        try:
            raw = await self.llm_client.generate(
                system_prompt=prompt.system,
                user_message=prompt.user,
                response_format={"type": "json_object"},
                temperature=0.3
            )
        except LLMError as e:
            logger.error("Model call failed: %s", e)
            raise ChatProcessingError(str(e), language) from e

        parsed = coerce_model_output(raw)
        return ChatResponse(
            message=parsed["message"] or localized("apology", language),
            links=sanitize_links(parsed.get("links"), self.link_catalog),
            yojanas=self._select_reported_schemes(parsed.get("yojanas"), candidates)
        )

    @staticmethod
    def _select_reported_schemes(reported: Any, candidates: List[Scheme]) -> List[Scheme]:
        """Map the model's yojana picks back to candidate records by id"""
        if not isinstance(reported, list):
            return []

        by_id = {scheme.id: scheme for scheme in candidates}
        selected: List[Scheme] = []
        for item in reported:
            if isinstance(item, dict):
                item = item.get("id", item.get("YojanaId", item.get("yojanaId")))
            if item is None or isinstance(item, (dict, list)):
                continue
            scheme = by_id.get(str(item).strip())
            if scheme is not None and scheme not in selected:
                selected.append(scheme)
        return selected
