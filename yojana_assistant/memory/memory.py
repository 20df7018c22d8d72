"""
Session Memory
Per-user conversation history and remembered slots, with idle expiry
"""
import asyncio
import logging
from abc import ABC, abstractmethod
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

ANONYMOUS_USER = "anonymous"


@dataclass
class ConversationTurn:
    """Single conversation turn"""
    role: str  # "user" or "assistant"
    content: str
    timestamp: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "role": self.role,
            "content": self.content,
            "timestamp": self.timestamp.isoformat()
        }


class SessionMemory:
    """
    Memory for one user id
    Keeps a sliding window of turns plus slots gathered across turns
    """

    def __init__(self,
                 user_id: str,
                 language: Optional[str] = None,
                 max_turns: int = 10,
                 clock: Callable[[], datetime] = datetime.now):
        self.user_id = user_id
        self.language = language
        self.max_turns = max_turns
        self.turns: List[ConversationTurn] = []
        self.slots: Dict[str, Any] = {}
        self._clock = clock
        self.created_at = clock()
        self.last_activity = self.created_at

    def touch(self):
        self.last_activity = self._clock()

    def add_turn(self, role: str, content: str):
        self.turns.append(ConversationTurn(role=role, content=content, timestamp=self._clock()))
        if len(self.turns) > self.max_turns:
            self.turns = self.turns[-self.max_turns:]
        self.touch()

    def add_user_message(self, content: str):
        self.add_turn("user", content)

    def add_assistant_message(self, content: str):
        self.add_turn("assistant", content)

    def update_slots(self, slots: Dict[str, Any]) -> Dict[str, Any]:
        """Merge newly extracted slots; missing values never clear old ones"""
        for key, value in slots.items():
            if value is not None:
                self.slots[key] = value
        return dict(self.slots)

    def get_recent_turns(self, n: Optional[int] = None) -> List[Dict[str, Any]]:
        turns = self.turns if n is None else self.turns[-n:]
        return [t.to_dict() for t in turns]

    def idle_for(self, now: Optional[datetime] = None) -> timedelta:
        return (now or self._clock()) - self.last_activity

    def to_dict(self) -> Dict[str, Any]:
        return {
            "user_id": self.user_id,
            "language": self.language,
            "slots": dict(self.slots),
            "turns": self.get_recent_turns(),
            "created_at": self.created_at.isoformat(),
            "last_activity": self.last_activity.isoformat()
        }


class SessionStore(ABC):
    """Keyed session storage with idle expiry"""

    @abstractmethod
    def get(self, user_id: str) -> Optional[SessionMemory]:
        pass

    @abstractmethod
    def put(self, session: SessionMemory):
        pass

    @abstractmethod
    def evict(self, user_id: str):
        pass

    @abstractmethod
    def sweep(self) -> int:
        """Remove idle sessions, returning how many were evicted"""
        pass

    @abstractmethod
    def lock(self, user_id: str) -> asyncio.Lock:
        """Lock serializing read-modify-write of one user's session"""
        pass

    def get_or_create(self, user_id: str, language: Optional[str] = None) -> SessionMemory:
        session = self.get(user_id)
        if session is None:
            session = self.new_session(user_id, language)
            self.put(session)
        return session

    @abstractmethod
    def new_session(self, user_id: str, language: Optional[str] = None) -> SessionMemory:
        pass


class InMemorySessionStore(SessionStore):
    """
    Process-local session store
    Only suitable for a single-instance deployment
    """

    def __init__(self,
                 idle_timeout: timedelta = timedelta(minutes=30),
                 max_turns: int = 10,
                 clock: Callable[[], datetime] = datetime.now):
        self.sessions: Dict[str, SessionMemory] = {}
        self.idle_timeout = idle_timeout
        self.max_turns = max_turns
        self._clock = clock
        self._locks: Dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    @classmethod
    def from_settings(cls) -> 'InMemorySessionStore':
        from ..config import settings
        return cls(
            idle_timeout=timedelta(minutes=settings.session_idle_minutes),
            max_turns=settings.history_window
        )

    def new_session(self, user_id: str, language: Optional[str] = None) -> SessionMemory:
        return SessionMemory(user_id, language=language, max_turns=self.max_turns, clock=self._clock)

    def get(self, user_id: str) -> Optional[SessionMemory]:
        return self.sessions.get(user_id)

    def put(self, session: SessionMemory):
        self.sessions[session.user_id] = session

    def evict(self, user_id: str):
        self.sessions.pop(user_id, None)
        lock = self._locks.get(user_id)
        if lock is not None and not lock.locked():
            del self._locks[user_id]

    def lock(self, user_id: str) -> asyncio.Lock:
        return self._locks[user_id]

    def sweep(self) -> int:
        now = self._clock()
        expired = [
            uid for uid, session in self.sessions.items()
            if session.idle_for(now) > self.idle_timeout
        ]
        for uid in expired:
            self.evict(uid)
        if expired:
            logger.info("Evicted %d idle sessions", len(expired))
        return len(expired)

    def __len__(self) -> int:
        return len(self.sessions)


class SessionSweeper:
    """Background task that periodically sweeps a session store"""

    def __init__(self, store: SessionStore, interval_seconds: float = 300):
        self.store = store
        self.interval_seconds = interval_seconds
        self._task: Optional[asyncio.Task] = None

    async def _run(self):
        while True:
            await asyncio.sleep(self.interval_seconds)
            self.store.sweep()

    def start(self):
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self._run())

    async def stop(self):
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()
