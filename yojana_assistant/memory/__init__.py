"""
Memory Package
Contains per-user session memory and the session store
"""
from .memory import (
    ANONYMOUS_USER,
    ConversationTurn,
    SessionMemory,
    SessionStore,
    InMemorySessionStore,
    SessionSweeper
)

__all__ = [
    "ANONYMOUS_USER",
    "ConversationTurn",
    "SessionMemory",
    "SessionStore",
    "InMemorySessionStore",
    "SessionSweeper"
]
