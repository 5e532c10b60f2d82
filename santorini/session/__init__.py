"""
Session Module - Registry of in-memory matches.

A session represents one match:
- Created when the lobby opens a table
- Holds the GameSession and its serialization lock
- Removed when the hosting process ends it

Sessions are EPHEMERAL: nothing is persisted.
"""

from .manager import SessionManager, Session, SessionState

__all__ = [
    "SessionManager",
    "Session",
    "SessionState",
]
