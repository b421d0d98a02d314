"""
Session management module.

Sessions are owned by the SessionManager; callers take a session for one
turn through `SessionManager.session()`, which locks the key and saves
with a version check on exit.
"""

from .models import ConversationSession, ConversationTurn, TurnRole
from .manager import SessionConflictError, SessionManager, get_session_manager

__all__ = [
    # Models
    "ConversationSession",
    "ConversationTurn",
    "TurnRole",
    # Manager
    "SessionConflictError",
    "SessionManager",
    "get_session_manager",
]
