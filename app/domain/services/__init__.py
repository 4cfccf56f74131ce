"""Domain services for SkillSwap.

This module contains domain services that encapsulate
business logic that doesn't naturally fit within entities.
"""

from .conversation_service import ConversationDomainService, ConversationStream
from .match_service import MatchDomainService, MatchSuggestions
from .profile_service import ProfileDomainService
from .reminder_service import ReminderDomainService, SweepResult
from .session_service import SessionBuckets, SessionDomainService, SessionView, SessionWatch

__all__ = [
    "MatchDomainService",
    "MatchSuggestions",
    "SessionDomainService",
    "SessionBuckets",
    "SessionView",
    "SessionWatch",
    "ConversationDomainService",
    "ConversationStream",
    "ReminderDomainService",
    "SweepResult",
    "ProfileDomainService",
]
