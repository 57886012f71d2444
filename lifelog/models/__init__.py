from lifelog.models.user import User
from lifelog.models.user_settings import UserSettings
from lifelog.models.tag import Tag
from lifelog.models.entry import Entry, EntryTag, EntryEmotion
from lifelog.models.insight import AIInsight

__all__ = [
    "User",
    "UserSettings",
    "Tag",
    "Entry",
    "EntryTag",
    "EntryEmotion",
    "AIInsight",
]
