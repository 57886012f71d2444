"""
User Settings Model

One row per user. Holds the DeepSeek API key, which must never leave the
server unmasked, plus display and notification preferences.
"""

from datetime import datetime
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from lifelog.database import Base


class UserSettings(Base):
    __tablename__ = "user_settings"

    id = Column(Integer, primary_key=True)
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )
    deepseek_api_key = Column(String(255), nullable=True)
    ai_depth = Column(String(20), nullable=False, default="medium")
    theme = Column(String(20), nullable=False, default="system")
    discrete_mode = Column(Boolean, nullable=False, default=False)
    notifications_enabled = Column(Boolean, nullable=False, default=False)
    notification_time = Column(String(5), nullable=False, default="21:00")
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(
        DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    user = relationship("User", back_populates="settings")

    AI_DEPTHS = ["shallow", "medium", "deep"]
    THEMES = ["light", "dark", "system"]

    @property
    def has_api_key(self):
        return bool(self.deepseek_api_key)

    @property
    def masked_api_key(self):
        """Only the last four characters of the key are ever exposed."""
        if not self.deepseek_api_key:
            return None
        return f"sk-...{self.deepseek_api_key[-4:]}"

    def to_dict(self):
        return {
            "id": self.id,
            "user_id": self.user_id,
            "deepseek_api_key": self.masked_api_key,
            "has_api_key": self.has_api_key,
            "ai_depth": self.ai_depth,
            "theme": self.theme,
            "discrete_mode": bool(self.discrete_mode),
            "notifications_enabled": bool(self.notifications_enabled),
            "notification_time": self.notification_time,
        }

    def __repr__(self):
        return f"<UserSettings user:{self.user_id}>"
