"""
AI Insight Model

Immutable record of one generation. `content` holds the parsed response
object as a JSON string; regenerating appends a new row.
"""

import json
from datetime import datetime
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from lifelog.database import Base


class AIInsight(Base):
    __tablename__ = "ai_insights"

    id = Column(Integer, primary_key=True)
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    entry_id = Column(
        Integer,
        ForeignKey("entries.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    insight_type = Column(String(30), nullable=False, index=True)
    content = Column(Text, nullable=False)
    # "metadata" is reserved on declarative classes
    meta = Column("metadata", Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    entry = relationship("Entry", back_populates="insights")

    INSIGHT_TYPES = [
        "daily_summary",
        "tomorrow_plan",
        "weekly_summary",
        "monthly_summary",
        "pattern",
        "suggestion",
    ]

    @classmethod
    def record(cls, user_id, entry_id, insight_type, payload, generated_at):
        """Build a new insight row from a parsed response object."""
        if insight_type not in cls.INSIGHT_TYPES:
            raise ValueError(f"Unknown insight type: {insight_type}")
        return cls(
            user_id=user_id,
            entry_id=entry_id,
            insight_type=insight_type,
            content=json.dumps(payload, ensure_ascii=False),
            meta=json.dumps({"generated_at": generated_at.isoformat()}),
            created_at=generated_at.replace(tzinfo=None),
        )

    def to_dict(self):
        try:
            content = json.loads(self.content)
        except ValueError:
            content = self.content
        return {
            "id": self.id,
            "user_id": self.user_id,
            "entry_id": self.entry_id,
            "insight_type": self.insight_type,
            "content": content,
            "metadata": json.loads(self.meta) if self.meta else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<AIInsight {self.insight_type} entry:{self.entry_id}>"
