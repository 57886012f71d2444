from datetime import datetime
from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    Float,
    Boolean,
    DateTime,
    Date,
    ForeignKey,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from lifelog.database import Base


EMOTION_LABEL_LENGTH = 50


class Entry(Base):
    __tablename__ = "entries"

    id = Column(Integer, primary_key=True)
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    entry_date = Column(Date, nullable=False, index=True)
    content = Column(Text, nullable=True)

    # Metrics, each independently optional
    mood = Column(Integer, nullable=True)  # 0-10
    energy = Column(Integer, nullable=True)  # 0-10
    sleep_hours = Column(Float, nullable=True)
    sleep_quality = Column(Integer, nullable=True)  # 0-10
    stress = Column(Integer, nullable=True)  # 0-10
    focus = Column(Integer, nullable=True)  # 0-10
    physical_discomfort = Column(Integer, nullable=True)  # 0-10

    highlight = Column(Text, nullable=True)
    is_private = Column(Boolean, nullable=False, default=False)
    is_favorite = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(
        DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    # Relationships
    user = relationship("User", back_populates="entries")
    tag_links = relationship(
        "EntryTag",
        back_populates="entry",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    tags = relationship("Tag", secondary="entry_tags", viewonly=True, order_by="Tag.name")
    emotions = relationship(
        "EntryEmotion",
        back_populates="entry",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    insights = relationship(
        "AIInsight",
        back_populates="entry",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="AIInsight.created_at.desc()",
    )

    __table_args__ = (
        UniqueConstraint("user_id", "entry_date", name="uq_entries_user_date"),
    )

    METRIC_FIELDS = [
        "mood",
        "energy",
        "sleep_hours",
        "sleep_quality",
        "stress",
        "focus",
        "physical_discomfort",
    ]

    def to_dict(self, include_tags=True):
        data = {
            "id": self.id,
            "user_id": self.user_id,
            "entry_date": self.entry_date.isoformat(),
            "content": self.content,
            "highlight": self.highlight,
            "is_private": bool(self.is_private),
            "is_favorite": bool(self.is_favorite),
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
        for field in self.METRIC_FIELDS:
            data[field] = getattr(self, field)
        if include_tags:
            data["tags"] = [tag.to_dict() for tag in self.tags]
        return data

    def __repr__(self):
        return f"<Entry {self.entry_date} user:{self.user_id}>"


class EntryTag(Base):
    __tablename__ = "entry_tags"

    id = Column(Integer, primary_key=True)
    entry_id = Column(
        Integer,
        ForeignKey("entries.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    tag_id = Column(
        Integer,
        ForeignKey("tags.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    entry = relationship("Entry", back_populates="tag_links")
    tag = relationship("Tag", back_populates="entry_links")

    __table_args__ = (
        UniqueConstraint("entry_id", "tag_id", name="uq_entry_tags_entry_tag"),
    )

    def __repr__(self):
        return f"<EntryTag entry:{self.entry_id} tag:{self.tag_id}>"


class EntryEmotion(Base):
    __tablename__ = "entry_emotions"

    id = Column(Integer, primary_key=True)
    entry_id = Column(
        Integer,
        ForeignKey("entries.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    emotion = Column(String(EMOTION_LABEL_LENGTH), nullable=False)
    intensity = Column(Integer, nullable=False, default=5)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    entry = relationship("Entry", back_populates="emotions")

    def to_dict(self):
        return {
            "id": self.id,
            "entry_id": self.entry_id,
            "emotion": self.emotion,
            "intensity": self.intensity,
        }

    def __repr__(self):
        return f"<EntryEmotion {self.emotion}>"
