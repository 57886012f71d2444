from datetime import datetime
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from lifelog.database import Base


class Tag(Base):
    __tablename__ = "tags"

    id = Column(Integer, primary_key=True)
    # NULL for system tags shared by every user
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    name = Column(String(100), nullable=False, index=True)
    color = Column(String(20), nullable=False, default="#6366f1")
    icon = Column(String(50), nullable=False, default="tag")
    is_system = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    # Relationships
    user = relationship("User", back_populates="tags")
    entry_links = relationship(
        "EntryTag",
        back_populates="tag",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    DEFAULT_COLOR = "#6366f1"
    DEFAULT_ICON = "tag"

    def to_dict(self):
        return {
            "id": self.id,
            "user_id": self.user_id,
            "name": self.name,
            "color": self.color,
            "icon": self.icon,
            "is_system": bool(self.is_system),
        }

    def __repr__(self):
        return f"<Tag {self.name}>"
