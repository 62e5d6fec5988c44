from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import relationship
from blogsmith.core.database import Base
from blogsmith.models.user import generate_id, utcnow

TITLE_MAX_LENGTH = 200


class Post(Base):
    __tablename__ = "posts"

    id = Column(String(36), primary_key=True, default=generate_id)
    title = Column(String(TITLE_MAX_LENGTH), nullable=False)
    content = Column(Text, nullable=False)
    # Owner is set once at creation and never reassigned
    owner_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    published = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    owner = relationship("User", backref="posts")

    # Backs the per-owner newest-first listing
    __table_args__ = (Index("ix_posts_owner_created", "owner_id", "created_at"),)
