"""
SQLAlchemy models for the recommendation data store.

Saved content with its features and themes, interaction events, per-user
domain statistics, and the persisted slates with their ranked items.
"""

from sqlalchemy import (
    JSON,
    TIMESTAMP,
    Column,
    ForeignKey,
    Index,
    Integer,
    String,
)
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


class EventType:
    """Interaction event kinds stored in ``events.type``."""

    OPEN = "OPEN"
    IMPRESSION = "IMPRESSION"
    SAVE = "SAVE"
    DISMISS = "DISMISS"


class Content(Base):
    """
    An item saved by a user.
    """

    __tablename__ = "contents"

    id = Column(String, primary_key=True)  # UUID
    user_id = Column(String, nullable=False)
    url = Column(String, nullable=True)
    title = Column(String, nullable=True)
    domain = Column(String, nullable=True)
    saved_at = Column(TIMESTAMP, nullable=False, server_default=func.now())

    features = relationship(
        "ContentFeature", back_populates="content", order_by="ContentFeature.id"
    )
    theme_items = relationship(
        "ThemeItem", back_populates="content", order_by="ThemeItem.theme_id"
    )

    __table_args__ = (Index("idx_content_user_saved", "user_id", "saved_at"),)

    def __repr__(self):
        return f"<Content(id={self.id}, user_id={self.user_id}, domain={self.domain})>"


class ContentFeature(Base):
    """Derived features of a content item (reading length bucket)."""

    __tablename__ = "content_features"

    id = Column(Integer, primary_key=True, autoincrement=True)
    content_id = Column(String, ForeignKey("contents.id"), nullable=False)
    reading_bucket = Column(String, nullable=True)  # SHORT | MEDIUM | LONG | XLONG

    content = relationship("Content", back_populates="features")

    __table_args__ = (Index("idx_feature_content", "content_id"),)


class ThemeItem(Base):
    """Association of a content item with a theme (topic tag)."""

    __tablename__ = "theme_items"

    content_id = Column(String, ForeignKey("contents.id"), primary_key=True)
    theme_id = Column(String, primary_key=True)

    content = relationship("Content", back_populates="theme_items")


class Event(Base):
    """
    Interaction event: opens, saves, impressions.

    Impressions reference the slate they were shown in.
    """

    __tablename__ = "events"

    id = Column(String, primary_key=True)  # UUID
    user_id = Column(String, nullable=False)
    content_id = Column(String, nullable=False)
    slate_id = Column(String, ForeignKey("slates.id"), nullable=True)
    type = Column(String, nullable=False)
    context = Column(JSON, nullable=True)
    created_at = Column(TIMESTAMP, server_default=func.now())

    __table_args__ = (
        Index("idx_event_user_content_type", "user_id", "content_id", "type"),
        Index("idx_event_slate", "slate_id"),
    )

    def __repr__(self):
        return f"<Event(id={self.id}, type={self.type}, content_id={self.content_id})>"


class UserDomainStat(Base):
    """Per-user save count for a source domain."""

    __tablename__ = "user_domain_stats"

    user_id = Column(String, primary_key=True)
    domain = Column(String, primary_key=True)
    save_count = Column(Integer, nullable=False, default=0)

    __table_args__ = (Index("idx_domain_stat_user_count", "user_id", "save_count"),)


class Slate(Base):
    """A persisted, ordered set of recommendations served in one request."""

    __tablename__ = "slates"

    id = Column(String, primary_key=True)  # UUID
    user_id = Column(String, nullable=False)
    meta = Column(JSON, nullable=True)
    created_at = Column(TIMESTAMP, server_default=func.now())

    items = relationship("SlateItem", back_populates="slate", order_by="SlateItem.position")

    __table_args__ = (Index("idx_slate_user", "user_id"),)

    def __repr__(self):
        return f"<Slate(id={self.id}, user_id={self.user_id})>"


class SlateItem(Base):
    """One ranked entry of a slate; position is 1-based and contiguous."""

    __tablename__ = "slate_items"

    slate_id = Column(String, ForeignKey("slates.id"), primary_key=True)
    position = Column(Integer, primary_key=True)
    content_id = Column(String, nullable=False)
    score = Column(Integer, nullable=False)
    reasons = Column(JSON, nullable=False)

    slate = relationship("Slate", back_populates="items")

    def __repr__(self):
        return (
            f"<SlateItem(slate_id={self.slate_id}, "
            f"position={self.position}, content_id={self.content_id})>"
        )
