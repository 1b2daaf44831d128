# app/stories/models.py
from datetime import datetime

from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import Integer, DateTime, ForeignKey, func, UniqueConstraint
from sqlalchemy.types import UnicodeText, Text
from app.db.base import Base, utcnow

STORY_CAPTION_MAX = 500


class Story(Base):
    """
    Historia efímera: se deja de servir a las STORY_TTL_HOURS y el
    sweeper (app/db/expiry.py) la borra físicamente.
    """
    __tablename__ = "stories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
    )

    image: Mapped[str] = mapped_column(Text, nullable=False)
    caption: Mapped[str] = mapped_column(UnicodeText, nullable=False, default="")

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        index=True,
    )


class StoryView(Base):
    """
    Quién vio qué historia.
    Un usuario cuenta solo una vez por historia.
    """
    __tablename__ = "story_views"
    __table_args__ = (
        UniqueConstraint("story_id", "user_id", name="uq_storyview_story_user"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)

    story_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("stories.id", ondelete="CASCADE"),
        index=True,
    )

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
    )
