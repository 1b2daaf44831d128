# app/activity/models.py
from datetime import datetime

from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import Integer, String, DateTime, ForeignKey, func
from app.db.base import Base, utcnow

ACTIVITY_TYPES = {
    "signup",
    "login",
    "logout",
    "post",
    "like",
    "comment",
    "follow",
    "unfollow",
    "message",
    "share",
    "delete_post",
}


class Activity(Base):
    """
    Log de auditoría (solo escritura). Lo lee únicamente el dashboard admin.
    target_post_id va sin FK: el post puede haberse borrado y el registro queda.
    """
    __tablename__ = "activities"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True
    )
    type: Mapped[str] = mapped_column(String(32), nullable=False)
    target_user_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    target_post_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    details: Mapped[str | None] = mapped_column(String(500), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), index=True
    )
