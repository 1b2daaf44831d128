# app/messages/models.py
from datetime import datetime

from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import (
    Integer,
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    JSON,
    false,
    func,
)
from sqlalchemy.types import UnicodeText
from sqlalchemy.dialects.postgresql import JSONB
from app.db.base import Base, utcnow

MESSAGE_MAX = 5000


class Message(Base):
    __tablename__ = "messages"
    __table_args__ = (
        Index("ix_messages_pair_created", "sender_id", "receiver_id", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    sender_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True
    )
    receiver_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True
    )
    text: Mapped[str] = mapped_column(UnicodeText, nullable=False)

    # foto del post compartido al momento de enviar
    # {post_id, image, caption, username}; sobrevive aunque borren el post
    shared_post: Mapped[dict | None] = mapped_column(
        JSON().with_variant(JSONB, "postgresql"), nullable=True
    )

    read: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )
