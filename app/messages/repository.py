# app/messages/repository.py
from sqlalchemy import select, desc, func, or_, and_, update, delete
from sqlalchemy.ext.asyncio import AsyncSession

from app.messages.models import Message


def _pair(a: int, b: int):
    return or_(
        and_(Message.sender_id == a, Message.receiver_id == b),
        and_(Message.sender_id == b, Message.receiver_id == a),
    )


async def create_message(
    db: AsyncSession,
    *,
    sender_id: int,
    receiver_id: int,
    text: str,
    shared_post: dict | None = None,
) -> Message:
    msg = Message(
        sender_id=sender_id,
        receiver_id=receiver_id,
        text=text,
        shared_post=shared_post,
    )
    db.add(msg)
    await db.flush()
    await db.refresh(msg)
    return msg


async def counterpart_ids(db: AsyncSession, user_id: int) -> set[int]:
    """Con quién ha hablado el usuario (como emisor o receptor)."""
    sent = await db.execute(
        select(Message.receiver_id).where(Message.sender_id == user_id).distinct()
    )
    received = await db.execute(
        select(Message.sender_id).where(Message.receiver_id == user_id).distinct()
    )
    return {row[0] for row in sent.all()} | {row[0] for row in received.all()}


async def last_message_between(db: AsyncSession, a: int, b: int) -> Message | None:
    res = await db.execute(
        select(Message)
        .where(_pair(a, b))
        .order_by(desc(Message.created_at), desc(Message.id))
        .limit(1)
    )
    return res.scalar_one_or_none()


async def list_thread(db: AsyncSession, a: int, b: int) -> list[Message]:
    res = await db.execute(
        select(Message)
        .where(_pair(a, b))
        .order_by(Message.created_at.asc(), Message.id.asc())
    )
    return list(res.scalars())


async def count_unread_from(db: AsyncSession, sender_id: int, receiver_id: int) -> int:
    res = await db.execute(
        select(func.count(Message.id)).where(
            Message.sender_id == sender_id,
            Message.receiver_id == receiver_id,
            Message.read.is_(False),
        )
    )
    return int(res.scalar_one() or 0)


async def count_unread_total(db: AsyncSession, receiver_id: int) -> int:
    res = await db.execute(
        select(func.count(Message.id)).where(
            Message.receiver_id == receiver_id,
            Message.read.is_(False),
        )
    )
    return int(res.scalar_one() or 0)


async def mark_read(db: AsyncSession, sender_id: int, receiver_id: int) -> int:
    """Marca como leídos los mensajes sender → receiver. Devuelve cuántos cambió."""
    res = await db.execute(
        update(Message)
        .where(
            Message.sender_id == sender_id,
            Message.receiver_id == receiver_id,
            Message.read.is_(False),
        )
        .values(read=True)
    )
    await db.flush()
    return int(res.rowcount or 0)


async def delete_for_user(db: AsyncSession, user_id: int) -> None:
    await db.execute(
        delete(Message).where(
            or_(Message.sender_id == user_id, Message.receiver_id == user_id)
        )
    )
