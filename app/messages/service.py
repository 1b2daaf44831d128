# app/messages/service.py
from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from app.messages import repository as repo
from app.messages.models import Message, MESSAGE_MAX
from app.messages.schemas import SharedPostIn
from app.users.service import hydrate_mini


def clean_message_text(text: str | None) -> str:
    """
    Recorta espacios y corta a MESSAGE_MAX.
    ValueError si no queda nada.
    """
    cleaned = (text or "").strip()
    if not cleaned:
        raise ValueError("message text is required")
    return cleaned[:MESSAGE_MAX]


def shared_post_snapshot(shared: SharedPostIn | None) -> dict | None:
    # copia desnormalizada: no depende de que el post siga existiendo
    if shared is None:
        return None
    return shared.model_dump()


async def message_out(
    db: AsyncSession,
    msg: Message,
    cache: dict[int, dict] | None = None,
) -> dict:
    cache = cache if cache is not None else {}

    async def mini(uid: int) -> dict | None:
        if uid not in cache:
            cache[uid] = await hydrate_mini(db, uid)
        return cache[uid]

    return {
        "id": msg.id,
        "sender": await mini(msg.sender_id),
        "receiver": await mini(msg.receiver_id),
        "text": msg.text,
        "shared_post": msg.shared_post,
        "read": msg.read,
        "created_at": msg.created_at,
    }


async def list_conversations(db: AsyncSession, user_id: int) -> list[dict]:
    """
    Una entrada por contraparte: último mensaje + no leídos (de ella hacia mí).
    Orden: último mensaje más reciente primero; sin mensajes, al final.
    """
    cache: dict[int, dict] = {}
    out: list[dict] = []

    for other_id in await repo.counterpart_ids(db, user_id):
        other = await hydrate_mini(db, other_id)
        if other is None:
            continue
        cache[other_id] = other
        last = await repo.last_message_between(db, user_id, other_id)
        out.append(
            {
                "user": other,
                "last_message": await message_out(db, last, cache) if last else None,
                "unread_count": await repo.count_unread_from(db, other_id, user_id),
                "_sort": (last.created_at, last.id) if last else None,
            }
        )

    with_msg = [c for c in out if c["_sort"] is not None]
    without = [c for c in out if c["_sort"] is None]
    with_msg.sort(key=lambda c: c["_sort"], reverse=True)

    result = with_msg + without
    for c in result:
        c.pop("_sort")
    return result


async def open_thread(db: AsyncSession, user_id: int, other_id: int) -> list[dict]:
    """
    Hilo completo en orden cronológico. Al abrirlo se marcan como leídos
    los mensajes que la contraparte me mandó (read-on-view).
    """
    await repo.mark_read(db, other_id, user_id)
    messages = await repo.list_thread(db, user_id, other_id)

    cache: dict[int, dict] = {}
    return [await message_out(db, m, cache) for m in messages]
