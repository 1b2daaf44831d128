# app/comments/service.py
from __future__ import annotations

from typing import Dict, List

from sqlalchemy.ext.asyncio import AsyncSession

from app.comments import repository as repo
from app.users.service import mini_from


def clean_comment_text(text: str | None) -> str:
    """Texto recortado; ValueError si queda vacío."""
    cleaned = (text or "").strip()
    if not cleaned:
        raise ValueError("comment text is required")
    return cleaned


async def list_comments_out(
    db: AsyncSession,
    post_id: int,
    *,
    limit: int | None = None,
    offset: int = 0,
) -> List[Dict]:
    rows = await repo.list_post_comments(db, post_id, limit=limit, offset=offset)
    return [
        {
            "id": c.id,
            "post_id": c.post_id,
            "text": c.text,
            "created_at": c.created_at,
            "author": mini_from(user, prof),
        }
        for c, user, prof in rows
    ]
