# app/comments/repository.py
from __future__ import annotations

from typing import List
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.comments.models import Comment
from app.users.models import User
from app.profile.models import Profile


async def create_comment(
    db: AsyncSession,
    *,
    user_id: int,
    post_id: int,
    text: str,
) -> Comment:
    c = Comment(user_id=user_id, post_id=post_id, text=text)
    db.add(c)
    await db.flush()
    await db.refresh(c)
    return c


async def list_post_comments(
    db: AsyncSession,
    post_id: int,
    limit: int | None = None,
    offset: int = 0,
) -> List[tuple]:
    """
    Comentarios del post en orden cronológico (id para desempatar).
    Devuelve filas (Comment, User, Profile | None).
    """
    q = (
        select(Comment, User, Profile)
        .join(User, User.id == Comment.user_id)
        .outerjoin(Profile, Profile.user_id == User.id)
        .where(Comment.post_id == post_id)
        .order_by(Comment.created_at.asc(), Comment.id.asc())
        .offset(offset)
    )
    if limit is not None:
        q = q.limit(limit)
    res = await db.execute(q)
    return res.all()


async def count_post_comments(db: AsyncSession, post_id: int) -> int:
    res = await db.execute(
        select(func.count(Comment.id)).where(Comment.post_id == post_id)
    )
    return int(res.scalar_one() or 0)
