# app/comments/router.py
from __future__ import annotations

from typing import List

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.deps import get_current_user
from app.db.session import get_session
from app.users.models import User
from app.posts.repository import get_post
from app.comments.schemas import CommentCreate, CommentOut
from app.comments import repository as repo
from app.comments.service import clean_comment_text, list_comments_out
from app.activity.service import log_activity

# los comentarios cuelgan de /api/posts/{id}/...
router = APIRouter(prefix="/api/posts", tags=["comments"])


@router.get("/{post_id}/comments", response_model=List[CommentOut])
async def comments_for_post(
    post_id: int,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    if not await get_post(db, post_id):
        raise HTTPException(status_code=404, detail="post not found")
    return await list_comments_out(db, post_id, limit=limit, offset=offset)


@router.post("/{post_id}/comment", response_model=List[CommentOut])
async def add_comment(
    post_id: int,
    payload: CommentCreate,
    background: BackgroundTasks,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """
    Agrega un comentario y devuelve la lista COMPLETA del post
    (orden cronológico), que es lo que pinta el modal del front.
    """
    try:
        text = clean_comment_text(payload.text)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    post = await get_post(db, post_id)
    if not post:
        raise HTTPException(status_code=404, detail="post not found")

    await repo.create_comment(db, user_id=user.id, post_id=post.id, text=text)
    await db.commit()

    log_activity(
        background,
        user.id,
        "comment",
        target_post_id=post.id,
        target_user_id=post.user_id,
    )
    return await list_comments_out(db, post.id)
