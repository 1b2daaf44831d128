# app/admin/service.py
from __future__ import annotations

import logging
from datetime import timedelta

from sqlalchemy import select, func, desc, delete, update, or_
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.base import utcnow
from app.users.models import User, Follow, ROLE_ADMIN, ROLE_CREATOR, ROLE_CONSUMER
from app.profile.models import Profile
from app.posts.models import Post, PostLike, SavedPost
from app.posts.repository import delete_post_cascade
from app.comments.models import Comment
from app.stories.models import Story, StoryView
from app.messages.models import Message
from app.messages.repository import delete_for_user
from app.activity.models import Activity

log = logging.getLogger("uvicorn")


async def _count(db: AsyncSession, q) -> int:
    res = await db.execute(q)
    return int(res.scalar_one() or 0)


async def dashboard_stats(db: AsyncSession) -> dict:
    """
    Números del dashboard. Likes y comentarios se cuentan con agregados
    en SQL, no con contadores mantenidos a mano.
    """
    week_ago = utcnow() - timedelta(days=7)
    not_admin = User.role != ROLE_ADMIN

    return {
        "total_users": await _count(db, select(func.count(User.id)).where(not_admin)),
        "total_creators": await _count(
            db, select(func.count(User.id)).where(User.role == ROLE_CREATOR)
        ),
        "total_consumers": await _count(
            db, select(func.count(User.id)).where(User.role == ROLE_CONSUMER)
        ),
        "total_posts": await _count(db, select(func.count(Post.id))),
        "total_messages": await _count(db, select(func.count(Message.id))),
        "new_users_this_week": await _count(
            db,
            select(func.count(User.id)).where(not_admin, User.created_at >= week_ago),
        ),
        "new_posts_this_week": await _count(
            db, select(func.count(Post.id)).where(Post.created_at >= week_ago)
        ),
        "total_likes": await _count(db, select(func.count(PostLike.id))),
        "total_comments": await _count(db, select(func.count(Comment.id))),
    }


async def list_users_with_stats(db: AsyncSession, limit: int = 100) -> list[dict]:
    """Usuarios no-admin, más nuevos primero, con su cantidad de posts."""
    posts_sq = (
        select(Post.user_id.label("user_id"), func.count(Post.id).label("post_count"))
        .group_by(Post.user_id)
        .subquery()
    )
    post_count = func.coalesce(posts_sq.c.post_count, 0)
    q = (
        select(User, Profile, post_count.label("post_count"))
        .outerjoin(posts_sq, posts_sq.c.user_id == User.id)
        .outerjoin(Profile, Profile.user_id == User.id)
        .where(User.role != ROLE_ADMIN)
        .order_by(desc(User.created_at), desc(User.id))
        .limit(limit)
    )
    res = await db.execute(q)

    out: list[dict] = []
    for user, prof, count in res.all():
        out.append(
            {
                "id": user.id,
                "username": user.username,
                "email": user.email,
                "role": user.role,
                "avatar": prof.avatar if prof else None,
                "bio": prof.bio if prof else None,
                "created_at": user.created_at,
                "post_count": int(count or 0),
            }
        )
    return out


async def delete_user_cascade(db: AsyncSession, user: User) -> None:
    """
    Borra al usuario y todo lo que cuelga de él, en la MISMA transacción
    (el commit lo hace el router; si algo falla, rollback y no queda nada a medias):

    - sus posts (con likes, guardados y comentarios de esos posts)
    - todos los mensajes donde es emisor o receptor
    - todas las aristas follow en ambas direcciones
    - sus likes/guardados/comentarios en posts ajenos, sus historias y vistas
    - su perfil y su log de actividad; las actividades de otros que lo
      apuntaban quedan con target_user_id = NULL
    """
    uid = user.id

    res = await db.execute(select(Post.id).where(Post.user_id == uid))
    for (post_id,) in res.all():
        await delete_post_cascade(db, post_id)

    await delete_for_user(db, uid)

    await db.execute(
        delete(Follow).where(or_(Follow.follower_id == uid, Follow.following_id == uid))
    )

    await db.execute(delete(PostLike).where(PostLike.user_id == uid))
    await db.execute(delete(SavedPost).where(SavedPost.user_id == uid))
    await db.execute(delete(Comment).where(Comment.user_id == uid))

    story_ids = select(Story.id).where(Story.user_id == uid)
    await db.execute(delete(StoryView).where(StoryView.story_id.in_(story_ids)))
    await db.execute(delete(StoryView).where(StoryView.user_id == uid))
    await db.execute(delete(Story).where(Story.user_id == uid))

    await db.execute(
        update(Activity).where(Activity.target_user_id == uid).values(target_user_id=None)
    )
    await db.execute(delete(Activity).where(Activity.user_id == uid))
    await db.execute(delete(Profile).where(Profile.user_id == uid))

    await db.delete(user)
    await db.flush()
    log.info("🗑️ usuario %s eliminado con cascada", uid)
