# app/posts/service.py
import unicodedata

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.posts.models import Post
from app.posts.repository import list_like_user_ids, is_saved
from app.comments.repository import count_post_comments
from app.users.models import User, AUTHOR_ROLES
from app.profile.models import Profile


def normalize_caption(text: str | None) -> str:
    """
    Normaliza a NFC (acentos y emojis compuestos quedan como un solo
    grapheme) y recorta espacios. None → "".
    """
    if not text:
        return ""
    return unicodedata.normalize("NFC", text).strip()


def can_author(user: User) -> bool:
    return user.role in AUTHOR_ROLES


def can_delete(user: User, owner_id: int) -> bool:
    return user.id == owner_id or user.role == "admin"


async def hydrate_post_out(
    db: AsyncSession, post: Post, *, viewer_id: int | None = None
) -> dict:
    """
    Devuelve el dict que espera el front para un Post:
    - autor + avatar + rol
    - likes (ids) + likes_count + liked
    - saved, comments_count, shares
    """
    res = await db.execute(
        select(User, Profile)
        .outerjoin(Profile, Profile.user_id == User.id)
        .where(User.id == post.user_id)
    )
    user, prof = res.one()

    likes = await list_like_user_ids(db, post.id)

    return {
        "id": post.id,
        "image": post.image,
        "caption": post.caption or "",
        "created_at": post.created_at,
        "shares": post.shares_count or 0,
        "author": {
            "id": user.id,
            "username": user.username,
            "avatar": prof.avatar if prof else None,
            "role": user.role,
        },
        "likes": likes,
        "likes_count": len(likes),
        "liked": bool(viewer_id) and viewer_id in likes,
        "saved": await is_saved(db, post.id, viewer_id) if viewer_id else False,
        "comments_count": await count_post_comments(db, post.id),
    }
