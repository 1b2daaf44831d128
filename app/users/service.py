# app/users/service.py
from __future__ import annotations
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.security import hash_password
from app.users.models import User, ROLE_ADMIN
from app.users import repository as repo
from app.profile.models import Profile
from app.profile.service import ensure_profile, DEFAULT_BIOS, default_avatar
from app.posts.repository import count_posts_by_user, saved_post_ids
from app.messages.repository import count_unread_total

log = logging.getLogger("uvicorn")


def mini_from(user: User, prof: Profile | None) -> dict:
    """Lo mínimo que el front necesita para pintar a un usuario."""
    return {
        "id": user.id,
        "username": user.username,
        "avatar": prof.avatar if prof else None,
        "role": user.role,
    }


def card_from(user: User, prof: Profile | None) -> dict:
    data = mini_from(user, prof)
    data["bio"] = prof.bio if prof else None
    return data


async def hydrate_mini(db: AsyncSession, user_id: int) -> dict | None:
    res = await db.execute(
        select(User, Profile)
        .outerjoin(Profile, Profile.user_id == User.id)
        .where(User.id == user_id)
    )
    row = res.first()
    if not row:
        return None
    return mini_from(row[0], row[1])


async def public_profile(
    db: AsyncSession, user: User, *, viewer_id: int | None = None
) -> dict:
    """
    Perfil público: nunca incluye email ni hash.
    followers / following van como ids (una sola fuente: la tabla follows).
    """
    res = await db.execute(select(Profile).where(Profile.user_id == user.id))
    prof = res.scalar_one_or_none()

    followers = await repo.follower_ids(db, user.id)
    following = await repo.following_ids(db, user.id)

    data = card_from(user, prof)
    data.update(
        {
            "created_at": user.created_at,
            "followers": followers,
            "following": following,
            "followers_count": len(followers),
            "following_count": len(following),
            "posts_count": await count_posts_by_user(db, user.id),
            "is_following": bool(viewer_id) and viewer_id in followers,
        }
    )
    return data


async def me_projection(db: AsyncSession, user: User) -> dict:
    """Proyección del usuario logueado (incluye email, guardados y no leídos)."""
    data = await public_profile(db, user)
    data.pop("is_following", None)
    data["email"] = user.email
    data["saved_posts"] = await saved_post_ids(db, user.id)
    data["unread_messages"] = await count_unread_total(db, user.id)
    return data


async def toggle_follow(db: AsyncSession, actor: User, target_id: int) -> tuple[bool, int]:
    """
    Follow / unfollow. ValueError si es uno mismo, LookupError si el
    target no existe. El commit lo hace el router.
    """
    if target_id == actor.id:
        raise ValueError("cannot follow yourself")
    target = await repo.get_by_id(db, target_id)
    if not target:
        raise LookupError("user not found")
    return await repo.toggle_follow(db, actor.id, target.id)


async def ensure_admin(db: AsyncSession) -> tuple[User, bool]:
    """
    Crea la cuenta admin con los datos de settings si todavía no hay ninguna.
    Devuelve (admin, created). No hace commit.
    """
    existing = await repo.get_any_admin(db)
    if existing:
        return existing, False

    admin = await repo.create_user(
        db,
        settings.ADMIN_USERNAME,
        settings.ADMIN_EMAIL,
        hash_password(settings.ADMIN_PASSWORD),
        ROLE_ADMIN,
    )
    await ensure_profile(
        db,
        admin.id,
        avatar=default_avatar(admin.username),
        bio=DEFAULT_BIOS[ROLE_ADMIN],
    )
    log.info("👑 admin creado: %s", admin.email)
    return admin, True
