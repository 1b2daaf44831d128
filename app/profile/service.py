# app/profile/service.py
from __future__ import annotations
from sqlalchemy.ext.asyncio import AsyncSession
from app.profile.models import Profile
from app.profile.repository import get_by_user_id, create_profile

DEFAULT_BIOS = {
    "creator": "Content Creator ✨",
    "consumer": "SnapShare User 📱",
    "admin": "System Administrator",
}


def default_avatar(username: str) -> str:
    return f"https://ui-avatars.com/api/?name={username}&background=random&size=200"


async def ensure_profile(
    db: AsyncSession,
    user_id: int,
    *,
    avatar: str | None = None,
    bio: str | None = None,
) -> Profile:
    """
    Garantiza que el usuario tenga perfil y actualiza avatar/bio si llegan.
    No hace commit (lo hace el caller).
    """
    prof = await get_by_user_id(db, user_id)
    if prof:
        changed = False
        if avatar is not None and prof.avatar != avatar:
            prof.avatar = avatar
            changed = True
        if bio is not None and prof.bio != bio:
            prof.bio = bio
            changed = True
        if changed:
            await db.flush()
        return prof

    return await create_profile(db, user_id, avatar=avatar, bio=bio)
