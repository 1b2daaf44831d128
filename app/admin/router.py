# app/admin/router.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.deps import require_admin
from app.db.session import get_session
from app.users.models import User, ROLE_ADMIN
from app.users.repository import get_by_id
from app.users.service import mini_from
from app.profile.models import Profile
from app.posts.repository import get_post, list_posts, delete_post_cascade
from app.posts.schemas import PostOut
from app.posts.service import hydrate_post_out
from app.activity.repository import list_recent
from app.admin import service as svc
from app.admin.schemas import StatsOut, AdminUserOut, ActivityOut

# todo el router exige token de admin
router = APIRouter(
    prefix="/api/admin",
    tags=["admin"],
    dependencies=[Depends(require_admin)],
)


def _mini(user: User | None, prof: Profile | None) -> dict | None:
    if user is None:
        return None
    return mini_from(user, prof)


@router.get("/stats", response_model=StatsOut)
async def stats(db: AsyncSession = Depends(get_session)):
    return await svc.dashboard_stats(db)


@router.get("/users", response_model=List[AdminUserOut])
async def users(db: AsyncSession = Depends(get_session)):
    return await svc.list_users_with_stats(db, limit=settings.ADMIN_LIST_LIMIT)


@router.get("/posts", response_model=List[PostOut])
async def posts(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_session),
):
    rows = await list_posts(db, limit=settings.ADMIN_LIST_LIMIT)
    return [await hydrate_post_out(db, p, viewer_id=admin.id) for p in rows]


@router.get("/activities", response_model=List[ActivityOut])
async def activities(db: AsyncSession = Depends(get_session)):
    rows = await list_recent(db, limit=settings.ADMIN_LIST_LIMIT)
    return [
        {
            "id": act.id,
            "type": act.type,
            "user": _mini(actor, actor_prof),
            "target_user": _mini(target, target_prof),
            "target_post_id": act.target_post_id,
            "details": act.details,
            "created_at": act.created_at,
        }
        for act, actor, actor_prof, target, target_prof in rows
    ]


@router.delete("/users/{user_id}")
async def delete_user(user_id: int, db: AsyncSession = Depends(get_session)):
    user = await get_by_id(db, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="user not found")
    if user.role == ROLE_ADMIN:
        raise HTTPException(status_code=403, detail="cannot delete admin user")

    try:
        await svc.delete_user_cascade(db, user)
        await db.commit()
    except Exception:
        await db.rollback()
        raise
    return {"message": "user deleted"}


@router.delete("/posts/{post_id}")
async def delete_post(post_id: int, db: AsyncSession = Depends(get_session)):
    # override de admin: sin chequeo de dueño
    if not await get_post(db, post_id):
        raise HTTPException(status_code=404, detail="post not found")
    await delete_post_cascade(db, post_id)
    await db.commit()
    return {"message": "post deleted"}
