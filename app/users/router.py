# app/users/router.py
from typing import List

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.deps import get_current_user
from app.db.session import get_session
from app.users.models import User, USERNAME_MAX
from app.users import repository as repo
from app.users import service as svc
from app.users.schemas import (
    UserCard,
    UserProfileOut,
    SuggestedUserOut,
    FollowToggleOut,
    ProfileUpdate,
)
from app.profile.service import ensure_profile
from app.activity.service import log_activity

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("/search", response_model=List[UserCard])
async def search_users(
    q: str = Query(""),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    # menos de 2 caracteres → ni vamos a la BD; más de 50 no puede ser un username
    q = q.strip()
    if len(q) < 2 or len(q) > USERNAME_MAX:
        return []
    rows = await repo.search_by_username(
        db, q, exclude_id=user.id, limit=settings.SEARCH_LIMIT
    )
    return [svc.card_from(u, prof) for u, prof in rows]


@router.get("/suggested", response_model=List[SuggestedUserOut])
async def suggested_users(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    rows = await repo.suggested_creators(db, user.id, limit=settings.SUGGESTED_LIMIT)
    out = []
    for u, prof, followers in rows:
        data = svc.card_from(u, prof)
        data["followers_count"] = int(followers or 0)
        out.append(data)
    return out


@router.put("/profile", response_model=UserProfileOut)
async def update_profile(
    payload: ProfileUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    await ensure_profile(db, user.id, avatar=payload.avatar, bio=payload.bio)
    await db.commit()
    return await svc.public_profile(db, user, viewer_id=user.id)


@router.get("/{user_id}", response_model=UserProfileOut)
async def user_profile(
    user_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    target = await repo.get_by_id(db, user_id)
    if not target:
        raise HTTPException(status_code=404, detail="user not found")
    return await svc.public_profile(db, target, viewer_id=user.id)


@router.get("/{user_id}/followers", response_model=List[UserCard])
async def followers(
    user_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    if not await repo.get_by_id(db, user_id):
        raise HTTPException(status_code=404, detail="user not found")
    rows = await repo.list_followers(db, user_id)
    return [svc.card_from(u, prof) for u, prof in rows]


@router.get("/{user_id}/following", response_model=List[UserCard])
async def following(
    user_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    if not await repo.get_by_id(db, user_id):
        raise HTTPException(status_code=404, detail="user not found")
    rows = await repo.list_following(db, user_id)
    return [svc.card_from(u, prof) for u, prof in rows]


@router.post("/{user_id}/follow", response_model=FollowToggleOut)
async def toggle_follow(
    user_id: int,
    background: BackgroundTasks,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    uid = user.id
    try:
        now_following, count = await svc.toggle_follow(db, user, user_id)
        await db.commit()
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except IntegrityError:
        # carrera con otro follow del mismo par: respondemos con el estado actual
        await db.rollback()
        now_following = await repo.is_following(db, uid, user_id)
        return _follow_out(now_following, await repo.count_followers(db, user_id))

    log_activity(
        background,
        uid,
        "follow" if now_following else "unfollow",
        target_user_id=user_id,
    )
    return _follow_out(now_following, count)


def _follow_out(following: bool, followers_count: int) -> dict:
    return {
        "following": following,
        "followers_count": followers_count,
        "message": "following" if following else "unfollowed",
    }
