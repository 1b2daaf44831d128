# app/stories/router.py
from __future__ import annotations

from datetime import timedelta

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.deps import get_current_user
from app.db.session import get_session
from app.users.models import User
from app.users.repository import get_by_id, following_ids
from app.users.service import mini_from
from app.profile.repository import get_by_user_id
from app.posts.service import can_author, can_delete, normalize_caption
from app.activity.service import log_activity
from app.stories import repository as repo
from app.stories.models import Story
from app.stories.schemas import StoryCreate, StoryOut, StoryGroupOut, StoryViewOut

router = APIRouter(prefix="/api/stories", tags=["stories"])


# ======================= HELPERS =======================

async def _stories_out(db: AsyncSession, rows, viewer_id: int) -> list[dict]:
    viewed = await repo.viewed_story_ids(db, viewer_id, [s.id for s, _, _ in rows])
    out: list[dict] = []
    for story, author, profile in rows:
        out.append(_story_dict(
            story,
            mini_from(author, profile),
            viewers_count=await repo.count_story_viewers(db, story.id),
            viewed=story.id in viewed,
        ))
    return out


def _story_dict(story: Story, author: dict, *, viewers_count: int, viewed: bool) -> dict:
    return {
        "id": story.id,
        "image": story.image,
        "caption": story.caption or "",
        "created_at": story.created_at,
        "expires_at": story.created_at + timedelta(hours=settings.STORY_TTL_HOURS),
        "author": author,
        "viewers_count": viewers_count,
        "viewed": viewed,
    }


# ======================= STORIES =======================


@router.get("", response_model=list[StoryGroupOut])
async def stories_feed(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """
    Historias vigentes mías + de quienes sigo, agrupadas por autor.
    El orden de los grupos sigue a la historia más reciente de cada uno.
    """
    authors = await following_ids(db, user.id) + [user.id]
    rows = await repo.list_live_stories(db, authors)
    stories = await _stories_out(db, rows, user.id)

    groups: dict[int, dict] = {}
    for s in stories:
        uid = s["author"]["id"]
        if uid not in groups:
            groups[uid] = {"user": s["author"], "stories": []}
        groups[uid]["stories"].append(s)
    return list(groups.values())


@router.get("/user/{user_id}", response_model=list[StoryOut])
async def stories_by_user(
    user_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    if not await get_by_id(db, user_id):
        raise HTTPException(status_code=404, detail="user not found")
    rows = await repo.list_live_stories(db, [user_id])
    return await _stories_out(db, rows, user.id)


@router.post("", response_model=StoryOut, status_code=status.HTTP_201_CREATED)
async def create_story(
    payload: StoryCreate,
    background: BackgroundTasks,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    if not can_author(user):
        raise HTTPException(status_code=403, detail="only creators can add stories")
    if not payload.image.strip():
        raise HTTPException(status_code=400, detail="image is required")

    story = await repo.create_story(
        db,
        user_id=user.id,
        image=payload.image.strip(),
        caption=normalize_caption(payload.caption),
    )
    await db.commit()

    log_activity(background, user.id, "post", details="Added a story")

    author = mini_from(user, await get_by_user_id(db, user.id))
    return _story_dict(story, author, viewers_count=0, viewed=False)


@router.post("/{story_id}/view", response_model=StoryViewOut)
async def view_story(
    story_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    story = await repo.get_live_story(db, story_id)
    if not story:
        raise HTTPException(status_code=404, detail="story not found")

    total = await repo.track_story_view(db, story.id, user.id)
    await db.commit()
    return {"id": story.id, "viewers_count": total}


@router.delete("/{story_id}")
async def delete_story(
    story_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    story = await repo.get_live_story(db, story_id)
    if not story:
        raise HTTPException(status_code=404, detail="story not found")
    if not can_delete(user, story.user_id):
        raise HTTPException(status_code=403, detail="not your story")

    await repo.delete_story(db, story.id)
    await db.commit()
    return {"message": "story deleted"}
