# app/stories/repository.py
from datetime import datetime, timedelta

from sqlalchemy import select, desc, func, delete
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.db.base import utcnow
from app.stories.models import Story, StoryView
from app.users.models import User
from app.profile.models import Profile


def story_cutoff(now: datetime | None = None) -> datetime:
    """Todo lo creado antes de esto ya expiró."""
    return (now or utcnow()) - timedelta(hours=settings.STORY_TTL_HOURS)


async def create_story(
    db: AsyncSession,
    user_id: int,
    image: str,
    caption: str | None,
) -> Story:
    story = Story(user_id=user_id, image=image, caption=caption or "")
    db.add(story)
    await db.flush()
    await db.refresh(story)
    return story


async def get_live_story(db: AsyncSession, story_id: int) -> Story | None:
    """Historia por id, solo si no expiró."""
    q = select(Story).where(Story.id == story_id, Story.created_at > story_cutoff())
    res = await db.execute(q)
    return res.scalar_one_or_none()


async def list_live_stories(
    db: AsyncSession,
    author_ids: list[int],
):
    """
    Historias vigentes de esos autores, más recientes primero.
    Devuelve filas (Story, User, Profile | None).
    """
    if not author_ids:
        return []
    q = (
        select(Story, User, Profile)
        .join(User, User.id == Story.user_id)
        .outerjoin(Profile, Profile.user_id == User.id)
        .where(
            Story.user_id.in_(author_ids),
            Story.created_at > story_cutoff(),
        )
        .order_by(desc(Story.created_at), desc(Story.id))
    )
    res = await db.execute(q)
    return res.all()


# ------------------ VIEWERS: quién vio una historia ------------------


async def track_story_view(
    db: AsyncSession,
    story_id: int,
    user_id: int,
) -> int:
    """
    Registra que el usuario vio la historia (idempotente).
    Devuelve el total de viewers únicos.
    """
    q = select(StoryView).where(
        StoryView.story_id == story_id,
        StoryView.user_id == user_id,
    )
    res = await db.execute(q)
    if res.scalar_one_or_none() is None:
        db.add(StoryView(story_id=story_id, user_id=user_id))
        await db.flush()

    return await count_story_viewers(db, story_id)


async def count_story_viewers(db: AsyncSession, story_id: int) -> int:
    q = select(func.count(StoryView.id)).where(StoryView.story_id == story_id)
    res = await db.execute(q)
    return int(res.scalar() or 0)


async def viewed_story_ids(
    db: AsyncSession, user_id: int, story_ids: list[int]
) -> set[int]:
    if not story_ids:
        return set()
    res = await db.execute(
        select(StoryView.story_id).where(
            StoryView.user_id == user_id,
            StoryView.story_id.in_(story_ids),
        )
    )
    return {row[0] for row in res.all()}


async def delete_story(db: AsyncSession, story_id: int) -> None:
    await db.execute(delete(StoryView).where(StoryView.story_id == story_id))
    await db.execute(delete(Story).where(Story.id == story_id))
    await db.flush()
