# app/db/expiry.py
"""
Barrido periódico de registros con TTL:

- historias con más de STORY_TTL_HOURS (y sus vistas)
- actividades con más de ACTIVITY_TTL_DAYS

Las lecturas de historias ya filtran por fecha, así que el barrido solo
libera espacio; si se atrasa, nadie ve una historia vencida.
"""
from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta

from sqlalchemy import delete, select

from app.core.config import settings
from app.db.base import utcnow
from app.db.session import AsyncSessionLocal
from app.stories.models import Story, StoryView
from app.stories.repository import story_cutoff
from app.activity.models import Activity

log = logging.getLogger("uvicorn")


async def purge_expired(now: datetime | None = None) -> dict[str, int]:
    now = now or utcnow()
    activity_cutoff = now - timedelta(days=settings.ACTIVITY_TTL_DAYS)

    async with AsyncSessionLocal() as db:
        expired = select(Story.id).where(Story.created_at <= story_cutoff(now))
        await db.execute(delete(StoryView).where(StoryView.story_id.in_(expired)))
        stories = await db.execute(
            delete(Story).where(Story.created_at <= story_cutoff(now))
        )
        activities = await db.execute(
            delete(Activity).where(Activity.created_at <= activity_cutoff)
        )
        await db.commit()

    return {
        "stories": int(stories.rowcount or 0),
        "activities": int(activities.rowcount or 0),
    }


async def expiry_loop(interval: int | None = None) -> None:
    interval = interval or settings.SWEEP_INTERVAL_SECONDS
    log.info("🧹 sweeper activo (cada %ss)", interval)
    while True:
        try:
            purged = await purge_expired()
            if purged["stories"] or purged["activities"]:
                log.info("🧹 expirados: %s", purged)
        except Exception:
            log.warning("sweeper: tick falló", exc_info=True)
        await asyncio.sleep(interval)
