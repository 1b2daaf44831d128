# app/activity/service.py
from __future__ import annotations

import logging

from fastapi import BackgroundTasks

from app.activity.models import Activity, ACTIVITY_TYPES
from app.db.session import AsyncSessionLocal

log = logging.getLogger("uvicorn")


async def record_activity(
    user_id: int,
    type: str,
    *,
    target_user_id: int | None = None,
    target_post_id: int | None = None,
    details: str | None = None,
) -> None:
    """
    Escribe una entrada del log de auditoría en su PROPIA sesión.
    Best-effort: si falla se loguea y listo, nunca sube la excepción.
    """
    if type not in ACTIVITY_TYPES:
        log.warning("activity type desconocido: %s", type)
        return
    try:
        async with AsyncSessionLocal() as db:
            db.add(
                Activity(
                    user_id=user_id,
                    type=type,
                    target_user_id=target_user_id,
                    target_post_id=target_post_id,
                    details=details,
                )
            )
            await db.commit()
    except Exception as e:
        log.warning("activity log error (%s, user=%s): %r", type, user_id, e)


def log_activity(
    background: BackgroundTasks,
    user_id: int,
    type: str,
    **kwargs,
) -> None:
    """
    Encola el registro para después de enviar la respuesta.
    Así el resultado de la operación principal no depende del log.
    """
    background.add_task(record_activity, user_id, type, **kwargs)
