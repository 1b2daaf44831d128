# app/messages/router.py
from typing import List

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.deps import get_current_user
from app.db.session import get_session
from app.users.models import User
from app.users.repository import get_by_id
from app.activity.service import log_activity
from app.messages import repository as repo
from app.messages import service as svc
from app.messages.schemas import (
    MessageCreate,
    MessageOut,
    ConversationOut,
    UnreadCountOut,
    MarkReadOut,
)

router = APIRouter(prefix="/api/messages", tags=["messages"])


@router.get("/conversations", response_model=List[ConversationOut])
async def conversations(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    return await svc.list_conversations(db, user.id)


@router.get("/unread-count", response_model=UnreadCountOut)
async def unread_count(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    # el front lo consulta cada X segundos para el badge
    return {"count": await repo.count_unread_total(db, user.id)}


@router.put("/read/{user_id}", response_model=MarkReadOut)
async def mark_as_read(
    user_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    await repo.mark_read(db, user_id, user.id)
    await db.commit()
    return {
        "message": "messages marked as read",
        "unread_count": await repo.count_unread_from(db, user_id, user.id),
        "total_unread": await repo.count_unread_total(db, user.id),
    }


@router.get("/{user_id}", response_model=List[MessageOut])
async def thread(
    user_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    if not await get_by_id(db, user_id):
        raise HTTPException(status_code=404, detail="user not found")

    messages = await svc.open_thread(db, user.id, user_id)
    await db.commit()
    return messages


@router.post("/{user_id}", response_model=MessageOut, status_code=status.HTTP_201_CREATED)
async def send_message(
    user_id: int,
    payload: MessageCreate,
    background: BackgroundTasks,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    try:
        text = svc.clean_message_text(payload.text)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if user_id == user.id:
        raise HTTPException(status_code=400, detail="cannot message yourself")

    receiver = await get_by_id(db, user_id)
    if not receiver:
        raise HTTPException(status_code=404, detail="user not found")

    msg = await repo.create_message(
        db,
        sender_id=user.id,
        receiver_id=receiver.id,
        text=text,
        shared_post=svc.shared_post_snapshot(payload.shared_post),
    )
    await db.commit()

    log_activity(background, user.id, "message", target_user_id=receiver.id)
    return await svc.message_out(db, msg)
