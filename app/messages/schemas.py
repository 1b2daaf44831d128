# app/messages/schemas.py
from pydantic import BaseModel, Field
from datetime import datetime

from app.users.schemas import UserMini


class SharedPostIn(BaseModel):
    post_id: int
    image: str | None = None
    caption: str | None = None
    username: str | None = None


class MessageCreate(BaseModel):
    # el recorte a MESSAGE_MAX lo hace el service, no se rechaza
    text: str = Field(...)
    shared_post: SharedPostIn | None = None


class MessageOut(BaseModel):
    id: int
    sender: UserMini
    receiver: UserMini
    text: str
    shared_post: SharedPostIn | None = None
    read: bool
    created_at: datetime


class ConversationOut(BaseModel):
    user: UserMini
    last_message: MessageOut | None = None
    unread_count: int


class UnreadCountOut(BaseModel):
    count: int


class MarkReadOut(BaseModel):
    message: str
    unread_count: int
    total_unread: int
