# app/comments/schemas.py
from pydantic import BaseModel, Field
from datetime import datetime

from app.comments.models import COMMENT_MAX
from app.users.schemas import UserMini


class CommentCreate(BaseModel):
    text: str = Field(..., max_length=COMMENT_MAX)


class CommentOut(BaseModel):
    id: int
    post_id: int
    text: str
    created_at: datetime
    author: UserMini

    class Config:
        from_attributes = True
