# app/posts/schemas.py
from pydantic import BaseModel, Field, field_validator
from datetime import datetime

from app.posts.models import CAPTION_MAX
from app.users.schemas import UserMini


class PostCreate(BaseModel):
    image: str = Field(..., min_length=1)
    caption: str | None = Field(default=None, max_length=CAPTION_MAX)

    @field_validator("image")
    @classmethod
    def image_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("image is required")
        return v.strip()


class PostOut(BaseModel):
    id: int
    image: str
    caption: str
    created_at: datetime
    shares: int
    author: UserMini

    likes: list[int]        # ids de usuarios, sin repetidos
    likes_count: int
    liked: bool
    saved: bool
    comments_count: int

    class Config:
        from_attributes = True


class LikeToggleOut(BaseModel):
    post_id: int
    liked: bool
    likes_count: int


class SaveToggleOut(BaseModel):
    post_id: int
    saved: bool
    saved_count: int


class ShareOut(BaseModel):
    post_id: int
    shares: int
