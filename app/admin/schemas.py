# app/admin/schemas.py
from pydantic import BaseModel
from datetime import datetime

from app.users.schemas import UserMini


class StatsOut(BaseModel):
    total_users: int
    total_creators: int
    total_consumers: int
    total_posts: int
    total_messages: int
    new_users_this_week: int
    new_posts_this_week: int
    total_likes: int
    total_comments: int


class AdminUserOut(BaseModel):
    id: int
    username: str
    email: str
    role: str
    avatar: str | None = None
    bio: str | None = None
    created_at: datetime
    post_count: int


class ActivityOut(BaseModel):
    id: int
    type: str
    user: UserMini | None = None
    target_user: UserMini | None = None
    target_post_id: int | None = None
    details: str | None = None
    created_at: datetime
