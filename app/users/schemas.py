# app/users/schemas.py
from pydantic import BaseModel, Field
from datetime import datetime


class UserMini(BaseModel):
    id: int
    username: str
    avatar: str | None = None
    role: str


class UserCard(UserMini):
    bio: str | None = None


class SuggestedUserOut(UserCard):
    followers_count: int = 0


class UserProfileOut(UserCard):
    created_at: datetime | None = None
    followers: list[int] = []
    following: list[int] = []
    followers_count: int = 0
    following_count: int = 0
    posts_count: int = 0
    is_following: bool = False


class FollowToggleOut(BaseModel):
    following: bool
    followers_count: int
    message: str


class ProfileUpdate(BaseModel):
    bio: str | None = Field(default=None, max_length=500)
    avatar: str | None = Field(default=None, max_length=1024)
