# app/stories/schemas.py
from pydantic import BaseModel, Field
from datetime import datetime

from app.stories.models import STORY_CAPTION_MAX
from app.users.schemas import UserMini


class StoryCreate(BaseModel):
    image: str = Field(..., min_length=1)
    caption: str | None = Field(default=None, max_length=STORY_CAPTION_MAX)


class StoryOut(BaseModel):
    id: int
    image: str
    caption: str
    created_at: datetime
    expires_at: datetime
    author: UserMini
    viewers_count: int = 0
    viewed: bool = False


class StoryGroupOut(BaseModel):
    """Historias agrupadas por autor (la fila de círculos del front)."""
    user: UserMini
    stories: list[StoryOut]


class StoryViewOut(BaseModel):
    id: int
    viewers_count: int
