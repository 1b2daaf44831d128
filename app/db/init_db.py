# app/db/init_db.py
import logging
from app.db.session import engine
from app.db.base import Base

# 👇 importa todos los modelos que deben existir en la DB
from app.users.models import User, Follow  # noqa: F401
from app.profile.models import Profile  # noqa: F401
from app.posts.models import Post, PostLike, SavedPost  # noqa: F401
from app.comments.models import Comment  # noqa: F401
from app.stories.models import Story, StoryView  # noqa: F401
from app.messages.models import Message  # noqa: F401
from app.activity.models import Activity  # noqa: F401

log = logging.getLogger("uvicorn")


async def init_models():
    """
    Crea/verifica todas las tablas declaradas en Base.metadata
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    log.info("✅ DB init: tablas creadas/verificadas.")


async def drop_models():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
