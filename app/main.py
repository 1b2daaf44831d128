# app/main.py
import asyncio
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.json import UTF8JSONResponse
from app.core.config import settings
from app.core.errors import install_error_handlers
from app.db.init_db import init_models
from app.db.expiry import expiry_loop

# routers
from app.auth.router import router as auth_router
from app.users.router import router as users_router
from app.posts.router import router as posts_router
from app.comments.router import router as comments_router
from app.stories.router import router as stories_router
from app.messages.router import router as messages_router
from app.admin.router import router as admin_router

log = logging.getLogger("uvicorn")

app = FastAPI(
    title="SnapShare API",
    default_response_class=UTF8JSONResponse,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allow_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

install_error_handlers(app)

_sweeper: asyncio.Task | None = None


@app.on_event("startup")
async def on_startup():
    global _sweeper
    log.info("🚀 Iniciando servicio…")
    await init_models()
    if settings.SWEEP_ENABLED:
        _sweeper = asyncio.create_task(expiry_loop())
    log.info("✅ Startup listo.")


@app.on_event("shutdown")
async def on_shutdown():
    if _sweeper:
        _sweeper.cancel()


@app.get("/api/health")
async def health():
    return {"ok": True, "service": "snapshare", "msg": "healthy ✨📸"}


# routers
app.include_router(auth_router)      # /api/auth/...
app.include_router(users_router)     # /api/users/...
app.include_router(posts_router)     # /api/posts/...
app.include_router(comments_router)  # /api/posts/{id}/comment(s)
app.include_router(stories_router)   # /api/stories/...
app.include_router(messages_router)  # /api/messages/...
app.include_router(admin_router)     # /api/admin/...
