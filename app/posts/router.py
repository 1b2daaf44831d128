# app/posts/router.py
from typing import List, Literal

from fastapi import (
    APIRouter,
    BackgroundTasks,
    Depends,
    HTTPException,
    Query,
    status,
)
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.deps import get_current_user
from app.core.json import UTF8JSONResponse
from app.db.session import get_session
from app.users.models import User
from app.users.repository import get_by_id, following_ids
from app.activity.service import log_activity

from app.posts.repository import (
    create_post,
    list_posts,
    list_posts_by_user,
    list_saved_posts,
    get_post,
    delete_post_cascade,
    toggle_post_like,
    toggle_saved_post,
    increment_shares,
    list_like_user_ids,
    is_saved,
    saved_post_ids,
)
from app.posts.schemas import (
    PostCreate,
    PostOut,
    LikeToggleOut,
    SaveToggleOut,
    ShareOut,
)
from app.posts.service import (
    hydrate_post_out,
    normalize_caption,
    can_author,
    can_delete,
)

router = APIRouter(
    prefix="/api/posts",
    tags=["posts"],
    default_response_class=UTF8JSONResponse,
)


async def _get_post_or_404(db: AsyncSession, post_id: int):
    post = await get_post(db, post_id)
    if not post:
        raise HTTPException(status_code=404, detail="post not found")
    return post


@router.get("", response_model=List[PostOut])
async def feed_list(
    type: Literal["all", "following"] = Query("all"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """
    Feed: "all" → lo más reciente de todos; "following" → solo de quienes
    sigo + lo mío. Tope FEED_LIMIT, más recientes primero.
    """
    authors = None
    if type == "following":
        authors = await following_ids(db, user.id) + [user.id]

    posts = await list_posts(db, limit=settings.FEED_LIMIT, author_ids=authors)
    return [await hydrate_post_out(db, p, viewer_id=user.id) for p in posts]


@router.post("", response_model=PostOut, status_code=status.HTTP_201_CREATED)
async def publish(
    payload: PostCreate,
    background: BackgroundTasks,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    if not can_author(user):
        raise HTTPException(status_code=403, detail="only creators can create posts")

    post = await create_post(
        db,
        user_id=user.id,
        image=payload.image,
        caption=normalize_caption(payload.caption),
    )
    await db.commit()

    log_activity(background, user.id, "post", target_post_id=post.id)
    return await hydrate_post_out(db, post, viewer_id=user.id)


@router.get("/saved", response_model=List[PostOut])
async def saved_posts(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    posts = await list_saved_posts(db, user.id)
    return [await hydrate_post_out(db, p, viewer_id=user.id) for p in posts]


@router.get("/user/{user_id}", response_model=List[PostOut])
async def user_posts(
    user_id: int,
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    if not await get_by_id(db, user_id):
        raise HTTPException(status_code=404, detail="user not found")
    posts = await list_posts_by_user(db, user_id, limit=limit, offset=offset)
    return [await hydrate_post_out(db, p, viewer_id=user.id) for p in posts]


@router.delete("/{post_id}")
async def delete_post_endpoint(
    post_id: int,
    background: BackgroundTasks,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """
    Borra una publicación (hard delete).
    Solo el autor o un admin.
    """
    post = await _get_post_or_404(db, post_id)
    if not can_delete(user, post.user_id):
        raise HTTPException(status_code=403, detail="not your post")

    await delete_post_cascade(db, post.id)
    await db.commit()

    log_activity(background, user.id, "delete_post", target_post_id=post_id)
    return {"message": "post deleted"}


@router.post("/{post_id}/like", response_model=LikeToggleOut)
async def toggle_like(
    post_id: int,
    background: BackgroundTasks,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    post = await _get_post_or_404(db, post_id)
    # el rollback expira los objetos de la sesión: guardamos los ids antes
    uid, owner_id = user.id, post.user_id

    try:
        liked, count = await toggle_post_like(db, post_id, uid)
        await db.commit()
    except IntegrityError:
        # otra request con el mismo par ganó la carrera: devolvemos lo que quedó
        await db.rollback()
        likes = await list_like_user_ids(db, post_id)
        return {"post_id": post_id, "liked": uid in likes, "likes_count": len(likes)}

    # solo el like queda en el log, el unlike no
    if liked:
        log_activity(
            background,
            uid,
            "like",
            target_post_id=post_id,
            target_user_id=owner_id,
        )
    return {"post_id": post_id, "liked": liked, "likes_count": count}


@router.post("/{post_id}/share", response_model=ShareOut)
async def share(
    post_id: int,
    background: BackgroundTasks,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    post = await _get_post_or_404(db, post_id)

    shares = await increment_shares(db, post)
    await db.commit()

    log_activity(
        background,
        user.id,
        "share",
        target_post_id=post.id,
        target_user_id=post.user_id,
    )
    return {"post_id": post.id, "shares": shares}


@router.post("/{post_id}/save", response_model=SaveToggleOut)
async def toggle_save(
    post_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    await _get_post_or_404(db, post_id)
    uid = user.id

    try:
        saved, count = await toggle_saved_post(db, post_id, uid)
        await db.commit()
    except IntegrityError:
        await db.rollback()
        saved = await is_saved(db, post_id, uid)
        count = len(await saved_post_ids(db, uid))
    return {"post_id": post_id, "saved": saved, "saved_count": count}
