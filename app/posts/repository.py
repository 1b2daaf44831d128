# app/posts/repository.py
from sqlalchemy import select, desc, func, delete
from sqlalchemy.ext.asyncio import AsyncSession
from app.posts.models import Post, PostLike, SavedPost
from app.comments.models import Comment


# -------------------------
# POSTS
# -------------------------
async def create_post(
    db: AsyncSession,
    user_id: int,
    image: str,
    caption: str | None,
) -> Post:
    post = Post(user_id=user_id, image=image, caption=caption or "")
    db.add(post)
    await db.flush()
    await db.refresh(post)
    return post


async def list_posts(
    db: AsyncSession,
    limit: int = 50,
    offset: int = 0,
    author_ids: list[int] | None = None,
):
    """
    Posts más recientes primero. Si llega author_ids, solo de esos autores
    (feed "following").
    """
    q = select(Post)
    if author_ids is not None:
        q = q.where(Post.user_id.in_(author_ids))
    q = q.order_by(desc(Post.created_at), desc(Post.id)).limit(limit).offset(offset)
    res = await db.execute(q)
    return list(res.scalars())


async def list_posts_by_user(
    db: AsyncSession,
    user_id: int,
    limit: int = 50,
    offset: int = 0,
):
    q = (
        select(Post)
        .where(Post.user_id == user_id)
        .order_by(desc(Post.created_at), desc(Post.id))
        .limit(limit)
        .offset(offset)
    )
    res = await db.execute(q)
    return list(res.scalars())


async def count_posts_by_user(db: AsyncSession, user_id: int) -> int:
    res = await db.execute(
        select(func.count()).select_from(Post).where(Post.user_id == user_id)
    )
    return int(res.scalar_one() or 0)


async def get_post(db: AsyncSession, post_id: int) -> Post | None:
    res = await db.execute(select(Post).where(Post.id == post_id))
    return res.scalar_one_or_none()


async def increment_shares(db: AsyncSession, post: Post) -> int:
    # sin idempotencia: cada share suma
    post.shares_count = (post.shares_count or 0) + 1
    await db.flush()
    return post.shares_count


async def delete_post_cascade(db: AsyncSession, post_id: int) -> None:
    """
    Borra el post junto con sus likes, guardados y comentarios.
    No hace commit.
    """
    await db.execute(delete(PostLike).where(PostLike.post_id == post_id))
    await db.execute(delete(SavedPost).where(SavedPost.post_id == post_id))
    await db.execute(delete(Comment).where(Comment.post_id == post_id))
    await db.execute(delete(Post).where(Post.id == post_id))
    await db.flush()


# -------------------------
# ❤️ LIKES
# -------------------------
async def count_post_likes(db: AsyncSession, post_id: int) -> int:
    q = select(func.count()).select_from(PostLike).where(PostLike.post_id == post_id)
    res = await db.execute(q)
    return int(res.scalar_one() or 0)


async def list_like_user_ids(db: AsyncSession, post_id: int) -> list[int]:
    res = await db.execute(
        select(PostLike.user_id)
        .where(PostLike.post_id == post_id)
        .order_by(PostLike.created_at.asc(), PostLike.id.asc())
    )
    return [row[0] for row in res.all()]


async def toggle_post_like(
    db: AsyncSession,
    post_id: int,
    user_id: int,
) -> tuple[bool, int]:
    """
    Activa/desactiva el like de un usuario sobre un post.
    Devuelve (liked, total_likes)
    """
    q = select(PostLike).where(
        PostLike.post_id == post_id,
        PostLike.user_id == user_id,
    )
    res = await db.execute(q)
    existing = res.scalar_one_or_none()

    if existing:
        # quitar
        await db.execute(delete(PostLike).where(PostLike.id == existing.id))
        await db.flush()
        return False, await count_post_likes(db, post_id)

    # crear
    db.add(PostLike(post_id=post_id, user_id=user_id))
    await db.flush()
    return True, await count_post_likes(db, post_id)


# -------------------------
# 🔖 GUARDADOS
# -------------------------
async def is_saved(db: AsyncSession, post_id: int, user_id: int) -> bool:
    res = await db.execute(
        select(SavedPost.id).where(
            SavedPost.post_id == post_id,
            SavedPost.user_id == user_id,
        )
    )
    return res.scalar_one_or_none() is not None


async def saved_post_ids(db: AsyncSession, user_id: int) -> list[int]:
    res = await db.execute(
        select(SavedPost.post_id)
        .where(SavedPost.user_id == user_id)
        .order_by(desc(SavedPost.created_at), desc(SavedPost.id))
    )
    return [row[0] for row in res.all()]


async def toggle_saved_post(
    db: AsyncSession,
    post_id: int,
    user_id: int,
) -> tuple[bool, int]:
    """
    Guarda / quita de guardados. Devuelve (saved, total guardados del usuario)
    """
    res = await db.execute(
        select(SavedPost).where(
            SavedPost.post_id == post_id,
            SavedPost.user_id == user_id,
        )
    )
    existing = res.scalar_one_or_none()

    if existing:
        await db.execute(delete(SavedPost).where(SavedPost.id == existing.id))
        saved = False
    else:
        db.add(SavedPost(post_id=post_id, user_id=user_id))
        saved = True
    await db.flush()

    total = await db.execute(
        select(func.count()).select_from(SavedPost).where(SavedPost.user_id == user_id)
    )
    return saved, int(total.scalar_one() or 0)


async def list_saved_posts(db: AsyncSession, user_id: int):
    q = (
        select(Post)
        .join(SavedPost, SavedPost.post_id == Post.id)
        .where(SavedPost.user_id == user_id)
        .order_by(desc(SavedPost.created_at), desc(SavedPost.id))
    )
    res = await db.execute(q)
    return list(res.scalars())
