# app/users/repository.py
from sqlalchemy import select, func, desc, delete
from sqlalchemy.ext.asyncio import AsyncSession
from app.users.models import User, Follow, ROLE_ADMIN, ROLE_CREATOR
from app.profile.models import Profile


async def get_by_username(db: AsyncSession, username: str) -> User | None:
    res = await db.execute(select(User).where(User.username == username))
    return res.scalar_one_or_none()


async def get_by_email(db: AsyncSession, email: str) -> User | None:
    res = await db.execute(select(User).where(User.email == email))
    return res.scalar_one_or_none()


async def get_by_id(db: AsyncSession, user_id: int) -> User | None:
    res = await db.execute(select(User).where(User.id == user_id))
    return res.scalar_one_or_none()


async def get_any_admin(db: AsyncSession) -> User | None:
    res = await db.execute(select(User).where(User.role == ROLE_ADMIN).limit(1))
    return res.scalar_one_or_none()


async def create_user(
    db: AsyncSession, username: str, email: str, hashed_password: str, role: str
) -> User:
    user = User(username=username, email=email, hashed_password=hashed_password, role=role)
    db.add(user)
    await db.flush()
    await db.refresh(user)
    return user


# -------------------------
# 👥 GRAFO SOCIAL
# -------------------------
async def is_following(db: AsyncSession, follower_id: int, following_id: int) -> bool:
    res = await db.execute(
        select(Follow.id).where(
            Follow.follower_id == follower_id,
            Follow.following_id == following_id,
        )
    )
    return res.scalar_one_or_none() is not None


async def count_followers(db: AsyncSession, user_id: int) -> int:
    res = await db.execute(
        select(func.count()).select_from(Follow).where(Follow.following_id == user_id)
    )
    return int(res.scalar_one() or 0)


async def count_following(db: AsyncSession, user_id: int) -> int:
    res = await db.execute(
        select(func.count()).select_from(Follow).where(Follow.follower_id == user_id)
    )
    return int(res.scalar_one() or 0)


async def following_ids(db: AsyncSession, user_id: int) -> list[int]:
    res = await db.execute(
        select(Follow.following_id).where(Follow.follower_id == user_id)
    )
    return [row[0] for row in res.all()]


async def follower_ids(db: AsyncSession, user_id: int) -> list[int]:
    res = await db.execute(
        select(Follow.follower_id).where(Follow.following_id == user_id)
    )
    return [row[0] for row in res.all()]


async def toggle_follow(
    db: AsyncSession,
    follower_id: int,
    following_id: int,
) -> tuple[bool, int]:
    """
    Sigue / deja de seguir. Es una sola fila, así que ambos lados del
    grafo cambian juntos.
    Devuelve (following, followers_count del target)
    """
    res = await db.execute(
        select(Follow).where(
            Follow.follower_id == follower_id,
            Follow.following_id == following_id,
        )
    )
    existing = res.scalar_one_or_none()

    if existing:
        await db.execute(delete(Follow).where(Follow.id == existing.id))
        await db.flush()
        return False, await count_followers(db, following_id)

    db.add(Follow(follower_id=follower_id, following_id=following_id))
    await db.flush()
    return True, await count_followers(db, following_id)


async def list_followers(db: AsyncSession, user_id: int):
    """Filas (User, Profile | None) de quienes siguen a user_id."""
    q = (
        select(User, Profile)
        .join(Follow, Follow.follower_id == User.id)
        .outerjoin(Profile, Profile.user_id == User.id)
        .where(Follow.following_id == user_id)
        .order_by(desc(Follow.created_at), desc(Follow.id))
    )
    res = await db.execute(q)
    return res.all()


async def list_following(db: AsyncSession, user_id: int):
    """Filas (User, Profile | None) a quienes sigue user_id."""
    q = (
        select(User, Profile)
        .join(Follow, Follow.following_id == User.id)
        .outerjoin(Profile, Profile.user_id == User.id)
        .where(Follow.follower_id == user_id)
        .order_by(desc(Follow.created_at), desc(Follow.id))
    )
    res = await db.execute(q)
    return res.all()


# -------------------------
# 🔎 BÚSQUEDA / SUGERENCIAS
# -------------------------
async def search_by_username(
    db: AsyncSession,
    query: str,
    *,
    exclude_id: int,
    limit: int = 20,
):
    q = (
        select(User, Profile)
        .outerjoin(Profile, Profile.user_id == User.id)
        .where(
            User.username.icontains(query, autoescape=True),
            User.id != exclude_id,
            User.role != ROLE_ADMIN,
        )
        .order_by(User.username)
        .limit(limit)
    )
    res = await db.execute(q)
    return res.all()


async def suggested_creators(
    db: AsyncSession,
    viewer_id: int,
    limit: int = 5,
):
    """
    Creators que el viewer aún no sigue, ordenados por cantidad de
    seguidores (desc). Devuelve filas (User, Profile | None, followers).
    """
    followers_sq = (
        select(
            Follow.following_id.label("user_id"),
            func.count(Follow.id).label("followers"),
        )
        .group_by(Follow.following_id)
        .subquery()
    )
    already = select(Follow.following_id).where(Follow.follower_id == viewer_id)
    followers_col = func.coalesce(followers_sq.c.followers, 0)

    q = (
        select(User, Profile, followers_col.label("followers"))
        .outerjoin(followers_sq, followers_sq.c.user_id == User.id)
        .outerjoin(Profile, Profile.user_id == User.id)
        .where(
            User.role == ROLE_CREATOR,
            User.id != viewer_id,
            User.id.notin_(already),
        )
        .order_by(desc(followers_col), desc(User.created_at), desc(User.id))
        .limit(limit)
    )
    res = await db.execute(q)
    return res.all()
