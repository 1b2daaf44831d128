# app/auth/service.py
from __future__ import annotations
from sqlalchemy.ext.asyncio import AsyncSession

from app.users.models import User, SIGNUP_ROLES
from app.users.repository import get_by_username, get_by_email, create_user
from app.core.security import hash_password, create_access_token, verify_password
from app.auth.schemas import SignupIn
from app.profile.service import ensure_profile, DEFAULT_BIOS, default_avatar


async def register_user(db: AsyncSession, data: SignupIn) -> tuple[User, str]:
    """
    Crea la cuenta + perfil y devuelve (user, token).
    ValueError con mensaje distinto para email y username repetidos.
    El commit lo hace el router.
    """
    if data.role not in SIGNUP_ROLES:
        raise ValueError("invalid role, must be creator or consumer")
    if await get_by_email(db, data.email):
        raise ValueError("email already registered")
    if await get_by_username(db, data.username):
        raise ValueError("username already taken")

    hashed = hash_password(data.password)
    user = await create_user(db, data.username, data.email, hashed, data.role)

    await ensure_profile(
        db,
        user.id,
        avatar=default_avatar(user.username),
        bio=DEFAULT_BIOS.get(user.role),
    )

    token = create_access_token(sub=str(user.id))
    return user, token


async def authenticate_user(db: AsyncSession, email: str, password: str) -> User | None:
    user = await get_by_email(db, email)
    if not user:
        return None
    if not verify_password(password, user.hashed_password):
        return None
    return user


async def login_user(db: AsyncSession, email: str, password: str) -> tuple[User, str]:
    # mismo error si no existe o si la clave no cuadra
    user = await authenticate_user(db, email, password)
    if not user:
        raise ValueError("invalid email or password")
    return user, create_access_token(sub=str(user.id))
