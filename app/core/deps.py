# app/core/deps.py
from fastapi import Depends, Header, HTTPException, Query
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import get_session
from app.core.security import decode_access_token
from app.users.models import User, ROLE_ADMIN


def extract_token(token: str | None, authorization: str | None) -> str:
    """
    Token por query (?token=...) o por header Authorization: Bearer XXX.
    """
    if not token and authorization and authorization.lower().startswith("bearer "):
        token = authorization.split(" ", 1)[1].strip()
    if not token:
        raise HTTPException(status_code=401, detail="missing token")
    return token


async def get_current_user(
    db: AsyncSession = Depends(get_session),
    token: str | None = Query(None),
    authorization: str | None = Header(None),
) -> User:
    """
    Decodifica el JWT (firma + expiración) y resuelve el usuario en la BD.
    Token ausente, inválido, vencido o de un usuario que ya no existe → 401.
    """
    tok = extract_token(token, authorization)
    try:
        user_id = int(decode_access_token(tok))
    except (JWTError, ValueError):
        raise HTTPException(status_code=401, detail="invalid token")

    user = await db.get(User, user_id)
    if not user:
        raise HTTPException(status_code=401, detail="invalid token")
    return user


async def require_admin(user: User = Depends(get_current_user)) -> User:
    if user.role != ROLE_ADMIN:
        raise HTTPException(status_code=403, detail="admin access required")
    return user
