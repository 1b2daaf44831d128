# app/auth/router.py
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import get_session
from app.core.deps import get_current_user
from app.auth.schemas import SignupIn, LoginIn
from app.auth import service as svc
from app.users.models import User
from app.users.service import me_projection
from app.activity.service import log_activity

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/signup", status_code=status.HTTP_201_CREATED)
async def signup(
    payload: SignupIn,
    background: BackgroundTasks,
    db: AsyncSession = Depends(get_session),
):
    try:
        user, token = await svc.register_user(db, payload)
        await db.commit()
    except ValueError as e:
        await db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except IntegrityError:
        # carrera entre dos registros con el mismo email/username
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="username or email already exists",
        )

    log_activity(background, user.id, "signup", details=f"Signed up as {user.role}")
    return {
        "message": "account created",
        "token": token,
        "user": await me_projection(db, user),
    }


@router.post("/login")
async def login(
    payload: LoginIn,
    background: BackgroundTasks,
    db: AsyncSession = Depends(get_session),
):
    try:
        user, token = await svc.login_user(db, payload.email, payload.password)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    log_activity(background, user.id, "login")
    return {
        "message": "login successful",
        "token": token,
        "user": await me_projection(db, user),
    }


@router.get("/me")
async def me(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    return await me_projection(db, user)


@router.post("/logout")
async def logout(
    background: BackgroundTasks,
    user: User = Depends(get_current_user),
):
    # el token es stateless: solo queda el registro en el log
    log_activity(background, user.id, "logout")
    return {"message": "logged out"}
