# app/auth/schemas.py
from pydantic import BaseModel, EmailStr, Field

from app.users.models import USERNAME_MAX


class SignupIn(BaseModel):
    username: str = Field(..., min_length=1, max_length=USERNAME_MAX)
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)
    # se valida en el service para devolver un mensaje claro
    role: str


class LoginIn(BaseModel):
    # mismo EmailStr que en signup: ambos lados normalizan igual
    email: EmailStr
    password: str = Field(..., min_length=1)
