# app/db/base.py
from datetime import datetime, timezone

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


def utcnow() -> datetime:
    # default del lado Python: mismo reloj en Postgres y en SQLite (tests)
    return datetime.now(timezone.utc)
