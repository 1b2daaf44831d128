# seed_admin.py
"""
Crea la cuenta admin (ADMIN_USERNAME / ADMIN_EMAIL / ADMIN_PASSWORD del .env)
si todavía no existe ninguna. Se puede correr las veces que sea.

    python seed_admin.py
"""
import asyncio
import os

if os.path.exists(".env"):
    from dotenv import load_dotenv
    load_dotenv(".env")

from app.db.init_db import init_models  # noqa: E402
from app.db.session import AsyncSessionLocal  # noqa: E402
from app.users.service import ensure_admin  # noqa: E402


async def main() -> None:
    await init_models()
    async with AsyncSessionLocal() as db:
        admin, created = await ensure_admin(db)
        await db.commit()
    if created:
        print(f"✅ Admin creado: {admin.email}")
    else:
        print(f"✅ Ya existe un admin: {admin.email}")


if __name__ == "__main__":
    asyncio.run(main())
