# app/activity/repository.py
from sqlalchemy import select, desc
from sqlalchemy.orm import aliased
from sqlalchemy.ext.asyncio import AsyncSession

from app.activity.models import Activity
from app.users.models import User
from app.profile.models import Profile


async def list_recent(db: AsyncSession, limit: int = 100):
    """
    Filas (Activity, actor, actor_profile, target, target_profile),
    más recientes primero. Cualquiera de los usuarios/perfiles puede venir None.
    """
    actor = aliased(User)
    actor_prof = aliased(Profile)
    target = aliased(User)
    target_prof = aliased(Profile)
    q = (
        select(Activity, actor, actor_prof, target, target_prof)
        .outerjoin(actor, actor.id == Activity.user_id)
        .outerjoin(actor_prof, actor_prof.user_id == actor.id)
        .outerjoin(target, target.id == Activity.target_user_id)
        .outerjoin(target_prof, target_prof.user_id == target.id)
        .order_by(desc(Activity.created_at), desc(Activity.id))
        .limit(limit)
    )
    res = await db.execute(q)
    return res.all()
