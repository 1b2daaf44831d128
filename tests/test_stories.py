# tests/test_stories.py
from datetime import timedelta

from sqlalchemy import update

from app.activity.models import Activity
from app.db.base import utcnow
from app.db.expiry import purge_expired
from app.db.session import AsyncSessionLocal
from app.stories.models import Story, StoryView
from tests.conftest import bearer, count_rows


async def _add_story(client, token, image="story1", caption=""):
    res = await client.post("/api/stories", json={"image": image, "caption": caption}, headers=bearer(token))
    assert res.status_code == 201, res.text
    return res.json()


async def _backdate(model, row_id, **delta):
    async with AsyncSessionLocal() as db:
        await db.execute(
            update(model).where(model.id == row_id).values(created_at=utcnow() - timedelta(**delta))
        )
        await db.commit()


async def test_creator_adds_story(client, signup):
    t1, u1 = await signup("u1", role="creator")
    story = await _add_story(client, t1)

    assert story["author"]["id"] == u1["id"]
    assert story["viewers_count"] == 0
    assert await count_rows(Activity, Activity.type == "post", Activity.details == "Added a story") == 1


async def test_consumer_cannot_add_story(client, signup):
    t1, _ = await signup("c1")
    res = await client.post("/api/stories", json={"image": "img"}, headers=bearer(t1))
    assert res.status_code == 403
    assert await count_rows(Story) == 0


async def test_feed_groups_by_author(client, signup):
    t1, u1 = await signup("u1", role="creator")
    t2, u2 = await signup("u2", role="creator")
    t3, u3 = await signup("viewer")

    await _add_story(client, t1, image="a")
    await _add_story(client, t2, image="b")
    await _add_story(client, t1, image="c")

    # sin seguir a nadie solo se ven las propias (ninguna)
    empty = await client.get("/api/stories", headers=bearer(t3))
    assert empty.json() == []

    await client.post(f"/api/users/{u1['id']}/follow", headers=bearer(t3))
    await client.post(f"/api/users/{u2['id']}/follow", headers=bearer(t3))

    groups = (await client.get("/api/stories", headers=bearer(t3))).json()
    assert [g["user"]["username"] for g in groups] == ["u1", "u2"]
    assert [s["image"] for s in groups[0]["stories"]] == ["c", "a"]


async def test_expired_story_is_never_served(client, signup):
    t1, u1 = await signup("u1", role="creator")
    t2, _ = await signup("u2")
    story = await _add_story(client, t1)

    await _backdate(Story, story["id"], hours=24, minutes=1)

    by_user = await client.get(f"/api/stories/user/{u1['id']}", headers=bearer(t2))
    assert by_user.json() == []
    own = await client.get("/api/stories", headers=bearer(t1))
    assert own.json() == []
    view = await client.post(f"/api/stories/{story['id']}/view", headers=bearer(t2))
    assert view.status_code == 404


async def test_story_view_is_idempotent(client, signup):
    t1, u1 = await signup("u1", role="creator")
    t2, _ = await signup("u2")
    story = await _add_story(client, t1)

    for _ in range(3):
        res = await client.post(f"/api/stories/{story['id']}/view", headers=bearer(t2))
        assert res.json() == {"id": story["id"], "viewers_count": 1}

    listed = (await client.get(f"/api/stories/user/{u1['id']}", headers=bearer(t2))).json()
    assert listed[0]["viewed"] is True
    assert listed[0]["viewers_count"] == 1


async def test_delete_story(client, signup):
    t1, _ = await signup("u1", role="creator")
    t2, _ = await signup("u2", role="creator")
    story = await _add_story(client, t1)
    await client.post(f"/api/stories/{story['id']}/view", headers=bearer(t2))

    forbidden = await client.delete(f"/api/stories/{story['id']}", headers=bearer(t2))
    assert forbidden.status_code == 403

    ok = await client.delete(f"/api/stories/{story['id']}", headers=bearer(t1))
    assert ok.status_code == 200
    assert await count_rows(Story) == 0
    assert await count_rows(StoryView) == 0


async def test_purge_expired(client, signup):
    t1, _ = await signup("u1", role="creator")
    t2, _ = await signup("u2")
    old = await _add_story(client, t1, image="old")
    fresh = await _add_story(client, t1, image="fresh")
    await client.post(f"/api/stories/{old['id']}/view", headers=bearer(t2))

    await _backdate(Story, old["id"], hours=25)

    logged = await count_rows(Activity)
    assert logged > 0
    async with AsyncSessionLocal() as db:
        await db.execute(update(Activity).values(created_at=utcnow() - timedelta(days=31)))
        await db.commit()

    purged = await purge_expired()
    assert purged == {"stories": 1, "activities": logged}

    assert await count_rows(Story) == 1
    assert await count_rows(Story, Story.id == fresh["id"]) == 1
    assert await count_rows(StoryView) == 0
    assert await count_rows(Activity) == 0