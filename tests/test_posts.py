# tests/test_posts.py
from app.activity.models import Activity
from app.posts.models import Post, PostLike, SavedPost
from app.comments.models import Comment
from tests.conftest import bearer, count_rows


async def test_creator_publishes_post(client, signup, create_post):
    token, user = await signup("u1", role="creator")
    post = await create_post(token, image="img1", caption="hello")

    assert post["image"] == "img1"
    assert post["caption"] == "hello"
    assert post["likes"] == [] and post["likes_count"] == 0
    assert post["shares"] == 0
    assert post["comments_count"] == 0
    assert post["author"]["id"] == user["id"]
    assert post["author"]["username"] == "u1"
    assert post["author"]["role"] == "creator"
    assert await count_rows(Activity, Activity.type == "post", Activity.target_post_id == post["id"]) == 1


async def test_consumer_cannot_publish(client, signup):
    token, _ = await signup("c1", role="consumer")
    res = await client.post("/api/posts", json={"image": "img", "caption": "x"}, headers=bearer(token))
    assert res.status_code == 403
    assert await count_rows(Post) == 0


async def test_admin_can_publish(client, admin_login, create_post):
    token, _ = await admin_login()
    post = await create_post(token)
    assert post["author"]["role"] == "admin"


async def test_post_validation(client, signup):
    token, _ = await signup("u1", role="creator")

    no_image = await client.post("/api/posts", json={"caption": "x"}, headers=bearer(token))
    blank_image = await client.post("/api/posts", json={"image": "   "}, headers=bearer(token))
    long_caption = await client.post(
        "/api/posts", json={"image": "img", "caption": "a" * 2201}, headers=bearer(token)
    )
    for res in (no_image, blank_image, long_caption):
        assert res.status_code == 400
    assert await count_rows(Post) == 0

    ok = await client.post("/api/posts", json={"image": "img", "caption": "a" * 2200}, headers=bearer(token))
    assert ok.status_code == 201
    no_caption = await client.post("/api/posts", json={"image": "img"}, headers=bearer(token))
    assert no_caption.json()["caption"] == ""


async def test_like_toggle_is_reversible(client, signup, create_post):
    t1, u1 = await signup("u1", role="creator")
    t2, u2 = await signup("u2")
    post = await create_post(t1)

    first = await client.post(f"/api/posts/{post['id']}/like", headers=bearer(t2))
    assert first.json() == {"post_id": post["id"], "liked": True, "likes_count": 1}

    second = await client.post(f"/api/posts/{post['id']}/like", headers=bearer(t2))
    assert second.json() == {"post_id": post["id"], "liked": False, "likes_count": 0}
    assert await count_rows(PostLike) == 0

    # solo el like genera actividad, el unlike no
    likes = await count_rows(
        Activity,
        Activity.type == "like",
        Activity.target_post_id == post["id"],
        Activity.target_user_id == u1["id"],
    )
    assert likes == 1


async def test_likes_never_duplicate(client, signup, create_post):
    t1, _ = await signup("u1", role="creator")
    t2, u2 = await signup("u2")
    post = await create_post(t1)

    for _ in range(3):
        await client.post(f"/api/posts/{post['id']}/like", headers=bearer(t2))

    feed = await client.get("/api/posts", headers=bearer(t2))
    assert feed.json()[0]["likes"] == [u2["id"]]
    assert feed.json()[0]["liked"] is True


async def test_like_unknown_post_is_404(client, signup):
    token, _ = await signup("u1")
    res = await client.post("/api/posts/999/like", headers=bearer(token))
    assert res.status_code == 404


async def test_comments(client, signup, create_post):
    t1, _ = await signup("u1", role="creator")
    t2, u2 = await signup("u2")
    post = await create_post(t1)

    empty = await client.post(f"/api/posts/{post['id']}/comment", json={"text": "   "}, headers=bearer(t2))
    assert empty.status_code == 400
    too_long = await client.post(
        f"/api/posts/{post['id']}/comment", json={"text": "x" * 501}, headers=bearer(t2)
    )
    assert too_long.status_code == 400
    assert await count_rows(Comment) == 0

    first = await client.post(f"/api/posts/{post['id']}/comment", json={"text": "  nice  "}, headers=bearer(t2))
    assert first.status_code == 200
    assert [c["text"] for c in first.json()] == ["nice"]
    assert first.json()[0]["author"]["id"] == u2["id"]

    second = await client.post(f"/api/posts/{post['id']}/comment", json={"text": "thanks"}, headers=bearer(t1))
    assert [c["text"] for c in second.json()] == ["nice", "thanks"]

    page = await client.get(f"/api/posts/{post['id']}/comments", params={"limit": 1, "offset": 1}, headers=bearer(t1))
    assert [c["text"] for c in page.json()] == ["thanks"]

    assert await count_rows(Activity, Activity.type == "comment") == 2


async def test_share_keeps_counting(client, signup, create_post):
    t1, _ = await signup("u1", role="creator")
    post = await create_post(t1)

    for expected in (1, 2, 3):
        res = await client.post(f"/api/posts/{post['id']}/share", headers=bearer(t1))
        assert res.json()["shares"] == expected
    assert await count_rows(Activity, Activity.type == "share") == 3


async def test_save_toggle_and_saved_list(client, signup, create_post):
    t1, _ = await signup("u1", role="creator")
    t2, _ = await signup("u2")
    post = await create_post(t1)

    saved = await client.post(f"/api/posts/{post['id']}/save", headers=bearer(t2))
    assert saved.json()["saved"] is True and saved.json()["saved_count"] == 1

    listing = await client.get("/api/posts/saved", headers=bearer(t2))
    assert [p["id"] for p in listing.json()] == [post["id"]]

    me = await client.get("/api/auth/me", headers=bearer(t2))
    assert me.json()["saved_posts"] == [post["id"]]

    unsaved = await client.post(f"/api/posts/{post['id']}/save", headers=bearer(t2))
    assert unsaved.json()["saved"] is False and unsaved.json()["saved_count"] == 0


async def test_delete_permissions_and_cascade(client, signup, admin_login, create_post):
    t1, _ = await signup("u1", role="creator")
    t2, _ = await signup("u2", role="creator")
    post = await create_post(t1)
    await client.post(f"/api/posts/{post['id']}/like", headers=bearer(t2))
    await client.post(f"/api/posts/{post['id']}/save", headers=bearer(t2))
    await client.post(f"/api/posts/{post['id']}/comment", json={"text": "hi"}, headers=bearer(t2))

    forbidden = await client.delete(f"/api/posts/{post['id']}", headers=bearer(t2))
    assert forbidden.status_code == 403

    ok = await client.delete(f"/api/posts/{post['id']}", headers=bearer(t1))
    assert ok.status_code == 200
    assert await count_rows(Post) == 0
    assert await count_rows(PostLike) == 0
    assert await count_rows(SavedPost) == 0
    assert await count_rows(Comment) == 0
    assert await count_rows(Activity, Activity.type == "delete_post") == 1

    missing = await client.delete(f"/api/posts/{post['id']}", headers=bearer(t1))
    assert missing.status_code == 404

    # un admin puede borrar posts ajenos
    admin_token, _ = await admin_login()
    other = await create_post(t2)
    res = await client.delete(f"/api/posts/{other['id']}", headers=bearer(admin_token))
    assert res.status_code == 200


async def test_feed_filters(client, signup, create_post):
    t1, u1 = await signup("u1", role="creator")
    t2, u2 = await signup("u2", role="creator")
    t3, _ = await signup("u3")

    p1 = await create_post(t1, caption="from u1")
    p2 = await create_post(t2, caption="from u2")

    everything = await client.get("/api/posts", headers=bearer(t3))
    assert [p["id"] for p in everything.json()] == [p2["id"], p1["id"]]

    nothing_followed = await client.get("/api/posts", params={"type": "following"}, headers=bearer(t3))
    assert nothing_followed.json() == []

    await client.post(f"/api/users/{u1['id']}/follow", headers=bearer(t3))
    followed = await client.get("/api/posts", params={"type": "following"}, headers=bearer(t3))
    assert [p["id"] for p in followed.json()] == [p1["id"]]

    # el feed "following" incluye lo propio
    own = await client.get("/api/posts", params={"type": "following"}, headers=bearer(t2))
    assert [p["id"] for p in own.json()] == [p2["id"]]

    bad = await client.get("/api/posts", params={"type": "trending"}, headers=bearer(t3))
    assert bad.status_code == 400


async def test_feed_is_capped(client, signup, create_post):
    from app.core.config import settings

    token, _ = await signup("u1", role="creator")
    for i in range(settings.FEED_LIMIT + 2):
        await create_post(token, caption=str(i))

    feed = await client.get("/api/posts", headers=bearer(token))
    assert len(feed.json()) == settings.FEED_LIMIT
    assert feed.json()[0]["caption"] == str(settings.FEED_LIMIT + 1)


async def test_user_posts(client, signup, create_post):
    t1, u1 = await signup("u1", role="creator")
    await create_post(t1, caption="a")
    await create_post(t1, caption="b")

    res = await client.get(f"/api/posts/user/{u1['id']}", headers=bearer(t1))
    assert [p["caption"] for p in res.json()] == ["b", "a"]

    missing = await client.get("/api/posts/user/999", headers=bearer(t1))
    assert missing.status_code == 404


async def test_posts_require_auth(client):
    res = await client.get("/api/posts")
    assert res.status_code == 401


async def test_like_and_save_races_return_current_state(client, signup, create_post, monkeypatch):
    from app.posts import router as posts_router

    t1, _ = await signup("u1", role="creator")
    t2, u2 = await signup("u2")
    post = await create_post(t1)
    await client.post(f"/api/posts/{post['id']}/like", headers=bearer(t2))
    await client.post(f"/api/posts/{post['id']}/save", headers=bearer(t2))

    # otra request ya insertó la misma fila: el insert choca con la unique
    async def duplicate_like(db, post_id, user_id):
        db.add(PostLike(post_id=post_id, user_id=user_id))
        await db.flush()

    async def duplicate_save(db, post_id, user_id):
        db.add(SavedPost(post_id=post_id, user_id=user_id))
        await db.flush()

    monkeypatch.setattr(posts_router, "toggle_post_like", duplicate_like)
    monkeypatch.setattr(posts_router, "toggle_saved_post", duplicate_save)

    like = await client.post(f"/api/posts/{post['id']}/like", headers=bearer(t2))
    assert like.status_code == 200
    assert like.json() == {"post_id": post["id"], "liked": True, "likes_count": 1}

    save = await client.post(f"/api/posts/{post['id']}/save", headers=bearer(t2))
    assert save.status_code == 200
    assert save.json() == {"post_id": post["id"], "saved": True, "saved_count": 1}

    assert await count_rows(PostLike) == 1
    assert await count_rows(SavedPost) == 1
    assert await count_rows(Activity, Activity.type == "like") == 1
