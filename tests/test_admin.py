# tests/test_admin.py
from app.activity.models import Activity
from app.comments.models import Comment
from app.messages.models import Message
from app.posts.models import Post, PostLike
from app.users.models import Follow, User
from tests.conftest import bearer, count_rows


async def test_admin_routes_reject_non_admins(client, signup):
    token, _ = await signup("u1", role="creator")
    for path in ("/api/admin/stats", "/api/admin/users", "/api/admin/posts", "/api/admin/activities"):
        res = await client.get(path, headers=bearer(token))
        assert res.status_code == 403
        assert res.json()["detail"] == "admin access required"

    anonymous = await client.get("/api/admin/stats")
    assert anonymous.status_code == 401


async def test_stats(client, signup, admin_login, create_post):
    admin_token, _ = await admin_login()
    t1, _ = await signup("u1", role="creator")
    t2, u2 = await signup("u2")
    post = await create_post(t1)
    await client.post(f"/api/posts/{post['id']}/like", headers=bearer(t2))
    await client.post(f"/api/posts/{post['id']}/comment", json={"text": "wow"}, headers=bearer(t2))
    await client.post(f"/api/messages/{u2['id']}", json={"text": "hola"}, headers=bearer(t1))

    stats = (await client.get("/api/admin/stats", headers=bearer(admin_token))).json()
    assert stats == {
        "total_users": 2,
        "total_creators": 1,
        "total_consumers": 1,
        "total_posts": 1,
        "total_messages": 1,
        "new_users_this_week": 2,
        "new_posts_this_week": 1,
        "total_likes": 1,
        "total_comments": 1,
    }


async def test_user_listing_with_post_count(client, signup, admin_login, create_post):
    admin_token, _ = await admin_login()
    t1, u1 = await signup("u1", role="creator")
    await signup("u2")
    await create_post(t1)
    await create_post(t1)

    users = (await client.get("/api/admin/users", headers=bearer(admin_token))).json()
    assert [u["username"] for u in users] == ["u2", "u1"]
    assert users[1]["post_count"] == 2
    assert users[0]["post_count"] == 0
    assert users[1]["email"] == "u1@example.com"


async def test_delete_user_cascade(client, signup, admin_login, create_post):
    admin_token, _ = await admin_login()
    t1, u1 = await signup("u1", role="creator")
    t2, u2 = await signup("u2")
    p1 = await create_post(t1)

    await client.post(f"/api/users/{u1['id']}/follow", headers=bearer(t2))
    await client.post(f"/api/users/{u2['id']}/follow", headers=bearer(t1))
    await client.post(f"/api/posts/{p1['id']}/like", headers=bearer(t2))
    await client.post(f"/api/posts/{p1['id']}/comment", json={"text": "hey"}, headers=bearer(t2))
    await client.post(f"/api/messages/{u1['id']}", json={"text": "hola"}, headers=bearer(t2))
    await client.post(f"/api/messages/{u2['id']}", json={"text": "qué tal"}, headers=bearer(t1))

    res = await client.delete(f"/api/admin/users/{u2['id']}", headers=bearer(admin_token))
    assert res.status_code == 200

    assert await count_rows(User, User.id == u2["id"]) == 0
    assert await count_rows(Follow) == 0
    assert await count_rows(Message) == 0
    assert await count_rows(PostLike) == 0
    assert await count_rows(Comment) == 0
    assert await count_rows(Activity, Activity.user_id == u2["id"]) == 0
    # lo que u1 hizo hacia u2 sigue en el log, sin target
    assert await count_rows(Activity, Activity.target_user_id == u2["id"]) == 0
    assert await count_rows(Activity, Activity.user_id == u1["id"], Activity.type == "follow") == 1

    profile = (await client.get(f"/api/users/{u1['id']}", headers=bearer(t1))).json()
    assert profile["followers"] == []
    assert profile["following"] == []

    # el post de u1 queda intacto (sin el like de u2)
    assert await count_rows(Post, Post.id == p1["id"]) == 1
    feed = (await client.get("/api/posts", headers=bearer(t1))).json()
    assert feed[0]["likes"] == []
    assert feed[0]["comments_count"] == 0

    # su token ya no sirve
    me = await client.get("/api/auth/me", headers=bearer(t2))
    assert me.status_code == 401


async def test_delete_user_removes_their_posts(client, signup, admin_login, create_post):
    admin_token, _ = await admin_login()
    t1, u1 = await signup("u1", role="creator")
    await create_post(t1)

    await client.delete(f"/api/admin/users/{u1['id']}", headers=bearer(admin_token))
    assert await count_rows(Post) == 0


async def test_cannot_delete_admin_or_ghost(client, admin_login):
    admin_token, admin = await admin_login()

    res = await client.delete(f"/api/admin/users/{admin['id']}", headers=bearer(admin_token))
    assert res.status_code == 403
    assert res.json()["detail"] == "cannot delete admin user"

    missing = await client.delete("/api/admin/users/999", headers=bearer(admin_token))
    assert missing.status_code == 404


async def test_admin_posts_and_delete(client, signup, admin_login, create_post):
    admin_token, _ = await admin_login()
    t1, _ = await signup("u1", role="creator")
    p1 = await create_post(t1, caption="first")
    p2 = await create_post(t1, caption="second")

    listing = (await client.get("/api/admin/posts", headers=bearer(admin_token))).json()
    assert [p["id"] for p in listing] == [p2["id"], p1["id"]]

    res = await client.delete(f"/api/admin/posts/{p1['id']}", headers=bearer(admin_token))
    assert res.status_code == 200
    assert await count_rows(Post) == 1

    missing = await client.delete(f"/api/admin/posts/{p1['id']}", headers=bearer(admin_token))
    assert missing.status_code == 404


async def test_activity_feed(client, signup, admin_login, create_post):
    admin_token, _ = await admin_login()
    t1, u1 = await signup("u1", role="creator")
    t2, u2 = await signup("u2")
    post = await create_post(t1)
    await client.post(f"/api/posts/{post['id']}/like", headers=bearer(t2))

    acts = (await client.get("/api/admin/activities", headers=bearer(admin_token))).json()
    assert acts[0]["type"] == "like"
    assert acts[0]["user"]["id"] == u2["id"]
    assert acts[0]["target_user"]["id"] == u1["id"]
    assert acts[0]["user"]["avatar"] == u2["avatar"]
    assert acts[0]["target_user"]["avatar"] == u1["avatar"]
    assert acts[0]["target_post_id"] == post["id"]
    assert {a["type"] for a in acts} >= {"signup", "login", "post", "like"}
