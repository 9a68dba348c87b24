"""Posts API tests — CRUD plus the ownership rule."""

import pytest


async def _create_post(client, headers, title="Hello", content="First post"):
    r = await client.post(
        "/api/v1/posts", json={"title": title, "content": content}, headers=headers
    )
    assert r.status_code == 201, r.text
    return r.json()


@pytest.mark.asyncio
async def test_create_post_sets_author_from_token(client, register_and_login):
    user, headers = await register_and_login()
    post = await _create_post(client, headers)
    assert post["author_id"] == user["id"]
    assert post["comment_ids"] == []

    r = await client.get(f"/api/v1/users/{user['id']}")
    assert r.json()["post_ids"] == [post["id"]]


@pytest.mark.asyncio
async def test_create_post_ignores_author_in_body(client, register_and_login):
    alice, _ = await register_and_login()
    bob, bob_headers = await register_and_login()
    r = await client.post(
        "/api/v1/posts",
        json={"title": "t", "content": "c", "author_id": alice["id"]},
        headers=bob_headers,
    )
    assert r.status_code == 201
    assert r.json()["author_id"] == bob["id"]


@pytest.mark.asyncio
async def test_create_post_validation_422(client, register_and_login):
    _, headers = await register_and_login()
    r = await client.post("/api/v1/posts", json={"title": ""}, headers=headers)
    assert r.status_code == 422


@pytest.mark.asyncio
async def test_list_and_filter_posts(client, register_and_login):
    alice, alice_headers = await register_and_login()
    _, bob_headers = await register_and_login()
    a = await _create_post(client, alice_headers, title="A")
    b = await _create_post(client, bob_headers, title="B")

    r = await client.get("/api/v1/posts")
    assert [p["id"] for p in r.json()] == [a["id"], b["id"]]

    r = await client.get("/api/v1/posts", params={"author_id": alice["id"]})
    assert [p["id"] for p in r.json()] == [a["id"]]


@pytest.mark.asyncio
async def test_get_missing_post_404(client):
    r = await client.get("/api/v1/posts/nope")
    assert r.status_code == 404
    assert r.json()["detail"] == "Post not found"


@pytest.mark.asyncio
async def test_owner_can_update(client, register_and_login):
    _, headers = await register_and_login()
    post = await _create_post(client, headers)
    r = await client.put(
        f"/api/v1/posts/{post['id']}", json={"title": "Edited"}, headers=headers
    )
    assert r.status_code == 200
    assert r.json()["title"] == "Edited"
    assert r.json()["content"] == post["content"]


@pytest.mark.asyncio
async def test_non_owner_update_403(client, register_and_login):
    _, alice_headers = await register_and_login()
    _, bob_headers = await register_and_login()
    post = await _create_post(client, alice_headers)

    r = await client.put(
        f"/api/v1/posts/{post['id']}", json={"title": "Mine now"}, headers=bob_headers
    )
    assert r.status_code == 403
    assert r.json()["detail"] == "You are not allowed to update this post"

    r = await client.get(f"/api/v1/posts/{post['id']}")
    assert r.json()["title"] == post["title"]


@pytest.mark.asyncio
async def test_update_missing_post_is_404_for_anyone(client, register_and_login):
    _, headers = await register_and_login()
    r = await client.put("/api/v1/posts/nope", json={"title": "x"}, headers=headers)
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_delete_post_removes_back_reference(client, register_and_login):
    user, headers = await register_and_login()
    post = await _create_post(client, headers)

    r = await client.delete(f"/api/v1/posts/{post['id']}", headers=headers)
    assert r.status_code == 200
    assert r.json() == {"deleted": True}

    assert (await client.get(f"/api/v1/posts/{post['id']}")).status_code == 404
    r = await client.get(f"/api/v1/users/{user['id']}")
    assert r.json()["post_ids"] == []


@pytest.mark.asyncio
async def test_delete_post_keeps_comments(client, register_and_login):
    _, headers = await register_and_login()
    post = await _create_post(client, headers)
    r = await client.post(
        f"/api/v1/comments/{post['id']}", json={"content": "nice"}, headers=headers
    )
    comment = r.json()

    await client.delete(f"/api/v1/posts/{post['id']}", headers=headers)

    r = await client.get(f"/api/v1/comments/{comment['id']}")
    assert r.status_code == 200
    assert r.json()["post_id"] == post["id"]


@pytest.mark.asyncio
async def test_create_post_for_deleted_account_403(client, register_and_login):
    user, headers = await register_and_login()
    await client.delete(f"/api/v1/users/{user['id']}", headers=headers)

    # Token still verifies, but the author no longer exists.
    r = await client.post("/api/v1/posts", json={"title": "t", "content": "c"}, headers=headers)
    assert r.status_code == 403
    assert r.json()["detail"] == "User not found"
