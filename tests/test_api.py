from uuid import uuid4


async def test_healthcheck_envelope(client):
    response = await client.get("/api/v1/healthcheck")

    assert response.status_code == 200
    assert response.json() == {
        "statusCode": 200,
        "data": {"message": "OK"},
        "message": "OK",
        "success": True,
    }


async def test_unknown_route_uses_error_envelope(client):
    response = await client.get("/api/v1/nope")

    assert response.status_code == 404
    body = response.json()
    assert body["success"] is False
    assert body["statusCode"] == 404


async def test_protected_route_requires_token(client):
    response = await client.get("/api/v1/users/current-user")

    assert response.status_code == 401
    assert response.json() == {
        "statusCode": 401,
        "message": "Unauthorized request",
        "errors": [],
        "success": False,
    }


async def test_malformed_id_is_invalid_input(client, register, login):
    await register("alice")
    headers, _ = await login("alice")

    response = await client.get("/api/v1/videos/not-a-uuid", headers=headers)

    assert response.status_code == 400
    body = response.json()
    assert body["message"] == "Invalid input"
    assert body["success"] is False
    assert body["errors"]


async def test_register_removes_staged_files(client, register, media):
    user = await register("alice")

    assert user["username"] == "alice"
    assert user["fullName"] == "Alice Tester"
    assert "passwordHash" not in user and "refreshToken" not in user
    assert media.staged_paths
    assert all(not path.exists() for path in media.staged_paths)


async def test_failed_upload_still_removes_staged_files(client, media):
    media.fail_uploads = True

    response = await client.post(
        "/api/v1/users/register",
        data={"fullName": "Alice", "email": "alice@example.com", "username": "alice", "password": "pw"},
        files={"avatar": ("avatar.png", b"png-bytes", "image/png")},
    )

    assert response.status_code == 500
    assert response.json()["success"] is False
    assert media.staged_paths
    assert all(not path.exists() for path in media.staged_paths)


async def test_register_without_avatar(client):
    response = await client.post(
        "/api/v1/users/register",
        data={"fullName": "Alice", "email": "alice@example.com", "username": "alice", "password": "pw"},
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Avatar is required"


async def test_duplicate_registration_conflicts(client, register):
    await register("alice")

    response = await client.post(
        "/api/v1/users/register",
        data={"fullName": "Alice", "email": "other@example.com", "username": "alice", "password": "pw"},
        files={"avatar": ("avatar.png", b"png-bytes", "image/png")},
    )

    assert response.status_code == 409


async def test_session_lifecycle(client, register, login):
    await register("alice")
    headers, session = await login("alice")
    assert session["user"]["username"] == "alice"

    current = await client.get("/api/v1/users/current-user", headers=headers)
    assert current.json()["data"]["email"] == "alice@example.com"

    by_cookie = await client.get(
        "/api/v1/users/current-user", headers={"Cookie": f"accessToken={session['accessToken']}"}
    )
    assert by_cookie.status_code == 200

    rotated = await client.post(
        "/api/v1/users/refresh-token", json={"refreshToken": session["refreshToken"]}
    )
    assert rotated.status_code == 200
    tokens = rotated.json()["data"]
    assert tokens["refreshToken"] != session["refreshToken"]
    client.cookies.clear()

    reused = await client.post(
        "/api/v1/users/refresh-token", json={"refreshToken": session["refreshToken"]}
    )
    assert reused.status_code == 401

    new_headers = {"Authorization": f"Bearer {tokens['accessToken']}"}
    logged_out = await client.post("/api/v1/users/logout", headers=new_headers)
    assert logged_out.status_code == 200

    after_logout = await client.post(
        "/api/v1/users/refresh-token", json={"refreshToken": tokens["refreshToken"]}
    )
    assert after_logout.status_code == 401


async def test_wrong_password(client, register):
    await register("alice")

    response = await client.post(
        "/api/v1/users/login", json={"username": "alice", "password": "wrong"}
    )

    assert response.status_code == 401
    assert response.json()["message"] == "Invalid user credentials"


async def test_tweet_round_trip(client, register, login):
    alice = await register("alice")
    await register("bob")
    alice_headers, _ = await login("alice")
    bob_headers, _ = await login("bob")

    created = await client.post("/api/v1/tweets", json={"content": "hello world"}, headers=alice_headers)
    assert created.status_code == 201
    tweet_id = created.json()["data"]["id"]

    liked = await client.post(f"/api/v1/likes/toggle/t/{tweet_id}", headers=bob_headers)
    assert liked.json()["data"] == {"isLiked": True}

    listing = await client.get(f"/api/v1/tweets/user/{alice['id']}", headers=bob_headers)
    page = listing.json()["data"]
    assert page["totalDocs"] == 1
    [item] = page["docs"]
    assert item["content"] == "hello world"
    assert item["likesCount"] == 1
    assert item["isLiked"] is True
    assert item["owner"]["username"] == "alice"

    forbidden = await client.patch(
        f"/api/v1/tweets/{tweet_id}", json={"content": "mine"}, headers=bob_headers
    )
    assert forbidden.status_code == 403

    edited = await client.patch(
        f"/api/v1/tweets/{tweet_id}", json={"content": "edited"}, headers=alice_headers
    )
    assert edited.json()["data"]["content"] == "edited"

    deleted = await client.delete(f"/api/v1/tweets/{tweet_id}", headers=alice_headers)
    assert deleted.json()["data"] == {"tweetId": tweet_id}

    listing = await client.get(f"/api/v1/tweets/user/{alice['id']}", headers=bob_headers)
    assert listing.json()["data"]["docs"] == []


async def test_video_views_and_history(client, register, login, media):
    await register("alice")
    await register("bob")
    alice_headers, _ = await login("alice")
    bob_headers, _ = await login("bob")

    published = await client.post(
        "/api/v1/videos",
        data={"title": "Clip", "description": "A clip"},
        files={
            "videoFile": ("clip.mp4", b"video-bytes", "video/mp4"),
            "thumbnail": ("thumb.png", b"png-bytes", "image/png"),
        },
        headers=alice_headers,
    )
    assert published.status_code == 201
    video = published.json()["data"]
    assert video["duration"] == 42.5
    assert all(not path.exists() for path in media.staged_paths)

    for _ in range(2):
        detail = await client.get(f"/api/v1/videos/{video['id']}", headers=bob_headers)
    assert detail.json()["data"]["views"] == 2
    assert detail.json()["data"]["owner"]["isSubscribed"] is False

    history = await client.get("/api/v1/users/history", headers=bob_headers)
    assert [v["id"] for v in history.json()["data"]] == [video["id"]]

    feed = await client.get(
        "/api/v1/videos", params={"query": "clip", "sortBy": "views"}, headers=bob_headers
    )
    assert feed.json()["data"]["totalDocs"] == 1

    bad_sort = await client.get("/api/v1/videos", params={"sortBy": "secret"}, headers=bob_headers)
    assert bad_sort.status_code == 400


async def test_channel_profile_and_subscription(client, register, login):
    await register("alice")
    bob = await register("bob")
    alice_headers, _ = await login("alice")

    toggled = await client.post(f"/api/v1/subscriptions/c/{bob['id']}", headers=alice_headers)
    assert toggled.json()["data"] == {"subscribed": True}

    missing = await client.post(f"/api/v1/subscriptions/c/{uuid4()}", headers=alice_headers)
    assert missing.status_code == 404

    profile = await client.get("/api/v1/users/c/bob", headers=alice_headers)
    data = profile.json()["data"]
    assert data["subscribersCount"] == 1
    assert data["isSubscribed"] is True

    anonymous = await client.get("/api/v1/users/c/bob")
    assert anonymous.json()["data"]["isSubscribed"] is False

    subscribers = await client.get(f"/api/v1/subscriptions/c/{bob['id']}", headers=alice_headers)
    assert [s["username"] for s in subscribers.json()["data"]] == ["alice"]


async def test_register_rejects_malformed_email(client):
    response = await client.post(
        "/api/v1/users/register",
        data={"fullName": "Alice", "email": "not-an-email", "username": "alice", "password": "pw"},
        files={"avatar": ("avatar.png", b"png-bytes", "image/png")},
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Invalid input"


async def test_large_upload_is_staged_intact(client, media):
    content = bytes(range(256)) * 10_000

    response = await client.post(
        "/api/v1/users/register",
        data={"fullName": "Alice", "email": "alice@example.com", "username": "alice", "password": "pw"},
        files={"avatar": ("avatar.png", content, "image/png")},
    )

    assert response.status_code == 201
    assert media.uploaded == [content]
    assert all(not path.exists() for path in media.staged_paths)
