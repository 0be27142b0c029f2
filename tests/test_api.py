"""
End-to-end tests through the HTTP API.

Status mapping: 400 bad input / credentials, 401 no or bad token,
403 not allowed, 404 missing.
"""

import pytest

from tests.helpers import PASSWORD, PNG_BYTES, signup


def image_upload(name: str = "photo.png"):
    return {"image": (name, PNG_BYTES, "image/png")}


def create_post(client, user, title="My first post", category="general"):
    resp = client.post(
        "/api/posts",
        data={"title": title, "description": "A description long enough", "category": category},
        files=image_upload(),
        headers=user.headers,
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


def create_comment(client, user, post_id, text="Nice post"):
    resp = client.post(
        "/api/comments", json={"post_id": post_id, "text": text}, headers=user.headers,
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


@pytest.fixture
def alice(client, notifier, storage):
    return signup(client, notifier, storage, "alice")


@pytest.fixture
def bob(client, notifier, storage):
    return signup(client, notifier, storage, "bob")


@pytest.fixture
def admin(client, notifier, storage):
    return signup(client, notifier, storage, "admin", admin=True)


# =============================================================================
# Auth
# =============================================================================


class TestAuthApi:
    def test_health(self, client):
        assert client.get("/health").json()["status"] == "healthy"

    def test_unverified_login_is_403(self, client, notifier):
        client.post("/api/auth/register", json={
            "username": "carol", "email": "carol@example.com", "password": PASSWORD,
        })

        resp = client.post("/api/auth/login", json={"email": "carol@example.com", "password": PASSWORD})

        assert resp.status_code == 403
        assert resp.json()["code"] == "verification_required"
        assert len(notifier.of_kind("verify")) == 2

    def test_wrong_password_is_400(self, client, alice):
        resp = client.post("/api/auth/login", json={"email": "alice@example.com", "password": "Wrong-pass1"})

        assert resp.status_code == 400
        assert resp.json()["code"] == "invalid_credentials"

    def test_duplicate_email_is_400(self, client, alice):
        resp = client.post("/api/auth/register", json={
            "username": "alice2", "email": "alice@example.com", "password": PASSWORD,
        })

        assert resp.status_code == 400
        assert resp.json()["code"] == "conflict"

    @pytest.mark.parametrize("body", [
        {"username": "dave", "email": "dave@example.com", "password": "short"},
        {"username": "dave", "email": "not-an-email", "password": PASSWORD},
        {"username": "d", "email": "dave@example.com", "password": PASSWORD},
    ])
    def test_invalid_registration_is_400(self, client, body):
        resp = client.post("/api/auth/register", json=body)

        assert resp.status_code == 400
        assert resp.json()["code"] == "validation_error"

    def test_verify_link_is_single_use(self, client, notifier):
        client.post("/api/auth/register", json={
            "username": "carol", "email": "carol@example.com", "password": PASSWORD,
        })
        link = notifier.last("verify")
        url = f"/api/auth/{link['user_id']}/verify/{link['token']}"

        assert client.get(url).status_code == 200
        assert client.get(url).status_code == 404

    def test_login_response(self, client, alice):
        resp = client.post("/api/auth/login", json={"email": "alice@example.com", "password": PASSWORD})

        body = resp.json()
        assert body["id"] == alice.id
        assert body["is_admin"] is False
        assert body["profile_photo"]["url"]
        assert "password_hash" not in body

    def test_password_reset(self, client, notifier, alice):
        assert client.post(
            "/api/password/reset-password-link", json={"email": "nobody@example.com"}
        ).status_code == 200
        assert notifier.of_kind("reset") == []

        client.post("/api/password/reset-password-link", json={"email": "alice@example.com"})
        link = notifier.last("reset")
        url = f"/api/password/reset-password/{link['user_id']}/{link['token']}"

        assert client.get(url).status_code == 200
        assert client.post(url, json={"password": "N3w-password"}).status_code == 200
        assert client.get(url).status_code == 404

        resp = client.post("/api/auth/login", json={"email": "alice@example.com", "password": "N3w-password"})
        assert resp.status_code == 200


# =============================================================================
# Tokens at the edge
# =============================================================================


class TestTokenHandling:
    def test_missing_token_is_401(self, client):
        resp = client.get("/api/comments")

        assert resp.status_code == 401
        assert resp.json()["code"] == "unauthenticated"

    def test_bad_token_is_401(self, client):
        resp = client.get("/api/comments", headers={"Authorization": "Bearer garbage"})

        assert resp.status_code == 401

    def test_valid_token(self, client, alice):
        assert client.get("/api/comments", headers=alice.headers).status_code == 200


# =============================================================================
# Users
# =============================================================================


class TestUsersApi:
    def test_listing_is_admin_only(self, client, alice, admin):
        assert client.get("/api/users", headers=alice.headers).status_code == 403

        resp = client.get("/api/users", headers=admin.headers)
        assert resp.status_code == 200
        assert {u["id"] for u in resp.json()} == {alice.id, admin.id}
        assert all("password_hash" not in u for u in resp.json())

        assert client.get("/api/users/count", headers=admin.headers).json() == 2

    def test_profile_is_public(self, client, alice):
        resp = client.get(f"/api/users/{alice.id}")

        assert resp.status_code == 200
        assert resp.json()["username"] == "alice"
        assert client.get("/api/users/user_nope").status_code == 404

    def test_only_self_updates_profile(self, client, alice, bob, admin):
        url = f"/api/users/{alice.id}"

        assert client.put(url, json={"bio": "x"}, headers=bob.headers).status_code == 403
        assert client.put(url, json={"bio": "x"}, headers=admin.headers).status_code == 403

        resp = client.put(url, json={"bio": "Hello there"}, headers=alice.headers)
        assert resp.status_code == 200
        assert resp.json()["bio"] == "Hello there"

    def test_profile_photo(self, client, alice):
        resp = client.post("/api/users/profile-photo", files=image_upload(), headers=alice.headers)

        assert resp.status_code == 200
        assert resp.json()["profile_photo"]["public_id"]

    def test_profile_photo_rejects_other_files(self, client, alice):
        resp = client.post(
            "/api/users/profile-photo",
            files={"image": ("notes.txt", b"hello", "text/plain")},
            headers=alice.headers,
        )

        assert resp.status_code == 400

    def test_delete_self_or_admin(self, client, alice, bob, admin):
        create_post(client, alice)

        assert client.delete(f"/api/users/{alice.id}", headers=bob.headers).status_code == 403

        resp = client.delete(f"/api/users/{alice.id}", headers=admin.headers)
        assert resp.status_code == 200
        assert resp.json()["completed_steps"][-1] == "delete_user"
        assert client.get(f"/api/users/{alice.id}").status_code == 404
        assert client.get("/api/posts/count").json() == 0

        assert client.delete(f"/api/users/{bob.id}", headers=bob.headers).status_code == 200


# =============================================================================
# Posts
# =============================================================================


class TestPostsApi:
    def test_create_and_read(self, client, alice):
        post = create_post(client, alice)

        assert post["user_id"] == alice.id
        resp = client.get(f"/api/posts/{post['id']}")
        assert resp.status_code == 200
        assert resp.json()["user"]["id"] == alice.id

        assert client.get("/api/posts/post_nope").status_code == 404

    def test_create_requires_login(self, client):
        resp = client.post(
            "/api/posts",
            data={"title": "Title", "description": "A description long enough", "category": "x"},
            files=image_upload(),
        )

        assert resp.status_code == 401

    def test_create_requires_image(self, client, alice):
        resp = client.post(
            "/api/posts",
            data={"title": "Title", "description": "A description long enough", "category": "x"},
            headers=alice.headers,
        )

        assert resp.status_code == 400

    def test_create_validates_fields(self, client, alice):
        resp = client.post(
            "/api/posts",
            data={"title": "T", "description": "short", "category": ""},
            files=image_upload(),
            headers=alice.headers,
        )

        assert resp.status_code == 400
        assert resp.json()["code"] == "validation_error"

    def test_list_with_paging_and_category(self, client, alice):
        for i in range(5):
            create_post(client, alice, title=f"Post number {i}", category="music" if i == 0 else "news")

        assert len(client.get("/api/posts").json()) == 5
        assert len(client.get("/api/posts", params={"page_number": 1}).json()) == 4
        assert len(client.get("/api/posts", params={"page_number": 2}).json()) == 1
        assert len(client.get("/api/posts", params={"category": "music"}).json()) == 1

    @pytest.mark.parametrize("page_number", [0, -1])
    def test_page_number_must_be_positive(self, client, alice, page_number):
        for i in range(5):
            create_post(client, alice, title=f"Post number {i}")

        resp = client.get("/api/posts", params={"page_number": page_number})

        assert resp.status_code == 400
        assert resp.json()["code"] == "validation_error"

    def test_deleted_account_token_cannot_post(self, client, alice):
        assert client.delete(f"/api/users/{alice.id}", headers=alice.headers).status_code == 200

        resp = client.post(
            "/api/posts",
            data={"title": "Ghost", "description": "A description long enough", "category": "x"},
            files=image_upload(),
            headers=alice.headers,
        )

        assert resp.status_code == 404
        assert client.get("/api/posts/count").json() == 0

    def test_only_owner_edits(self, client, alice, bob, admin):
        post = create_post(client, alice)
        url = f"/api/posts/{post['id']}"

        assert client.put(url, json={"title": "Hijacked"}, headers=bob.headers).status_code == 403
        assert client.put(url, json={"title": "Hijacked"}, headers=admin.headers).status_code == 403

        resp = client.put(url, json={"title": "Renamed"}, headers=alice.headers)
        assert resp.status_code == 200
        assert resp.json()["title"] == "Renamed"

    def test_update_image(self, client, alice, bob):
        post = create_post(client, alice)
        url = f"/api/posts/update-image/{post['id']}"

        assert client.put(url, files=image_upload(), headers=bob.headers).status_code == 403

        resp = client.put(url, files=image_upload(), headers=alice.headers)
        assert resp.status_code == 200
        assert resp.json()["image"]["public_id"] != post["image"]["public_id"]

    def test_like_toggles(self, client, alice, bob):
        post = create_post(client, alice)
        url = f"/api/posts/like/{post['id']}"

        assert client.put(url, headers=bob.headers).json()["likes"] == [bob.id]
        assert client.put(url, headers=bob.headers).json()["likes"] == []

    def test_delete_owner_or_admin(self, client, alice, bob, admin):
        first = create_post(client, alice)
        second = create_post(client, alice)
        create_comment(client, bob, first["id"])

        assert client.delete(f"/api/posts/{first['id']}", headers=bob.headers).status_code == 403

        resp = client.delete(f"/api/posts/{first['id']}", headers=alice.headers)
        assert resp.status_code == 200
        assert resp.json()["completed_steps"] == ["remove_image", "delete_comments", "delete_post"]
        assert client.get("/api/comments", headers=alice.headers).json() == []

        assert client.delete(f"/api/posts/{second['id']}", headers=admin.headers).status_code == 200
        assert client.delete(f"/api/posts/{second['id']}", headers=admin.headers).status_code == 404


# =============================================================================
# Comments
# =============================================================================


class TestCommentsApi:
    def test_moderation(self, client, alice, bob, admin):
        post = create_post(client, alice)
        comment = create_comment(client, bob, post["id"])
        url = f"/api/comments/{comment['id']}"

        assert comment["username"] == "bob"

        # Admin moderates by deleting, never by editing
        assert client.put(url, json={"text": "edited"}, headers=admin.headers).status_code == 403
        # Owning the post does not grant rights over others' comments
        assert client.put(url, json={"text": "edited"}, headers=alice.headers).status_code == 403
        assert client.delete(url, headers=alice.headers).status_code == 403

        resp = client.put(url, json={"text": "edited"}, headers=bob.headers)
        assert resp.status_code == 200
        assert resp.json()["text"] == "edited"

        assert client.delete(url, headers=admin.headers).status_code == 200
        assert client.delete(url, headers=admin.headers).status_code == 404

    def test_post_id_alias(self, client, alice):
        post = create_post(client, alice)

        resp = client.post(
            "/api/comments", json={"postId": post["id"], "text": "hi"}, headers=alice.headers,
        )

        assert resp.status_code == 201
        assert resp.json()["post_id"] == post["id"]

    def test_comment_on_missing_post(self, client, alice):
        resp = client.post(
            "/api/comments", json={"post_id": "post_nope", "text": "hi"}, headers=alice.headers,
        )

        assert resp.status_code == 404

    def test_post_detail_embeds_comments(self, client, alice, bob):
        post = create_post(client, alice)
        create_comment(client, bob, post["id"])

        detail = client.get(f"/api/posts/{post['id']}").json()

        assert [c["username"] for c in detail["comments"]] == ["bob"]


# =============================================================================
# Categories
# =============================================================================


class TestCategoriesApi:
    def test_create_list_delete(self, client, alice, admin):
        assert client.post("/api/categories", json={"title": "music"}).status_code == 401

        resp = client.post("/api/categories", json={"title": "music"}, headers=alice.headers)
        assert resp.status_code == 201
        category = resp.json()

        assert [c["title"] for c in client.get("/api/categories").json()] == ["music"]

        url = f"/api/categories/{category['id']}"
        assert client.delete(url, headers=alice.headers).status_code == 403
        assert client.delete(url, headers=admin.headers).status_code == 200
        assert client.delete(url, headers=admin.headers).status_code == 404
