"""Integration tests for /api/posts endpoints."""

import base64

import repositories.db_models as db_models

PNG = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mP8z8BQDwAEhQGAhKmMIQAAAABJRU5ErkJggg=="
)


class TestPostAccess:
    """The membership gate on post creation."""

    def test_anonymous_cannot_post(self, client, community):
        response = client.post("/api/posts", json={"content": "Hello"})

        assert response.status_code == 401
        assert response.json()["detail"] == "You must be logged in to do that"

    def test_non_member_cannot_post(self, outsider_client):
        response = outsider_client.post("/api/posts", json={"content": "Hello"})

        assert response.status_code == 403
        assert response.json()["detail"] == "You must join the community first"

    def test_member_can_post(self, member_client, member_user):
        response = member_client.post("/api/posts", json={"content": "Hello"})

        assert response.status_code == 201
        data = response.json()
        assert data["userId"] == member_user.id
        assert data["firstName"] == "Mary"
        assert data["likeCount"] == 0
        assert data["commentCount"] == 0
        assert data["isLikedByUser"] is False

    def test_blank_post_rejected(self, member_client):
        response = member_client.post("/api/posts", json={"content": " "})
        assert response.status_code == 400


class TestPostReads:
    def test_list_is_public(self, client, test_post):
        response = client.get("/api/posts")

        assert response.status_code == 200
        assert [p["id"] for p in response.json()] == [test_post.id]

    def test_get_missing_post(self, client):
        response = client.get("/api/posts/99999")

        assert response.status_code == 404
        body = response.json()
        assert body["correlation_id"] == response.headers["X-Correlation-ID"]

    def test_client_correlation_id_is_echoed(self, client):
        response = client.get(
            "/api/posts/99999", headers={"X-Correlation-ID": "abc12345"}
        )
        assert response.json()["correlation_id"] == "abc12345"

    def test_json_responses_not_cached(self, client):
        response = client.get("/api/posts")
        assert response.headers["Cache-Control"].startswith("no-store")
        assert response.headers["X-Content-Type-Options"] == "nosniff"

    def test_invalid_pagination(self, client):
        assert client.get("/api/posts", params={"limit": 0}).status_code == 422


class TestPostMutations:
    def test_update_own_post(self, member_client, test_post):
        response = member_client.put(
            f"/api/posts/{test_post.id}", json={"content": "Edited"}
        )

        assert response.status_code == 200
        assert response.json()["content"] == "Edited"

    def test_delete_others_post_forbidden(self, client, login, other_member, test_post):
        login(other_member.email, "memberpassword123")

        response = client.delete(f"/api/posts/{test_post.id}")

        assert response.status_code == 403

    def test_delete_post_cascades(self, member_client, db_session, test_post, test_comment):
        post_id = test_post.id
        member_client.post("/api/likes/toggle", json={"commentId": test_comment.id})

        response = member_client.delete(f"/api/posts/{post_id}")

        assert response.status_code == 200
        assert member_client.get(f"/api/posts/{post_id}").status_code == 404
        assert db_session.query(db_models.Comment).count() == 0
        assert db_session.query(db_models.Like).count() == 0

    def test_delete_missing_post(self, member_client):
        assert member_client.delete("/api/posts/99999").status_code == 404


class TestImageUpload:
    def test_upload_and_serve(self, member_client):
        response = member_client.post(
            "/api/posts/upload-image",
            files={"image": ("shot.png", PNG, "image/png")},
        )

        assert response.status_code == 200
        image_url = response.json()["imageUrl"]
        assert image_url.startswith("/api/posts/images/post-")

        served = member_client.get(image_url)
        assert served.status_code == 200
        assert served.content == PNG
        assert served.headers["Cache-Control"].startswith("public")

        post = member_client.post(
            "/api/posts", json={"content": "With a picture", "imageUrl": image_url}
        )
        assert post.json()["imageUrl"] == image_url

    def test_upload_requires_membership(self, outsider_client):
        response = outsider_client.post(
            "/api/posts/upload-image",
            files={"image": ("shot.png", PNG, "image/png")},
        )
        assert response.status_code == 403

    def test_two_files_rejected(self, member_client):
        response = member_client.post(
            "/api/posts/upload-image",
            files=[
                ("image", ("a.png", PNG, "image/png")),
                ("image", ("b.png", PNG, "image/png")),
            ],
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Too many files. Only one image allowed."

    def test_non_image_rejected(self, member_client):
        response = member_client.post(
            "/api/posts/upload-image",
            files={"image": ("doc.pdf", b"%PDF-1.4", "application/pdf")},
        )

        assert response.status_code == 400
        assert "Only image files" in response.json()["detail"]

    def test_markup_disguised_as_png_rejected(self, member_client, upload_dir):
        response = member_client.post(
            "/api/posts/upload-image",
            files={"image": ("x.png", b"<html><script>alert(1)</script></html>", "image/png")},
        )

        assert response.status_code == 400
        assert not (upload_dir / "posts").exists()

    def test_unknown_image(self, client):
        assert client.get("/api/posts/images/post-missing.png").status_code == 404
