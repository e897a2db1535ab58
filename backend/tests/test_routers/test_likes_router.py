"""Integration tests for /api/likes endpoints."""


class TestLikesRouter:
    """Test cases for /api/likes endpoints."""

    def test_toggle_requires_login(self, client, test_post):
        response = client.post("/api/likes/toggle", json={"postId": test_post.id})
        assert response.status_code == 401

    def test_toggle_requires_membership(self, outsider_client, test_post):
        response = outsider_client.post("/api/likes/toggle", json={"postId": test_post.id})
        assert response.status_code == 403

    def test_toggle_post(self, member_client, test_post):
        liked = member_client.post("/api/likes/toggle", json={"postId": test_post.id})
        assert liked.status_code == 200
        assert liked.json()["action"] == "liked"
        assert liked.json()["totalLikes"] == 1

        post = member_client.get(f"/api/posts/{test_post.id}").json()
        assert post["isLikedByUser"] is True

        unliked = member_client.post("/api/likes/toggle", json={"postId": test_post.id})
        assert unliked.json()["action"] == "unliked"
        assert unliked.json()["totalLikes"] == 0

    def test_toggle_needs_exactly_one_target(self, member_client, test_post, test_comment):
        response = member_client.post(
            "/api/likes/toggle",
            json={"postId": test_post.id, "commentId": test_comment.id},
        )

        assert response.status_code == 400
        assert response.json()["detail"] == (
            "Either postId or commentId must be provided, but not both"
        )

    def test_list_likes(self, member_client, test_post):
        member_client.post("/api/likes/toggle", json={"postId": test_post.id})

        data = member_client.get(f"/api/likes/post/{test_post.id}").json()

        assert data["totalLikes"] == 1
        assert data["likes"][0]["firstName"] == "Mary"

    def test_delete_like(self, member_client, test_comment):
        like_id = member_client.post(
            "/api/likes/toggle", json={"commentId": test_comment.id}
        ).json()["likeId"]

        response = member_client.delete(f"/api/likes/{like_id}")

        assert response.status_code == 200
        assert response.json()["totalLikes"] == 0

    def test_like_status(self, member_client, member_user, test_post, test_comment):
        member_client.post("/api/likes/toggle", json={"postId": test_post.id})

        response = member_client.get(
            f"/api/likes/user/{member_user.id}/status",
            params={
                "postIds": f"{test_post.id},abc",
                "commentIds": str(test_comment.id),
            },
        )

        assert response.status_code == 200
        assert response.json() == {"likeStatus": {f"post_{test_post.id}": True}}
