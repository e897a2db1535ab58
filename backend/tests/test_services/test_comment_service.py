"""Tests for CommentService."""

import pytest

import repositories.db_models as db_models
from models.exceptions import (
    CommentNotFoundException,
    NotResourceOwnerException,
    PostNotFoundException,
    ValidationException,
)
from models.schemas import CommentCreate, CommentUpdate
from services.comment_service import CommentService
from services.like_service import LikeService


class TestCommentService:
    """Test cases for CommentService."""

    def test_create_comment(self, db_session, member, test_post):
        comment = CommentService.create_comment(
            db_session, member, CommentCreate(post_id=test_post.id, content="Agreed")
        )

        assert comment.post_id == test_post.id
        assert comment.first_name == "Mary"
        assert comment.is_edited is False

    def test_create_comment_unknown_post(self, db_session, member):
        with pytest.raises(PostNotFoundException):
            CommentService.create_comment(
                db_session, member, CommentCreate(post_id=99999, content="Hello")
            )

    def test_create_comment_blank(self, db_session, member, test_post):
        with pytest.raises(ValidationException):
            CommentService.create_comment(
                db_session, member, CommentCreate(post_id=test_post.id, content="")
            )

    def test_comments_oldest_first(self, db_session, member, other, test_post):
        for user, text in ((member, "one"), (other, "two"), (member, "three")):
            CommentService.create_comment(
                db_session, user, CommentCreate(post_id=test_post.id, content=text)
            )

        result = CommentService.get_comments_for_post(db_session, test_post.id)

        assert [c.content for c in result] == ["one", "two", "three"]

    def test_comments_for_unknown_post(self, db_session):
        with pytest.raises(PostNotFoundException):
            CommentService.get_comments_for_post(db_session, 99999)

    def test_update_marks_edited(self, db_session, other, test_comment):
        result = CommentService.update_comment(
            db_session, other, test_comment.id, CommentUpdate(content="Nicer one")
        )

        assert result.content == "Nicer one"
        assert result.is_edited is True

    def test_update_by_non_author(self, db_session, member, test_comment):
        with pytest.raises(NotResourceOwnerException):
            CommentService.update_comment(
                db_session, member, test_comment.id, CommentUpdate(content="Hijack")
            )

    def test_delete_removes_likes(self, db_session, member, other, test_comment):
        LikeService.toggle_like(db_session, member.id, comment_id=test_comment.id)

        CommentService.delete_comment(db_session, other, test_comment.id)

        assert db_session.query(db_models.Comment).count() == 0
        assert db_session.query(db_models.Like).count() == 0

    def test_admin_can_delete(self, db_session, admin, test_comment):
        CommentService.delete_comment(db_session, admin, test_comment.id)
        assert db_session.query(db_models.Comment).count() == 0

    def test_delete_unknown_comment(self, db_session, member):
        with pytest.raises(CommentNotFoundException):
            CommentService.delete_comment(db_session, member, 99999)

    def test_delete_by_non_author(self, db_session, member, test_comment):
        with pytest.raises(NotResourceOwnerException):
            CommentService.delete_comment(db_session, member, test_comment.id)
