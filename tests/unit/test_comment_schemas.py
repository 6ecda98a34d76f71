"""
Unit tests for the comment request models – error keys and clean values.
"""
import pytest
from pydantic import ValidationError

from comments.schemas import BulkModerateRequest, CommentSubmission
from core.errors import format_validation_errors


def _details(model, data):
    with pytest.raises(ValidationError) as exc:
        model.model_validate(data)
    return format_validation_errors(exc.value.errors())


def test_missing_fields_use_wire_names():
    assert _details(CommentSubmission, {}) == {
        "postSlug": "Post slug is required",
        "authorName": "Name is required",
        "authorEmail": "Email is required",
        "content": "Comment is required",
    }


def test_missing_and_invalid_fields_share_keys():
    details = _details(CommentSubmission, {"authorName": "A", "content": "tiny"})
    assert set(details) == {"postSlug", "authorName", "authorEmail", "content"}
    assert details["authorName"] == "Name must be at least 2 characters"


def test_python_names_are_still_accepted():
    sub = CommentSubmission.model_validate({
        "post_slug": "hello", "author_name": "Ann", "author_email": "Ann@Mailbox.org",
        "content": "Long enough comment",
    })
    assert sub.post_slug == "hello"
    assert sub.author_email == "ann@mailbox.org"


def test_bulk_request_missing_ids():
    assert _details(BulkModerateRequest, {"action": "approve"}) == {
        "commentIds": "commentIds must be a non-empty array",
    }
