"""Tests for form validation."""

import pytest
from pydantic import ValidationError

from threads_app.schemas import CommentValidation, CommunityValidation, ThreadValidation, UserValidation


def test_thread_requires_three_characters() -> None:
    with pytest.raises(ValidationError) as excinfo:
        ThreadValidation(thread="hi", account_id="abc")
    assert "Min 3 chars" in str(excinfo.value)

    assert ThreadValidation(thread="hey", account_id="abc").thread == "hey"


def test_thread_requires_account_id() -> None:
    with pytest.raises(ValidationError):
        ThreadValidation(thread="hello")


def test_comment_requires_three_characters() -> None:
    with pytest.raises(ValidationError) as excinfo:
        CommentValidation(thread="")
    assert "Min 3 chars" in str(excinfo.value)
    assert CommentValidation(thread="nice").thread == "nice"


def test_user_validation_bounds() -> None:
    valid = {"profile_photo": "https://x/y.png", "name": "Jane", "username": "jane", "bio": "Hi!"}
    assert UserValidation(**valid).username == "jane"

    with pytest.raises(ValidationError):
        UserValidation(**{**valid, "name": "Jo"})
    with pytest.raises(ValidationError):
        UserValidation(**{**valid, "username": "x" * 31})
    with pytest.raises(ValidationError):
        UserValidation(**{**valid, "bio": "x" * 1001})
    with pytest.raises(ValidationError):
        UserValidation(**{**valid, "profile_photo": ""})


def test_community_validation_defaults() -> None:
    form = CommunityValidation(name="Pythonistas", username="pythonistas")
    assert form.external_id is None
    assert form.image == ""
    assert form.bio == ""
