"""Thread and comment form validation."""

from pydantic import BaseModel, field_validator

MIN_THREAD_LENGTH = 3


def _check_min_length(v: str) -> str:
    if len(v) < MIN_THREAD_LENGTH:
        raise ValueError("Min 3 chars")
    return v


class ThreadValidation(BaseModel):
    """New thread form: the text and the posting account's id."""

    thread: str
    account_id: str

    @field_validator("thread")
    @classmethod
    def thread_min_length(cls, v: str) -> str:
        return _check_min_length(v)


class CommentValidation(BaseModel):
    """Reply form: only the text."""

    thread: str

    @field_validator("thread")
    @classmethod
    def thread_min_length(cls, v: str) -> str:
        return _check_min_length(v)
