"""
Thread APIs: post, reply, delete, and read threads.
"""

import logging
from typing import Optional

from beanie import PydanticObjectId
from fastapi import APIRouter, HTTPException, Query, status

from threads_app.api.auth import CurrentUser
from threads_app.schemas.thread import CommentValidation, ThreadValidation
from threads_app.schemas.views import ThreadPage, ThreadView
from threads_app.services import thread_service

logger = logging.getLogger(__name__)
router = APIRouter()


class CreateThreadRequest(ThreadValidation):
    community_id: Optional[str] = None
    path: str = "/"


class CommentRequest(CommentValidation):
    path: Optional[str] = None  # Defaults to the thread's page


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=ThreadView,
    summary="Post a thread",
)
async def create_thread(body: CreateThreadRequest, current_user: CurrentUser) -> ThreadView:
    if body.account_id != str(current_user.id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Threads can only be posted from your own account",
        )
    thread = await thread_service.create_thread(
        text=body.thread,
        author=current_user.id,
        community_id=body.community_id,
        path=body.path,
    )
    return ThreadView.from_document(thread, author=current_user)


@router.get("", response_model=ThreadPage, summary="Home feed")
async def list_threads(
    current_user: CurrentUser,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
) -> ThreadPage:
    return await thread_service.fetch_posts(page, page_size)


@router.get("/{thread_id}", response_model=ThreadView, summary="Get a thread with replies")
async def get_thread(thread_id: PydanticObjectId, current_user: CurrentUser) -> ThreadView:
    thread = await thread_service.fetch_thread_by_id(thread_id)
    if thread is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Thread not found")
    return thread


@router.post(
    "/{thread_id}/comments",
    status_code=status.HTTP_201_CREATED,
    response_model=ThreadView,
    summary="Reply to a thread",
)
async def add_comment(
    thread_id: PydanticObjectId,
    body: CommentRequest,
    current_user: CurrentUser,
) -> ThreadView:
    comment = await thread_service.add_comment_to_thread(
        thread_id=thread_id,
        comment_text=body.thread,
        user_id=current_user.id,
        path=body.path or f"/thread/{thread_id}",
    )
    return ThreadView.from_document(comment, author=current_user)


@router.delete("/{thread_id}", response_model=dict, summary="Delete a thread and its replies")
async def delete_thread(
    thread_id: PydanticObjectId,
    current_user: CurrentUser,
    path: str = "/",
) -> dict:
    deleted = await thread_service.delete_thread(thread_id, path, requested_by=current_user.id)
    return {"deleted": deleted}
