"""Tests for the thread actions."""

from datetime import datetime, timedelta

import pytest
from beanie import PydanticObjectId

from threads_app.cache import page_cache
from threads_app.errors import ActionError, http_status_for
from threads_app.models import Community, Thread, User
from threads_app.services import thread_service


class TestCreateThread:
    async def test_links_thread_to_author(self, alice) -> None:
        thread = await thread_service.create_thread("Hello threads", alice.id, None, "/")

        stored_user = await User.get(alice.id)
        assert stored_user.threads == [thread.id]
        stored_thread = await Thread.get(thread.id)
        assert stored_thread.text == "Hello threads"
        assert stored_thread.community is None
        assert stored_thread.parent_id is None

    async def test_links_thread_to_community(self, alice, community) -> None:
        thread = await thread_service.create_thread("Community post", alice.id, community.external_id, "/")

        stored_community = await Community.get(community.id)
        assert stored_community.threads == [thread.id]
        assert (await Thread.get(thread.id)).community == community.id

    async def test_unknown_community(self, alice) -> None:
        with pytest.raises(ActionError) as excinfo:
            await thread_service.create_thread("Lost post", alice.id, "org_missing", "/")
        assert str(excinfo.value) == "Error creating thread: Community not found"
        assert http_status_for(excinfo.value) == 404
        assert await Thread.find_all().count() == 0

    async def test_revalidates_path(self, alice, monkeypatch) -> None:
        monkeypatch.setattr(page_cache, "_ttl_seconds", 60)
        page_cache.set("/", alice.external_id, {"threads": []})
        await thread_service.create_thread("Fresh", alice.id, None, "/")
        assert page_cache.get("/", alice.external_id) is None


class TestFetchPosts:
    async def test_top_level_only_newest_first(self, alice, bob, make_thread) -> None:
        start = datetime(2024, 5, 1)
        older = await make_thread(alice, text="Older", created_at=start)
        await make_thread(bob, text="Newer", created_at=start + timedelta(hours=1))
        await make_thread(bob, text="A reply", parent=older, created_at=start + timedelta(hours=2))

        page = await thread_service.fetch_posts()
        assert [t.text for t in page.threads] == ["Newer", "Older"]
        assert page.is_next is False
        assert page.threads[1].author.username == "alice"
        assert [c.text for c in page.threads[1].children] == ["A reply"]
        assert page.threads[1].children[0].author.username == "bob"

    async def test_pagination(self, alice, make_thread) -> None:
        start = datetime(2024, 5, 1)
        for i in range(3):
            await make_thread(alice, text=f"Post {i}", created_at=start + timedelta(minutes=i))

        first = await thread_service.fetch_posts(page_number=1, page_size=2)
        assert [t.text for t in first.threads] == ["Post 2", "Post 1"]
        assert first.is_next is True

        second = await thread_service.fetch_posts(page_number=2, page_size=2)
        assert [t.text for t in second.threads] == ["Post 0"]
        assert second.is_next is False


class TestFetchThreadById:
    async def test_two_levels_of_replies(self, alice, bob, community, make_thread) -> None:
        root = await make_thread(alice, text="Root", community=community)
        reply = await make_thread(bob, text="Reply", parent=root)
        await make_thread(alice, text="Reply to reply", parent=reply)

        view = await thread_service.fetch_thread_by_id(root.id)
        assert view.text == "Root"
        assert view.community.username == "pythonistas"
        assert view.children[0].text == "Reply"
        assert view.children[0].children[0].text == "Reply to reply"
        assert view.children[0].children[0].author.username == "alice"

    async def test_missing_thread_is_none(self, db) -> None:
        assert await thread_service.fetch_thread_by_id(PydanticObjectId()) is None


class TestAddComment:
    async def test_links_reply_to_parent(self, alice, bob, make_thread) -> None:
        thread = await make_thread(alice, text="Original")

        comment = await thread_service.add_comment_to_thread(thread.id, "Great!", bob.id, f"/thread/{thread.id}")

        parent = await Thread.get(thread.id)
        assert parent.children == [comment.id]
        stored = await Thread.get(comment.id)
        assert stored.parent_id == str(thread.id)
        assert stored.author == bob.id

    async def test_missing_parent(self, bob) -> None:
        with pytest.raises(ActionError) as excinfo:
            await thread_service.add_comment_to_thread(PydanticObjectId(), "Hello?", bob.id, "/")
        assert str(excinfo.value) == "Error adding comment to thread: Thread not found"


class TestDeleteThread:
    async def test_deletes_descendants_and_references(self, alice, bob, community, make_thread) -> None:
        root = await make_thread(alice, text="Root", community=community)
        reply = await make_thread(bob, text="Reply", parent=root)
        await make_thread(alice, text="Deep", parent=reply)
        keep = await make_thread(alice, text="Keep me")

        deleted = await thread_service.delete_thread(root.id, "/", requested_by=alice.id)

        assert deleted == 3
        assert [t.text for t in await Thread.find_all().to_list()] == ["Keep me"]
        assert (await User.get(alice.id)).threads == [keep.id]
        assert (await Community.get(community.id)).threads == []

    async def test_deleting_reply_unlinks_from_parent(self, alice, bob, make_thread) -> None:
        root = await make_thread(alice, text="Root")
        reply = await make_thread(bob, text="Reply", parent=root)

        await thread_service.delete_thread(reply.id, f"/thread/{root.id}")

        assert (await Thread.get(root.id)).children == []
        assert await Thread.get(reply.id) is None

    async def test_revalidates_pages_showing_deleted_threads(self, alice, bob, make_thread, monkeypatch) -> None:
        monkeypatch.setattr(page_cache, "_ttl_seconds", 60)
        root = await make_thread(alice, text="Root")
        reply = await make_thread(bob, text="Reply", parent=root)
        deep = await make_thread(alice, text="Deep", parent=reply)
        paths = [
            f"/thread/{root.id}",
            f"/thread/{reply.id}",
            f"/thread/{deep.id}",
            f"/profile/{bob.external_id}",
            f"/profile/{alice.external_id}",
            "/activity",
        ]
        for p in paths + ["/search"]:
            page_cache.set(p, "viewer", {"cached": True})

        await thread_service.delete_thread(reply.id, "/")

        for p in paths:
            assert page_cache.get(p, "viewer") is None, p
        assert page_cache.get("/search", "viewer") == {"cached": True}

    async def test_only_author_may_delete(self, alice, bob, make_thread) -> None:
        root = await make_thread(alice, text="Mine")
        with pytest.raises(ActionError) as excinfo:
            await thread_service.delete_thread(root.id, "/", requested_by=bob.id)
        assert http_status_for(excinfo.value) == 403
        assert await Thread.get(root.id) is not None

    async def test_fetch_all_child_threads(self, alice, bob, make_thread) -> None:
        root = await make_thread(alice)
        first = await make_thread(bob, text="a", parent=root)
        await make_thread(bob, text="b", parent=root)
        await make_thread(alice, text="c", parent=first)

        descendants = await thread_service.fetch_all_child_threads(root.id)
        assert sorted(t.text for t in descendants) == ["a", "b", "c"]
