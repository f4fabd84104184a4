import asyncio

import pytest

from noteshare.core import (
    Attachment,
    InvalidOperationError,
    InvalidReferenceError,
    NotFoundError,
    ValidationError,
)


def test_new_discussion_starts_empty(market, make_user) -> None:
    async def main():
        author = await make_user("author")
        return await market.create_discussion(
            author.id, "Finals", "Share your notes", "Academic"
        )

    discussion = asyncio.run(main())
    assert (discussion.likes, discussion.views, discussion.is_pinned) == (0, 0, False)
    assert discussion.created_at == discussion.updated_at


def test_every_view_counts(market, make_user) -> None:
    async def main():
        author = await make_user("author")
        discussion = await market.create_discussion(author.id, "T", "C", "General")
        views = [(await market.view_discussion(discussion.id)).views for _ in range(3)]
        return views, await market.discussions.get_discussion(discussion.id)

    views, unviewed_fetch = asyncio.run(main())
    assert views == [1, 2, 3]
    assert unviewed_fetch.views == 3


def test_concurrent_views_are_not_lost(market, make_user) -> None:
    async def main():
        author = await make_user("author")
        discussion = await market.create_discussion(author.id, "T", "C", "General")
        await asyncio.gather(*(market.view_discussion(discussion.id) for _ in range(10)))
        return await market.discussions.get_discussion(discussion.id)

    assert asyncio.run(main()).views == 10


def test_view_missing_discussion(market) -> None:
    with pytest.raises(NotFoundError):
        asyncio.run(market.view_discussion(3))


def test_replies_are_flat_and_oldest_first(market, make_user) -> None:
    async def main():
        author = await make_user("author")
        other = await make_user("other")
        discussion = await market.create_discussion(author.id, "T", "C", "General")
        top = await market.reply(other.id, discussion.id, "First!")
        nested = await market.reply(
            author.id,
            discussion.id,
            "Answering you",
            parent_reply_id=top.id,
            attachment=Attachment(url="/api/files/x.png", type="image"),
        )
        deeper = await market.reply(other.id, discussion.id, "Thanks", parent_reply_id=nested.id)
        return await market.replies_for(discussion.id), top, nested, deeper

    replies, top, nested, deeper = asyncio.run(main())
    assert [r.id for r in replies] == [top.id, nested.id, deeper.id]
    assert nested.parent_reply_id == top.id
    assert nested.attachment.type == "image"
    assert deeper.parent_reply_id == nested.id


def test_reply_parent_must_be_in_same_discussion(market, make_user) -> None:
    async def main():
        author = await make_user("author")
        first = await market.create_discussion(author.id, "One", "C", "General")
        second = await market.create_discussion(author.id, "Two", "C", "General")
        foreign = await market.reply(author.id, first.id, "Over here")
        with pytest.raises(InvalidReferenceError):
            await market.reply(author.id, second.id, "Hi", parent_reply_id=foreign.id)
        with pytest.raises(InvalidOperationError):
            await market.reply(author.id, second.id, "Hi", parent_reply_id=999)
        return await market.replies_for(second.id), await market.replies_for(first.id)

    second_replies, first_replies = asyncio.run(main())
    assert second_replies == []
    assert len(first_replies) == 1


def test_reply_to_missing_discussion(market, make_user) -> None:
    async def main():
        author = await make_user("author")
        await market.reply(author.id, 12, "Hello?")

    with pytest.raises(NotFoundError):
        asyncio.run(main())


def test_reply_requires_content(market, make_user) -> None:
    async def main():
        author = await make_user("author")
        discussion = await market.create_discussion(author.id, "T", "C", "General")
        await market.reply(author.id, discussion.id, "   ")

    with pytest.raises(ValidationError):
        asyncio.run(main())


def test_discussion_listings(market, make_user) -> None:
    async def main():
        alice = await make_user("alice")
        bob = await make_user("bob")
        await market.create_discussion(alice.id, "One", "C", "Help")
        await market.create_discussion(bob.id, "Two", "C", "help")
        await market.create_discussion(alice.id, "Three", "C", "Offtopic")
        return (
            await market.list_discussions(page=1, limit=2),
            await market.list_discussions(page=2, limit=2),
            await market.discussions_by_category("HELP"),
            await market.discussions_by_user(alice.id),
        )

    page_one, page_two, help_threads, by_alice = asyncio.run(main())
    assert [d.title for d in page_one] == ["Three", "Two"]
    assert [d.title for d in page_two] == ["One"]
    assert [d.title for d in help_threads] == ["One", "Two"]
    assert [d.title for d in by_alice] == ["One", "Three"]
