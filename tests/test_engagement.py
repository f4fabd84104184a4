import asyncio

import pytest

from noteshare.core import Download, Like, NotFoundError


def test_record_download_increments_by_one_and_allows_repeats(
    market, make_user, make_note
) -> None:
    async def main():
        owner = await make_user("owner")
        reader = await make_user("reader")
        note = await make_note(owner.id)
        await market.engagement.record_download(note.id, reader.id)
        await market.engagement.record_download(note.id, reader.id)
        return await market.get_note(note.id)

    note = asyncio.run(main())
    assert note.downloads == 2
    assert market.store.count(Download, lambda d: d.note_id == note.id) == 2


def test_record_download_for_missing_note(market) -> None:
    with pytest.raises(NotFoundError):
        asyncio.run(market.engagement.record_download(5, 1))


def test_toggle_like_is_its_own_inverse(market, make_user, make_note) -> None:
    async def main():
        owner = await make_user("owner")
        fan = await make_user("fan")
        note = await make_note(owner.id)
        first = await market.toggle_like(fan.id, note.id)
        liked_note = await market.get_note(note.id)
        liked_state = await market.engagement.is_liked(note.id, fan.id)
        second = await market.toggle_like(fan.id, note.id)
        return first, liked_note, liked_state, second, await market.get_note(note.id)

    first, liked_note, liked_state, second, final = asyncio.run(main())
    assert (first, liked_note.likes, liked_state) == (True, 1, True)
    assert (second, final.likes) == (False, 0)
    assert market.store.count(Like) == 0


def test_likes_from_different_users_accumulate(market, make_user, make_note) -> None:
    async def main():
        owner = await make_user("owner")
        note = await make_note(owner.id)
        for name in ("a", "b", "c"):
            fan = await make_user(name)
            await market.toggle_like(fan.id, note.id)
        return await market.get_note(note.id)

    assert asyncio.run(main()).likes == 3


def test_concurrent_toggles_never_create_two_likes(
    market, make_user, make_note, monkeypatch
) -> None:
    likes = market.repos.likes
    original = likes.get_by_user_and_note
    seen: list[int] = []

    async def slow_lookup(user_id, note_id):
        found = await original(user_id, note_id)
        # yield between the existence check and the write
        await asyncio.sleep(0)
        seen.append(market.store.count(Like))
        return found

    monkeypatch.setattr(likes, "get_by_user_and_note", slow_lookup)

    async def main():
        owner = await make_user("owner")
        fan = await make_user("fan")
        note = await make_note(owner.id)
        results = await asyncio.gather(
            market.toggle_like(fan.id, note.id),
            market.toggle_like(fan.id, note.id),
        )
        return results, await market.get_note(note.id)

    results, note = asyncio.run(main())
    assert results == [True, False]
    assert note.likes == market.store.count(Like) == 0
    assert max(seen) <= 1


def test_toggle_like_on_missing_note(market, make_user) -> None:
    async def main():
        fan = await make_user("fan")
        await market.toggle_like(fan.id, 404)

    with pytest.raises(NotFoundError):
        asyncio.run(main())


def test_discussion_and_reply_likes_only_grow(market, make_user) -> None:
    async def main():
        author = await make_user("author")
        discussion = await market.create_discussion(
            author.id, "Study group", "Anyone?", "General"
        )
        reply = await market.reply(author.id, discussion.id, "Me")
        await market.like_discussion(author.id, discussion.id)
        liked = await market.like_discussion(author.id, discussion.id)
        liked_reply = await market.like_reply(author.id, reply.id)
        return liked, liked_reply

    discussion, reply = asyncio.run(main())
    assert discussion.likes == 2
    assert reply.likes == 1
