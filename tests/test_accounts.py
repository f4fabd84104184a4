import asyncio

import pytest

from noteshare.core import UserStats, ValidationError


def test_register_starts_with_zero_coins(market) -> None:
    user = asyncio.run(market.register("Alice", "alice@example.com", "hash"))
    assert (user.id, user.coins) == (1, 0)
    assert "hash" not in repr(user)


def test_username_and_email_unique_ignoring_case(market) -> None:
    async def main():
        await market.register("Alice", "alice@example.com", "pw")
        with pytest.raises(ValidationError, match="Username"):
            await market.register("ALICE", "other@example.com", "pw")
        with pytest.raises(ValidationError, match="Email"):
            await market.register("bob", "Alice@Example.COM", "pw")

    asyncio.run(main())
    assert market.store.count(market.repos.users.model) == 1


def test_concurrent_registrations_with_same_name(market) -> None:
    async def main():
        return await asyncio.gather(
            market.register("sam", "sam1@example.com", "pw"),
            market.register("SAM", "sam2@example.com", "pw"),
            return_exceptions=True,
        )

    results = asyncio.run(main())
    assert sum(isinstance(r, ValidationError) for r in results) == 1


def test_lookups(market) -> None:
    async def main():
        await market.register("Alice", "alice@example.com", "pw")
        return (
            await market.get_user_by_username("alice"),
            await market.get_user_by_email("ALICE@example.com"),
            await market.get_user_by_username("nobody"),
        )

    by_name, by_email, missing = asyncio.run(main())
    assert by_name.id == by_email.id == 1
    assert missing is None


def test_stats_count_distinct_downloads_and_received_likes(
    market, make_user, make_note
) -> None:
    async def main():
        owner = await make_user("owner")
        reader = await make_user("reader")
        note = await make_note(owner.id)
        other = await make_note(owner.id, "Other")
        await market.toggle_like(reader.id, note.id)
        await market.download_note(owner.id, other.id)
        await market.download_note(owner.id, other.id)
        return await market.user_stats(owner.id)

    assert asyncio.run(main()) == UserStats(uploads=2, downloads=1, coins=10, likes=1)


def test_user_library_is_newest_first(market, make_user, make_note) -> None:
    async def main():
        owner = await make_user("owner")
        reader = await make_user("reader")
        first = await make_note(owner.id, "First")
        second = await make_note(owner.id, "Second")
        await market.download_note(reader.id, first.id)
        await market.download_note(reader.id, second.id)
        await market.toggle_like(reader.id, first.id)
        await market.toggle_like(reader.id, second.id)
        return (
            await market.user_downloads(reader.id),
            await market.user_likes(reader.id),
            second.id,
        )

    downloads, likes, newest = asyncio.run(main())
    assert [d.note_id for d in downloads] == [newest, newest - 1]
    assert [l.note_id for l in likes] == [newest, newest - 1]
