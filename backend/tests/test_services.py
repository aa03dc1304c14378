"""Service-layer tests run directly against an AsyncSession."""

import asyncio

import pytest
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from devterminal.core.errors import DuplicateUsername, InvalidCredentials, PostNotFound, SelfFollow, UserNotFound
from devterminal.db.session import get_session
from devterminal.models.follow import Follow
from devterminal.models.post import Like
from devterminal.services import posts as post_service
from devterminal.services import users as user_service


@pytest.mark.asyncio
async def test_unique_constraint_backs_up_username_check(monkeypatch):
    async with get_session() as session:
        await user_service.create_user(session, "alice", "pw1")
        await session.commit()

    async def _lookup_misses(session, username):
        return None

    # Simulates a second registration racing past the existence check
    monkeypatch.setattr(user_service, "get_user_by_username", _lookup_misses)
    async with get_session() as session:
        with pytest.raises(DuplicateUsername):
            await user_service.create_user(session, "alice", "pw2")


@pytest.mark.asyncio
async def test_authenticate_rejects_unknown_and_wrong_password_alike():
    async with get_session() as session:
        await user_service.create_user(session, "alice", "pw1")
        await session.commit()

    async with get_session() as session:
        user = await user_service.authenticate_user(session, "alice", "pw1")
        assert user.username == "alice"
        with pytest.raises(InvalidCredentials) as wrong:
            await user_service.authenticate_user(session, "alice", "bad")
        with pytest.raises(InvalidCredentials) as unknown:
            await user_service.authenticate_user(session, "nobody", "pw1")
    assert wrong.value.message == unknown.value.message


@pytest.mark.asyncio
async def test_like_counter_and_relation_commit_together():
    async with get_session() as session:
        user = await user_service.create_user(session, "alice", "pw1")
        post = await post_service.create_post(session, user.id, "hello")
        await session.commit()
        user_id, post_id = user.id, post.id

    async with get_session() as session:
        assert await post_service.toggle_like(session, user_id, post_id) is True
        # Nothing committed yet: a rollback drops both the like and the increment
        await session.rollback()

    async with get_session() as session:
        (entry,) = await post_service.get_feed(session, user_id)
        assert entry.likes == 0
        assert entry.like_count == 0

    async with get_session() as session:
        assert await post_service.toggle_like(session, user_id, post_id) is True
        await session.commit()
    async with get_session() as session:
        (entry,) = await post_service.get_feed(session, user_id)
        assert entry.likes == entry.like_count == 1


@pytest.mark.asyncio
async def test_toggle_like_unknown_post():
    async with get_session() as session:
        user = await user_service.create_user(session, "alice", "pw1")
        await session.commit()
        with pytest.raises(PostNotFound):
            await post_service.toggle_like(session, user.id, 12345)


@pytest.mark.asyncio
async def test_self_follow_checked_before_lookup():
    async with get_session() as session:
        # No such user exists, yet the self-follow error wins
        with pytest.raises(SelfFollow):
            await user_service.toggle_follow(session, 77, 77)


@pytest.mark.asyncio
async def test_feed_limit_never_exceeds_fifty():
    async with get_session() as session:
        user = await user_service.create_user(session, "alice", "pw1")
        for index in range(55):
            await post_service.create_post(session, user.id, f"post {index}")
        await session.commit()

        assert len(await post_service.get_feed(session, user.id, limit=500)) == 50
        assert len(await post_service.get_feed(session, user.id, limit=5)) == 5


async def _create_users(*usernames):
    async with get_session() as session:
        users = [await user_service.create_user(session, name, "pw") for name in usernames]
        await session.commit()
        return [user.id for user in users]


async def _toggle_and_commit(toggle, *args):
    async with get_session() as session:
        result = await toggle(session, *args)
        await session.commit()
        return result


@pytest.fixture
def lookups_meet(monkeypatch):
    """Hold every ``session.get`` of one model until two callers have read it.

    Both toggles then see the same state before either writes, which is the
    interleaving two simultaneous requests can hit.
    """

    def _install(model):
        original_get = AsyncSession.get
        arrived = []
        both_read = asyncio.Event()

        async def get_then_wait(self, entity, ident, **kwargs):
            found = await original_get(self, entity, ident, **kwargs)
            if entity is model:
                arrived.append(ident)
                if len(arrived) >= 2:
                    both_read.set()
                await asyncio.wait_for(both_read.wait(), timeout=5)
            return found

        monkeypatch.setattr(AsyncSession, "get", get_then_wait)

    return _install


class TestConcurrentToggles:
    @pytest.mark.asyncio
    async def test_simultaneous_likes_count_once(self, lookups_meet):
        (alice_id,) = await _create_users("alice")
        async with get_session() as session:
            post = await post_service.create_post(session, alice_id, "hello")
            await session.commit()
            post_id = post.id

        lookups_meet(Like)
        results = await asyncio.gather(
            _toggle_and_commit(post_service.toggle_like, alice_id, post_id),
            _toggle_and_commit(post_service.toggle_like, alice_id, post_id),
        )

        assert results == [True, True]
        async with get_session() as session:
            (entry,) = await post_service.get_feed(session, alice_id)
        assert entry.likes == entry.like_count == 1

    @pytest.mark.asyncio
    async def test_simultaneous_unlikes_decrement_once(self, lookups_meet):
        (alice_id,) = await _create_users("alice")
        async with get_session() as session:
            post = await post_service.create_post(session, alice_id, "hello")
            await session.flush()
            await post_service.toggle_like(session, alice_id, post.id)
            await session.commit()
            post_id = post.id

        lookups_meet(Like)
        results = await asyncio.gather(
            _toggle_and_commit(post_service.toggle_like, alice_id, post_id),
            _toggle_and_commit(post_service.toggle_like, alice_id, post_id),
        )

        assert results == [False, False]
        async with get_session() as session:
            (entry,) = await post_service.get_feed(session, alice_id)
        assert entry.likes == entry.like_count == 0

    @pytest.mark.asyncio
    async def test_simultaneous_follows_leave_one_edge(self, lookups_meet):
        alice_id, bob_id = await _create_users("alice", "bob")

        lookups_meet(Follow)
        results = await asyncio.gather(
            _toggle_and_commit(user_service.toggle_follow, alice_id, bob_id),
            _toggle_and_commit(user_service.toggle_follow, alice_id, bob_id),
        )

        assert results == [True, True]
        async with get_session() as session:
            edges = await session.scalar(text("SELECT COUNT(*) FROM follows"))
            profile = await user_service.get_profile(session, "bob", alice_id)
        assert edges == 1
        assert profile.followers_count == 1
        assert profile.is_following is True


class TestMissingUsers:
    @pytest.mark.asyncio
    async def test_foreign_keys_enforced_on_sqlite(self):
        async with get_session() as session:
            assert await session.scalar(text("PRAGMA foreign_keys")) == 1

    @pytest.mark.asyncio
    async def test_post_by_unknown_user(self):
        async with get_session() as session:
            with pytest.raises(UserNotFound):
                await post_service.create_post(session, 999, "ghost")

    @pytest.mark.asyncio
    async def test_like_by_unknown_user_leaves_counter(self):
        (alice_id,) = await _create_users("alice")
        async with get_session() as session:
            post = await post_service.create_post(session, alice_id, "hello")
            await session.commit()
            post_id = post.id

        async with get_session() as session:
            with pytest.raises(UserNotFound):
                await post_service.toggle_like(session, 999, post_id)

        async with get_session() as session:
            (entry,) = await post_service.get_feed(session, alice_id)
        assert entry.likes == entry.like_count == 0

    @pytest.mark.asyncio
    async def test_follow_by_unknown_user(self):
        (bob_id,) = await _create_users("bob")
        async with get_session() as session:
            with pytest.raises(UserNotFound):
                await user_service.toggle_follow(session, 999, bob_id)
