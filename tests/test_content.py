"""
Tests for the post, comment, category and user services.
"""

import pytest

from blogapi.auth.context import Claim
from blogapi.core.errors import Forbidden, NotFound, ValidationError
from blogapi.core.models import Role, toggle_like
from blogapi.storage import Collections

from tests.helpers import seed_comment, seed_post, seed_user


def claim_of(user) -> Claim:
    return Claim(user_id=user.id, role=user.role)


# =============================================================================
# Likes
# =============================================================================


class TestToggleLike:
    def test_involution(self):
        likes = ["a", "b"]

        assert toggle_like(toggle_like(likes, "c"), "c") == likes
        assert toggle_like(toggle_like(likes, "a"), "a") == ["b", "a"]

    def test_no_duplicates(self):
        assert toggle_like(["a"], "a") == []
        assert toggle_like([], "a") == ["a"]

    def test_input_untouched(self):
        likes = ["a"]
        toggle_like(likes, "b")
        assert likes == ["a"]

    @pytest.mark.asyncio
    async def test_service_like_unlike(self, state, image_file):
        alice = await seed_user(state.storage, "alice")
        bob = await seed_user(state.storage, "bob")
        post = await seed_post(state.storage, alice, image_file)

        liked = await state.posts.toggle_like(claim_of(bob), post.id)
        assert liked.likes == [bob.id]

        unliked = await state.posts.toggle_like(claim_of(bob), post.id)
        assert unliked.likes == []


# =============================================================================
# Posts
# =============================================================================


class TestPosts:
    @pytest.mark.asyncio
    async def test_create_sets_owner_and_image(self, state, blobs, image_file):
        alice = await seed_user(state.storage, "alice")

        post = await state.posts.create_post(
            claim_of(alice), "Hello", "Some description", "general", image_file
        )

        assert post.user_id == alice.id
        assert blobs.exists(post.image.public_id)

    @pytest.mark.asyncio
    async def test_get_embeds_author_and_comments(self, state, image_file):
        alice = await seed_user(state.storage, "alice")
        bob = await seed_user(state.storage, "bob")
        post = await seed_post(state.storage, alice, image_file)
        await seed_comment(state.storage, post, bob)

        detail = await state.posts.get_post(post.id)

        assert detail.user.id == alice.id
        assert not hasattr(detail.user, "password_hash")
        assert [c.user_id for c in detail.comments] == [bob.id]

    @pytest.mark.asyncio
    async def test_pagination_and_category(self, state, image_file):
        state.posts.posts_per_page = 2
        alice = await seed_user(state.storage, "alice")
        for i in range(5):
            await seed_post(state.storage, alice, image_file, title=f"post {i}")
        await state.storage.metadata.update(
            Collections.POSTS,
            (await state.storage.metadata.query(Collections.POSTS, limit=1))[0]["id"],
            {"category": "music"},
        )

        assert len(await state.posts.list_posts(page_number=1)) == 2
        assert len(await state.posts.list_posts(page_number=3)) == 1
        assert len(await state.posts.list_posts(category="music")) == 1
        assert len(await state.posts.list_posts()) == 5
        assert await state.posts.count_posts() == 5

    @pytest.mark.asyncio
    async def test_only_owner_edits(self, state, image_file):
        alice = await seed_user(state.storage, "alice")
        bob = await seed_user(state.storage, "bob")
        admin = await seed_user(state.storage, "admin", role=Role.ADMIN)
        post = await seed_post(state.storage, alice, image_file)

        for intruder in (bob, admin):
            with pytest.raises(Forbidden):
                await state.posts.update_post(claim_of(intruder), post.id, {"title": "Mine now"})

        updated = await state.posts.update_post(claim_of(alice), post.id, {"title": "Renamed"})
        assert updated.title == "Renamed"
        assert updated.user_id == alice.id

    @pytest.mark.asyncio
    async def test_update_image_replaces_blob(self, state, blobs, image_file):
        alice = await seed_user(state.storage, "alice")
        post = await seed_post(state.storage, alice, image_file)

        updated = await state.posts.update_image(claim_of(alice), post.id, image_file)

        assert updated.image.public_id != post.image.public_id
        assert not blobs.exists(post.image.public_id)
        assert blobs.exists(updated.image.public_id)

    @pytest.mark.asyncio
    async def test_delete_owner_or_admin(self, state, image_file):
        alice = await seed_user(state.storage, "alice")
        bob = await seed_user(state.storage, "bob")
        admin = await seed_user(state.storage, "admin", role=Role.ADMIN)
        first = await seed_post(state.storage, alice, image_file)
        second = await seed_post(state.storage, alice, image_file)

        with pytest.raises(Forbidden):
            await state.posts.delete_post(claim_of(bob), first.id)

        await state.posts.delete_post(claim_of(alice), first.id)
        await state.posts.delete_post(claim_of(admin), second.id)

        assert await state.posts.count_posts() == 0

    @pytest.mark.asyncio
    async def test_missing_post(self, state):
        with pytest.raises(NotFound):
            await state.posts.get_post("post_nope")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("page_number", [0, -1])
    async def test_page_number_must_be_positive(self, state, image_file, page_number):
        alice = await seed_user(state.storage, "alice")
        for _ in range(10):
            await seed_post(state.storage, alice, image_file)

        with pytest.raises(ValidationError):
            await state.posts.list_posts(page_number=page_number)

    @pytest.mark.asyncio
    async def test_deleted_account_cannot_create(self, state, image_file):
        alice = await seed_user(state.storage, "alice")
        bob = await seed_user(state.storage, "bob")
        bobs_post = await seed_post(state.storage, bob, image_file)
        await state.users.delete_user(alice.id)

        with pytest.raises(NotFound):
            await state.posts.create_post(
                claim_of(alice), "Ghost", "Written after deletion", "general", image_file
            )
        with pytest.raises(NotFound):
            await state.posts.toggle_like(claim_of(alice), bobs_post.id)
        with pytest.raises(NotFound):
            await state.categories.create_category(claim_of(alice), "ghosts")

        assert await state.storage.metadata.count(Collections.POSTS, {"user_id": alice.id}) == 0
        assert (await state.posts.get_model(bobs_post.id)).likes == []
        assert await state.categories.list_categories() == []


# =============================================================================
# Comments
# =============================================================================


class TestComments:
    @pytest.mark.asyncio
    async def test_create_copies_username(self, state, image_file):
        alice = await seed_user(state.storage, "alice")
        post = await seed_post(state.storage, alice, image_file)

        comment = await state.comments.create_comment(claim_of(alice), post.id, "First!")

        assert comment.username == "alice"
        assert comment.user_id == alice.id

    @pytest.mark.asyncio
    async def test_create_on_missing_post(self, state):
        alice = await seed_user(state.storage, "alice")

        with pytest.raises(NotFound):
            await state.comments.create_comment(claim_of(alice), "post_nope", "Hello")

    @pytest.mark.asyncio
    async def test_admin_can_delete_but_not_edit(self, state, image_file):
        alice = await seed_user(state.storage, "alice")
        admin = await seed_user(state.storage, "admin", role=Role.ADMIN)
        post = await seed_post(state.storage, alice, image_file)
        comment = await seed_comment(state.storage, post, alice)

        with pytest.raises(Forbidden):
            await state.comments.update_comment(claim_of(admin), comment.id, "moderated")

        await state.comments.delete_comment(claim_of(admin), comment.id)
        assert await state.storage.metadata.get(Collections.COMMENTS, comment.id) is None

    @pytest.mark.asyncio
    async def test_stranger_cannot_touch(self, state, image_file):
        alice = await seed_user(state.storage, "alice")
        bob = await seed_user(state.storage, "bob")
        post = await seed_post(state.storage, alice, image_file)
        comment = await seed_comment(state.storage, post, alice)

        with pytest.raises(Forbidden):
            await state.comments.update_comment(claim_of(bob), comment.id, "hijack")
        with pytest.raises(Forbidden):
            await state.comments.delete_comment(claim_of(bob), comment.id)

        edited = await state.comments.update_comment(claim_of(alice), comment.id, "edited")
        assert edited.text == "edited"


# =============================================================================
# Categories
# =============================================================================


class TestCategories:
    @pytest.mark.asyncio
    async def test_create_list_delete(self, state):
        alice = await seed_user(state.storage, "alice")

        category = await state.categories.create_category(claim_of(alice), "music")
        assert [c.title for c in await state.categories.list_categories()] == ["music"]

        deleted = await state.categories.delete_category(category.id)
        assert deleted.id == category.id
        assert await state.categories.list_categories() == []

        with pytest.raises(NotFound):
            await state.categories.delete_category(category.id)


# =============================================================================
# Users
# =============================================================================


class TestUsers:
    @pytest.mark.asyncio
    async def test_profile_embeds_posts(self, state, image_file):
        alice = await seed_user(state.storage, "alice")
        await seed_post(state.storage, alice, image_file)

        profile = await state.users.get_user(alice.id)

        assert profile.username == "alice"
        assert len(profile.posts) == 1

    @pytest.mark.asyncio
    async def test_update_rehashes_password(self, state):
        alice = await seed_user(state.storage, "alice")

        await state.users.update_user(alice.id, password="N3w-password", bio="hi")

        stored = await state.storage.metadata.get(Collections.USERS, alice.id)
        assert stored["bio"] == "hi"
        assert stored["password_hash"] != alice.password_hash
        assert "N3w-password" not in stored["password_hash"]

    @pytest.mark.asyncio
    async def test_profile_photo_replaces_previous(self, state, blobs, image_file):
        alice = await seed_user(state.storage, "alice")

        first = await state.users.upload_profile_photo(claim_of(alice), image_file)
        second = await state.users.upload_profile_photo(claim_of(alice), image_file)

        assert not blobs.exists(first.public_id)
        assert blobs.exists(second.public_id)

    @pytest.mark.asyncio
    async def test_count(self, state):
        await seed_user(state.storage, "alice")
        await seed_user(state.storage, "bob")

        assert await state.users.count_users() == 2
