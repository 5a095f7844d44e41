"""Access policy tests."""

import uuid

import pytest

from snippet_manager.models.snippet import Snippet
from snippet_manager.services import access_policy
from snippet_manager.services.identity import (
    AnonymousCaller,
    AuthenticatedCaller,
    GuestCaller,
    resolve_identity,
)

OWNER_ID = uuid.uuid4()
OTHER_ID = uuid.uuid4()


def make_snippet(is_public=True, owner_id=None, anonymous_id=None) -> Snippet:
    return Snippet(
        title="t",
        code="c",
        is_public=is_public,
        owner_id=owner_id,
        anonymous_id=anonymous_id,
    )


class TestResolveIdentity:
    """Tests for caller identity resolution."""

    def test_user_wins_over_anonymous_id(self):
        identity = resolve_identity(user_id=OWNER_ID, anonymous_id="anon-1")
        assert identity == AuthenticatedCaller(user_id=OWNER_ID)

    def test_anonymous_id(self):
        assert resolve_identity(anonymous_id=" anon-1 ") == AnonymousCaller(session_id="anon-1")

    def test_blank_anonymous_id_is_guest(self):
        assert resolve_identity(anonymous_id="   ") == GuestCaller()

    def test_nothing_is_guest(self):
        assert resolve_identity() == GuestCaller()


class TestCanView:
    """Tests for single-record visibility."""

    def test_public_visible_to_everyone(self):
        snippet = make_snippet(is_public=True, owner_id=OWNER_ID)
        for identity in (
            AuthenticatedCaller(OTHER_ID),
            AnonymousCaller("anon-2"),
            GuestCaller(),
        ):
            assert access_policy.can_view(snippet, identity)

    def test_private_owned_visible_only_to_owner(self):
        snippet = make_snippet(is_public=False, owner_id=OWNER_ID)
        assert access_policy.can_view(snippet, AuthenticatedCaller(OWNER_ID))
        assert not access_policy.can_view(snippet, AuthenticatedCaller(OTHER_ID))
        assert not access_policy.can_view(snippet, AnonymousCaller("anon-1"))
        assert not access_policy.can_view(snippet, GuestCaller())

    def test_private_anonymous_visible_only_to_session(self):
        snippet = make_snippet(is_public=False, anonymous_id="anon-1")
        assert access_policy.can_view(snippet, AnonymousCaller("anon-1"))
        assert not access_policy.can_view(snippet, AnonymousCaller("anon-2"))
        assert not access_policy.can_view(snippet, AuthenticatedCaller(OWNER_ID))
        assert not access_policy.can_view(snippet, GuestCaller())

    def test_anonymous_id_ignored_on_owned_snippet(self):
        snippet = make_snippet(is_public=False, owner_id=OWNER_ID, anonymous_id="anon-1")
        assert not access_policy.can_view(snippet, AnonymousCaller("anon-1"))


@pytest.mark.parametrize("strict_owner", [False, True])
class TestMutationRules:
    """Rules shared by both owner-check variants."""

    def test_owner_may_edit_and_delete_private(self, strict_owner):
        snippet = make_snippet(is_public=False, owner_id=OWNER_ID)
        identity = AuthenticatedCaller(OWNER_ID)
        assert access_policy.can_edit(snippet, identity, strict_owner=strict_owner)
        assert access_policy.can_delete(snippet, identity, strict_owner=strict_owner)

    def test_public_editable_by_anyone(self, strict_owner):
        snippet = make_snippet(is_public=True, anonymous_id="anon-1")
        for identity in (
            AuthenticatedCaller(OTHER_ID),
            AnonymousCaller("anon-2"),
            GuestCaller(),
        ):
            assert access_policy.can_edit(snippet, identity, strict_owner=strict_owner)

    def test_public_not_deletable_by_non_creator(self, strict_owner):
        snippet = make_snippet(is_public=True, anonymous_id="anon-1")
        assert not access_policy.can_delete(snippet, AnonymousCaller("anon-2"), strict_owner=strict_owner)
        assert not access_policy.can_delete(snippet, GuestCaller(), strict_owner=strict_owner)
        assert not access_policy.can_delete(
            snippet, AuthenticatedCaller(OTHER_ID), strict_owner=strict_owner
        )

    def test_anonymous_creator_may_edit_and_delete(self, strict_owner):
        snippet = make_snippet(is_public=False, anonymous_id="anon-1")
        identity = AnonymousCaller("anon-1")
        assert access_policy.can_edit(snippet, identity, strict_owner=strict_owner)
        assert access_policy.can_delete(snippet, identity, strict_owner=strict_owner)

    def test_other_session_may_not_touch_private_anonymous(self, strict_owner):
        snippet = make_snippet(is_public=False, anonymous_id="anon-1")
        identity = AnonymousCaller("anon-2")
        assert not access_policy.can_edit(snippet, identity, strict_owner=strict_owner)
        assert not access_policy.can_delete(snippet, identity, strict_owner=strict_owner)

    def test_guest_may_never_delete(self, strict_owner):
        for snippet in (
            make_snippet(is_public=True, owner_id=OWNER_ID),
            make_snippet(is_public=False, anonymous_id="anon-1"),
        ):
            assert not access_policy.can_delete(snippet, GuestCaller(), strict_owner=strict_owner)

    def test_authenticated_caller_may_not_touch_private_anonymous(self, strict_owner):
        snippet = make_snippet(is_public=False, anonymous_id="anon-1")
        identity = AuthenticatedCaller(OWNER_ID)
        assert not access_policy.can_edit(snippet, identity, strict_owner=strict_owner)
        assert not access_policy.can_delete(snippet, identity, strict_owner=strict_owner)


class TestOwnerCheckVariants:
    """The two readings of the owner clause differ only for other users' owned snippets."""

    def test_loose_owner_check_grants_any_authenticated_caller(self):
        snippet = make_snippet(is_public=False, owner_id=OWNER_ID)
        identity = AuthenticatedCaller(OTHER_ID)
        assert access_policy.can_edit(snippet, identity, strict_owner=False)
        assert access_policy.can_delete(snippet, identity, strict_owner=False)

    def test_strict_owner_check_requires_matching_owner(self):
        snippet = make_snippet(is_public=False, owner_id=OWNER_ID)
        identity = AuthenticatedCaller(OTHER_ID)
        assert not access_policy.can_edit(snippet, identity, strict_owner=True)
        assert not access_policy.can_delete(snippet, identity, strict_owner=True)

    def test_strict_owner_check_still_allows_public_edit(self):
        snippet = make_snippet(is_public=True, owner_id=OWNER_ID)
        identity = AuthenticatedCaller(OTHER_ID)
        assert access_policy.can_edit(snippet, identity, strict_owner=True)
        assert not access_policy.can_delete(snippet, identity, strict_owner=True)
