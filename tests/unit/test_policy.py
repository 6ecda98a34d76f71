"""
Unit tests for core.policy – role ordering, action checks, page rules.
"""
import itertools
from types import SimpleNamespace

import pytest

from core.errors import AuthenticationError, AuthorizationError, ValidationError
from core.policy import (
    Action,
    Role,
    authorize,
    ensure_not_self,
    has_role,
    required_role_for_path,
)

RANKS = {"reader": 0, "author": 1, "admin": 2, "super_admin": 3}


def _user(role: str, user_id: int = 1):
    return SimpleNamespace(id=user_id, role=role)


class TestRoleHierarchy:

    @pytest.mark.parametrize("subject,required", list(itertools.product(RANKS, RANKS)))
    def test_has_role_matches_rank_order(self, subject, required):
        assert has_role(subject, required) is (RANKS[subject] >= RANKS[required])

    def test_enum_members_and_strings_are_interchangeable(self):
        assert has_role(Role.ADMIN, "author")
        assert not has_role("author", Role.ADMIN)

    def test_unknown_role_is_treated_as_reader(self):
        assert Role.parse("owner") is Role.READER
        assert not has_role("owner", Role.AUTHOR)


class TestAuthorize:

    def test_no_user_is_unauthenticated(self):
        with pytest.raises(AuthenticationError) as exc:
            authorize(None, Action.CREATE_POST)
        assert exc.value.reason == "no_session"

    def test_reader_cannot_enter_admin(self):
        with pytest.raises(AuthorizationError) as exc:
            authorize(_user("reader"), Action.ACCESS_ADMIN)
        assert exc.value.reason == "insufficient_role"

    def test_author_can_create_but_not_delete(self):
        author = _user("author")
        assert authorize(author, Action.CREATE_POST) is author
        with pytest.raises(AuthorizationError):
            authorize(author, Action.DELETE_POST)

    def test_author_limited_to_own_posts(self):
        author = _user("author", user_id=7)
        authorize(author, Action.UPDATE_POST, owner_id=7, check_owner=True)
        with pytest.raises(AuthorizationError) as exc:
            authorize(author, Action.UPDATE_POST, owner_id=8, check_owner=True)
        assert exc.value.reason == "not_owner"

    @pytest.mark.parametrize("action", [Action.READ_POST, Action.UPDATE_POST])
    def test_authorless_post_is_not_the_authors(self, action):
        with pytest.raises(AuthorizationError) as exc:
            authorize(_user("author", user_id=7), action, owner_id=None, check_owner=True)
        assert exc.value.reason == "not_owner"

    def test_authorless_post_is_open_to_admins(self):
        authorize(_user("admin"), Action.UPDATE_POST, owner_id=None, check_owner=True)

    @pytest.mark.parametrize("role", ["admin", "super_admin"])
    def test_admins_bypass_ownership(self, role):
        authorize(_user(role, user_id=1), Action.UPDATE_POST, owner_id=99, check_owner=True)
        authorize(_user(role, user_id=1), Action.READ_POST, owner_id=99, check_owner=True)

    def test_admin_cannot_moderate_comments(self):
        with pytest.raises(AuthorizationError):
            authorize(_user("admin"), Action.MODERATE_COMMENTS)

    def test_super_admin_can_do_everything(self):
        for action in Action:
            authorize(_user("super_admin"), action, owner_id=123, check_owner=True)


class TestSelfProtection:

    def test_changing_own_role_is_rejected(self):
        with pytest.raises(ValidationError):
            ensure_not_self(_user("super_admin", user_id=5), 5)

    def test_changing_someone_else_is_fine(self):
        ensure_not_self(_user("super_admin", user_id=5), 6)


class TestPageRules:

    @pytest.mark.parametrize("path", ["/", "/posts/hello", "/tags", "/administrator", "/admin/login"])
    def test_public_paths(self, path):
        assert required_role_for_path(path) is None

    @pytest.mark.parametrize("path", ["/admin", "/admin/dashboard", "/admin/posts/3/edit"])
    def test_admin_paths_need_author(self, path):
        assert required_role_for_path(path) is Role.AUTHOR

    @pytest.mark.parametrize("path", ["/admin/users", "/admin/settings", "/admin/tags", "/admin/comments"])
    def test_super_admin_paths(self, path):
        assert required_role_for_path(path) is Role.SUPER_ADMIN
