"""Tests for JWT handling and role checks"""

import pytest
from authlib.jose.errors import InvalidTokenError

from competition_manager.auth.jwt_utils import JWTUtils
from competition_manager.auth.models import User, can_view_user, is_admin
from competition_manager.config import config


class TestJWTUtils:
    def test_token_round_trip(self):
        utils = JWTUtils(secret="unit-test-secret")

        token = utils.create_access_token("user-42", role="admin")
        user = utils.extract_user(token)

        assert user.user_id == "user-42"
        assert user.role == "admin"
        assert user.claims["exp"] > user.claims["iat"]

    def test_default_role_is_user(self):
        utils = JWTUtils(secret="unit-test-secret")

        user = utils.extract_user(utils.create_access_token("user-42"))

        assert user.role == "user"

    def test_wrong_secret_rejected(self):
        token = JWTUtils(secret="one-secret").create_access_token("user-42")

        with pytest.raises(InvalidTokenError):
            JWTUtils(secret="another-secret").extract_user(token)

    def test_expired_token_rejected(self):
        utils = JWTUtils(secret="unit-test-secret", expire_minutes=-5)
        token = utils.create_access_token("user-42")

        with pytest.raises(InvalidTokenError):
            utils.extract_user(token)

    def test_garbage_token_rejected(self):
        with pytest.raises(InvalidTokenError):
            JWTUtils(secret="unit-test-secret").extract_user("not-a-jwt")

    def test_missing_secret(self, monkeypatch):
        monkeypatch.setitem(config, "jwt_secret", None)

        with pytest.raises(InvalidTokenError):
            JWTUtils().create_access_token("user-42")


class TestRoles:
    def test_admin_can_view_anyone(self):
        admin = User(user_id="admin-1", claims={"role": "admin"})

        assert is_admin(admin)
        assert can_view_user(admin, "user-7")

    def test_user_can_only_view_self(self):
        user = User(user_id="user-7", claims={"role": "user"})

        assert not is_admin(user)
        assert can_view_user(user, "user-7")
        assert not can_view_user(user, "user-8")

    def test_missing_role_claim_means_user(self):
        assert User(user_id="user-7", claims={}).role == "user"
