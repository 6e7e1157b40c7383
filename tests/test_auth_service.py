"""
tests/test_auth_service.py — Accounts, Passwords & Tokens
==========================================================
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import jwt
import pytest

from eventscout.errors import Conflict, NotFound, Unauthorized
from eventscout.services import auth_service, user_service
from eventscout.services.auth_service import (
    EMAIL_TAKEN,
    INVALID_CREDENTIALS,
    USERNAME_TAKEN,
)

from conftest import TEST_CONFIG


# ===========================================================================
# Passwords
# ===========================================================================
class TestPasswords:
    def test_hash_is_not_plaintext_and_checks(self):
        hashed = auth_service.hash_password("s3cret", rounds=4)
        assert hashed != "s3cret"
        assert hashed.startswith("$2")
        assert auth_service.check_password("s3cret", hashed)
        assert not auth_service.check_password("wrong", hashed)

    def test_malformed_hash_is_rejected(self):
        assert not auth_service.check_password("s3cret", "not-a-bcrypt-hash")

    def test_long_password_is_truncated_not_refused(self):
        long_pw = "x" * 100
        hashed = auth_service.hash_password(long_pw, rounds=4)
        assert auth_service.check_password(long_pw, hashed)


# ===========================================================================
# Register / login
# ===========================================================================
class TestRegisterAndLogin:
    def test_register_returns_token_and_user(self, db_engine, jwt_secret):
        token, user = auth_service.register(
            db_engine,
            username="alice",
            email="Alice@Example.com",
            password="pa55word",
            cfg=TEST_CONFIG,
            secret=jwt_secret,
        )
        assert user.id is not None
        assert user.email == "alice@example.com"
        assert user.name == "alice"  # defaults to username
        assert user.password != "pa55word"
        assert auth_service.decode_token(token, secret=jwt_secret) == user.id

    def test_duplicate_email(self, make_user):
        make_user("alice", email="shared@example.com")
        with pytest.raises(Conflict, match=EMAIL_TAKEN):
            make_user("alice2", email="shared@example.com")

    def test_duplicate_username(self, make_user):
        make_user("alice")
        with pytest.raises(Conflict, match=USERNAME_TAKEN):
            make_user("alice", email="other@example.com")

    def test_username_lost_to_concurrent_signup(self, make_user, monkeypatch):
        """The pre-check sees nothing; the unique index rejects the insert."""
        make_user("alice")
        real_check = auth_service._taken_key_message
        calls = []

        def _stale_first_check(session, email, username):
            calls.append(username)
            return None if len(calls) == 1 else real_check(session, email, username)

        monkeypatch.setattr(auth_service, "_taken_key_message", _stale_first_check)
        with pytest.raises(Conflict) as exc:
            make_user("alice", email="other@example.com")
        assert exc.value.message == USERNAME_TAKEN
        assert len(calls) == 2

    def test_login_then_verify(self, db_engine, jwt_secret, make_user):
        _, user = make_user("alice", password="pa55word")
        token, logged_in = auth_service.login(
            db_engine, "alice@example.com", "pa55word", cfg=TEST_CONFIG, secret=jwt_secret
        )
        assert logged_in.id == user.id
        assert auth_service.verify_token(db_engine, token, secret=jwt_secret).id == user.id

    def test_wrong_password_and_unknown_email_look_the_same(self, db_engine, jwt_secret, make_user):
        make_user("alice", password="pa55word")
        with pytest.raises(Unauthorized) as wrong_pw:
            auth_service.login(
                db_engine, "alice@example.com", "nope", cfg=TEST_CONFIG, secret=jwt_secret
            )
        with pytest.raises(Unauthorized) as unknown:
            auth_service.login(
                db_engine, "ghost@example.com", "nope", cfg=TEST_CONFIG, secret=jwt_secret
            )
        assert wrong_pw.value.message == unknown.value.message == INVALID_CREDENTIALS


# ===========================================================================
# Tokens
# ===========================================================================
class TestTokens:
    def test_claims(self, jwt_secret, make_user):
        token, user = make_user("alice")
        payload = jwt.decode(token, jwt_secret, algorithms=["HS256"])
        assert payload["sub"] == str(user.id)
        assert payload["email"] == "alice@example.com"
        assert payload["username"] == "alice"
        assert payload["exp"] - payload["iat"] == TEST_CONFIG.token_ttl_hours * 3600

    def test_expired_token(self, jwt_secret, make_user):
        _, user = make_user("alice")
        token = auth_service.issue_token(
            user,
            secret=jwt_secret,
            ttl_hours=1,
            now=datetime.now(UTC) - timedelta(hours=2),
        )
        with pytest.raises(Unauthorized, match="Invalid token"):
            auth_service.decode_token(token, secret=jwt_secret)

    def test_wrong_signature(self, jwt_secret, make_user):
        _, user = make_user("alice")
        forged = auth_service.issue_token(user, secret="another-secret-" + "y" * 40, ttl_hours=1)
        with pytest.raises(Unauthorized):
            auth_service.decode_token(forged, secret=jwt_secret)

    def test_garbage_token(self, jwt_secret):
        with pytest.raises(Unauthorized):
            auth_service.decode_token("not.a.jwt", secret=jwt_secret)

    def test_deleted_user(self, db_engine, jwt_secret, make_user):
        token, user = make_user("alice")
        user_service.delete_user(db_engine, user.id)
        with pytest.raises(NotFound, match="User not found"):
            auth_service.verify_token(db_engine, token, secret=jwt_secret)
