"""
Unit tests for core.security – hashing, tokens, client metadata.
"""
from datetime import timedelta

import pytest
from starlette.requests import Request

from core.errors import AuthenticationError
from core.security import (
    create_access_token,
    decode_access_token,
    get_client_ip,
    hash_password,
    validate_new_password,
    verify_password,
)


def _request(headers=None, client=("10.0.0.9", 1234)):
    scope = {
        "type": "http",
        "method": "GET",
        "path": "/",
        "headers": [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()],
        "client": client,
    }
    return Request(scope)


class TestPasswordHashing:

    def test_hash_is_salted(self):
        assert hash_password("Secret123") != hash_password("Secret123")

    def test_verify(self):
        hashed = hash_password("Secret123")
        assert verify_password("Secret123", hashed) is True
        assert verify_password("Secret124", hashed) is False

    def test_malformed_hash_is_a_mismatch(self):
        assert verify_password("Secret123", "not-a-hash") is False

    @pytest.mark.parametrize("pw", ["Sh0rt", "alllowercase1", "ALLUPPERCASE1", "NoDigitsHere"])
    def test_weak_passwords(self, pw):
        assert validate_new_password(pw) is not None

    def test_strong_password(self):
        assert validate_new_password("Str0ngEnough") is None


class TestTokens:

    def test_round_trip(self):
        token, expires_at = create_access_token({"sub": "a@mailbox.org", "user_id": 1, "role": "author"})
        payload = decode_access_token(token)
        assert payload["user_id"] == 1
        assert payload["role"] == "author"
        assert int(expires_at.timestamp()) == payload["exp"]

    def test_expired_token(self):
        token, _ = create_access_token({"user_id": 1}, expires_delta=timedelta(seconds=-5))
        with pytest.raises(AuthenticationError) as exc:
            decode_access_token(token)
        assert exc.value.reason == "session_expired"

    def test_tampered_token(self):
        token, _ = create_access_token({"user_id": 1})
        with pytest.raises(AuthenticationError) as exc:
            decode_access_token(token[:-2] + ("aa" if not token.endswith("aa") else "bb"))
        assert exc.value.reason == "invalid_token"


class TestClientIp:

    def test_forwarded_header_wins(self):
        req = _request({"X-Forwarded-For": "203.0.113.5, 10.0.0.1"})
        assert get_client_ip(req) == "203.0.113.5"

    def test_ipv4_mapped_address_is_unwrapped(self):
        assert get_client_ip(_request(client=("::ffff:192.0.2.7", 80))) == "192.0.2.7"

    def test_falls_back_to_peer(self):
        assert get_client_ip(_request()) == "10.0.0.9"

    def test_unknown_without_peer(self):
        assert get_client_ip(_request(client=None)) == "unknown"
