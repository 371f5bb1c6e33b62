"""Unit tests for BearerTokenParser."""

from datetime import datetime, timedelta, timezone

import base64
import json

import jwt
import pytest

from bridge_auth import BearerTokenParser, InvalidTokenError

NOW = datetime(2025, 1, 1, tzinfo=timezone.utc)


def _token(claims: dict) -> str:
    return jwt.encode(claims, "provider-key", algorithm="HS256")


def _segment(data: dict) -> str:
    raw = json.dumps(data).encode()
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode()


class TestBearerTokenParser:
    def setup_method(self):
        self.parser = BearerTokenParser(clock=lambda: NOW)

    def test_parses_subject_from_sub(self):
        claims = self.parser.parse(_token({"sub": "42"}))

        assert claims.subject == "42"
        assert claims.header["alg"] == "HS256"

    def test_accepts_bearer_prefix(self):
        claims = self.parser.parse("Bearer " + _token({"userId": 7}))

        assert claims.subject == "7"

    @pytest.mark.parametrize("key", ["user_id", "id"])
    def test_falls_back_to_other_subject_claims(self, key):
        assert self.parser.parse(_token({key: "abc"})).subject == "abc"

    def test_reads_expiry(self):
        exp = NOW + timedelta(hours=1)

        claims = self.parser.parse(_token({"sub": "1", "exp": int(exp.timestamp())}))

        assert claims.expires_at == exp

    def test_rejects_expired_token(self):
        exp = NOW - timedelta(seconds=1)

        with pytest.raises(InvalidTokenError, match="expired"):
            self.parser.parse(_token({"sub": "1", "exp": int(exp.timestamp())}))

    @pytest.mark.parametrize("token", [None, "", "abc", "a.b", "a..c", "..."])
    def test_rejects_malformed_tokens(self, token):
        with pytest.raises(InvalidTokenError):
            self.parser.parse(token)

    def test_rejects_token_without_subject(self):
        with pytest.raises(InvalidTokenError, match="no subject"):
            self.parser.parse(_token({"role": "admin"}))

    def test_signature_is_not_verified(self):
        token = jwt.encode({"sub": "99"}, "some-other-key", algorithm="HS256")

        assert self.parser.parse(token).subject == "99"

    def test_rejects_non_string_key_id(self):
        token = ".".join(
            [
                _segment({"alg": "HS256", "typ": "JWT", "kid": 123}),
                _segment({"sub": "1"}),
                "c2ln",
            ],
        )

        with pytest.raises(InvalidTokenError, match="Malformed token"):
            self.parser.parse(token)

    def test_rejects_out_of_range_expiry(self):
        with pytest.raises(InvalidTokenError, match="expiry"):
            self.parser.parse(_token({"sub": "1", "exp": 10**20}))
