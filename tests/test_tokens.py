"""Tests for the bearer token codec."""

import time
import uuid

import jwt
import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from adminpanel.services.tokens import (
    InvalidTokenError,
    TokenClaims,
    TokenCodec,
    TokenError,
    TokenExpiredError,
)


def _other_private_key() -> str:
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    return key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode()


class TestSignAndVerify:
    def test_signed_claims_verify(self, codec):
        uid = uuid.uuid4()
        token = codec.sign(TokenClaims(uid=uid, pv=3, roles=("admin", "ops")))

        claims = codec.verify(token)
        assert claims.uid == uid
        assert claims.pv == 3
        assert claims.roles == ("admin", "ops")

    def test_sign_stamps_iat_and_exp(self, codec):
        before = int(time.time())
        claims = codec.verify(codec.sign(TokenClaims(uid=uuid.uuid4(), pv=1)))

        assert claims.iat >= before
        assert claims.exp == claims.iat + codec.expires_in

    def test_token_is_rs256(self, codec):
        token = codec.sign(TokenClaims(uid=uuid.uuid4(), pv=1))
        assert jwt.get_unverified_header(token)["alg"] == "RS256"

    def test_signing_is_stateless(self, codec):
        """Two codecs built from the same keys accept each other's tokens."""
        other = TokenCodec(codec.private_key, codec.public_key)
        token = codec.sign(TokenClaims(uid=uuid.uuid4(), pv=1))
        assert other.verify(token).pv == 1


class TestVerifyFailures:
    def test_expired_token(self, codec):
        now = int(time.time())
        token = codec.sign(TokenClaims(uid=uuid.uuid4(), pv=1, iat=now - 7200, exp=now - 3600))

        with pytest.raises(TokenExpiredError):
            codec.verify(token)

    def test_token_from_another_key(self, codec):
        forged = jwt.encode(
            {"uid": str(uuid.uuid4()), "pv": 1, "iat": int(time.time()), "exp": int(time.time()) + 60},
            _other_private_key(),
            algorithm="RS256",
        )
        with pytest.raises(InvalidTokenError):
            codec.verify(forged)

    def test_garbage_token(self, codec):
        with pytest.raises(InvalidTokenError):
            codec.verify("not-a-jwt")

    def test_missing_expiry_is_rejected(self, codec):
        token = jwt.encode(
            {"uid": str(uuid.uuid4()), "pv": 1, "iat": int(time.time())},
            codec.private_key,
            algorithm="RS256",
        )
        with pytest.raises(InvalidTokenError):
            codec.verify(token)

    def test_missing_identity_claims_are_rejected(self, codec):
        now = int(time.time())
        token = jwt.encode({"pv": 1, "iat": now, "exp": now + 60}, codec.private_key, algorithm="RS256")
        with pytest.raises(InvalidTokenError):
            codec.verify(token)

    def test_expired_is_a_token_error(self):
        assert issubclass(TokenExpiredError, TokenError)
        assert issubclass(InvalidTokenError, TokenError)

    def test_unconfigured_keys(self):
        codec = TokenCodec(private_key="", public_key="")
        with pytest.raises(TokenError):
            codec.sign(TokenClaims(uid=uuid.uuid4(), pv=1))
        with pytest.raises(TokenError):
            codec.verify("anything")


class TestTokenClaims:
    def test_from_payload_rejects_bad_uid(self):
        with pytest.raises(InvalidTokenError):
            TokenClaims.from_payload({"uid": "not-a-uuid", "pv": 1})

    def test_from_payload_rejects_non_list_roles(self):
        with pytest.raises(InvalidTokenError):
            TokenClaims.from_payload({"uid": str(uuid.uuid4()), "pv": 1, "roles": "admin"})

    def test_from_payload_defaults_roles(self):
        claims = TokenClaims.from_payload({"uid": str(uuid.uuid4()), "pv": "2"})
        assert claims.roles == ()
        assert claims.pv == 2

    def test_payload_omits_unset_timestamps(self):
        payload = TokenClaims(uid=uuid.uuid4(), pv=1).to_payload()
        assert "iat" not in payload
        assert "exp" not in payload

    def test_remaining_seconds(self):
        claims = TokenClaims(uid=uuid.uuid4(), pv=1, iat=0, exp=1000)
        assert claims.remaining_seconds(now=400) == 600
        assert claims.remaining_seconds(now=2000) == 0
        assert TokenClaims(uid=uuid.uuid4(), pv=1).remaining_seconds() is None
