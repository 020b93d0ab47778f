"""Bearer token codec: asymmetric JWT signing and verification."""

import time
import uuid
from dataclasses import dataclass, field
from typing import Any

import jwt
from jwt.exceptions import PyJWTError

from adminpanel.core import settings


class TokenError(Exception):
    """JWT token error."""

    pass


class TokenExpiredError(TokenError):
    """JWT token has expired."""

    pass


class InvalidTokenError(TokenError):
    """JWT token is malformed, badly signed, or carries unusable claims."""

    pass


@dataclass(frozen=True)
class TokenClaims:
    """Identity claims carried by an access token.

    ``roles`` is informational: authorization re-resolves permissions from
    current state and only uses the claim to spot the admin shortcut.
    """

    uid: uuid.UUID
    pv: int
    roles: tuple[str, ...] = field(default_factory=tuple)
    iat: int | None = None
    exp: int | None = None

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"uid": str(self.uid), "pv": self.pv, "roles": list(self.roles)}
        if self.iat is not None:
            payload["iat"] = self.iat
        if self.exp is not None:
            payload["exp"] = self.exp
        return payload

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "TokenClaims":
        try:
            uid = uuid.UUID(str(payload["uid"]))
            pv = int(payload["pv"])
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidTokenError("Token missing identity claims") from e
        roles = payload.get("roles") or []
        if not isinstance(roles, list):
            raise InvalidTokenError("Token roles claim must be a list")
        return cls(
            uid=uid,
            pv=pv,
            roles=tuple(str(r) for r in roles),
            iat=payload.get("iat"),
            exp=payload.get("exp"),
        )

    def remaining_seconds(self, now: float | None = None) -> int | None:
        """Seconds until expiry, or None when the token has no exp claim."""
        if self.exp is None:
            return None
        now = time.time() if now is None else now
        return max(0, int(self.exp - now))


class TokenCodec:
    """Signs with the private key, verifies with the public key. Stateless."""

    def __init__(
        self,
        private_key: str,
        public_key: str,
        algorithm: str = "RS256",
        expires_in: int = 86400,
    ):
        self.private_key = private_key
        self.public_key = public_key
        self.algorithm = algorithm
        self.expires_in = expires_in

    def sign(self, claims: TokenClaims) -> str:
        """Issue a token; iat/exp are stamped here unless already set."""
        if not self.private_key:
            raise TokenError("JWT private key is not configured")
        now = int(time.time())
        payload = claims.to_payload()
        payload.setdefault("iat", now)
        payload.setdefault("exp", payload["iat"] + self.expires_in)
        token = jwt.encode(payload, self.private_key, algorithm=self.algorithm)
        # PyJWT 2.x returns str; older type stubs may declare bytes
        return str(token)

    def verify(self, token: str) -> TokenClaims:
        """Verify signature and expiry, returning the decoded claims."""
        if not self.public_key:
            raise TokenError("JWT public key is not configured")
        try:
            payload = jwt.decode(
                token,
                self.public_key,
                algorithms=[self.algorithm],
                options={"require": ["exp", "iat"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise TokenExpiredError("Token has expired") from e
        except PyJWTError as e:
            raise InvalidTokenError(f"Invalid token: {e}") from e
        return TokenClaims.from_payload(payload)


def get_token_codec() -> TokenCodec:
    """Codec built from application settings."""
    return TokenCodec(
        private_key=settings.jwt_private_key,
        public_key=settings.jwt_public_key,
        algorithm=settings.jwt_algorithm,
        expires_in=settings.jwt_expiration_seconds,
    )
