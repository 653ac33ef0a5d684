"""Stateless HMAC-signed admin tokens.

A token is ``<payload>.<signature>``: the payload is base64url JSON
``{"email", "role", "iat", "exp"}`` and the signature is base64url
HMAC-SHA256 of the payload segment under the server secret. Nothing is
stored server side, so a token stays valid until it expires.
"""

import base64
import binascii
import hashlib
import hmac
import json
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum

from commission_desk.domain.errors import (
    InvalidCredentialsError,
    InvalidTokenError,
    ValidationError,
)
from commission_desk.domain.records import AdminSession

ADMIN_ROLE = "admin"


class TokenStatus(StrEnum):
    """Outcome of verifying a token."""

    VALID = "valid"
    INVALID = "invalid"
    MALFORMED = "malformed"


@dataclass(frozen=True)
class TokenCheck:
    """Result of ``TokenService.verify``."""

    status: TokenStatus
    session: AdminSession | None = None

    @property
    def ok(self) -> bool:
        return self.status is TokenStatus.VALID


@dataclass
class TokenService:
    """Issues and verifies admin tokens and checks admin credentials."""

    secret: str
    admin_email: str
    admin_password: str
    ttl_seconds: int
    clock: Callable[[], float] = time.time

    def login(self, email: str | None, password: str | None) -> str:
        """Check admin credentials and return a fresh token."""
        if not email or not password or not email.strip():
            raise ValidationError("Missing fields")
        email_ok = hmac.compare_digest(
            email.strip().lower().encode(), self.admin_email.strip().lower().encode()
        )
        password_ok = hmac.compare_digest(
            password.encode(), self.admin_password.encode()
        )
        if not (email_ok and password_ok):
            raise InvalidCredentialsError()
        return self.issue(self.admin_email)

    def issue(self, email: str) -> str:
        """Return a signed token for ``email``."""
        issued_at = int(self.clock())
        payload = {
            "email": email,
            "role": ADMIN_ROLE,
            "iat": issued_at,
            "exp": issued_at + self.ttl_seconds,
        }
        body = _b64encode(
            json.dumps(payload, separators=(",", ":"), sort_keys=True).encode()
        )
        return f"{body}.{self._sign(body)}"

    def verify(self, token: str | None) -> TokenCheck:
        """Check signature and expiry; never raises."""
        if not token or not isinstance(token, str):
            return TokenCheck(TokenStatus.MALFORMED)
        parts = token.split(".")
        if len(parts) != 2 or not all(parts):  # noqa: PLR2004
            return TokenCheck(TokenStatus.MALFORMED)
        body, signature = parts
        if not hmac.compare_digest(signature.encode(), self._sign(body).encode()):
            return TokenCheck(TokenStatus.INVALID)
        try:
            payload = json.loads(_b64decode(body))
        except (binascii.Error, UnicodeDecodeError, ValueError):
            return TokenCheck(TokenStatus.MALFORMED)
        session = _session_from_payload(payload)
        if session is None:
            return TokenCheck(TokenStatus.MALFORMED)
        if session.role != ADMIN_ROLE or self.clock() >= session.expires_at:
            return TokenCheck(TokenStatus.INVALID)
        return TokenCheck(TokenStatus.VALID, session)

    def require_session(self, token: str | None) -> AdminSession:
        """Return the admin session for ``token`` or raise InvalidTokenError."""
        check = self.verify(token)
        if check.session is None or not check.ok:
            raise InvalidTokenError()
        return check.session

    def _sign(self, body: str) -> str:
        digest = hmac.new(self.secret.encode(), body.encode(), hashlib.sha256).digest()
        return _b64encode(digest)


def _session_from_payload(payload: object) -> AdminSession | None:
    if not isinstance(payload, dict):
        return None
    email = payload.get("email")
    role = payload.get("role")
    issued_at = payload.get("iat")
    expires_at = payload.get("exp")
    if not isinstance(email, str) or not isinstance(role, str):
        return None
    if not isinstance(issued_at, int) or not isinstance(expires_at, int):
        return None
    return AdminSession(
        email=email, role=role, issued_at=issued_at, expires_at=expires_at
    )


def _b64encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _b64decode(segment: str) -> bytes:
    padded = segment + "=" * (-len(segment) % 4)
    return base64.urlsafe_b64decode(padded.encode("ascii"))
