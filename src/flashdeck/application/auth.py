"""
Session and API-token authentication.

A session token is base64(JSON {username, issued_at}) + "." + HMAC-SHA256 hex digest,
signed with the configured session secret. A request is authenticated when it carries
a valid, unexpired session token OR an `Authorization: Bearer <api_token>` header that
matches the configured API token.
"""

import base64
import binascii
import hashlib
import hmac
import json
import logging
from datetime import datetime

logger = logging.getLogger(__name__)


class SessionManager:
    def __init__(
        self,
        username: str,
        password: str,
        secret: str,
        max_age: int,
        api_token: str | None = None,
    ):
        self._username = username
        self._password = password
        self._secret = secret.encode("utf-8")
        self._api_token = api_token
        self.max_age = max_age

    def _sign(self, payload: bytes) -> str:
        return hmac.new(self._secret, payload, hashlib.sha256).hexdigest()

    def validate_credentials(self, username: str, password: str) -> bool:
        return _same(username, self._username) and _same(password, self._password)

    def validate_api_token(self, token: str) -> bool:
        if not self._api_token or not token:
            return False
        return _same(token, self._api_token)

    def create_session(self, username: str, now: datetime) -> str:
        payload = json.dumps(
            {"username": username, "issued_at": int(now.timestamp())},
            separators=(",", ":"),
        ).encode("utf-8")
        encoded = base64.urlsafe_b64encode(payload).decode("ascii")
        return f"{encoded}.{self._sign(payload)}"

    def verify_session(self, token: str | None, now: datetime) -> str | None:
        """Return the session's username, or None if the token is absent, forged or expired."""
        if not token or "." not in token:
            return None
        encoded, signature = token.rsplit(".", 1)
        try:
            payload = base64.urlsafe_b64decode(encoded.encode("ascii"))
            session = json.loads(payload)
            username = session["username"]
            issued_at = int(session["issued_at"])
        except (binascii.Error, UnicodeError, ValueError, KeyError, TypeError):
            logger.debug("Ignoring malformed session token")
            return None

        if not _same(signature, self._sign(payload)):
            return None
        if now.timestamp() - issued_at > self.max_age:
            return None
        return username

    def check_auth(
        self,
        session_token: str | None,
        authorization: str | None,
        now: datetime,
    ) -> bool:
        if self.verify_session(session_token, now) is not None:
            return True
        token = bearer_token(authorization)
        return token is not None and self.validate_api_token(token)


def _same(given: str, expected: str) -> bool:
    return hmac.compare_digest(given.encode("utf-8"), expected.encode("utf-8"))


def bearer_token(authorization: str | None) -> str | None:
    """Extract the token from an Authorization header. Malformed headers mean no token."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme != "Bearer" or not token.strip():
        return None
    return token.strip()
