"""Google sign-in verification and session token handling."""
from __future__ import annotations

import datetime
import logging
from typing import Any, Callable, Dict

import jwt
from google.auth.transport import requests as google_requests
from google.oauth2 import id_token

from flowpad.domain.errors import AuthenticationError, ValidationError

logger = logging.getLogger(__name__)

GoogleVerifier = Callable[[str, str], Dict[str, Any]]


def verify_google_id_token(token: str, client_id: str) -> Dict[str, Any]:
    """Check a Google ID token's signature, expiry and audience."""
    return id_token.verify_oauth2_token(token, google_requests.Request(), client_id)


class AuthService:
    """Turns a Google ID token into a Flowpad session JWT and back."""

    algorithm = "HS256"

    def __init__(
        self,
        secret: str,
        google_client_id: str,
        expires_in_days: int = 7,
        verifier: GoogleVerifier = verify_google_id_token,
    ) -> None:
        self._secret = secret
        self._client_id = google_client_id
        self._expires_in_days = expires_in_days
        self._verifier = verifier

    @property
    def expires_in_seconds(self) -> int:
        return self._expires_in_days * 24 * 60 * 60

    def verify_google_credential(self, credential: str) -> Dict[str, str]:
        """
        Verify a Google ID token.

        Returns:
            ``google_id``, ``email`` and ``name`` of the signed-in account

        Raises:
            ValidationError if no token was supplied
            AuthenticationError if Google rejects it
        """
        if not credential:
            raise ValidationError("Missing idToken")
        if not self._client_id:
            raise AuthenticationError("Google sign-in is not configured")
        try:
            payload = self._verifier(credential, self._client_id)
        except ValueError as exc:
            logger.warning(f"Google token rejected: {exc}")
            raise AuthenticationError("Invalid Google token") from exc

        if payload.get("aud") != self._client_id:
            raise AuthenticationError("Invalid token audience")
        if not payload.get("sub") or not payload.get("email"):
            raise AuthenticationError("Google token is missing subject or email")
        return {
            "google_id": payload["sub"],
            "email": payload["email"],
            "name": payload.get("name") or payload["email"],
        }

    def create_token(self, user_id: int) -> str:
        now = datetime.datetime.now(datetime.timezone.utc)
        payload = {
            "userId": user_id,
            "iat": now,
            "exp": now + datetime.timedelta(days=self._expires_in_days),
        }
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def decode_token(self, token: str) -> int:
        """Return the user id carried by a session token."""
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self.algorithm])
        except jwt.ExpiredSignatureError as exc:
            raise AuthenticationError("Token has expired") from exc
        except jwt.InvalidTokenError as exc:
            raise AuthenticationError("Invalid token") from exc

        user_id = payload.get("userId")
        if not isinstance(user_id, int):
            raise AuthenticationError("Invalid token")
        return user_id
