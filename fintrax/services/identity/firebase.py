"""
Firebase Authentication (Identity Toolkit REST API) implementation.

Talks to the same email/password accounts the web client used. REST error
strings (EMAIL_EXISTS, INVALID_PASSWORD, ...) are translated into the SDK
error codes the rest of the app understands.
"""

from typing import Any, Optional

import requests

from fintrax.audit.structured import get_logger
from fintrax.config import FirebaseSettings, get_settings
from fintrax.models.account import Identity
from fintrax.services.identity.interface import (
    IdentityError,
    IdentityProviderInterface,
)


logger = get_logger("fintrax.identity")


# REST error message -> SDK error code
REST_ERROR_CODES = {
    "EMAIL_EXISTS": "email-already-in-use",
    "EMAIL_NOT_FOUND": "user-not-found",
    "INVALID_PASSWORD": "wrong-password",
    "INVALID_LOGIN_CREDENTIALS": "invalid-credential",
    "USER_DISABLED": "user-disabled",
    "TOO_MANY_ATTEMPTS_TRY_LATER": "too-many-requests",
    "WEAK_PASSWORD": "weak-password",
    "INVALID_EMAIL": "invalid-email",
    "MISSING_PASSWORD": "wrong-password",
    "CREDENTIAL_TOO_OLD_LOGIN_AGAIN": "requires-recent-login",
    "INVALID_ID_TOKEN": "requires-recent-login",
    "TOKEN_EXPIRED": "requires-recent-login",
}


def translate_rest_error(message: str) -> str:
    """'WEAK_PASSWORD : Password should be...' -> 'weak-password'."""
    key = message.split(":", 1)[0].strip().upper()
    return REST_ERROR_CODES.get(key, "internal-error")


class FirebaseIdentityProvider(IdentityProviderInterface):
    """
    Email/password identity backed by Firebase Authentication.

    Holds the current session (uid, email, ID token) in memory.
    """

    def __init__(
        self,
        settings: Optional[FirebaseSettings] = None,
        session: Optional[requests.Session] = None,
    ):
        self._settings = settings or get_settings().firebase
        self._http = session or requests.Session()
        self._identity: Optional[Identity] = None
        self._id_token: Optional[str] = None

    def _post(self, endpoint: str, payload: dict[str, Any]) -> dict[str, Any]:
        url = f"{self._settings.auth_base_url}/accounts:{endpoint}"
        try:
            response = self._http.post(
                url,
                params={"key": self._settings.api_key},
                json=payload,
                timeout=self._settings.request_timeout_seconds,
            )
        except requests.RequestException as e:
            logger.warning("identity_request_failed", endpoint=endpoint, error=str(e))
            raise IdentityError("network-request-failed", str(e)) from e

        try:
            body = response.json()
        except ValueError:
            body = {}

        if not response.ok:
            message = (body.get("error") or {}).get("message", f"HTTP {response.status_code}")
            code = translate_rest_error(message)
            logger.info("identity_request_rejected", endpoint=endpoint, code=code)
            raise IdentityError(code, message)

        return body

    def _start_session(self, body: dict[str, Any], email: str) -> Identity:
        self._identity = Identity(uid=body["localId"], email=body.get("email") or email)
        self._id_token = body.get("idToken")
        return self._identity

    def _require_session(self) -> str:
        if self._identity is None or not self._id_token:
            raise IdentityError("requires-recent-login", "No signed-in user")
        return self._id_token

    async def sign_up(self, email: str, password: str) -> Identity:
        body = self._post(
            "signUp",
            {"email": email, "password": password, "returnSecureToken": True},
        )
        return self._start_session(body, email)

    async def sign_in(self, email: str, password: str) -> Identity:
        body = self._post(
            "signInWithPassword",
            {"email": email, "password": password, "returnSecureToken": True},
        )
        return self._start_session(body, email)

    async def sign_out(self) -> None:
        self._identity = None
        self._id_token = None

    async def send_password_reset(self, email: str) -> None:
        self._post("sendOobCode", {"requestType": "PASSWORD_RESET", "email": email})

    async def reauthenticate(self, password: str) -> Identity:
        self._require_session()
        email = self._identity.email
        body = self._post(
            "signInWithPassword",
            {"email": email, "password": password, "returnSecureToken": True},
        )
        if body.get("localId") != self._identity.uid:
            raise IdentityError("user-mismatch", "Re-authenticated as a different user")
        return self._start_session(body, email)

    async def change_password(self, new_password: str) -> None:
        token = self._require_session()
        body = self._post(
            "update",
            {"idToken": token, "password": new_password, "returnSecureToken": True},
        )
        self._id_token = body.get("idToken", token)

    async def delete_identity(self) -> None:
        token = self._require_session()
        self._post("delete", {"idToken": token})
        await self.sign_out()

    def current_identity(self) -> Optional[Identity]:
        return self._identity
