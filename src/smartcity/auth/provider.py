"""Authentication provider Protocol and mock implementation."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

import yaml

from smartcity.auth.models import AuthCredentials, AuthResult, TokenValidation
from smartcity.repositories import resolve

logger = logging.getLogger(__name__)

_DEFAULT_FIXTURES_PATH = Path(__file__).resolve().parents[3] / "config" / "auth_fixtures.yml"


@runtime_checkable
class AuthProvider(Protocol):
    """Protocol for authentication providers."""

    async def authenticate(self, credentials: AuthCredentials) -> AuthResult: ...

    def validate_token(self, token: str) -> TokenValidation: ...

    def revoke_token(self, token: str) -> bool: ...


class MockAuthProvider:
    """Mock provider over the user directory.

    A user logs in with their email and a verification code. When the
    fixture file pins a code for that email it must match; otherwise any
    non-empty code is accepted. Inactive users are refused.
    """

    def __init__(
        self,
        directory: Any,
        fixtures_path: str | Path | None = None,
        token_expiry_minutes: int = 60,
    ) -> None:
        self._directory = directory
        self._codes: dict[str, str] = {}
        self._tokens: dict[str, dict[str, Any]] = {}
        self._token_expiry = timedelta(minutes=token_expiry_minutes)
        self._load_fixtures(Path(fixtures_path) if fixtures_path else _DEFAULT_FIXTURES_PATH)

    def _load_fixtures(self, path: Path) -> None:
        if not path.exists():
            return
        with open(path) as fh:
            data = yaml.safe_load(fh) or {}
        for entry in data.get("codes", []):
            self._codes[entry["email"].lower()] = str(entry["code"])

    async def authenticate(self, credentials: AuthCredentials) -> AuthResult:
        user = await resolve(self._directory.find_user_by_email(credentials.email))
        if user is None:
            return AuthResult(success=False, error="User not found")
        if not user.is_active:
            return AuthResult(success=False, error="User is inactive")

        if not credentials.code or not credentials.code.strip():
            return AuthResult(success=False, error="Verification code is required")

        expected_code = self._codes.get(user.email.lower(), "")
        if expected_code and credentials.code != expected_code:
            logger.info("Rejected login for %s: wrong verification code", user.id)
            return AuthResult(success=False, error="Invalid verification code")

        token = str(uuid.uuid4())
        self._tokens[token] = {
            "user_id": user.id,
            "role": user.role,
            "expires_at": datetime.now(timezone.utc) + self._token_expiry,
        }
        return AuthResult(
            success=True,
            token=token,
            user_id=user.id,
            role=user.role,
            display_name=user.full_name,
        )

    def validate_token(self, token: str) -> TokenValidation:
        info = self._tokens.get(token)
        if info is None:
            return TokenValidation(valid=False)

        if datetime.now(timezone.utc) > info["expires_at"]:
            del self._tokens[token]
            return TokenValidation(valid=False)

        return TokenValidation(
            valid=True,
            user_id=info["user_id"],
            role=info["role"],
            expires_at=info["expires_at"],
        )

    def revoke_token(self, token: str) -> bool:
        if token in self._tokens:
            del self._tokens[token]
            return True
        return False
