"""
Authentication collaborator: credential lifecycle and bearer token storage
"""

import json
import time
from typing import Any, Dict, Optional
import logging

from jose import jwt, JWTError
from pydantic import ValidationError as PydanticValidationError

from .errors import EcoWatchError, ProtocolError, TransportError, ValidationError
from ..api.endpoints import AuthAPI
from ..schemas.auth import UserLogin, UserProfile, UserRegister
from ..storage.kv_storage import KeyValueStore

logger = logging.getLogger(__name__)

# Persisted keys
TOKEN_KEY = "token"
USER_KEY = "user"


def _first_error(e: PydanticValidationError) -> str:
    """Human-readable message of the first failed field"""
    error = e.errors()[0]
    if error.get("loc") and error["loc"][0] == "email":
        return "Invalid email address"
    message = error.get("msg", "Invalid input")
    return message.removeprefix("Value error, ")


class AuthSession:
    """Signs the user in and out and keeps the token in durable storage"""

    def __init__(self, auth_api: AuthAPI, store: KeyValueStore):
        self.auth_api = auth_api
        self.store = store

    def token(self) -> Optional[str]:
        """Bearer token provider for the API client"""
        return self.store.get(TOKEN_KEY) or None

    def cached_user(self) -> Optional[UserProfile]:
        raw = self.store.get(USER_KEY)
        if not raw:
            return None
        try:
            return UserProfile.model_validate(json.loads(raw))
        except (json.JSONDecodeError, PydanticValidationError) as e:
            logger.warning(f"Ignoring unreadable cached user: {e}")
            return None

    def token_expired(self, now: Optional[float] = None) -> bool:
        """
        Check the ``exp`` claim without verifying the signature.
        Tokens without an expiry, or that are not JWTs, are left to the server.
        """
        token = self.token()
        if token is None:
            return True
        try:
            claims = jwt.get_unverified_claims(token)
        except JWTError:
            logger.debug("Stored token is not a JWT, expiry unknown")
            return False
        exp = claims.get("exp")
        if exp is None:
            return False
        return float(exp) <= (now if now is not None else time.time())

    def _store_credentials(self, token: str, user: Optional[Dict[str, Any]]):
        self.store.set(TOKEN_KEY, token)
        if user is not None:
            self.store.set(USER_KEY, json.dumps(user))

    def clear(self):
        self.store.remove(TOKEN_KEY)
        self.store.remove(USER_KEY)

    async def register(self, name: str, email: str, password: str) -> Dict[str, Any]:
        try:
            data = UserRegister(name=name, email=email, password=password)
        except PydanticValidationError as e:
            raise ValidationError(_first_error(e)) from e
        return await self.auth_api.register(data.name, data.email, data.password)

    async def login(self, email: str, password: str) -> Optional[UserProfile]:
        try:
            data = UserLogin(email=email, password=password)
        except PydanticValidationError as e:
            raise ValidationError(_first_error(e)) from e

        response = await self.auth_api.login(data.email, data.password)
        token = response.get("token") if isinstance(response, dict) else None
        if not token:
            raise ProtocolError("Missing token in response", payload=response)

        user = response.get("user")
        self._store_credentials(token, user if isinstance(user, dict) else None)
        logger.info("Signed in")
        return self.cached_user()

    async def logout(self) -> bool:
        """Sign out remotely; local credentials are cleared either way"""
        if self.token() is None:
            return True
        try:
            await self.auth_api.logout()
            return True
        except EcoWatchError as e:
            logger.warning(f"Logout failed: {e}")
            return False
        finally:
            self.clear()

    async def current_user(self) -> Optional[UserProfile]:
        """
        Refresh the profile from the server.
        A rejected token clears the stored credentials; a network failure
        keeps them and returns the cached profile.
        """
        if self.token() is None:
            return None
        try:
            response = await self.auth_api.me()
        except TransportError as e:
            logger.error(f"Failed to fetch user: {e}")
            return self.cached_user()
        except ProtocolError as e:
            logger.info(f"Stored token rejected, signing out locally: {e}")
            self.clear()
            return None

        user = response.get("user") if isinstance(response, dict) else None
        if not isinstance(user, dict):
            self.clear()
            return None
        self.store.set(USER_KEY, json.dumps(user))
        return self.cached_user()
