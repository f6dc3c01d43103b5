"""Scoped credential (subkey) exchange for manifest actions that declare a scope."""

import logging
from dataclasses import dataclass
from typing import Dict, Optional

from ..errors import AuthorizationError

logger = logging.getLogger(__name__)

# Variables the launched game reads its scoped key from
API_KEY_ENV_VAR = "CAVE_API_KEY"
API_KEY_EXPIRES_ENV_VAR = "CAVE_API_KEY_EXPIRES_AT"


@dataclass(frozen=True)
class Subkey:
    """A short-lived key limited to one scope; opaque to the launcher"""
    key: str
    expires_at: Optional[str] = None

    def apply(self, env: Dict[str, str]) -> None:
        """Inject the key into a launch environment overlay"""
        env[API_KEY_ENV_VAR] = self.key
        env[API_KEY_EXPIRES_ENV_VAR] = self.expires_at or ""


class SubkeyAuthorizer:
    """Exchanges session credentials for a scoped subkey"""

    def __init__(self, client):
        """
        Args:
            client: Object with `async subkey(game_id, scope, credentials) -> dict`
                    (ApiClient in production)
        """
        self.client = client

    async def authorize(self, game_id: int, scope: str, credentials, log: logging.Logger = None) -> Subkey:
        """Request a subkey. Never retried; any failure aborts the launch.

        Raises:
            AuthorizationError: on missing credentials, network or API errors
        """
        log = log or logger
        if credentials is None:
            raise AuthorizationError(f"cannot request a '{scope}' subkey without credentials")

        log.info(f"[Subkey] Requesting subkey with scope: {scope}")
        try:
            payload = await self.client.subkey(game_id, scope, credentials)
        except Exception as e:
            raise AuthorizationError(f"subkey request for scope '{scope}' failed: {e}") from e

        key = payload.get('key') if isinstance(payload, dict) else None
        if not key:
            raise AuthorizationError(f"subkey response for scope '{scope}' has no key")

        subkey = Subkey(key=key, expires_at=payload.get('expires_at'))
        log.info(f"[Subkey] Got subkey ({len(subkey.key)} chars, expires {subkey.expires_at})")
        return subkey
