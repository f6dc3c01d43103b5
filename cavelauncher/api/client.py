"""
HTTP client for the marketplace API.

Only the two calls the launcher needs: looking a game up by id (cached
summaries win) and exchanging the session key for a scoped subkey.
"""
import ssl
import logging
from typing import Any, Dict, Optional

import aiohttp
import certifi

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """The API answered with an error payload or an unexpected status"""

    def __init__(self, message: str, status: Optional[int] = None, errors=None):
        super().__init__(message)
        self.status = status
        self.errors = errors or []


class ApiClient:
    """Minimal async client for the marketplace API"""

    def __init__(self, base_url: str, session: Optional[aiohttp.ClientSession] = None, timeout: float = 10):
        self.base_url = base_url.rstrip('/')
        self._session = session
        self._timeout = aiohttp.ClientTimeout(total=timeout)

    def _new_session(self) -> aiohttp.ClientSession:
        ssl_context = ssl.create_default_context(cafile=certifi.where())
        connector = aiohttp.TCPConnector(ssl=ssl_context)
        return aiohttp.ClientSession(connector=connector)

    @staticmethod
    def _headers(credentials) -> Dict[str, str]:
        headers = {'Accept': 'application/json'}
        if credentials is not None and credentials.key:
            headers['Authorization'] = f"Bearer {credentials.key}"
        return headers

    async def _request(self, method: str, path: str, credentials=None, data=None) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        session = self._session or self._new_session()
        try:
            async with session.request(
                method, url,
                data=data,
                headers=self._headers(credentials),
                timeout=self._timeout,
            ) as response:
                if response.status != 200:
                    raise ApiError(f"{method} {path} returned status {response.status}", status=response.status)
                payload = await response.json()
        finally:
            if self._session is None:
                await session.close()

        if not isinstance(payload, dict):
            raise ApiError(f"{method} {path} returned {type(payload).__name__}, expected an object")
        if payload.get('errors'):
            raise ApiError(f"{method} {path} failed: {', '.join(map(str, payload['errors']))}", errors=payload['errors'])
        return payload

    async def game(self, game_id: int, credentials=None, cached: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Look a game up by id.

        Args:
            game_id: Game identifier
            credentials: Session credentials
            cached: Summary already stored on the cave; returned as-is when present

        Returns:
            Game dict (at least 'id' and 'title')
        """
        if cached:
            return cached
        payload = await self._request('GET', f"/games/{game_id}", credentials)
        game = payload.get('game')
        if not isinstance(game, dict):
            raise ApiError(f"No game in response for {game_id}")
        logger.debug(f"[Api] Fetched game {game_id}: {game.get('title')}")
        return game

    async def subkey(self, game_id: int, scope: str, credentials) -> Dict[str, Any]:
        """Exchange the session key for a scoped, short-lived subkey.

        Returns:
            Dict with 'key' and 'expires_at'
        """
        payload = await self._request('POST', f"/games/{game_id}/subkey", credentials, data={'scope': scope})
        subkey = payload.get('subkey')
        if not isinstance(subkey, dict) or not subkey.get('key'):
            raise ApiError(f"No subkey in response for game {game_id}")
        return subkey
