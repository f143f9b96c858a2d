"""
Auth Service - resolves a bearer token to an auth user via the hosted auth API.
"""

import logging
from typing import Optional

import httpx

from storefront.config import settings
from storefront.errors import ConfigurationError, Unauthorized

logger = logging.getLogger(__name__)


class AuthService:
    """Verifies access tokens against {SUPABASE_URL}/auth/v1/user."""

    def __init__(self, http: httpx.AsyncClient):
        self.http = http
        self.base_url = settings.supabase_url.rstrip("/")
        self.service_key = settings.supabase_service_role_key

    @staticmethod
    def extract_token(authorization: Optional[str]) -> str:
        """Strip the Bearer scheme from an Authorization header."""
        if not authorization:
            logger.error("No authorization header found")
            raise Unauthorized("Authorization required")

        token = authorization.replace("Bearer ", "", 1).strip()
        if not token:
            raise Unauthorized("Authorization required")
        return token

    async def get_user_id(self, token: str) -> str:
        """
        Return the auth user id for `token`.

        Raises Unauthorized when the auth API rejects the token.
        """
        if not self.base_url or not self.service_key:
            logger.error("Auth backend not configured (SUPABASE_URL / SUPABASE_SERVICE_ROLE_KEY)")
            raise ConfigurationError("Authentication backend not configured")

        try:
            response = await self.http.get(
                f"{self.base_url}/auth/v1/user",
                headers={
                    "apikey": self.service_key,
                    "Authorization": f"Bearer {token}",
                },
            )
        except httpx.HTTPError as e:
            logger.error(f"Auth backend request failed: {e}")
            raise Unauthorized("Invalid authentication")

        if response.status_code != 200:
            logger.error(f"Authentication failed: {response.status_code}")
            raise Unauthorized("Invalid authentication")

        try:
            user_id = response.json().get("id")
        except ValueError:
            user_id = None

        if not user_id:
            raise Unauthorized("Invalid authentication")

        logger.info(f"User authenticated: {user_id}")
        return user_id
