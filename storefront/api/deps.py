from typing import AsyncGenerator, Optional

import httpx
from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.config import settings
from storefront.database import get_db
from storefront.errors import Unauthorized
from storefront.services.auth_service import AuthService
from storefront.services.settings_provider import SettingsProvider, SiteSettingsProvider


async def get_http_client() -> AsyncGenerator[httpx.AsyncClient, None]:
    """One outbound HTTP client per request; closed when the request ends."""
    async with httpx.AsyncClient(timeout=settings.gateway_timeout_seconds) as client:
        yield client


async def get_settings_provider(
    db: AsyncSession = Depends(get_db),
) -> SettingsProvider:
    """Configuration store, read fresh for this request."""
    return SiteSettingsProvider(db)


async def get_current_user_id(
    authorization: Optional[str] = Header(None),
    http: httpx.AsyncClient = Depends(get_http_client),
) -> str:
    """
    Resolve the caller's bearer token to an auth user id.
    Raises Unauthorized (401) when missing or rejected.
    """
    token = AuthService.extract_token(authorization)
    return await AuthService(http).get_user_id(token)


async def get_admin_user(
    x_admin_key: Optional[str] = Header(None, alias="X-Admin-Key"),
) -> str:
    """
    Validate the Admin Key header.
    Returns the key if valid, raises 401 otherwise.
    """
    if not x_admin_key:
        raise Unauthorized("Missing admin key")

    valid_key = settings.admin_api_key
    if not valid_key or x_admin_key != valid_key:
        raise Unauthorized("Invalid admin key")

    return x_admin_key
