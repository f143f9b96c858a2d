"""
Admin Gateway Settings Endpoints.
Read and update payment gateway credentials stored in site_settings.
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.deps import get_admin_user
from storefront.database import get_db
from storefront.errors import BadRequest
from storefront.fsm.states import PaymentMethod
from storefront.models.site_setting import SiteSetting
from storefront.services.gateways import get_gateway_class
from storefront.services.settings_provider import SiteSettingsProvider

router = APIRouter()
logger = logging.getLogger(__name__)

MASK = "********"


class UpdateGatewaySettingsRequest(BaseModel):
    """Request body for updating a gateway's settings (keys without prefix)."""
    settings: Dict[str, Any]


@router.get("/gateways/{method}/settings")
async def get_gateway_settings(
    method: PaymentMethod,
    db: AsyncSession = Depends(get_db),
    _: str = Depends(get_admin_user),
):
    """Current settings of a gateway, secrets masked."""
    gateway_class = get_gateway_class(method)
    config = await SiteSettingsProvider(db).get_prefixed(
        method.settings_prefix, gateway_class.setting_keys
    )

    masked = {
        key: (MASK if key in gateway_class.secret_keys and config.get(key) else config.get(key))
        for key in gateway_class.setting_keys
    }

    return {
        "success": True,
        "method": method.value,
        "configured": all(config.get(key) for key in gateway_class.required_keys),
        "settings": masked,
    }


@router.put("/gateways/{method}/settings")
async def update_gateway_settings(
    method: PaymentMethod,
    request: UpdateGatewaySettingsRequest,
    db: AsyncSession = Depends(get_db),
    _: str = Depends(get_admin_user),
):
    """
    Upsert gateway settings.

    Unknown keys are rejected. A masked secret sent back unchanged is ignored.
    """
    gateway_class = get_gateway_class(method)

    unknown = sorted(set(request.settings) - set(gateway_class.setting_keys))
    if unknown:
        raise BadRequest(f"Unknown {method.value} settings: {', '.join(unknown)}")

    updates = {
        key: value
        for key, value in request.settings.items()
        if not (key in gateway_class.secret_keys and value == MASK)
    }
    full_keys = {f"{method.settings_prefix}{key}": value for key, value in updates.items()}

    result = await db.execute(
        select(SiteSetting).where(SiteSetting.key.in_(list(full_keys)))
    )
    existing = {setting.key: setting for setting in result.scalars().all()}

    for full_key, value in full_keys.items():
        if full_key in existing:
            existing[full_key].value = value
        else:
            db.add(SiteSetting(key=full_key, value=value))

    await db.commit()

    logger.info(f"{method.display_name} settings updated: {sorted(updates)}")

    return {"success": True, "method": method.value, "updated": sorted(updates)}
