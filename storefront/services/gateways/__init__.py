"""
Gateway registry.
Gateways are looked up by payment_method and built with fresh credentials
from the settings provider on every request.
"""

import logging
from typing import Dict, List, Type, Union

import httpx

from storefront.errors import BadRequest
from storefront.fsm.states import PaymentMethod
from storefront.services.gateways.base import (
    CheckoutRequest,
    CheckoutSession,
    GatewayOutcome,
    PaymentGateway,
)
from storefront.services.gateways.bkash import BkashGateway
from storefront.services.gateways.sslcommerz import SslCommerzGateway
from storefront.services.settings_provider import SettingsProvider

logger = logging.getLogger(__name__)

GATEWAYS: Dict[PaymentMethod, Type[PaymentGateway]] = {
    PaymentMethod.BKASH: BkashGateway,
    PaymentMethod.SSLCOMMERZ: SslCommerzGateway,
}


def get_gateway_class(method: Union[PaymentMethod, str]) -> Type[PaymentGateway]:
    """Resolve a gateway class or raise BadRequest for unknown methods."""
    try:
        method = PaymentMethod(method)
    except ValueError:
        raise BadRequest(f"Unsupported payment method: {method}")

    gateway_class = GATEWAYS.get(method)
    if not gateway_class:
        raise BadRequest(f"Unsupported payment method: {method.value}")
    return gateway_class


async def load_gateway(
    method: Union[PaymentMethod, str],
    provider: SettingsProvider,
    http: httpx.AsyncClient,
) -> PaymentGateway:
    """Read the gateway's credentials and build it (ConfigurationError if incomplete)."""
    gateway_class = get_gateway_class(method)
    config = await provider.get_prefixed(
        gateway_class.method.settings_prefix,
        gateway_class.setting_keys,
    )
    return gateway_class(config, http)


def get_all_gateway_names() -> List[str]:
    return [method.value for method in GATEWAYS]


__all__ = [
    "CheckoutRequest",
    "CheckoutSession",
    "GatewayOutcome",
    "PaymentGateway",
    "BkashGateway",
    "SslCommerzGateway",
    "GATEWAYS",
    "get_gateway_class",
    "load_gateway",
    "get_all_gateway_names",
]
