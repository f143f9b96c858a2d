"""
Payment gateway abstraction.

Each gateway implements begin() and confirm():

    begin(CheckoutRequest)  -> CheckoutSession   (redirect info)
    confirm(reference)      -> GatewayOutcome    (did the payment succeed?)
"""

import logging
import secrets
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, ClassVar, Dict, Optional, Tuple

import httpx

from storefront.errors import ConfigurationError
from storefront.fsm.states import PaymentMethod

logger = logging.getLogger(__name__)


@dataclass
class CheckoutRequest:
    """Input for creating a gateway checkout session."""
    transaction_id: str
    course_id: str
    course_title: str
    amount: Decimal
    currency: str
    customer_name: str = ""
    customer_email: str = ""
    customer_phone: str = ""
    payer_reference: str = ""


@dataclass
class CheckoutSession:
    """Result of begin(): where to send the user."""
    payment_url: str
    session_id: Optional[str] = None


@dataclass
class GatewayOutcome:
    """Result of confirm()."""
    success: bool
    status: Optional[str] = None
    # Local invoice id echoed back by the gateway, when it has one
    transaction_id: Optional[str] = None
    # Gateway's own final transaction id
    gateway_transaction_id: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict)


class PaymentGateway(ABC):
    """Base class for gateway integrations."""

    method: ClassVar[PaymentMethod]
    invoice_prefix: ClassVar[str] = "TXN"

    # Keys read from site_settings (without prefix) and the ones that must be set
    setting_keys: ClassVar[Tuple[str, ...]] = ()
    required_keys: ClassVar[Tuple[str, ...]] = ()
    secret_keys: ClassVar[Tuple[str, ...]] = ()

    def __init__(self, config: Dict[str, Any], http: httpx.AsyncClient):
        missing = [key for key in self.required_keys if not config.get(key)]
        if missing:
            logger.error(
                f"{self.method.display_name} configuration incomplete, missing: {missing}"
            )
            raise ConfigurationError(
                f"{self.method.display_name} payment gateway not configured properly"
            )

        self.config = config
        self.http = http
        self.is_live = bool(config.get("is_live"))

    def new_transaction_id(self, course_id: str) -> str:
        """Namespace + course id + nanosecond timestamp + random suffix."""
        return f"{self.invoice_prefix}_{course_id}_{time.time_ns()}_{secrets.token_hex(3)}"

    @abstractmethod
    async def begin(self, request: CheckoutRequest) -> CheckoutSession:
        """Create a checkout session at the gateway."""
        raise NotImplementedError

    @abstractmethod
    async def confirm(self, reference: str) -> GatewayOutcome:
        """Ask the gateway whether the payment behind `reference` succeeded."""
        raise NotImplementedError

    @staticmethod
    def _json(response: httpx.Response) -> Dict[str, Any]:
        """Response body as a dict, or {} when it is not JSON."""
        try:
            data = response.json()
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {}
