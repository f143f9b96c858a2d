"""
SSLCommerz Gateway - hosted checkout (v4).

Session creation is a single form POST; there is no token handshake.
Completion is pushed by IPN and confirmed through the validation API.
"""

import logging
import secrets
import time

import httpx

from storefront.config import settings
from storefront.errors import GatewaySessionError, GatewayValidationError
from storefront.fsm.states import PaymentMethod
from storefront.services.gateways.base import (
    CheckoutRequest,
    CheckoutSession,
    GatewayOutcome,
    PaymentGateway,
)

logger = logging.getLogger(__name__)

SSLCOMMERZ_LIVE_URL = "https://securepay.sslcommerz.com"
SSLCOMMERZ_SANDBOX_URL = "https://sandbox.sslcommerz.com"

# Statuses of the validation API that prove payment
VALID_STATUSES = frozenset({"VALID", "VALIDATED"})

NOT_AVAILABLE = "N/A"
CUSTOMER_COUNTRY = "Bangladesh"


class SslCommerzGateway(PaymentGateway):
    """SSLCommerz hosted checkout. Push-model verification via IPN + validator."""

    method = PaymentMethod.SSLCOMMERZ
    invoice_prefix = "TXN"

    setting_keys = (
        "store_id",
        "store_password",
        "is_live",
        "success_url",
        "fail_url",
        "cancel_url",
        "ipn_url",
    )
    required_keys = ("store_id", "store_password")
    secret_keys = ("store_password",)

    @property
    def base_url(self) -> str:
        return SSLCOMMERZ_LIVE_URL if self.is_live else SSLCOMMERZ_SANDBOX_URL

    def new_transaction_id(self, course_id: str) -> str:
        # tran_id is limited to 30 characters, so the course id is left out
        return f"{self.invoice_prefix}_{time.time_ns() // 1_000_000}_{secrets.token_hex(4)}"

    def _callback_urls(self, request: CheckoutRequest) -> dict:
        query = f"course_id={request.course_id}&tran_id={request.transaction_id}"
        site = settings.public_site_url
        return {
            "success_url": self.config.get("success_url") or f"{site}/payment/success?{query}",
            "fail_url": self.config.get("fail_url") or f"{site}/payment/failed?{query}",
            "cancel_url": self.config.get("cancel_url") or f"{site}/payment/cancelled?{query}",
            "ipn_url": self.config.get("ipn_url") or f"{settings.public_api_url}/webhooks/sslcommerz/ipn",
        }

    async def begin(self, request: CheckoutRequest) -> CheckoutSession:
        customer_name = request.customer_name or request.customer_email or NOT_AVAILABLE

        form = {
            "store_id": self.config["store_id"],
            "store_passwd": self.config["store_password"],
            "total_amount": str(request.amount),
            "currency": request.currency,
            "tran_id": request.transaction_id,
            **self._callback_urls(request),
            "product_name": request.course_title,
            "product_category": "Course",
            "product_profile": "digital-goods",
            "cus_name": customer_name,
            "cus_email": request.customer_email or NOT_AVAILABLE,
            "cus_add1": NOT_AVAILABLE,
            "cus_city": NOT_AVAILABLE,
            "cus_state": NOT_AVAILABLE,
            "cus_postcode": NOT_AVAILABLE,
            "cus_country": CUSTOMER_COUNTRY,
            "cus_phone": request.customer_phone or NOT_AVAILABLE,
            "ship_name": customer_name,
            "ship_add1": NOT_AVAILABLE,
            "ship_city": NOT_AVAILABLE,
            "ship_state": NOT_AVAILABLE,
            "ship_postcode": NOT_AVAILABLE,
            "ship_country": CUSTOMER_COUNTRY,
        }

        logger.info(f"Creating SSLCommerz session for {request.transaction_id}")
        try:
            response = await self.http.post(
                f"{self.base_url}/gwprocess/v4/api.php",
                data=form,
            )
        except httpx.HTTPError as e:
            logger.error(f"SSLCommerz session request error: {e}")
            raise GatewaySessionError("Payment initialization failed")

        data = self._json(response)
        payment_url = data.get("GatewayPageURL")

        if data.get("status") != "SUCCESS" or not payment_url:
            reason = data.get("failedreason") or "Payment initialization failed"
            logger.error(f"SSLCommerz session failed: {response.status_code} {reason}")
            raise GatewaySessionError(reason)

        return CheckoutSession(payment_url=payment_url, session_id=data.get("sessionkey"))

    async def confirm(self, reference: str) -> GatewayOutcome:
        """Validate a val_id; VALID / VALIDATED is proof of success."""
        logger.info(f"Validating SSLCommerz val_id {reference}")
        try:
            response = await self.http.get(
                f"{self.base_url}/validator/api/validationserverAPI.php",
                params={
                    "val_id": reference,
                    "store_id": self.config["store_id"],
                    "store_passwd": self.config["store_password"],
                    "format": "json",
                },
            )
        except httpx.HTTPError as e:
            logger.error(f"SSLCommerz validation error for {reference}: {e}")
            raise GatewayValidationError("Failed to validate payment with SSLCommerz")

        data = self._json(response)
        if not response.is_success or not data:
            logger.error(f"SSLCommerz validation HTTP error: {response.status_code}")
            raise GatewayValidationError("Failed to validate payment with SSLCommerz")

        status = data.get("status")
        success = status in VALID_STATUSES
        if not success:
            logger.warning(f"SSLCommerz validation status {status} for val_id {reference}")

        return GatewayOutcome(
            success=success,
            status=status,
            transaction_id=data.get("tran_id"),
            gateway_transaction_id=data.get("bank_tran_id"),
            raw=data,
        )
