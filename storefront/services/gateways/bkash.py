"""
bKash Gateway - tokenized checkout.

Flow:
1. token/grant   (app key/secret + username/password -> id_token)
2. create        (id_token -> paymentID + bkashURL)
3. execute       (id_token + paymentID -> trxID), after the user approves
"""

import logging
from typing import Any, Dict

import httpx

from storefront.config import settings
from storefront.errors import GatewayAuthError, GatewaySessionError, GatewayValidationError
from storefront.fsm.states import PaymentMethod
from storefront.services.gateways.base import (
    CheckoutRequest,
    CheckoutSession,
    GatewayOutcome,
    PaymentGateway,
)

logger = logging.getLogger(__name__)

BKASH_LIVE_URL = "https://tokenized.pay.bka.sh"
BKASH_SANDBOX_URL = "https://tokenized.sandbox.bka.sh"
BKASH_API_VERSION = "v1.2.0-beta"


class BkashGateway(PaymentGateway):
    """bKash tokenized checkout. Pull-model verification via execute."""

    method = PaymentMethod.BKASH
    invoice_prefix = "COURSE"

    setting_keys = (
        "app_key",
        "app_secret",
        "username",
        "password",
        "is_live",
        "success_url",
        "fail_url",
        "cancel_url",
    )
    required_keys = ("app_key", "app_secret", "username", "password")
    secret_keys = ("app_secret", "password")

    @property
    def base_url(self) -> str:
        root = BKASH_LIVE_URL if self.is_live else BKASH_SANDBOX_URL
        return f"{root}/{BKASH_API_VERSION}/tokenized/checkout"

    @property
    def callback_url(self) -> str:
        return self.config.get("success_url") or f"{settings.public_site_url}/payment/success"

    def _auth_headers(self, id_token: str) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "authorization": id_token,
            "x-app-key": self.config["app_key"],
        }

    async def grant_token(self) -> str:
        """Exchange merchant credentials for a short-lived id_token."""
        logger.info("Requesting bKash grant token")
        try:
            response = await self.http.post(
                f"{self.base_url}/token/grant",
                json={
                    "app_key": self.config["app_key"],
                    "app_secret": self.config["app_secret"],
                },
                headers={
                    "Content-Type": "application/json",
                    "Accept": "application/json",
                    "username": self.config["username"],
                    "password": self.config["password"],
                },
            )
        except httpx.HTTPError as e:
            logger.error(f"bKash token request error: {e}")
            raise GatewayAuthError("Failed to authenticate with bKash")

        data = self._json(response)
        id_token = data.get("id_token")

        if not response.is_success or not id_token:
            logger.error(f"bKash token request failed: {response.status_code} {data}")
            raise GatewayAuthError("Failed to authenticate with bKash")

        return id_token

    async def begin(self, request: CheckoutRequest) -> CheckoutSession:
        id_token = await self.grant_token()

        payload = {
            "mode": "0011",
            "payerReference": request.payer_reference or request.transaction_id,
            "callbackURL": self.callback_url,
            "amount": str(request.amount),
            "currency": request.currency,
            "intent": "sale",
            "merchantInvoiceNumber": request.transaction_id,
        }

        logger.info(f"Creating bKash payment for invoice {request.transaction_id}")
        try:
            response = await self.http.post(
                f"{self.base_url}/create",
                json=payload,
                headers=self._auth_headers(id_token),
            )
        except httpx.HTTPError as e:
            logger.error(f"bKash create payment error: {e}")
            raise GatewaySessionError("Failed to create bKash payment")

        data = self._json(response)
        payment_id = data.get("paymentID")
        bkash_url = data.get("bkashURL")

        if not response.is_success or not payment_id or not bkash_url:
            logger.error(f"bKash payment creation failed: {response.status_code} {data}")
            raise GatewaySessionError("Failed to create bKash payment")

        return CheckoutSession(payment_url=bkash_url, session_id=payment_id)

    async def confirm(self, reference: str) -> GatewayOutcome:
        """Execute the payment; a returned trxID is proof of success."""
        id_token = await self.grant_token()

        logger.info(f"Executing bKash payment {reference}")
        try:
            response = await self.http.post(
                f"{self.base_url}/execute",
                json={"paymentID": reference},
                headers=self._auth_headers(id_token),
            )
        except httpx.HTTPError as e:
            logger.error(f"bKash execute error for {reference}: {e}")
            raise GatewayValidationError("Failed to verify payment with bKash")

        if response.status_code >= 500:
            logger.error(f"bKash execute HTTP error: {response.status_code} {response.text}")
            raise GatewayValidationError("Failed to verify payment with bKash")

        data = self._json(response)
        if not data:
            logger.error(f"bKash execute returned no JSON body: {response.status_code}")
            raise GatewayValidationError("Failed to verify payment with bKash")

        return self._outcome(response, data)

    @staticmethod
    def _outcome(response: httpx.Response, data: Dict[str, Any]) -> GatewayOutcome:
        trx_id = data.get("trxID")
        status = data.get("transactionStatus") or data.get("statusMessage")

        # transactionStatus is absent on some sandbox responses; trxID alone is enough
        success = bool(
            response.is_success
            and trx_id
            and data.get("transactionStatus", "Completed") == "Completed"
        )

        if not success:
            logger.warning(
                f"bKash execute unsuccessful: code={data.get('statusCode')} "
                f"message={data.get('statusMessage') or data.get('errorMessage')}"
            )

        return GatewayOutcome(
            success=success,
            status=status,
            transaction_id=data.get("merchantInvoiceNumber"),
            gateway_transaction_id=trx_id,
            raw=data,
        )
