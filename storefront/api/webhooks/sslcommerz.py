"""
SSLCommerz IPN Handler.
Validates the notification with SSLCommerz and finalizes the payment.
"""

import logging

import httpx
from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.deps import get_http_client, get_settings_provider
from storefront.database import get_db
from storefront.errors import NotFound, VerificationFailed
from storefront.fsm.states import PaymentMethod
from storefront.services.payment_verifier import PaymentVerifier
from storefront.services.settings_provider import SettingsProvider

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/sslcommerz/ipn")
async def sslcommerz_ipn(
    request: Request,
    db: AsyncSession = Depends(get_db),
    settings_provider: SettingsProvider = Depends(get_settings_provider),
    http: httpx.AsyncClient = Depends(get_http_client),
):
    """
    Handle an SSLCommerz Instant Payment Notification.

    Form fields used: tran_id, status, amount, val_id.
    Answers 200 OK whether or not the payment validated; the outcome is
    recorded on the payment. Only internal errors answer 500 so the gateway
    delivers the notification again.
    """
    try:
        form = await request.form()
        tran_id = form.get("tran_id")
        status = form.get("status")
        amount = form.get("amount")
        val_id = form.get("val_id")

        logger.info(f"IPN received: tran_id={tran_id} status={status} amount={amount} val_id={val_id}")

        if not val_id:
            logger.warning(f"IPN for {tran_id} has no val_id; nothing to validate")
            return PlainTextResponse("OK", status_code=200)

        verifier = PaymentVerifier(db, settings_provider, http)

        try:
            result = await verifier.verify(
                PaymentMethod.SSLCOMMERZ,
                reference=val_id,
                transaction_id=tran_id,
            )
            logger.info(f"Payment completed and enrollment ensured for: {result.transaction_id}")
        except VerificationFailed:
            logger.info(f"Payment validation failed for: {tran_id}")
        except NotFound:
            logger.warning(f"IPN for unknown transaction: {tran_id}")

        return PlainTextResponse("OK", status_code=200)

    except Exception as e:
        logger.error(f"IPN processing error: {e}", exc_info=True)
        return PlainTextResponse("Error", status_code=500)
