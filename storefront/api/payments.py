"""
Payment Endpoints.
Checkout initiation, pull-model verification and status lookup.
"""

import logging
from decimal import Decimal
from typing import Optional

import httpx
from fastapi import APIRouter, Depends
from pydantic import AliasChoices, BaseModel, Field
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.deps import get_current_user_id, get_http_client, get_settings_provider
from storefront.database import get_db
from storefront.errors import PaymentNotFound
from storefront.fsm.states import PaymentMethod
from storefront.models.payment import Payment
from storefront.services.payment_initiator import PaymentInitiator
from storefront.services.payment_verifier import PaymentVerifier
from storefront.services.settings_provider import SettingsProvider
from storefront.services.user_service import UserService

router = APIRouter()
logger = logging.getLogger(__name__)


class InitiatePaymentRequest(BaseModel):
    """Request body for starting a checkout."""
    course_id: Optional[str] = Field(
        None, validation_alias=AliasChoices("course_id", "courseId")
    )
    amount: Optional[Decimal] = None
    currency: Optional[str] = None


class VerifyPaymentRequest(BaseModel):
    """Request body for confirming a payment the user approved at the gateway."""
    payment_reference: Optional[str] = Field(
        None, validation_alias=AliasChoices("payment_reference", "paymentID", "payment_id")
    )
    transaction_id: Optional[str] = Field(
        None, validation_alias=AliasChoices("transaction_id", "tran_id")
    )


@router.post("/{method}/initiate")
async def initiate_payment(
    method: PaymentMethod,
    request: InitiatePaymentRequest,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    settings_provider: SettingsProvider = Depends(get_settings_provider),
    http: httpx.AsyncClient = Depends(get_http_client),
):
    """
    Start a checkout with the selected gateway.

    Returns the gateway URL the browser should be redirected to.
    """
    logger.info(f"{method.display_name} payment initiation requested by {user_id}")

    initiator = PaymentInitiator(db, settings_provider, http)
    result = await initiator.initiate(
        method=method,
        user_id=user_id,
        course_id=request.course_id,
        amount=request.amount,
        currency=request.currency,
    )

    return {
        "success": True,
        "payment_url": result.payment_url,
        "payment_id": result.payment_id,
        "transaction_id": result.transaction_id,
        "message": "Payment created successfully",
    }


@router.post("/{method}/verify")
async def verify_payment(
    method: PaymentMethod,
    request: VerifyPaymentRequest,
    db: AsyncSession = Depends(get_db),
    settings_provider: SettingsProvider = Depends(get_settings_provider),
    http: httpx.AsyncClient = Depends(get_http_client),
):
    """Confirm a payment with the gateway and grant course access on success."""
    verifier = PaymentVerifier(db, settings_provider, http)
    result = await verifier.verify(
        method=method,
        reference=request.payment_reference,
        transaction_id=request.transaction_id,
    )

    return {
        "success": True,
        "message": "Payment verified and completed successfully",
        "transaction_id": result.transaction_id,
        "trx_id": result.gateway_transaction_id,
        "payment_id": request.payment_reference,
        "status": result.status.value,
    }


@router.get("/{transaction_id}")
async def get_payment_status(
    transaction_id: str,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Status of one of the caller's own payments."""
    profile = await UserService(db).get_profile(user_id)

    result = await db.execute(
        select(Payment).where(
            Payment.transaction_id == transaction_id,
            Payment.user_id == profile.id,
        )
    )
    payment = result.scalar_one_or_none()

    if not payment:
        raise PaymentNotFound()

    return {
        "success": True,
        "transaction_id": payment.transaction_id,
        "status": payment.status,
        "payment_method": payment.payment_method,
        "amount": float(payment.amount),
        "currency": payment.currency,
        "course_id": str(payment.course_id) if payment.course_id else None,
        "payment_date": payment.payment_date.isoformat() if payment.payment_date else None,
    }
