"""
Payment Verifier - confirms a payment with its gateway and finalizes it.

Used for both verification shapes:
- pull: the client posts the gateway reference (bKash paymentID)
- push: the gateway notifies us with a validation reference (SSLCommerz val_id)
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Union

import httpx
from sqlalchemy import or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.errors import BadRequest, PaymentNotFound, PersistenceError, VerificationFailed
from storefront.fsm.machine import PaymentStateMachine
from storefront.fsm.states import PaymentMethod, PaymentStatus
from storefront.models.payment import Payment
from storefront.services.enrollment_service import EnrollmentService
from storefront.services.gateways import GatewayOutcome, load_gateway
from storefront.services.settings_provider import SettingsProvider

logger = logging.getLogger(__name__)


@dataclass
class VerificationResult:
    transaction_id: str
    gateway_transaction_id: Optional[str]
    status: PaymentStatus
    enrollment_created: bool
    already_processed: bool = False


class PaymentVerifier:
    """
    Drives a payment from pending to a terminal state.

    Verification is safe to repeat: a payment that is already completed is
    reported as completed again without calling the gateway, and enrollment
    creation is keyed on (student, course).
    """

    def __init__(
        self,
        db: AsyncSession,
        settings_provider: SettingsProvider,
        http: httpx.AsyncClient,
    ):
        self.db = db
        self.settings_provider = settings_provider
        self.http = http
        self.enrollments = EnrollmentService(db)

    async def verify(
        self,
        method: Union[PaymentMethod, str],
        reference: Optional[str],
        transaction_id: Optional[str] = None,
    ) -> VerificationResult:
        """
        Verify `reference` with the gateway and finalize the matching payment.

        `transaction_id` is the local id when the caller knows it (IPN tran_id).
        """
        if not reference:
            logger.error(f"Missing payment reference for {method} verification")
            raise BadRequest("Missing payment reference")

        gateway = await load_gateway(method, self.settings_provider, self.http)

        existing = await self._find_payment(reference, transaction_id)
        if existing is not None and existing.is_terminal:
            return await self._already_processed(existing)

        outcome = await gateway.confirm(reference)

        payment = await self._find_payment(
            reference,
            outcome.transaction_id or transaction_id,
            for_update=True,
        )
        if payment is None:
            logger.error(
                f"No payment matches reference {reference} "
                f"(transaction {outcome.transaction_id or transaction_id}); "
                f"gateway reported success={outcome.success}"
            )
            raise PaymentNotFound()

        if payment.is_terminal:
            # Another verification finished first
            return await self._already_processed(payment)

        if outcome.success:
            return await self._complete(payment, outcome)
        return await self._fail(payment, outcome)

    async def _find_payment(
        self,
        reference: str,
        transaction_id: Optional[str],
        for_update: bool = False,
    ) -> Optional[Payment]:
        candidates = {value for value in (transaction_id, reference) if value}
        query = select(Payment).where(
            or_(
                Payment.transaction_id.in_(sorted(candidates)),
                Payment.gateway_session_id == reference,
            )
        )
        if for_update:
            query = query.with_for_update().execution_options(populate_existing=True)

        result = await self.db.execute(query.limit(1))
        return result.scalar_one_or_none()

    async def _complete(self, payment: Payment, outcome: GatewayOutcome) -> VerificationResult:
        PaymentStateMachine.transition(payment, PaymentStatus.COMPLETED)
        payment.payment_date = datetime.now(timezone.utc)
        if outcome.gateway_transaction_id:
            payment.gateway_transaction_id = outcome.gateway_transaction_id

        created = False
        if payment.user_id and payment.course_id:
            _, created = await self.enrollments.grant_access(payment.user_id, payment.course_id)
        else:
            logger.error(f"Payment {payment.transaction_id} has no owner or course; no enrollment")

        await self._commit(payment)

        logger.info(
            f"Payment {payment.transaction_id} completed "
            f"(gateway transaction {payment.gateway_transaction_id})",
            extra={
                "transaction_id": payment.transaction_id,
                "user_id": str(payment.user_id),
                "course_id": str(payment.course_id),
            },
        )

        return VerificationResult(
            transaction_id=payment.transaction_id,
            gateway_transaction_id=payment.gateway_transaction_id,
            status=PaymentStatus.COMPLETED,
            enrollment_created=created,
        )

    async def _fail(self, payment: Payment, outcome: GatewayOutcome) -> VerificationResult:
        PaymentStateMachine.transition(payment, PaymentStatus.FAILED)
        await self._commit(payment)

        logger.info(
            f"Payment validation failed for {payment.transaction_id}: {outcome.status}",
            extra={"transaction_id": payment.transaction_id},
        )
        raise VerificationFailed()

    async def _already_processed(self, payment: Payment) -> VerificationResult:
        """Report a terminal payment again, repairing a missing enrollment."""
        status = PaymentStatus(payment.status)
        logger.info(f"Payment {payment.transaction_id} already {status.value}")

        if status is PaymentStatus.FAILED:
            raise VerificationFailed()

        created = False
        if payment.user_id and payment.course_id:
            _, created = await self.enrollments.grant_access(payment.user_id, payment.course_id)
            if created:
                logger.warning(f"Restored missing enrollment for payment {payment.transaction_id}")
                await self._commit(payment)

        return VerificationResult(
            transaction_id=payment.transaction_id,
            gateway_transaction_id=payment.gateway_transaction_id,
            status=status,
            enrollment_created=created,
            already_processed=True,
        )

    async def _commit(self, payment: Payment) -> None:
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(
                f"Failed to update payment status for {payment.transaction_id}: {e}",
                exc_info=True,
            )
            raise PersistenceError()
