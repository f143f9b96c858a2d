"""
Payment Initiator - starts a gateway checkout and records a pending payment.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Union

import httpx
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.config import settings
from storefront.errors import BadRequest
from storefront.fsm.states import EnrollmentStatus, PaymentMethod, PaymentStatus
from storefront.models.payment import Payment
from storefront.services.course_service import CourseService
from storefront.services.enrollment_service import EnrollmentService
from storefront.services.gateways import CheckoutRequest, load_gateway
from storefront.services.settings_provider import SettingsProvider
from storefront.services.user_service import UserService

logger = logging.getLogger(__name__)


@dataclass
class InitiationResult:
    payment_url: str
    transaction_id: str
    payment_id: Optional[str]
    recorded: bool


def parse_amount(amount: Any) -> Decimal:
    """Positive Decimal from a JSON number or numeric string, else BadRequest."""
    if amount is None or amount == "" or isinstance(amount, bool):
        raise BadRequest("Missing courseId or amount")
    try:
        value = Decimal(str(amount))
    except (InvalidOperation, ValueError):
        raise BadRequest("Amount must be a number")
    if not value.is_finite() or value <= 0:
        raise BadRequest("Amount must be positive")
    return value.quantize(Decimal("0.01"))


class PaymentInitiator:
    """
    Begins a payment for (caller, course, amount) with one gateway.

    One gateway handshake, one checkout request and one insert per call.
    Nothing is retried; the caller restarts the whole flow on failure.
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

    async def initiate(
        self,
        method: Union[PaymentMethod, str],
        user_id: str,
        course_id: Optional[str],
        amount: Any,
        currency: Optional[str] = None,
    ) -> InitiationResult:
        """
        Start a checkout.

        1. Validate input
        2. Resolve profile and course, refuse if already enrolled
        3. Load gateway credentials
        4. Generate the transaction id
        5. Gateway handshake + checkout session
        6. Record the pending payment
        """
        if not course_id or amount in (None, ""):
            logger.error(f"Missing required parameters: course_id={course_id} amount={amount}")
            raise BadRequest("Missing courseId or amount")

        value = parse_amount(amount)
        currency = (currency or settings.default_currency).upper()

        profile = await UserService(self.db).get_profile(user_id)
        course = await CourseService(self.db).get_course(course_id)

        enrollment = await EnrollmentService(self.db).get_enrollment(profile.id, course.id)
        if enrollment is not None and enrollment.status == EnrollmentStatus.ACTIVE.value:
            logger.warning(f"User {user_id} already enrolled in course {course.id}; checkout refused")
            raise BadRequest("Already enrolled in this course")

        gateway = await load_gateway(method, self.settings_provider, self.http)
        transaction_id = gateway.new_transaction_id(str(course.id))

        log_context = {
            "user_id": str(user_id),
            "course_id": str(course.id),
            "transaction_id": transaction_id,
            "payment_method": gateway.method.value,
        }
        logger.info(
            f"Processing {gateway.method.display_name} payment {transaction_id} "
            f"for course {course.id}: {value} {currency}",
            extra=log_context,
        )

        if course.price is not None and value != course.effective_price:
            logger.warning(
                f"Requested amount {value} differs from course price {course.effective_price}",
                extra=log_context,
            )

        session = await gateway.begin(
            CheckoutRequest(
                transaction_id=transaction_id,
                course_id=str(course.id),
                course_title=course.title,
                amount=value,
                currency=currency,
                customer_name=profile.full_name or "",
                customer_email=profile.email or "",
                customer_phone=profile.phone or "",
                payer_reference=profile.payer_reference,
            )
        )

        recorded = await self._record_pending(
            Payment(
                user_id=profile.id,
                course_id=course.id,
                amount=value,
                currency=currency,
                status=PaymentStatus.PENDING.value,
                payment_method=gateway.method.value,
                transaction_id=transaction_id,
                gateway_session_id=session.session_id,
            ),
            log_context,
        )

        logger.info(f"Payment session created: {transaction_id}", extra=log_context)

        return InitiationResult(
            payment_url=session.payment_url,
            transaction_id=transaction_id,
            payment_id=session.session_id or transaction_id,
            recorded=recorded,
        )

    async def _record_pending(self, payment: Payment, log_context: dict) -> bool:
        """
        Persist the pending payment.

        The gateway session already exists at this point, so a failed write is
        logged and the user is still redirected.
        """
        try:
            self.db.add(payment)
            await self.db.commit()
            return True
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(
                f"Failed to store payment record {payment.transaction_id}: {e}",
                extra=log_context,
                exc_info=True,
            )
            return False
