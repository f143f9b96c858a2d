"""
Payment state machine with strict transitions.
"""

import logging
from typing import Dict, FrozenSet

from storefront.errors import InvalidTransition
from storefront.fsm.states import PaymentStatus
from storefront.models.payment import Payment

logger = logging.getLogger(__name__)


class PaymentStateMachine:
    """
    Enforces the payment lifecycle.

    pending -> completed
    pending -> failed

    Terminal states have no outgoing transitions.
    """

    TRANSITIONS: Dict[PaymentStatus, FrozenSet[PaymentStatus]] = {
        PaymentStatus.PENDING: frozenset({PaymentStatus.COMPLETED, PaymentStatus.FAILED}),
        PaymentStatus.COMPLETED: frozenset(),
        PaymentStatus.FAILED: frozenset(),
    }

    @classmethod
    def can_transition(cls, current: PaymentStatus, target: PaymentStatus) -> bool:
        return target in cls.TRANSITIONS.get(current, frozenset())

    @classmethod
    def transition(cls, payment: Payment, target: PaymentStatus) -> None:
        """Move `payment` to `target` or raise InvalidTransition."""
        current = PaymentStatus(payment.status)

        if not cls.can_transition(current, target):
            logger.warning(
                f"Rejected payment transition {current.value} -> {target.value} "
                f"for {payment.transaction_id}"
            )
            raise InvalidTransition(
                f"Payment is already {current.value}"
            )

        payment.status = target.value
        logger.info(
            f"Payment {payment.transaction_id}: {current.value} -> {target.value}"
        )
