"""Remittance processing lifecycle."""

import logging

from remitrecon.errors import InvalidStatusTransitionError
from remitrecon.models.reconciliation import ReconciliationResult
from remitrecon.models.remittance import PaymentRemittance, RemittanceStatus

logger = logging.getLogger(__name__)

S = RemittanceStatus

ALLOWED_TRANSITIONS: dict[RemittanceStatus, frozenset[RemittanceStatus]] = {
    S.PENDING: frozenset({S.REVIEWED, S.ERROR}),
    S.REVIEWED: frozenset({S.PARTIAL, S.POSTED, S.ERROR}),
    S.PARTIAL: frozenset({S.POSTED, S.ERROR}),
    S.POSTED: frozenset({S.RECONCILED, S.ERROR}),
    S.RECONCILED: frozenset(),
    S.ERROR: frozenset(),
}


def can_transition(current: RemittanceStatus, target: RemittanceStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


def transition(remittance: PaymentRemittance, target: RemittanceStatus) -> PaymentRemittance:
    """
    Move a remittance to a new status.

    Returns an updated copy; the input is left untouched.

    Raises:
        InvalidStatusTransitionError: If the transition is not allowed
    """
    if not can_transition(remittance.status, target):
        logger.warning(
            f"Rejected transition {remittance.status.value} -> {target.value} "
            f"for remittance {remittance.reference}"
        )
        raise InvalidStatusTransitionError(remittance.status.value, target.value)
    return remittance.model_copy(update={"status": target})


def mark_reviewed(remittance: PaymentRemittance) -> PaymentRemittance:
    """Every claim has been looked at by a person or an automated pass."""
    return transition(remittance, S.REVIEWED)


def mark_posting_result(remittance: PaymentRemittance, unresolved: int) -> PaymentRemittance:
    """POSTED when nothing is left unresolved, otherwise PARTIAL."""
    if unresolved < 0:
        raise ValueError(f"unresolved must be non-negative, got {unresolved}")
    if unresolved == 0:
        return transition(remittance, S.POSTED)
    if remittance.status == S.PARTIAL:
        return remittance
    return transition(remittance, S.PARTIAL)


def mark_reconciled(
    remittance: PaymentRemittance,
    result: ReconciliationResult,
) -> PaymentRemittance:
    """Confirm the remittance total is accounted for in a reconciled deposit."""
    if not result.is_reconciled or remittance.reference not in result.matched_remittances:
        raise InvalidStatusTransitionError(remittance.status.value, S.RECONCILED.value)
    return transition(remittance, S.RECONCILED)


def mark_error(remittance: PaymentRemittance, reason: str) -> PaymentRemittance:
    """Park the remittance for operator intervention."""
    logger.error(f"Remittance {remittance.reference} moved to ERROR: {reason}")
    return transition(remittance, S.ERROR)
