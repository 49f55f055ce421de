"""Payment variance calculation."""

from decimal import ROUND_HALF_UP, Decimal

from remitrecon.config import MatchingPolicy
from remitrecon.models.matching import PaymentVariance

HUNDRED = Decimal("100")
CENT = Decimal("0.01")


def calculate_variance(
    expected_amount: Decimal,
    actual_amount: Decimal,
    policy: MatchingPolicy | None = None,
) -> PaymentVariance:
    """
    Compare an expected payment with the amount actually paid.

    A zero expectation yields 100% when anything was paid and 0% otherwise,
    so callers never see a division error. Classification uses the exact
    percentage; only the reported value is rounded to cents.

    Args:
        expected_amount: Contracted or billed expectation (>= 0)
        actual_amount: Amount paid (>= 0)
        policy: Thresholds for classification (defaults when omitted)

    Returns:
        PaymentVariance with amount, rounded percentage and classification

    Raises:
        ValueError: If either amount is negative
    """
    if expected_amount < 0 or actual_amount < 0:
        raise ValueError(
            f"Amounts must be non-negative (expected={expected_amount}, actual={actual_amount})"
        )
    policy = policy or MatchingPolicy()

    variance_amount = actual_amount - expected_amount
    if expected_amount != 0:
        percentage = variance_amount / expected_amount * HUNDRED
    elif actual_amount != 0:
        percentage = HUNDRED
    else:
        percentage = Decimal("0")

    return PaymentVariance(
        expected_amount=expected_amount,
        actual_amount=actual_amount,
        variance_amount=variance_amount,
        variance_percentage=percentage.quantize(CENT, rounding=ROUND_HALF_UP),
        is_underpayment=variance_amount < -policy.money_tolerance,
        reason=_classify(variance_amount, percentage, policy),
    )


def _classify(variance_amount: Decimal, percentage: Decimal, policy: MatchingPolicy) -> str:
    """Describe the variance for operators."""
    if abs(variance_amount) < policy.money_tolerance:
        return "Payment matches expected amount"

    if variance_amount < 0:
        if percentage < policy.significant_underpayment_pct:
            return "Significant underpayment - review for possible denial or adjustment"
        if percentage < policy.review_underpayment_pct:
            return "Underpayment - may need fee schedule review"
        return "Minor underpayment - likely contractual adjustment"

    return "Overpayment - verify payment accuracy"
