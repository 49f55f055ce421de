"""Auto-post eligibility for matched payments."""

from remitrecon.config import MatchingPolicy
from remitrecon.models.matching import AutoPostDecision, MatchConfidence, MatchResult
from remitrecon.models.remittance import ClaimPayment
from remitrecon.pipeline.writeoff import WriteOffResolver


class AutoPostPolicy:
    """
    Decides whether a payment may post to the ledger without review.

    Rules are checked in order and the first failure vetoes auto-post:
    a confident match, no denial, variance within tolerance, and every
    write-off recommendation auto-post eligible.
    """

    def __init__(
        self,
        resolver: WriteOffResolver | None = None,
        policy: MatchingPolicy | None = None,
    ) -> None:
        self.resolver = resolver or WriteOffResolver()
        self.policy = policy or MatchingPolicy()

    def evaluate(self, payment: ClaimPayment, match: MatchResult) -> AutoPostDecision:
        """Return the decision together with the vetoing rule, if any."""
        if match.matched_claim_id is None or match.confidence == MatchConfidence.LOW:
            return AutoPostDecision(eligible=False, reason="No confident claim match")

        if payment.status.is_denial:
            return AutoPostDecision(eligible=False, reason="Denied claims require review")

        variance = match.variance
        if variance and abs(variance.variance_percentage) > self.policy.auto_post_max_variance_pct:
            return AutoPostDecision(
                eligible=False,
                reason=(
                    f"Variance {variance.variance_percentage}% exceeds "
                    f"{self.policy.auto_post_max_variance_pct}% limit"
                ),
            )

        for recommendation in self.resolver.recommendations_for(payment):
            if not recommendation.auto_post_eligible:
                adj = recommendation.adjustment
                return AutoPostDecision(
                    eligible=False,
                    reason=(
                        f"Adjustment {adj.group_code.value}-{adj.reason_code} "
                        f"({recommendation.write_off_code}) requires review"
                    ),
                )

        return AutoPostDecision(eligible=True)

    def can_auto_post(self, payment: ClaimPayment, match: MatchResult) -> bool:
        """Whether the payment is safe to post without review."""
        return self.evaluate(payment, match).eligible
