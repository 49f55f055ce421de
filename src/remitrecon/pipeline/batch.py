"""Batch matching and posting decisions for whole remittances."""

import logging
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from functools import reduce
from typing import TypeVar

from remitrecon.config import Settings, get_settings
from remitrecon.errors import RemittanceIntegrityError
from remitrecon.models.matching import (
    ClaimOutcome,
    MatchConfidence,
    MatchResult,
    MatchStatistics,
    RemittanceOutcome,
    UnmatchedPayment,
)
from remitrecon.models.remittance import ClaimPayment, PaymentRemittance
from remitrecon.models.system import SystemClaim, SystemPatient
from remitrecon.pipeline.auto_post import AutoPostPolicy
from remitrecon.pipeline.matcher import ClaimMatcher
from remitrecon.pipeline.writeoff import create_writeoff_resolver

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


def count_result(result: MatchResult, auto_post_eligible: bool) -> MatchStatistics:
    """Statistics for a single match result."""
    return MatchStatistics(
        total=1,
        matched=int(result.is_matched),
        unmatched=int(not result.is_matched),
        high_confidence=int(result.confidence == MatchConfidence.HIGH),
        medium_confidence=int(result.confidence == MatchConfidence.MEDIUM),
        low_confidence=int(result.confidence == MatchConfidence.LOW),
        auto_post_eligible=int(auto_post_eligible),
        requires_review=int(not auto_post_eligible),
    )


def review_unmatched(results: Sequence[MatchResult]) -> list[UnmatchedPayment]:
    """Summaries for every result without a matched claim, in input order."""
    return [UnmatchedPayment.from_payment(r.payment) for r in results if not r.is_matched]


class RemittanceProcessor:
    """
    Runs matching, write-off resolution and auto-post decisions over a batch.

    Claims are independent of each other, so large batches are spread over a
    thread pool. Results always come back in input order.
    """

    def __init__(
        self,
        matcher: ClaimMatcher | None = None,
        auto_post: AutoPostPolicy | None = None,
        max_workers: int = 1,
        parallel_threshold: int = 500,
    ) -> None:
        self.matcher = matcher or ClaimMatcher()
        self.auto_post = auto_post or AutoPostPolicy(policy=self.matcher.policy)
        self.max_workers = max(1, max_workers)
        self.parallel_threshold = parallel_threshold

    def match_payments(
        self,
        payments: Sequence[ClaimPayment],
        claims: list[SystemClaim],
        patients: list[SystemPatient] | None = None,
    ) -> list[MatchResult]:
        """Match every payment; patient matching only for claim-number misses."""
        return self._map(lambda p: self.matcher.match(p, claims, patients), payments)

    def statistics(self, results: Sequence[MatchResult]) -> MatchStatistics:
        """Aggregate statistics, re-applying the auto-post policy to each result."""
        parts = self._map(
            lambda r: count_result(r, self.auto_post.can_auto_post(r.payment, r)), results
        )
        return reduce(MatchStatistics.merge, parts, MatchStatistics())

    def process(
        self,
        remittance: PaymentRemittance,
        claims: list[SystemClaim],
        patients: list[SystemPatient] | None = None,
    ) -> RemittanceOutcome:
        """
        Process every claim in a remittance.

        Args:
            remittance: Parsed remittance
            claims: Billing-system claims to match against
            patients: Optional patient directory for identity matching

        Returns:
            RemittanceOutcome with one ClaimOutcome per remittance claim

        Raises:
            RemittanceIntegrityError: If the remittance has no trace number and no payer
        """
        if not remittance.has_identity:
            raise RemittanceIntegrityError(
                "Remittance has neither a trace number nor a payer identity"
            )

        def handle(payment: ClaimPayment) -> ClaimOutcome:
            match = self.matcher.match(payment, claims, patients)
            return ClaimOutcome(
                match=match,
                write_offs=self.auto_post.resolver.recommendations_for(payment),
                auto_post=self.auto_post.evaluate(payment, match),
            )

        outcomes = self._map(handle, remittance.claims)
        statistics = reduce(
            MatchStatistics.merge,
            (count_result(o.match, o.auto_post.eligible) for o in outcomes),
            MatchStatistics(),
        )

        logger.info(
            f"Remittance {remittance.reference}: {statistics.matched}/{statistics.total} matched, "
            f"{statistics.auto_post_eligible} auto-post eligible, "
            f"{statistics.requires_review} need review"
        )
        return RemittanceOutcome(
            remittance_reference=remittance.reference,
            outcomes=outcomes,
            statistics=statistics,
        )

    def _map(self, fn: Callable[[T], R], items: Sequence[T]) -> list[R]:
        if self.max_workers > 1 and len(items) >= self.parallel_threshold:
            logger.debug(f"Processing {len(items)} items on {self.max_workers} workers")
            with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                return list(pool.map(fn, items))
        return [fn(item) for item in items]


def create_remittance_processor(settings: Settings | None = None) -> RemittanceProcessor:
    """
    Create a processor from application settings.

    The write-off table and policy are snapshotted here; reloading rules means
    creating a new processor.
    """
    settings = settings or get_settings()
    policy = settings.policy()
    resolver = create_writeoff_resolver(settings.writeoff_rules_path)
    return RemittanceProcessor(
        matcher=ClaimMatcher(policy),
        auto_post=AutoPostPolicy(resolver, policy),
        max_workers=settings.batch_max_workers,
        parallel_threshold=settings.parallel_batch_threshold,
    )
