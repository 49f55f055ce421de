"""Pipeline modules for RemitRecon."""

from remitrecon.pipeline.auto_post import AutoPostPolicy
from remitrecon.pipeline.batch import (
    RemittanceProcessor,
    create_remittance_processor,
    review_unmatched,
)
from remitrecon.pipeline.lifecycle import (
    mark_error,
    mark_posting_result,
    mark_reconciled,
    mark_reviewed,
    transition,
)
from remitrecon.pipeline.matcher import ClaimMatcher, match_claim_payment, normalize_claim_number
from remitrecon.pipeline.reconcile import reconcile_deposit, reconciliation_report
from remitrecon.pipeline.variance import calculate_variance
from remitrecon.pipeline.writeoff import (
    DEFAULT_WRITEOFF_RULES,
    WriteOffResolver,
    create_writeoff_resolver,
    load_writeoff_rules,
    suggest_writeoff,
)

__all__ = [
    "calculate_variance",
    "DEFAULT_WRITEOFF_RULES",
    "WriteOffResolver",
    "create_writeoff_resolver",
    "load_writeoff_rules",
    "suggest_writeoff",
    "ClaimMatcher",
    "match_claim_payment",
    "normalize_claim_number",
    "AutoPostPolicy",
    "RemittanceProcessor",
    "create_remittance_processor",
    "review_unmatched",
    "reconcile_deposit",
    "reconciliation_report",
    "transition",
    "mark_reviewed",
    "mark_posting_result",
    "mark_reconciled",
    "mark_error",
]
