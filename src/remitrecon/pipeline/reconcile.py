"""Bank deposit reconciliation."""

import logging
from datetime import date, datetime
from decimal import Decimal

from remitrecon.config import MatchingPolicy
from remitrecon.models.reconciliation import (
    BankDeposit,
    ReconciliationReport,
    ReconciliationResult,
    ReconciliationTotals,
    RemittanceReportLine,
    UnreconciledRemittance,
)
from remitrecon.models.remittance import PaymentRemittance, RemittanceStatus

logger = logging.getLogger(__name__)


def reconcile_deposit(
    deposit: BankDeposit,
    remittances: list[PaymentRemittance],
    policy: MatchingPolicy | None = None,
) -> ReconciliationResult:
    """
    Reconcile a bank deposit against the remittances said to make it up.

    Remittances in ERROR status, or carrying a different trace number than
    the deposit, are reported as unmatched and left out of the sum. A
    remittance listed twice (same reference) counts once.

    Args:
        deposit: Deposit from the bank statement
        remittances: Candidate remittances
        policy: Supplies the monetary tolerance

    Returns:
        ReconciliationResult; reconciled when the variance is within tolerance
    """
    policy = policy or MatchingPolicy()
    matched: list[str] = []
    unmatched: list[str] = []
    notes: list[str] = []
    matched_amount = Decimal("0")
    seen: set[str] = set()

    for remittance in remittances:
        reference = remittance.reference
        if reference in seen:
            notes.append(f"Remittance {reference} listed more than once; counted once")
            continue
        seen.add(reference)

        if remittance.status == RemittanceStatus.ERROR:
            unmatched.append(reference)
            notes.append(f"Remittance {reference} is in ERROR status")
            continue

        trace = remittance.trace_number.trace_number if remittance.trace_number else None
        if deposit.trace_number and trace != deposit.trace_number:
            unmatched.append(reference)
            notes.append(f"Remittance {reference} trace number does not match deposit")
            continue

        matched_amount += remittance.financial_info.total_amount
        matched.append(reference)

    variance = deposit.amount - matched_amount
    is_reconciled = abs(variance) < policy.money_tolerance

    if not is_reconciled:
        notes.append(f"Variance of ${variance:.2f} detected")
        if variance > 0:
            notes.append("Deposit amount exceeds remittance total - check for missing remittances")
        else:
            notes.append(
                "Remittance total exceeds deposit - verify all remittances are for this deposit"
            )
        logger.warning(f"Deposit {deposit.deposit_id} not reconciled: variance {variance:.2f}")
    else:
        logger.info(f"Deposit {deposit.deposit_id} reconciled with {len(matched)} remittance(s)")

    return ReconciliationResult(
        deposit_id=deposit.deposit_id,
        deposit_amount=deposit.amount,
        matched_amount=matched_amount,
        variance=variance,
        is_reconciled=is_reconciled,
        matched_remittances=matched,
        unmatched_remittances=unmatched,
        notes=notes,
    )


def reconciliation_report(
    remittances: list[PaymentRemittance],
    as_of: datetime | None = None,
) -> ReconciliationReport:
    """
    Summarize reconciliation status across remittances.

    Remittances are listed by payment effective date, undated ones last.
    Anything not RECONCILED counts toward the unreconciled amount.

    Args:
        remittances: Remittances in the reporting period
        as_of: Reference time for days pending (now when omitted)

    Returns:
        ReconciliationReport with totals, every remittance and the unreconciled ones
    """
    ordered = sorted(remittances, key=_effective_date_key)
    totals = ReconciliationTotals(total_remittances=len(ordered))
    lines: list[RemittanceReportLine] = []
    unreconciled: list[UnreconciledRemittance] = []

    for remittance in ordered:
        amount = remittance.financial_info.total_amount
        check_number = remittance.trace_number.trace_number if remittance.trace_number else None
        payer_name = remittance.payer.name if remittance.payer else None
        is_reconciled = remittance.status == RemittanceStatus.RECONCILED

        totals.total_amount += amount
        if is_reconciled:
            totals.reconciled_amount += amount
            totals.reconciled_count += 1
        else:
            totals.unreconciled_amount += amount
            unreconciled.append(
                UnreconciledRemittance(
                    reference=remittance.reference,
                    check_number=check_number,
                    amount=amount,
                    payer_name=payer_name,
                    days_pending=_days_pending(remittance.processed_at, as_of),
                )
            )

        if remittance.status == RemittanceStatus.PENDING:
            totals.pending_count += 1
        elif remittance.status == RemittanceStatus.POSTED:
            totals.posted_count += 1

        lines.append(
            RemittanceReportLine(
                reference=remittance.reference,
                check_number=check_number,
                check_date=remittance.financial_info.effective_date,
                payer_name=payer_name,
                amount=amount,
                status=remittance.status,
                is_reconciled=is_reconciled,
            )
        )

    logger.info(
        f"Reconciliation report: {totals.reconciled_count}/{totals.total_remittances} reconciled, "
        f"${totals.unreconciled_amount:.2f} outstanding"
    )
    return ReconciliationReport(
        totals=totals, remittances=lines, unreconciled_remittances=unreconciled
    )


def _effective_date_key(remittance: PaymentRemittance) -> tuple[bool, date]:
    effective = remittance.financial_info.effective_date
    return (effective is None, effective or date.min)


def _days_pending(processed_at: datetime | None, as_of: datetime | None) -> int | None:
    if processed_at is None:
        return None
    now = as_of or datetime.now(processed_at.tzinfo)
    return max(0, (now - processed_at).days)
