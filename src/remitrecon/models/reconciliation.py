"""Pydantic models for bank deposit reconciliation."""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field

from remitrecon.models.remittance import ZERO, RemittanceStatus


class BankDeposit(BaseModel):
    """A deposit line from the bank statement."""

    deposit_id: str = Field(..., description="Bank deposit identifier")
    amount: Decimal = Field(..., ge=0, description="Deposited amount")
    deposit_date: date | None = None
    trace_number: str | None = Field(
        None, description="EFT trace number, when the bank reports one"
    )


class ReconciliationResult(BaseModel):
    """Outcome of reconciling a deposit against remittances."""

    deposit_id: str
    deposit_amount: Decimal
    matched_amount: Decimal = Field(..., description="Sum of matched remittance totals")
    variance: Decimal = Field(..., description="deposit - matched")
    is_reconciled: bool
    matched_remittances: list[str] = Field(default_factory=list)
    unmatched_remittances: list[str] = Field(default_factory=list)
    notes: list[str] = Field(default_factory=list)


class ReconciliationTotals(BaseModel):
    """Amounts and counts across a set of remittances."""

    total_remittances: int = 0
    total_amount: Decimal = ZERO
    reconciled_amount: Decimal = ZERO
    unreconciled_amount: Decimal = ZERO
    reconciled_count: int = 0
    pending_count: int = 0
    posted_count: int = 0


class RemittanceReportLine(BaseModel):
    """One remittance as listed in a reconciliation report."""

    reference: str
    check_number: str | None = Field(None, description="Check or EFT trace number")
    check_date: date | None = Field(None, description="Payment effective date")
    payer_name: str | None = None
    amount: Decimal
    status: RemittanceStatus
    is_reconciled: bool


class UnreconciledRemittance(BaseModel):
    """A remittance still waiting to be matched to a deposit."""

    reference: str
    check_number: str | None = None
    amount: Decimal
    payer_name: str | None = None
    days_pending: int | None = Field(
        None, description="Whole days since import; unknown without a processed time"
    )


class ReconciliationReport(BaseModel):
    """Reconciliation status report for reporting collaborators."""

    totals: ReconciliationTotals
    remittances: list[RemittanceReportLine] = Field(default_factory=list)
    unreconciled_remittances: list[UnreconciledRemittance] = Field(default_factory=list)
