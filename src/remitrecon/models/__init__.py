"""Pydantic models for RemitRecon."""

from remitrecon.models.adjustment import (
    AdjustmentGroup,
    AdjustmentInfo,
    WriteOffRecommendation,
    WriteOffRule,
)
from remitrecon.models.matching import (
    AutoPostDecision,
    ClaimOutcome,
    MatchConfidence,
    MatchMethod,
    MatchResult,
    MatchStatistics,
    PaymentVariance,
    RemittanceOutcome,
    UnmatchedPayment,
)
from remitrecon.models.reconciliation import (
    BankDeposit,
    ReconciliationReport,
    ReconciliationResult,
    ReconciliationTotals,
    RemittanceReportLine,
    UnreconciledRemittance,
)
from remitrecon.models.remittance import (
    ClaimPayment,
    FinancialInfo,
    InsuredInfo,
    PartyInfo,
    PatientInfo,
    PaymentMethod,
    PaymentRemittance,
    PaymentStatus,
    PaymentSummary,
    ProviderLevelAdjustment,
    RemittanceStatus,
    ServiceDate,
    ServicePayment,
    TraceNumber,
)
from remitrecon.models.system import SystemClaim, SystemPatient

__all__ = [
    # Adjustment models
    "AdjustmentGroup",
    "AdjustmentInfo",
    "WriteOffRecommendation",
    "WriteOffRule",
    # Remittance models
    "ClaimPayment",
    "FinancialInfo",
    "InsuredInfo",
    "PartyInfo",
    "PatientInfo",
    "PaymentMethod",
    "PaymentRemittance",
    "PaymentStatus",
    "PaymentSummary",
    "ProviderLevelAdjustment",
    "RemittanceStatus",
    "ServiceDate",
    "ServicePayment",
    "TraceNumber",
    # Billing-system records
    "SystemClaim",
    "SystemPatient",
    # Matching models
    "AutoPostDecision",
    "ClaimOutcome",
    "MatchConfidence",
    "MatchMethod",
    "MatchResult",
    "MatchStatistics",
    "PaymentVariance",
    "RemittanceOutcome",
    "UnmatchedPayment",
    # Reconciliation models
    "BankDeposit",
    "ReconciliationReport",
    "ReconciliationResult",
    "ReconciliationTotals",
    "RemittanceReportLine",
    "UnreconciledRemittance",
]
