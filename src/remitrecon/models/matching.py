"""Pydantic models for claim matching and auto-post decisions."""

from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from remitrecon.models.adjustment import WriteOffRecommendation
from remitrecon.models.remittance import ClaimPayment


class MatchConfidence(str, Enum):
    """Confidence grade for a match."""

    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class MatchMethod(str, Enum):
    """Evidence used to produce a match."""

    CLAIM_NUMBER = "CLAIM_NUMBER"
    PATIENT = "PATIENT"
    AMOUNT = "AMOUNT"
    MANUAL = "MANUAL"


class PaymentVariance(BaseModel):
    """Gap between expected and actual payment."""

    model_config = ConfigDict(frozen=True)

    expected_amount: Decimal = Field(..., description="Contract/fee-schedule expectation")
    actual_amount: Decimal = Field(..., description="Amount actually paid")
    variance_amount: Decimal = Field(..., description="actual - expected")
    variance_percentage: Decimal = Field(..., description="Variance as percent of expected")
    is_underpayment: bool = Field(..., description="Paid less than expected")
    reason: str = Field(..., description="Variance classification")


class MatchResult(BaseModel):
    """Outcome of matching one remittance claim to the billing system."""

    model_config = ConfigDict(frozen=True)

    payment: ClaimPayment = Field(..., description="Remittance claim being matched")
    matched_claim_id: str | None = Field(None, description="Internal claim id, if found")
    confidence: MatchConfidence = Field(..., description="Confidence grade")
    match_method: MatchMethod = Field(..., description="Method used")
    variance: PaymentVariance | None = Field(None, description="Non-zero variance only")
    suggested_actions: list[str] = Field(default_factory=list)

    @property
    def is_matched(self) -> bool:
        return self.matched_claim_id is not None


class UnmatchedPayment(BaseModel):
    """Review summary for a remittance claim that found no system claim."""

    era_claim_number: str = Field(..., description="Claim number as sent by the payer")
    patient_name: str = Field(..., description="\"Last, First\"")
    billed_amount: Decimal
    paid_amount: Decimal
    status: str = Field(..., description="Claim status description")
    suggested_actions: list[str] = Field(default_factory=list)

    @classmethod
    def from_payment(cls, payment: ClaimPayment) -> "UnmatchedPayment":
        patient = payment.patient
        if payment.status.is_denial:
            actions = ["Review denial - CARC codes available", "Consider appeal if appropriate"]
        else:
            actions = ["Search for claim manually", "Verify patient registration"]
        return cls(
            era_claim_number=payment.claim_number,
            patient_name=f"{patient.last_name}, {patient.first_name or ''}".strip(),
            billed_amount=payment.billed_amount,
            paid_amount=payment.paid_amount,
            status=payment.status.description,
            suggested_actions=actions,
        )


class AutoPostDecision(BaseModel):
    """Whether a matched payment can post without review, and why not."""

    model_config = ConfigDict(frozen=True)

    eligible: bool
    reason: str | None = Field(None, description="First rule that vetoed auto-post")


class MatchStatistics(BaseModel):
    """Counters for a batch of match results.

    Counters only, so partial statistics from separate workers can be
    combined with ``merge`` in any order.
    """

    model_config = ConfigDict(frozen=True)

    total: int = 0
    matched: int = 0
    unmatched: int = 0
    high_confidence: int = 0
    medium_confidence: int = 0
    low_confidence: int = 0
    auto_post_eligible: int = 0
    requires_review: int = 0

    def merge(self, other: "MatchStatistics") -> "MatchStatistics":
        return MatchStatistics(
            total=self.total + other.total,
            matched=self.matched + other.matched,
            unmatched=self.unmatched + other.unmatched,
            high_confidence=self.high_confidence + other.high_confidence,
            medium_confidence=self.medium_confidence + other.medium_confidence,
            low_confidence=self.low_confidence + other.low_confidence,
            auto_post_eligible=self.auto_post_eligible + other.auto_post_eligible,
            requires_review=self.requires_review + other.requires_review,
        )


class ClaimOutcome(BaseModel):
    """Everything the posting service needs for one remittance claim."""

    model_config = ConfigDict(frozen=True)

    match: MatchResult
    write_offs: list[WriteOffRecommendation] = Field(default_factory=list)
    auto_post: AutoPostDecision


class RemittanceOutcome(BaseModel):
    """Batch result for a whole remittance."""

    remittance_reference: str = Field(..., description="Remittance id or trace number")
    outcomes: list[ClaimOutcome] = Field(default_factory=list)
    statistics: MatchStatistics = Field(default_factory=MatchStatistics)

    @property
    def matches(self) -> list[MatchResult]:
        return [o.match for o in self.outcomes]

    @property
    def needs_review(self) -> list[ClaimOutcome]:
        return [o for o in self.outcomes if not o.auto_post.eligible]

    @property
    def unmatched(self) -> list[UnmatchedPayment]:
        """Review summaries for claims that found no system claim."""
        return [UnmatchedPayment.from_payment(m.payment) for m in self.matches if not m.is_matched]
