"""Pydantic models for ERA 835 payment remittances."""

from collections.abc import Iterator
from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator

from remitrecon.models.adjustment import AdjustmentGroup, AdjustmentInfo

ZERO = Decimal("0")


class PaymentStatus(str, Enum):
    """Claim payment status codes (CLP05)."""

    PROCESSED_PRIMARY = "1"
    PROCESSED_SECONDARY = "2"
    PROCESSED_TERTIARY = "3"
    DENIED = "4"
    PRIMARY_FORWARDED = "19"
    SECONDARY_FORWARDED = "20"
    TERTIARY_FORWARDED = "21"
    REVERSAL = "22"
    NOT_OUR_CLAIM_FORWARDED = "23"
    PREDETERMINATION = "25"
    OTHER = "OTHER"

    @classmethod
    def _missing_(cls, value: object) -> "PaymentStatus":
        return cls.OTHER

    @property
    def description(self) -> str:
        return _STATUS_DESCRIPTIONS[self]

    @property
    def is_denial(self) -> bool:
        return self is PaymentStatus.DENIED


_STATUS_DESCRIPTIONS = {
    PaymentStatus.PROCESSED_PRIMARY: "Processed as Primary",
    PaymentStatus.PROCESSED_SECONDARY: "Processed as Secondary",
    PaymentStatus.PROCESSED_TERTIARY: "Processed as Tertiary",
    PaymentStatus.DENIED: "Denied",
    PaymentStatus.PRIMARY_FORWARDED: "Processed as Primary, Forwarded to Additional Payer(s)",
    PaymentStatus.SECONDARY_FORWARDED: "Processed as Secondary, Forwarded to Additional Payer(s)",
    PaymentStatus.TERTIARY_FORWARDED: "Processed as Tertiary, Forwarded to Additional Payer(s)",
    PaymentStatus.REVERSAL: "Reversal of Previous Payment",
    PaymentStatus.NOT_OUR_CLAIM_FORWARDED: "Not Our Claim, Forwarded to Another Payer(s)",
    PaymentStatus.PREDETERMINATION: "Predetermination Pricing Only - No Payment",
    PaymentStatus.OTHER: "Unknown Status",
}


class PatientInfo(BaseModel):
    """Patient identity snippet (NM1*QC)."""

    model_config = ConfigDict(frozen=True)

    last_name: str = Field("", description="Patient last name")
    first_name: str | None = Field(None, description="Patient first name")
    middle_name: str | None = None
    suffix: str | None = None
    id_qualifier: str | None = Field(None, description="MI=member ID, HN=HIC number")
    id: str | None = Field(None, description="Patient member identifier")


class InsuredInfo(BaseModel):
    """Insured identity snippet (NM1*IL), present when it differs from the patient."""

    model_config = ConfigDict(frozen=True)

    last_name: str = Field("", description="Insured last name")
    first_name: str | None = Field(None, description="Insured first name")
    middle_name: str | None = None
    suffix: str | None = None
    id_qualifier: str | None = None
    id: str | None = Field(None, description="Insured member identifier")


class ServiceReference(BaseModel):
    """Service reference identifier (REF)."""

    model_config = ConfigDict(frozen=True)

    qualifier: str = Field(..., description="Reference qualifier (6R, etc.)")
    value: str = Field(..., description="Reference value")


class ServiceDate(BaseModel):
    """Service date (DTM)."""

    model_config = ConfigDict(frozen=True)

    qualifier: str = Field(..., description="472=service date, 150=period start, etc.")
    value: date = Field(..., description="Date of service")


class ServicePayment(BaseModel):
    """One billed service line inside a claim payment (SVC loop)."""

    model_config = ConfigDict(frozen=True)

    line_number: int = Field(1, ge=1, description="Service line sequence number")
    procedure_qualifier: str = Field("HC", description="Procedure code qualifier")
    procedure_code: str = Field(..., description="CPT/HCPCS code")
    modifiers: list[str] = Field(default_factory=list, max_length=4)
    charged_amount: Decimal = Field(..., ge=0, description="Submitted charge")
    paid_amount: Decimal = Field(ZERO, ge=0, description="Amount paid for this line")
    revenue_code: str | None = None
    unit_count: Decimal | None = Field(None, description="Units paid")
    original_units: Decimal | None = Field(None, description="Units submitted")
    adjustments: list[AdjustmentInfo] = Field(default_factory=list)
    references: list[ServiceReference] = Field(default_factory=list)
    dates: list[ServiceDate] = Field(default_factory=list)
    control_number: str | None = Field(None, description="Line item control number")

    @property
    def unexplained_amount(self) -> Decimal:
        """Charge not accounted for by payment or adjustments."""
        adjusted = sum((a.amount for a in self.adjustments), ZERO)
        return self.charged_amount - self.paid_amount - adjusted


class ClaimPayment(BaseModel):
    """One claim's adjudication result (CLP loop). Immutable once received."""

    model_config = ConfigDict(frozen=True)

    claim_number: str = Field("", description="Patient control number (submitter claim number)")
    status: PaymentStatus = Field(PaymentStatus.PROCESSED_PRIMARY, description="CLP05 status")
    billed_amount: Decimal = Field(..., ge=0, description="Original billed amount")
    paid_amount: Decimal = Field(..., ge=0, description="Total paid amount")
    patient_responsibility: Decimal = Field(ZERO, ge=0, description="Patient owes")
    filing_indicator: str | None = Field(None, description="MA, MB, etc.")
    payer_claim_control_number: str | None = Field(None, description="Payer ICN")
    facility_type_code: str | None = None
    frequency_code: str | None = None
    patient: PatientInfo = Field(default_factory=PatientInfo)
    insured: InsuredInfo | None = None
    adjustments: list[AdjustmentInfo] = Field(default_factory=list)
    services: list[ServicePayment] = Field(default_factory=list)

    def all_adjustments(self) -> Iterator[AdjustmentInfo]:
        """Yield claim-level adjustments, then service-level adjustments."""
        yield from self.adjustments
        for service in self.services:
            yield from service.adjustments


class PaymentMethod(str, Enum):
    """Payment method code (BPR04)."""

    ACH = "ACH"
    BOP = "BOP"
    CHK = "CHK"
    FWT = "FWT"
    NON = "NON"


class FinancialInfo(BaseModel):
    """Financial information (BPR)."""

    transaction_handling_code: str = Field("I", description="I=remittance with payment")
    total_amount: Decimal = Field(..., ge=0, description="Total payment amount")
    credit_debit_flag: str = Field("C", pattern=r"^[CD]$")
    payment_method: PaymentMethod = Field(PaymentMethod.ACH)
    payment_format: str | None = None
    effective_date: date | None = Field(None, description="Check/EFT effective date")


class TraceNumber(BaseModel):
    """Reassociation trace number (TRN)."""

    trace_type: str = Field("1", description="Trace type code")
    trace_number: str = Field(..., description="Check or EFT trace number")
    originating_company_id: str | None = None
    originating_company_supplemental_code: str | None = None


class PartyIdentifier(BaseModel):
    """Additional payer/payee identifier (REF)."""

    qualifier: str
    id: str


class PartyInfo(BaseModel):
    """Payer or payee party (N1 loop)."""

    name: str = Field("", description="Party name")
    id_qualifier: str | None = Field(None, description="XV, FI, XX, etc.")
    id: str | None = Field(None, description="Payer ID, Tax ID or NPI")
    additional_ids: list[PartyIdentifier] = Field(default_factory=list)

    @property
    def is_identified(self) -> bool:
        return bool(self.name.strip() or (self.id or "").strip())


class ProviderLevelAdjustment(BaseModel):
    """Provider-level adjustment (PLB) not tied to any claim."""

    provider_id: str = Field(..., description="Provider identifier")
    fiscal_period_date: date | None = None
    adjustment_code: str = Field(..., description="PLB reason code (WO, L6, FB, ...)")
    reference_id: str | None = None
    amount: Decimal = Field(..., description="Signed adjustment amount")


class RemittanceStatus(str, Enum):
    """Remittance processing lifecycle."""

    PENDING = "PENDING"
    REVIEWED = "REVIEWED"
    PARTIAL = "PARTIAL"
    POSTED = "POSTED"
    RECONCILED = "RECONCILED"
    ERROR = "ERROR"


class PaymentSummary(BaseModel):
    """Summary statistics derived from a remittance's claims."""

    total_claims: int = 0
    paid_claims: int = 0
    denied_claims: int = 0
    partial_claims: int = 0
    total_billed: Decimal = ZERO
    total_paid: Decimal = ZERO
    total_adjustments: Decimal = ZERO
    total_patient_responsibility: Decimal = ZERO
    contractual_adjustments: Decimal = ZERO
    other_adjustments: Decimal = ZERO
    provider_adjustments_total: Decimal = ZERO
    net_payment: Decimal = ZERO

    @classmethod
    def from_claims(
        cls,
        claims: list[ClaimPayment],
        provider_adjustments: list[ProviderLevelAdjustment],
        total_amount: Decimal,
    ) -> "PaymentSummary":
        """Derive the summary. Net payment is the BPR total, not a recomputation."""
        paid = denied = partial = 0
        contractual = other = ZERO

        for claim in claims:
            if claim.status.is_denial:
                denied += 1
            elif ZERO < claim.paid_amount < claim.billed_amount:
                partial += 1
            elif claim.paid_amount > 0:
                paid += 1

            for adj in claim.all_adjustments():
                if adj.group_code == AdjustmentGroup.CONTRACTUAL_OBLIGATION:
                    contractual += adj.amount
                elif adj.group_code != AdjustmentGroup.PATIENT_RESPONSIBILITY:
                    other += adj.amount

        return cls(
            total_claims=len(claims),
            paid_claims=paid,
            denied_claims=denied,
            partial_claims=partial,
            total_billed=sum((c.billed_amount for c in claims), ZERO),
            total_paid=sum((c.paid_amount for c in claims), ZERO),
            total_adjustments=contractual + other,
            total_patient_responsibility=sum(
                (c.patient_responsibility for c in claims), ZERO
            ),
            contractual_adjustments=contractual,
            other_adjustments=other,
            provider_adjustments_total=sum(
                (a.amount for a in provider_adjustments), ZERO
            ),
            net_payment=total_amount,
        )


class PaymentRemittance(BaseModel):
    """A complete ERA 835 payment remittance transaction."""

    id: str | None = Field(None, description="Identifier assigned by the importer")

    # Envelope
    interchange_sender_id: str = ""
    interchange_receiver_id: str = ""
    interchange_control_number: str = ""
    group_control_number: str = ""
    transaction_set_control_number: str = ""

    # Payment
    financial_info: FinancialInfo = Field(..., description="BPR payment information")
    trace_number: TraceNumber | None = Field(None, description="TRN reassociation trace")

    # Parties
    payer: PartyInfo | None = None
    payee: PartyInfo | None = None
    production_date: date | None = None

    # Detail
    claims: list[ClaimPayment] = Field(default_factory=list)
    provider_adjustments: list[ProviderLevelAdjustment] = Field(default_factory=list)
    summary: PaymentSummary | None = Field(
        None, description="Derived from claims when not supplied"
    )

    # Processing
    file_name: str | None = None
    processed_at: datetime | None = None
    status: RemittanceStatus = RemittanceStatus.PENDING

    @model_validator(mode="after")
    def _derive_summary(self) -> "PaymentRemittance":
        if self.summary is None:
            self.summary = PaymentSummary.from_claims(
                self.claims, self.provider_adjustments, self.financial_info.total_amount
            )
        return self

    @property
    def has_identity(self) -> bool:
        """Whether the remittance carries a trace number or an identified payer."""
        has_trace = bool(self.trace_number and self.trace_number.trace_number.strip())
        has_payer = bool(self.payer and self.payer.is_identified)
        return has_trace or has_payer

    @property
    def reference(self) -> str:
        """Identifier used in reconciliation reports."""
        if self.id:
            return self.id
        if self.trace_number and self.trace_number.trace_number:
            return self.trace_number.trace_number
        return self.transaction_set_control_number
