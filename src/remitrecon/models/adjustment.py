"""Pydantic models for claim adjustments and write-off recommendations."""

from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class AdjustmentGroup(str, Enum):
    """CAS adjustment group codes."""

    PATIENT_RESPONSIBILITY = "PR"
    CONTRACTUAL_OBLIGATION = "CO"
    OTHER_ADJUSTMENT = "OA"
    PAYER_INITIATED = "PI"
    CORRECTION_REVERSAL = "CR"


class AdjustmentInfo(BaseModel):
    """One reduction to a billed amount, with its CARC/RARC codes."""

    model_config = ConfigDict(frozen=True)

    group_code: AdjustmentGroup = Field(..., description="Adjustment group code")
    reason_code: str = Field(..., description="Claim Adjustment Reason Code (CARC)")
    amount: Decimal = Field(..., ge=0, description="Magnitude of the reduction")
    quantity: Decimal | None = Field(None, description="Units affected")
    reason_description: str | None = Field(None, description="CARC description")
    remark_code: str | None = Field(None, description="Remittance Advice Remark Code")
    remark_description: str | None = Field(None, description="RARC description")


class WriteOffRule(BaseModel):
    """Maps a (reason code, group code) pair to a write-off disposition."""

    model_config = ConfigDict(frozen=True)

    reason_code: str = Field(..., min_length=1, description="CARC the rule applies to")
    group_code: AdjustmentGroup = Field(..., description="Group the rule applies to")
    write_off_code: str = Field(..., min_length=1, description="Internal write-off code")
    description: str = Field(..., description="Reason shown to operators")
    requires_approval: bool = Field(..., description="Needs a human sign-off")
    auto_post_eligible: bool = Field(..., description="May be posted without review")


class WriteOffRecommendation(BaseModel):
    """Recommended disposition for a single adjustment."""

    model_config = ConfigDict(frozen=True)

    adjustment: AdjustmentInfo = Field(..., description="Source adjustment")
    write_off_code: str = Field(..., description="Recommended write-off code")
    reason: str = Field(..., description="Write-off reason description")
    amount: Decimal = Field(..., description="Amount to write off")
    requires_approval: bool = Field(..., description="Needs a human sign-off")
    auto_post_eligible: bool = Field(..., description="May be posted without review")
