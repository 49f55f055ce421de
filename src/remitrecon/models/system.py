"""Internal billing-system records supplied by the claims database."""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class SystemClaim(BaseModel):
    """A claim as recorded in the billing system."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Internal claim identifier")
    claim_number: str = Field(..., description="Claim number submitted to the payer")
    patient_id: str = Field(..., description="Internal patient identifier")
    patient_first_name: str | None = None
    patient_last_name: str | None = None
    patient_dob: date | None = None
    billed_amount: Decimal = Field(..., ge=0, description="Total billed")
    expected_payment: Decimal | None = Field(
        None, ge=0, description="Contracted/fee-schedule expected payment"
    )
    date_of_service: date | None = None
    payer_id: str | None = None
    payer_name: str | None = None
    status: str = Field("submitted", description="Billing-system claim status")

    @property
    def expected_amount(self) -> Decimal:
        """Expected payment, falling back to the billed amount."""
        if self.expected_payment is not None:
            return self.expected_payment
        return self.billed_amount


class SystemPatient(BaseModel):
    """A patient as recorded in the billing system."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Internal patient identifier")
    first_name: str = Field("", description="First name")
    last_name: str = Field(..., description="Last name")
    date_of_birth: date | None = None
    member_id: str | None = Field(None, description="Payer member ID")
