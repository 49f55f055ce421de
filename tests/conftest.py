"""Pytest configuration and fixtures."""

from collections.abc import Callable
from decimal import Decimal

import pytest

from remitrecon.models import (
    AdjustmentGroup,
    AdjustmentInfo,
    ClaimPayment,
    FinancialInfo,
    PartyInfo,
    PatientInfo,
    PaymentRemittance,
    PaymentStatus,
    ServicePayment,
    SystemClaim,
    SystemPatient,
    TraceNumber,
)


def money(value: str | int | Decimal) -> Decimal:
    return Decimal(str(value))


@pytest.fixture
def make_adjustment() -> Callable[..., AdjustmentInfo]:
    """Factory for adjustments, e.g. make_adjustment("CO", "45", "220")."""

    def _make(group: str, reason: str, amount: str | int = "0") -> AdjustmentInfo:
        return AdjustmentInfo(
            group_code=AdjustmentGroup(group), reason_code=reason, amount=money(amount)
        )

    return _make


@pytest.fixture
def make_payment() -> Callable[..., ClaimPayment]:
    """Factory for remittance claim payments."""

    def _make(
        claim_number: str = "CLM-001",
        billed: str | int = "500",
        paid: str | int = "500",
        status: PaymentStatus = PaymentStatus.PROCESSED_PRIMARY,
        patient: PatientInfo | None = None,
        adjustments: list[AdjustmentInfo] | None = None,
        services: list[ServicePayment] | None = None,
        **kwargs,
    ) -> ClaimPayment:
        return ClaimPayment(
            claim_number=claim_number,
            status=status,
            billed_amount=money(billed),
            paid_amount=money(paid),
            patient=patient or PatientInfo(last_name="Doe", first_name="Jane"),
            adjustments=adjustments or [],
            services=services or [],
            **kwargs,
        )

    return _make


@pytest.fixture
def make_claim() -> Callable[..., SystemClaim]:
    """Factory for billing-system claims."""

    def _make(
        claim_id: str,
        claim_number: str,
        patient_id: str = "P-100",
        billed: str | int = "500",
        expected: str | int | None = None,
    ) -> SystemClaim:
        return SystemClaim(
            id=claim_id,
            claim_number=claim_number,
            patient_id=patient_id,
            billed_amount=money(billed),
            expected_payment=money(expected) if expected is not None else None,
        )

    return _make


@pytest.fixture
def patients() -> list[SystemPatient]:
    """Patient directory with two patients."""
    return [
        SystemPatient(id="P-100", first_name="Jane", last_name="Doe", member_id="MEM123"),
        SystemPatient(id="P-200", first_name="John", last_name="Smith", member_id="MEM456"),
    ]


@pytest.fixture
def make_remittance() -> Callable[..., PaymentRemittance]:
    """Factory for remittances."""

    def _make(
        claims: list[ClaimPayment] | None = None,
        total: str | int = "0",
        trace: str | None = "EFT-0001",
        payer_name: str = "Acme Health Plan",
        **kwargs,
    ) -> PaymentRemittance:
        return PaymentRemittance(
            financial_info=FinancialInfo(total_amount=money(total)),
            trace_number=TraceNumber(trace_number=trace) if trace is not None else None,
            payer=PartyInfo(name=payer_name, id="ACME01"),
            payee=PartyInfo(name="Raleigh Medical Center", id_qualifier="XX", id="1234567890"),
            claims=claims or [],
            **kwargs,
        )

    return _make
