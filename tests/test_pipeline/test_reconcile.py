"""Tests for bank deposit reconciliation."""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from remitrecon.models import BankDeposit, FinancialInfo, RemittanceStatus
from remitrecon.pipeline.reconcile import reconcile_deposit, reconciliation_report


def _deposit(amount: str, trace: str | None = None) -> BankDeposit:
    return BankDeposit(
        deposit_id="DEP-1", amount=Decimal(amount), deposit_date=date(2024, 3, 1), trace_number=trace
    )


class TestReconcileDeposit:
    """Tests for reconcile_deposit."""

    def test_exact_sum_reconciles(self, make_remittance) -> None:
        remittances = [
            make_remittance(total="1200.50", id="R1"),
            make_remittance(total="799.50", id="R2"),
        ]

        result = reconcile_deposit(_deposit("2000.00"), remittances)

        assert result.is_reconciled is True
        assert result.matched_amount == Decimal("2000.00")
        assert result.variance == 0
        assert result.matched_remittances == ["R1", "R2"]
        assert result.unmatched_remittances == []
        assert result.notes == []

    def test_deposit_exceeds_remittances(self, make_remittance) -> None:
        result = reconcile_deposit(_deposit("1500"), [make_remittance(total="1000", id="R1")])

        assert result.is_reconciled is False
        assert result.variance == Decimal("500")
        assert result.notes == [
            "Variance of $500.00 detected",
            "Deposit amount exceeds remittance total - check for missing remittances",
        ]

    def test_remittances_exceed_deposit(self, make_remittance) -> None:
        result = reconcile_deposit(_deposit("900"), [make_remittance(total="1000", id="R1")])

        assert result.variance == Decimal("-100")
        assert result.notes[-1].startswith("Remittance total exceeds deposit")

    def test_sub_cent_variance_reconciles(self, make_remittance) -> None:
        result = reconcile_deposit(_deposit("1000.004"), [make_remittance(total="1000", id="R1")])

        assert result.is_reconciled is True

    def test_error_remittance_unmatched(self, make_remittance) -> None:
        remittances = [
            make_remittance(total="1000", id="R1"),
            make_remittance(total="250", id="R2", status=RemittanceStatus.ERROR),
        ]

        result = reconcile_deposit(_deposit("1000"), remittances)

        assert result.is_reconciled is True
        assert result.matched_remittances == ["R1"]
        assert result.unmatched_remittances == ["R2"]

    def test_trace_number_mismatch_unmatched(self, make_remittance) -> None:
        remittances = [
            make_remittance(total="1000", id="R1", trace="EFT-A"),
            make_remittance(total="400", id="R2", trace="EFT-B"),
        ]

        result = reconcile_deposit(_deposit("1000", trace="EFT-A"), remittances)

        assert result.matched_remittances == ["R1"]
        assert result.unmatched_remittances == ["R2"]
        assert result.is_reconciled is True

    def test_no_remittances(self) -> None:
        result = reconcile_deposit(_deposit("100"), [])

        assert result.matched_amount == 0
        assert result.is_reconciled is False

    def test_duplicate_remittance_counted_once(self, make_remittance) -> None:
        remittance = make_remittance(total="1000", id="R1")

        result = reconcile_deposit(_deposit("1000"), [remittance, remittance])

        assert result.is_reconciled is True
        assert result.matched_amount == Decimal("1000")
        assert result.matched_remittances == ["R1"]
        assert result.notes == ["Remittance R1 listed more than once; counted once"]


class TestReconciliationReport:
    """Tests for reconciliation_report."""

    @pytest.fixture
    def remittances(self, make_remittance):
        def dated(total, day, **kwargs):
            remittance = make_remittance(total=total, **kwargs)
            return remittance.model_copy(
                update={
                    "financial_info": FinancialInfo(
                        total_amount=Decimal(total),
                        effective_date=date(2024, 3, day) if day else None,
                    )
                }
            )

        imported = datetime(2024, 3, 1, tzinfo=timezone.utc)
        return [
            dated("300", None, id="R4", status=RemittanceStatus.PARTIAL),
            dated("1000", 5, id="R2", status=RemittanceStatus.POSTED, processed_at=imported),
            dated("250", 2, id="R1", status=RemittanceStatus.RECONCILED),
            dated("400", 9, id="R3", trace="EFT-0003"),
        ]

    def test_totals(self, remittances) -> None:
        totals = reconciliation_report(remittances).totals

        assert totals.total_remittances == 4
        assert totals.total_amount == Decimal("1950")
        assert totals.reconciled_amount == Decimal("250")
        assert totals.unreconciled_amount == Decimal("1700")
        assert totals.reconciled_count == 1
        assert totals.pending_count == 1
        assert totals.posted_count == 1

    def test_ordered_by_effective_date(self, remittances) -> None:
        report = reconciliation_report(remittances)

        assert [line.reference for line in report.remittances] == ["R1", "R2", "R3", "R4"]
        assert report.remittances[0].is_reconciled is True
        assert report.remittances[2].check_number == "EFT-0003"
        assert report.remittances[2].payer_name == "Acme Health Plan"

    def test_unreconciled_list(self, remittances) -> None:
        """Test days pending is measured from import and unknown without it."""
        report = reconciliation_report(
            remittances, as_of=datetime(2024, 3, 11, 12, tzinfo=timezone.utc)
        )

        unreconciled = {r.reference: r for r in report.unreconciled_remittances}

        assert list(unreconciled) == ["R2", "R3", "R4"]
        assert unreconciled["R2"].days_pending == 10
        assert unreconciled["R3"].days_pending is None
        assert unreconciled["R2"].amount == Decimal("1000")

    def test_empty(self) -> None:
        report = reconciliation_report([])

        assert report.totals.total_remittances == 0
        assert report.totals.total_amount == 0
        assert report.remittances == []
