"""Tests for batch processing of remittances."""

from decimal import Decimal

import pytest

from remitrecon.config import Settings
from remitrecon.errors import RemittanceIntegrityError
from remitrecon.models import MatchConfidence, MatchMethod, PatientInfo, PaymentStatus
from remitrecon.pipeline.batch import (
    RemittanceProcessor,
    create_remittance_processor,
    review_unmatched,
)


@pytest.fixture
def claims(make_claim):
    return [
        make_claim("c1", "CLM-001", patient_id="P-200", billed="500"),
        make_claim("c2", "123", patient_id="P-200", billed="250"),
        make_claim("c3", "CLM-777", patient_id="P-100", billed="1000"),
    ]


@pytest.fixture
def payments(make_payment, make_adjustment):
    return [
        make_payment("CLM-001", billed="500", paid="500"),
        make_payment("000123", billed="250", paid="240"),
        make_payment(
            "CLM-002",
            billed="1000",
            paid="780",
            patient=PatientInfo(last_name="Doe", first_name="Jane"),
            adjustments=[make_adjustment("CO", "45", "220")],
        ),
        make_payment("CLM-404", status=PaymentStatus.DENIED, paid="0", patient=PatientInfo(last_name="Nobody")),
    ]


class TestMatchPayments:
    """Tests for RemittanceProcessor.match_payments."""

    def test_results_in_input_order(self, payments, claims, patients) -> None:
        results = RemittanceProcessor().match_payments(payments, claims, patients)

        assert [r.payment.claim_number for r in results] == [p.claim_number for p in payments]
        assert [r.matched_claim_id for r in results] == ["c1", "c2", "c3", None]
        assert results[2].match_method == MatchMethod.PATIENT

    def test_no_patient_stage_without_directory(self, payments, claims) -> None:
        results = RemittanceProcessor().match_payments(payments, claims)

        assert results[2].matched_claim_id is None
        assert results[2].match_method == MatchMethod.CLAIM_NUMBER

    def test_deterministic(self, payments, claims, patients) -> None:
        processor = RemittanceProcessor()

        first = processor.match_payments(payments, claims, patients)
        second = processor.match_payments(payments, claims, patients)

        assert first == second
        assert processor.statistics(first) == processor.statistics(second)

    def test_parallel_matches_sequential(self, make_payment, make_claim) -> None:
        """Test the thread pool gives the same ordered results."""
        claims = [make_claim(f"c{i}", f"CLM-{i:04d}") for i in range(60)]
        payments = [make_payment(f"CLM-{i:04d}") for i in reversed(range(60))]

        sequential = RemittanceProcessor().match_payments(payments, claims)
        parallel = RemittanceProcessor(max_workers=4, parallel_threshold=10).match_payments(
            payments, claims
        )

        assert parallel == sequential


class TestStatistics:
    """Tests for batch statistics."""

    def test_counts(self, payments, claims, patients) -> None:
        processor = RemittanceProcessor()
        stats = processor.statistics(processor.match_payments(payments, claims, patients))

        assert stats.total == 4
        assert stats.matched == 3
        assert stats.unmatched == 1
        assert stats.high_confidence == 1
        assert stats.medium_confidence == 2
        assert stats.low_confidence == 1
        assert stats.auto_post_eligible == 2
        assert stats.requires_review == 2

    def test_counts_add_up(self, payments, claims, patients) -> None:
        processor = RemittanceProcessor()
        stats = processor.statistics(processor.match_payments(payments, claims, patients))

        assert stats.matched + stats.unmatched == stats.total
        assert stats.auto_post_eligible + stats.requires_review == stats.total

    def test_order_independent(self, payments, claims, patients) -> None:
        processor = RemittanceProcessor()
        results = processor.match_payments(payments, claims, patients)

        assert processor.statistics(results) == processor.statistics(list(reversed(results)))

    def test_empty_batch(self) -> None:
        stats = RemittanceProcessor().statistics([])

        assert stats.total == 0
        assert stats.matched + stats.unmatched == 0


class TestProcessRemittance:
    """Tests for RemittanceProcessor.process."""

    def test_outcome_per_claim(self, make_remittance, payments, claims, patients) -> None:
        remittance = make_remittance(payments, total="1520")

        outcome = RemittanceProcessor().process(remittance, claims, patients)

        assert outcome.remittance_reference == "EFT-0001"
        assert len(outcome.outcomes) == len(payments)
        assert outcome.statistics.total == 4
        assert outcome.statistics.auto_post_eligible == 2
        assert [o.match.confidence for o in outcome.outcomes] == [
            MatchConfidence.HIGH,
            MatchConfidence.MEDIUM,
            MatchConfidence.MEDIUM,
            MatchConfidence.LOW,
        ]
        assert outcome.outcomes[2].write_offs[0].write_off_code == "CONT-ADJ"
        assert len(outcome.needs_review) == 2

    def test_unidentifiable_remittance_rejected(self, make_remittance, payments, claims) -> None:
        remittance = make_remittance(payments, trace=None, payer_name="")
        remittance = remittance.model_copy(update={"payer": None})

        with pytest.raises(RemittanceIntegrityError):
            RemittanceProcessor().process(remittance, claims)

    def test_payer_identity_is_enough(self, make_remittance, claims) -> None:
        remittance = make_remittance([], trace=None)

        outcome = RemittanceProcessor().process(remittance, claims)

        assert outcome.statistics.total == 0


class TestCreateRemittanceProcessor:
    """Tests for the settings-driven factory."""

    def test_uses_settings_policy(self) -> None:
        settings = Settings(
            auto_post_max_variance_pct=Decimal("25"),
            batch_max_workers=8,
            parallel_batch_threshold=100,
        )

        processor = create_remittance_processor(settings)

        assert processor.max_workers == 8
        assert processor.parallel_threshold == 100
        assert processor.auto_post.policy.auto_post_max_variance_pct == Decimal("25")
        assert processor.matcher.policy is processor.auto_post.policy

    def test_looser_policy_changes_decision(self, make_remittance, payments, claims, patients) -> None:
        """Test a 25% limit lets the 22% contractual underpayment post."""
        processor = create_remittance_processor(
            Settings(auto_post_max_variance_pct=Decimal("25"))
        )

        outcome = processor.process(make_remittance(payments, total="1520"), claims, patients)

        assert outcome.outcomes[2].auto_post.eligible is True


class TestReviewUnmatched:
    """Tests for unmatched payment review summaries."""

    def test_only_unmatched_listed(self, payments, claims, patients) -> None:
        results = RemittanceProcessor().match_payments(payments, claims, patients)

        unmatched = review_unmatched(results)

        assert [u.era_claim_number for u in unmatched] == ["CLM-404"]
        assert unmatched[0].status == "Denied"
        assert unmatched[0].patient_name == "Nobody,"
        assert unmatched[0].paid_amount == 0
        assert unmatched[0].suggested_actions == [
            "Review denial - CARC codes available",
            "Consider appeal if appropriate",
        ]

    def test_non_denied_actions(self, make_payment, claims) -> None:
        payment = make_payment("CLM-999", billed="120", paid="100")

        unmatched = review_unmatched(RemittanceProcessor().match_payments([payment], claims))

        assert unmatched[0].patient_name == "Doe, Jane"
        assert unmatched[0].status == "Processed as Primary"
        assert unmatched[0].billed_amount == Decimal("120")
        assert unmatched[0].suggested_actions == [
            "Search for claim manually",
            "Verify patient registration",
        ]

    def test_outcome_exposes_unmatched(self, make_remittance, payments, claims, patients) -> None:
        outcome = RemittanceProcessor().process(make_remittance(payments, total="1520"), claims, patients)

        assert [u.era_claim_number for u in outcome.unmatched] == ["CLM-404"]
