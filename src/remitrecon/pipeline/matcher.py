"""Matching of remittance claim payments to billing-system claims."""

import logging
import re

from remitrecon.config import MatchingPolicy
from remitrecon.models.adjustment import AdjustmentGroup
from remitrecon.models.matching import (
    MatchConfidence,
    MatchMethod,
    MatchResult,
    PaymentVariance,
)
from remitrecon.models.remittance import ZERO, ClaimPayment
from remitrecon.models.system import SystemClaim, SystemPatient
from remitrecon.pipeline.variance import calculate_variance

logger = logging.getLogger(__name__)

_SEPARATORS = re.compile(r"[-\s]")


def normalize_claim_number(claim_number: str) -> str:
    """
    Normalize a claim number for fuzzy comparison.

    Hyphens and whitespace are removed first, then leading zeros, so
    "000123", "  123 " and "1-2-3" all normalize to "123". Embedded letters
    and check digits are kept as-is.
    """
    return _SEPARATORS.sub("", claim_number).lstrip("0").casefold()


def _fold(value: str | None) -> str:
    return (value or "").strip().casefold()


class ClaimMatcher:
    """
    Associates remittance claim payments with billing-system claims.

    Stages run in order and stop at the first hit:
    exact claim number, payer ICN, normalized claim number, then
    (only when patient records are supplied) patient identity with
    amount disambiguation.
    """

    def __init__(self, policy: MatchingPolicy | None = None) -> None:
        self.policy = policy or MatchingPolicy()

    def match(
        self,
        payment: ClaimPayment,
        claims: list[SystemClaim],
        patients: list[SystemPatient] | None = None,
    ) -> MatchResult:
        """
        Match one claim payment, falling back to patient identity.

        Args:
            payment: Remittance claim payment
            claims: Candidate billing-system claims
            patients: Patient directory; patient matching is skipped without it

        Returns:
            MatchResult (never raises for well-typed input)
        """
        result = self.match_by_claim_number(payment, claims)
        if result.is_matched or not patients:
            return result
        return self.match_by_patient(payment, claims, patients)

    def match_by_claim_number(
        self,
        payment: ClaimPayment,
        claims: list[SystemClaim],
    ) -> MatchResult:
        """Match on exact claim number, payer ICN, then normalized claim number."""
        claim_number = _fold(payment.claim_number)

        if claim_number:
            wanted = payment.claim_number.casefold()
            for claim in claims:
                if claim.claim_number.casefold() == wanted:
                    logger.debug(f"Claim {payment.claim_number}: exact match {claim.id}")
                    return self._matched(
                        payment, claim, MatchConfidence.HIGH, MatchMethod.CLAIM_NUMBER
                    )

        icn = _fold(payment.payer_claim_control_number)
        if icn:
            for claim in claims:
                if _fold(claim.claim_number) == icn:
                    logger.debug(f"Claim {payment.claim_number}: ICN match {claim.id}")
                    return self._matched(
                        payment, claim, MatchConfidence.HIGH, MatchMethod.CLAIM_NUMBER
                    )

        normalized = normalize_claim_number(payment.claim_number)
        if normalized:
            for claim in claims:
                if normalize_claim_number(claim.claim_number) == normalized:
                    logger.debug(f"Claim {payment.claim_number}: normalized match {claim.id}")
                    return self._matched(
                        payment, claim, MatchConfidence.MEDIUM, MatchMethod.CLAIM_NUMBER
                    )

        actions = ["Review payment manually", "Verify claim number in ERA matches system"]
        if not claim_number:
            actions.append("ERA claim has no claim number")
        return self._unmatched(payment, MatchMethod.CLAIM_NUMBER, actions)

    def find_patient(
        self,
        payment: ClaimPayment,
        patients: list[SystemPatient],
    ) -> SystemPatient | None:
        """Resolve the remittance patient by member id, insured name, then patient name."""
        member_id = _fold(payment.patient.id)
        if member_id:
            for patient in patients:
                if _fold(patient.member_id) == member_id:
                    return patient

        if payment.insured and _fold(payment.insured.last_name):
            found = _find_by_name(
                patients, payment.insured.last_name, payment.insured.first_name
            )
            if found:
                return found

        if _fold(payment.patient.last_name):
            return _find_by_name(
                patients, payment.patient.last_name, payment.patient.first_name
            )

        return None

    def match_by_patient(
        self,
        payment: ClaimPayment,
        claims: list[SystemClaim],
        patients: list[SystemPatient],
    ) -> MatchResult:
        """Match through the patient's claims, disambiguating by billed amount."""
        patient = self.find_patient(payment, patients)
        if patient is None:
            return self._unmatched(
                payment,
                MatchMethod.PATIENT,
                ["Patient not found in system", "Review payment manually"],
            )

        candidates = [c for c in claims if c.patient_id == patient.id]
        if not candidates:
            return self._unmatched(
                payment,
                MatchMethod.PATIENT,
                ["No claims found for patient", "Verify patient registration"],
            )

        if len(candidates) == 1:
            logger.debug(f"Claim {payment.claim_number}: patient match {candidates[0].id}")
            return self._matched(
                payment, candidates[0], MatchConfidence.MEDIUM, MatchMethod.PATIENT
            )

        amount_hits = [
            c
            for c in candidates
            if abs(c.billed_amount - payment.billed_amount) < self.policy.money_tolerance
        ]
        if len(amount_hits) == 1:
            logger.debug(f"Claim {payment.claim_number}: amount match {amount_hits[0].id}")
            return self._matched(
                payment, amount_hits[0], MatchConfidence.MEDIUM, MatchMethod.AMOUNT
            )

        return self._unmatched(
            payment,
            MatchMethod.PATIENT,
            [
                f"Multiple claims found for patient ({len(candidates)})",
                "Review manually to determine correct claim",
            ],
        )

    def suggested_actions(
        self,
        payment: ClaimPayment,
        variance: PaymentVariance,
    ) -> list[str]:
        """Operator guidance for a matched payment."""
        if payment.status.is_denial:
            return [
                "Claim denied - review denial reason codes",
                "Consider appeal if appropriate",
            ]

        actions: list[str] = []
        policy = self.policy

        if variance.is_underpayment:
            if variance.variance_percentage < policy.action_significant_underpayment_pct:
                actions.append("Significant underpayment detected")
                actions.append("Review contract terms and fee schedule")
                actions.append("Consider appeal for underpayment")
            elif variance.variance_percentage < policy.action_minor_underpayment_pct:
                actions.append("Minor underpayment - verify adjustments are correct")
        elif variance.variance_amount > policy.money_tolerance:
            actions.append("Overpayment detected - may require refund")

        pr_adjustments = [
            a
            for a in payment.all_adjustments()
            if a.group_code == AdjustmentGroup.PATIENT_RESPONSIBILITY
        ]
        if pr_adjustments:
            total = sum((a.amount for a in pr_adjustments), ZERO)
            actions.append(f"Patient responsibility: ${total:.2f}")

        non_covered = [
            s
            for s in payment.services
            if any(a.reason_code in policy.non_covered_reason_codes for a in s.adjustments)
        ]
        if non_covered:
            actions.append(f"{len(non_covered)} service(s) not covered")

        if not actions:
            actions.append("Ready for posting")

        return actions

    def _matched(
        self,
        payment: ClaimPayment,
        claim: SystemClaim,
        confidence: MatchConfidence,
        method: MatchMethod,
    ) -> MatchResult:
        variance = calculate_variance(claim.expected_amount, payment.paid_amount, self.policy)
        return MatchResult(
            payment=payment,
            matched_claim_id=claim.id,
            confidence=confidence,
            match_method=method,
            variance=variance if variance.variance_amount != 0 else None,
            suggested_actions=self.suggested_actions(payment, variance),
        )

    def _unmatched(
        self,
        payment: ClaimPayment,
        method: MatchMethod,
        actions: list[str],
    ) -> MatchResult:
        logger.debug(f"Claim {payment.claim_number or '<none>'}: no match ({method.value})")
        return MatchResult(
            payment=payment,
            matched_claim_id=None,
            confidence=MatchConfidence.LOW,
            match_method=method,
            suggested_actions=actions,
        )


def _find_by_name(
    patients: list[SystemPatient],
    last_name: str,
    first_name: str | None,
) -> SystemPatient | None:
    last, first = _fold(last_name), _fold(first_name)
    for patient in patients:
        if _fold(patient.last_name) == last and _fold(patient.first_name) == first:
            return patient
    return None


def match_claim_payment(
    payment: ClaimPayment,
    claims: list[SystemClaim],
    patients: list[SystemPatient] | None = None,
) -> MatchResult:
    """Match a single payment with the default policy."""
    return ClaimMatcher().match(payment, claims, patients)
