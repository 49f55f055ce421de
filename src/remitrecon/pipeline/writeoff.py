"""Write-off recommendations for claim and service adjustments."""

import json
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType

from remitrecon.errors import WriteOffRuleError
from remitrecon.models.adjustment import (
    AdjustmentGroup,
    AdjustmentInfo,
    WriteOffRecommendation,
    WriteOffRule,
)
from remitrecon.models.remittance import ClaimPayment
from remitrecon.utils.validation import validate_writeoff_rules

logger = logging.getLogger(__name__)

CO = AdjustmentGroup.CONTRACTUAL_OBLIGATION
PR = AdjustmentGroup.PATIENT_RESPONSIBILITY
PI = AdjustmentGroup.PAYER_INITIATED


def _rule(
    reason: str,
    group: AdjustmentGroup,
    code: str,
    description: str,
    auto_post: bool,
) -> WriteOffRule:
    return WriteOffRule(
        reason_code=reason,
        group_code=group,
        write_off_code=code,
        description=description,
        requires_approval=not auto_post,
        auto_post_eligible=auto_post,
    )


# Organizations are expected to supply their own table; this is the baseline.
DEFAULT_WRITEOFF_RULES: tuple[WriteOffRule, ...] = (
    # Contractual adjustments
    _rule("45", CO, "CONT-ADJ", "Contractual Adjustment - Charges exceed fee schedule", True),
    _rule("42", CO, "CONT-ADJ", "Contractual Adjustment - Charges exceed contract", True),
    _rule("131", CO, "CONT-ADJ", "Contractual Adjustment - Network discount", True),
    _rule("253", CO, "SEQ-ADJ", "Sequestration Adjustment", True),
    # Patient responsibility
    _rule("1", PR, "PT-DEDUCT", "Patient Deductible", True),
    _rule("2", PR, "PT-COINS", "Patient Coinsurance", True),
    _rule("3", PR, "PT-COPAY", "Patient Copay", True),
    # Denials
    _rule("4", CO, "DENY-MOD", "Procedure code inconsistent with modifier", False),
    _rule("5", CO, "DENY-COB", "Procedure code inconsistent with POS", False),
    _rule("16", CO, "DENY-INFO", "Missing/incomplete claim information", False),
    _rule("18", CO, "DENY-DUP", "Duplicate claim/service", False),
    _rule("22", CO, "DENY-COB", "Coordination of benefits", False),
    _rule("27", CO, "DENY-ELIG", "Patient not covered", False),
    _rule("29", CO, "DENY-TIME", "Timely filing limit exceeded", False),
    _rule("50", CO, "DENY-NONCOV", "Non-covered service", False),
    _rule("96", CO, "DENY-NONCOV", "Non-covered charge", False),
    _rule("97", CO, "DENY-AUTH", "Authorization required", False),
    _rule("109", CO, "DENY-NOT-COV", "Claim not covered by this payer", False),
    _rule("197", CO, "DENY-AUTH", "Prior authorization required", False),
    # Medical necessity
    _rule("50", PI, "DENY-MEDNEC", "Medical necessity not established", False),
    _rule("56", PI, "DENY-MEDNEC", "Service not medically necessary", False),
    # Bundling
    _rule("59", CO, "BUNDLE", "Service bundled into another", False),
    # Corrected claim
    _rule("B1", CO, "CORRECTED", "Non-covered unless submitted on corrected claim", False),
)


@dataclass(frozen=True)
class GroupDefault:
    """Disposition used when no rule matches an adjustment."""

    write_off_code: str
    label: str
    requires_approval: bool
    auto_post_eligible: bool


GROUP_DEFAULTS: Mapping[AdjustmentGroup, GroupDefault] = MappingProxyType(
    {
        AdjustmentGroup.CONTRACTUAL_OBLIGATION: GroupDefault(
            "CONT-ADJ", "Contractual Adjustment", False, True
        ),
        AdjustmentGroup.PATIENT_RESPONSIBILITY: GroupDefault(
            "PT-RESP", "Patient Responsibility", False, True
        ),
        AdjustmentGroup.OTHER_ADJUSTMENT: GroupDefault(
            "OTHER-ADJ", "Other Adjustment", True, False
        ),
        AdjustmentGroup.PAYER_INITIATED: GroupDefault(
            "PAYER-ADJ", "Payer Initiated Adjustment", True, False
        ),
        AdjustmentGroup.CORRECTION_REVERSAL: GroupDefault(
            "CORRECTION", "Correction/Reversal", True, False
        ),
    }
)

_missing_groups = set(AdjustmentGroup) - set(GROUP_DEFAULTS)
if _missing_groups:
    raise RuntimeError(f"No write-off default for groups: {sorted(g.value for g in _missing_groups)}")


class WriteOffResolver:
    """
    Resolves adjustments to write-off recommendations.

    The rule table is copied into a read-only index at construction, so a
    resolver can be shared by concurrent workers. To change rules, build a
    new resolver.
    """

    def __init__(self, rules: Iterable[WriteOffRule] | None = None) -> None:
        self._rules = _index_rules(DEFAULT_WRITEOFF_RULES if rules is None else rules)

    @property
    def rules(self) -> Mapping[tuple[str, AdjustmentGroup], WriteOffRule]:
        return self._rules

    def suggest(self, adjustment: AdjustmentInfo) -> WriteOffRecommendation:
        """
        Recommend a write-off for one adjustment.

        Exact (reason, group) rules win; otherwise the group default applies
        and the reason names the unmapped CARC so the table can be extended.
        """
        rule = self._rules.get((adjustment.reason_code, adjustment.group_code))
        if rule is not None:
            return WriteOffRecommendation(
                adjustment=adjustment,
                write_off_code=rule.write_off_code,
                reason=rule.description,
                amount=adjustment.amount,
                requires_approval=rule.requires_approval,
                auto_post_eligible=rule.auto_post_eligible,
            )

        default = GROUP_DEFAULTS[adjustment.group_code]
        logger.debug(
            f"No write-off rule for {adjustment.group_code.value}-{adjustment.reason_code}, "
            f"using {default.write_off_code}"
        )
        return WriteOffRecommendation(
            adjustment=adjustment,
            write_off_code=default.write_off_code,
            reason=f"{default.label} - CARC {adjustment.reason_code}",
            amount=adjustment.amount,
            requires_approval=default.requires_approval,
            auto_post_eligible=default.auto_post_eligible,
        )

    def recommendations_for(self, payment: ClaimPayment) -> list[WriteOffRecommendation]:
        """Recommendations for claim-level then service-level adjustments."""
        return [self.suggest(adj) for adj in payment.all_adjustments()]


def _index_rules(
    rules: Iterable[WriteOffRule],
) -> Mapping[tuple[str, AdjustmentGroup], WriteOffRule]:
    """Index rules by (reason, group), rejecting ambiguous tables."""
    index: dict[tuple[str, AdjustmentGroup], WriteOffRule] = {}
    for rule in rules:
        key = (rule.reason_code, rule.group_code)
        if key in index:
            raise WriteOffRuleError(
                f"Duplicate write-off rule for {rule.group_code.value}-{rule.reason_code}"
            )
        index[key] = rule
    return MappingProxyType(index)


def load_writeoff_rules(path: Path) -> tuple[WriteOffRule, ...]:
    """
    Load a write-off rule table from a JSON file.

    Raises:
        WriteOffRuleError: If the file is not valid JSON or fails the schema
    """
    try:
        data = json.loads(Path(path).read_text())
    except (OSError, json.JSONDecodeError) as e:
        raise WriteOffRuleError(f"Cannot read write-off rules from {path}: {e}") from e

    errors = validate_writeoff_rules(data)
    if errors:
        raise WriteOffRuleError(f"Invalid write-off rules in {path}: {'; '.join(errors)}")

    rules = tuple(WriteOffRule.model_validate(entry) for entry in data)
    logger.info(f"Loaded {len(rules)} write-off rules from {path}")
    return rules


def create_writeoff_resolver(rules_path: Path | None = None) -> WriteOffResolver:
    """Create a resolver from a JSON rule table, or the built-in table."""
    if rules_path is None:
        return WriteOffResolver()
    return WriteOffResolver(load_writeoff_rules(rules_path))


def suggest_writeoff(adjustment: AdjustmentInfo) -> WriteOffRecommendation:
    """Recommend a write-off using the built-in rule table."""
    return WriteOffResolver().suggest(adjustment)
