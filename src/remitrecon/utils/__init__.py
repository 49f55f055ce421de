"""Utility modules for RemitRecon."""

from remitrecon.utils.validation import validate_match_result, validate_writeoff_rules

__all__ = [
    "validate_match_result",
    "validate_writeoff_rules",
]
