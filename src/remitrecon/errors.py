"""Exceptions raised by RemitRecon.

Matching, write-off resolution and auto-post decisions never raise for
well-typed input. These errors cover the few conditions a caller must handle.
"""


class RemitReconError(Exception):
    """Base class for all RemitRecon errors."""


class RemittanceIntegrityError(RemitReconError, ValueError):
    """A remittance cannot be identified (no trace number and no payer)."""


class InvalidStatusTransitionError(RemitReconError, ValueError):
    """A remittance lifecycle transition is not allowed."""

    def __init__(self, current: str, target: str) -> None:
        self.current = current
        self.target = target
        super().__init__(f"Cannot move remittance from {current} to {target}")


class WriteOffRuleError(RemitReconError):
    """A write-off rule table is malformed or ambiguous."""
