"""
Error taxonomy for submission and settlement.

Input-shape errors are raised at the submission boundary before anything is
written. Settlement-time conditions are reported on the settlement report
rather than propagated, so one bad bundle never aborts a batch.
"""


class SettlementError(Exception):
    """Base for all errors raised by the settlement engine."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInputError(SettlementError, ValueError):
    """Raw input does not parse under the question's result codec."""


class AlreadyPostedError(InvalidInputError):
    """A non-margin question already has a posted answer for this user."""


class NotFoundError(SettlementError, LookupError):
    """Unknown question, user, list item, season, squad or bundle."""


class NotYetSolvableError(SettlementError):
    """Settlement attempted before an accepted solution exists."""


class DataIntegrityWarning(UserWarning):
    """Stored questions violate a bundle invariant; a safe default was used.

    Issued with ``warnings.warn`` whenever a bundle is resolved, next to the
    log line and the message attached to the bundle.
    """
