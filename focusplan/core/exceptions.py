"""Exception hierarchy for FocusPlan.

Public scheduling operations report failures through result objects; these
exceptions are raised by value types and caught at the operation boundaries.
"""


class FocusPlanError(Exception):
    """Base exception for FocusPlan errors."""

    pass


class InvalidTimeError(FocusPlanError, ValueError):
    """A time-of-day string or range is malformed."""

    pass


class InvalidStatusTransition(FocusPlanError, ValueError):
    """A slot status change would move backwards in its lifecycle."""

    pass
