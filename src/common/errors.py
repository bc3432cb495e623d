# ABOUTME: Declares the error taxonomy raised by the analytics engine and store adapters.
# ABOUTME: Unknown accounts are reported as results, not raised.


class SkillAnalyticsError(Exception):
    """Base class for analytics failures surfaced to callers."""


class InvalidInputError(SkillAnalyticsError, ValueError):
    """Request parameters rejected before any store access."""


class StoreUnavailableError(SkillAnalyticsError):
    """The backing document store could not serve a read."""
