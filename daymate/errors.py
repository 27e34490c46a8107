"""Exception types for DayMate."""


class DayMateError(Exception):
    """Base exception for DayMate."""


class ParseError(DayMateError, ValueError):
    """Raised when a date or time string cannot be parsed."""


class SchedulingError(DayMateError):
    """Raised when the alarm registry rejects a register or cancel call."""


class PersistenceCorrupt(DayMateError):
    """Raised when a stored timer snapshot cannot be decoded."""


class DeliveryFailure(DayMateError):
    """Raised when an alarm payload cannot be turned into a notification."""


class AppConfigurationError(DayMateError):
    """Raised when configuration values are unusable."""
