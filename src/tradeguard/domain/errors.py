# src/tradeguard/domain/errors.py
"""
Domain Errors - Admission Control Exceptions

Quota violations and abuse detections are not exceptions: they are reported
through Verdict objects. The exceptions here cover invalid setup only.
"""


class DomainError(Exception):
    """Base exception for domain errors."""
    pass


class InvalidConfigError(DomainError):
    """Raised when a rate limit configuration breaks its invariants."""
    pass


class UnknownProfileError(DomainError):
    """Raised when a named configuration profile does not exist."""
    pass
