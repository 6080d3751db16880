"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class FinanceAPIError(DomainException):
    """Hosted finance backend returned an error or is unavailable"""

    pass


class InvalidScoreInputError(DomainException):
    """Score input facts are inconsistent with each other"""

    pass
