"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class ConfigError(DomainException):
    """Household financial settings are invalid (reserve policy, weekend weight)"""

    pass


class LedgerAPIError(DomainException):
    """Ledger service returned an error or is unavailable"""

    pass


class InvalidTransactionDataError(DomainException):
    """A single ledger event is malformed and cannot be used"""

    pass
