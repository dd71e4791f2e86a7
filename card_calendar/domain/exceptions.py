"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class ValidationError(DomainException):
    """Card fields are outside their allowed ranges; nothing was changed"""

    pass


class StorageError(DomainException):
    """Card store or reminder store failed to read or write"""

    pass


class CardNotFoundError(DomainException):
    """No card exists with the requested id"""

    pass
