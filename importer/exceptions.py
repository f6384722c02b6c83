class ImporterError(Exception):
    """Base class for errors raised while importing an SPL document."""


class MissingContextError(ImporterError):
    """Raised when an operation needs a scope (document, section, product)
    that the parse context does not hold."""


class MalformedReferenceError(ImporterError):
    """Raised when an identifier in the source document cannot be parsed, for
    example a section ``id/@root`` that is not a UUID."""


class StoreError(ImporterError):
    """Raised by a store when a persistence operation fails."""
