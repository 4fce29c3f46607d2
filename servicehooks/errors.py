"""Failure kinds raised by services and by request parsing.

Services signal a classified failure by raising one of the ServiceError
subclasses below; anything else is treated as unclassified.
"""


class ServiceError(Exception):
    """Base class for failures a service raises on purpose."""

    pass


class ConfigurationError(ServiceError):
    """Invalid user-supplied service data (format, template, mapping)."""

    pass


class ServiceTimeout(ServiceError, TimeoutError):
    """A service or its transport gave up waiting."""

    pass


class MissingError(ServiceError):
    """A referenced remote object does not exist."""

    pass


class ConnectionFailure(ServiceError, ConnectionError):
    """A downstream dependency could not be reached."""

    def __init__(self, message: str, original_exception: BaseException | None = None) -> None:
        super().__init__(message)
        self.original_exception = original_exception


class ParseError(ValueError):
    """Raised when an inbound request body cannot be decoded."""

    pass
