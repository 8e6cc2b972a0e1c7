"""Exception types raised by subrouter."""


class SubrouterError(Exception):
    """Base class for subrouter errors."""


class ConfigurationError(SubrouterError, ValueError):
    """
    Raised when routing configuration is ambiguous or malformed.

    Configuration errors are raised while the router is being built, never
    while a request is being handled.
    """

    def __init__(self, message: str, value=None):
        super().__init__(message)
        self.value = value
