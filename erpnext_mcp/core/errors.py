"""Exception types raised across the ERPNext bridge."""


class ConfigurationError(Exception):
    """Fatal misconfiguration detected at startup (e.g. no base URL)."""


class ERPNextError(Exception):
    """A failed remote call, reduced to one readable message.

    ``str(error)`` is the fully formatted message, ready to be shown to
    the caller without further transformation.
    """

    def __init__(
        self,
        message: str,
        operation: str = "",
        status_code: int | None = None,
        detail: str = "",
    ):
        super().__init__(message)
        self.operation = operation
        self.status_code = status_code
        self.detail = detail or message
