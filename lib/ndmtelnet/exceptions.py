"""Custom exceptions for the NDM telnet client."""


class NdmTelnetError(Exception):
    """Base exception for all client errors."""

    def __init__(self, message: str, address: str | None = None) -> None:
        """Initialize client error.

        Parameters
        ----------
        message : str
            Error message
        address : str | None, optional
            Device address if applicable, by default None
        """
        super().__init__(message)
        self.message = message
        self.address = address

    def __str__(self) -> str:
        """Return string representation of error."""
        if self.address:
            return f"[{self.address}] {self.message}"
        return self.message


class ConfigurationError(NdmTelnetError):
    """Raised when arguments or configuration values are invalid."""

    pass


class SessionError(NdmTelnetError):
    """Raised when the session fails to open, send or receive."""

    pass


class AuthenticationError(SessionError):
    """Raised when authentication fails."""

    pass


class SessionTimeoutError(SessionError):
    """Raised when a session operation runs past its deadline."""

    def __init__(
        self,
        message: str,
        address: str | None = None,
        timeout: int | None = None,
    ) -> None:
        """Initialize timeout error.

        Parameters
        ----------
        message : str
            Error message
        address : str | None, optional
            Device address if applicable, by default None
        timeout : int | None, optional
            Time budget in milliseconds, by default None
        """
        super().__init__(message, address)
        self.timeout = timeout


class CommandSourceError(NdmTelnetError):
    """Raised when a command set cannot be read."""

    def __init__(self, message: str, source: str | None = None) -> None:
        """Initialize command source error.

        Parameters
        ----------
        message : str
            Error message
        source : str | None, optional
            File name of the command set, by default None
        """
        super().__init__(message)
        self.source = source


class CommandTooLongError(CommandSourceError):
    """Raised when a command exceeds the maximum command length."""

    def __init__(self, length: int, limit: int, source: str | None = None) -> None:
        super().__init__(
            f"Command of {length} characters exceeds the {limit} character limit",
            source=source,
        )
        self.length = length
        self.limit = limit
