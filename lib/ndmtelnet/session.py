"""Session interface used by the command driver."""

from abc import ABC, abstractmethod

from lib.ndmtelnet.response import ResponseEnvelope


class Session(ABC):
    """An authenticated connection to a device.

    A session is opened once, used for any number of commands and closed
    exactly once. Used as a context manager, ``__enter__`` opens it and
    ``__exit__`` closes it.
    """

    def __init__(
        self,
        address: str,
        port: int = 23,
        user: str = "admin",
        password: str = "",
        timeout: int = 10000,
    ) -> None:
        """Initialize session parameters.

        Parameters
        ----------
        address : str
            Device IPv4 address
        port : int, optional
            Telnet port, by default 23
        user : str, optional
            User name, by default "admin"
        password : str, optional
            User password, by default ""
        timeout : int, optional
            Time budget for opening the session in milliseconds, by default 10000
        """
        self.address = address
        self.port = port
        self.user = user
        self.password = password
        self.timeout = timeout

    @abstractmethod
    def open(self) -> None:
        """Connect and authenticate.

        Raises
        ------
        SessionError
            If the session cannot be opened
        """

    @abstractmethod
    def send(self, text: str, timeout_ms: int) -> None:
        """Send a command line within ``timeout_ms``.

        Raises
        ------
        SessionError
            If sending fails or times out
        """

    @abstractmethod
    def recv(self, timeout_ms: int) -> ResponseEnvelope:
        """Receive the next response within ``timeout_ms``.

        Raises
        ------
        SessionError
            If receiving fails or times out
        """

    @abstractmethod
    def close(self) -> None:
        """Release the connection."""

    def __enter__(self) -> "Session":
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
