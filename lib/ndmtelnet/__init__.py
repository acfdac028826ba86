"""Command-line client for NDM devices speaking the telnet XML protocol.

The package drives a command set over a single device session, classifies
continued, event and terminal responses, and renders response documents.
"""

__version__ = "0.1.0"

from lib.ndmtelnet.driver import Outcome, execute
from lib.ndmtelnet.exceptions import (
    AuthenticationError,
    CommandSourceError,
    CommandTooLongError,
    ConfigurationError,
    NdmTelnetError,
    SessionError,
    SessionTimeoutError,
)
from lib.ndmtelnet.response import ResponseDocument, ResponseEnvelope, ResponseStatus, Severity
from lib.ndmtelnet.runner import Runner
from lib.ndmtelnet.session import Session
from lib.ndmtelnet.transport import PexpectSession

__all__ = [
    "execute",
    "Outcome",
    "Runner",
    "Session",
    "PexpectSession",
    "ResponseDocument",
    "ResponseEnvelope",
    "ResponseStatus",
    "Severity",
    "NdmTelnetError",
    "ConfigurationError",
    "SessionError",
    "AuthenticationError",
    "SessionTimeoutError",
    "CommandSourceError",
    "CommandTooLongError",
]
