"""Session over a TCP connection driven by pexpect."""

import re
import socket
import xml.etree.ElementTree as ElementTree
from collections.abc import Iterator
from contextlib import contextmanager

import pexpect
from pexpect import fdpexpect

from lib.ndmtelnet.clock import deadline_after, remaining_ms
from lib.ndmtelnet.exceptions import AuthenticationError, SessionError, SessionTimeoutError
from lib.ndmtelnet.logging import log_debug, log_info
from lib.ndmtelnet.response import (
    Element,
    ResponseDocument,
    ResponseEnvelope,
    ResponseStatus,
)
from lib.ndmtelnet.session import Session

PROMPT = r"\(config\)> "
LOGIN_PROMPTS = ["login:", "Login:", "Username:"]
PASSWORD_PROMPTS = ["Password:", "password:"]
LOGIN_FAILED = "Login incorrect"

FRAME_START = re.compile(r"<response\b")

# Markup that can appear in a frame; group 1 is the end-tag slash, group 2
# the empty-element slash
MARKUP = re.compile(
    r"<!--.*?-->|<!\[CDATA\[.*?\]\]>|<\?.*?\?>"
    r"|<(/?)[^\s/>!?]+(?:\s*[^\s=/>]+\s*=\s*(?:\"[^\"]*\"|'[^']*'))*\s*(/?)>",
    re.DOTALL,
)

_TRUE_VALUES = {"yes", "true", "1"}


def to_element(node: ElementTree.Element) -> Element:
    """Convert a parsed XML node into an owned element tree."""
    return Element(
        name=node.tag,
        attributes=list(node.attrib.items()),
        value=(node.text or "").strip(),
        children=[to_element(child) for child in node],
    )


def frame_end(text: str) -> int | None:
    """Find the end of the first complete element in ``text``.

    Parameters
    ----------
    text : str
        Text starting with an element's start tag

    Returns
    -------
    int | None
        Index just past the element's end tag, or None if more text is needed
    """
    depth = 0
    for match in MARKUP.finditer(text):
        closing, empty = match.group(1), match.group(2)
        if closing is None:
            continue

        if closing:
            depth -= 1
        elif not empty:
            depth += 1

        if depth == 0:
            return match.end()

    return None


def parse_frame(frame: str) -> ResponseEnvelope:
    """Parse one ``<response>`` frame.

    The frame carries the status code, the message and the continuation
    flag as attributes and wraps the response document root.

    Parameters
    ----------
    frame : str
        Frame text

    Returns
    -------
    ResponseEnvelope
        Parsed response

    Raises
    ------
    SessionError
        If the frame is malformed
    """
    try:
        node = ElementTree.fromstring(frame)
    except ElementTree.ParseError as e:
        raise SessionError(f"Malformed response: {e}") from e

    try:
        status = ResponseStatus(int(node.get("code", "0"), 16))
    except ValueError as e:
        raise SessionError(f"Malformed response code: {node.get('code')!r}") from e

    children = list(node)
    if len(children) > 1:
        raise SessionError(f"Response has {len(children)} root elements")

    root = to_element(children[0]) if children else None

    return ResponseEnvelope(
        status=status,
        message=node.get("message", ""),
        document=ResponseDocument(root),
        continued=node.get("continued", "no").lower() in _TRUE_VALUES,
    )


class PexpectSession(Session):
    """Device session over a raw TCP stream."""

    max_login_attempts = 10

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.process: fdpexpect.fdspawn | None = None

    def open(self) -> None:
        """Connect and authenticate.

        Raises
        ------
        AuthenticationError
            If the device rejects the credentials
        SessionTimeoutError
            If the prompt does not appear in time
        SessionError
            If the connection fails
        """
        deadline = deadline_after(self.timeout)
        log_info(f"Connecting to {self.address}:{self.port}", address=self.address)

        try:
            sock = socket.create_connection(
                (self.address, self.port), timeout=self.timeout / 1000
            )
        except socket.timeout as e:
            raise SessionTimeoutError(
                "Connection timeout", address=self.address, timeout=self.timeout
            ) from e
        except OSError as e:
            raise SessionError(
                f"Connection failed: {e.strerror or e}", address=self.address
            ) from e

        sock.setblocking(True)
        self.process = fdpexpect.fdspawn(sock.detach(), encoding="utf-8")

        try:
            self._authenticate(deadline)
        except SessionError:
            self.close()
            raise

        log_info("Session opened", address=self.address)

    def _authenticate(self, deadline: int) -> None:
        patterns = [PROMPT, LOGIN_FAILED, *LOGIN_PROMPTS, *PASSWORD_PROMPTS]
        logins = range(2, 2 + len(LOGIN_PROMPTS))

        for _ in range(self.max_login_attempts):
            index = self._expect(patterns, remaining_ms(deadline))

            if index == 0:
                return

            if index == 1:
                raise AuthenticationError("Login incorrect", address=self.address)

            self._write(self.user if index in logins else self.password)

        raise AuthenticationError(
            "Authentication failed: max attempts reached", address=self.address
        )

    @contextmanager
    def _io_errors(self, timeout_ms: int) -> Iterator[None]:
        if self.process is None:
            raise SessionError("Session is not open", address=self.address)

        try:
            yield
        except pexpect.TIMEOUT as e:
            raise SessionTimeoutError(
                "Operation timed out", address=self.address, timeout=timeout_ms
            ) from e
        except pexpect.EOF as e:
            raise SessionError("Connection closed", address=self.address) from e
        except OSError as e:
            raise SessionError(f"I/O error: {e}", address=self.address) from e

    def _expect(self, patterns: list, timeout_ms: int) -> int:
        with self._io_errors(timeout_ms):
            return self.process.expect(patterns, timeout=timeout_ms / 1000)

    def _read(self, timeout_ms: int) -> str:
        with self._io_errors(timeout_ms):
            return self.process.read_nonblocking(self.process.maxread, timeout_ms / 1000)

    def send(self, text: str, timeout_ms: int) -> None:
        """Send a command line."""
        if self.process is None:
            raise SessionError("Session is not open", address=self.address)
        if timeout_ms <= 0:
            raise SessionTimeoutError(
                "Operation timed out", address=self.address, timeout=timeout_ms
            )

        self._write(text)

    def _write(self, line: str) -> None:
        try:
            self.process.send(f"{line}\r\n")
        except OSError as e:
            raise SessionError(f"I/O error: {e}", address=self.address) from e

    def recv(self, timeout_ms: int) -> ResponseEnvelope:
        """Receive the next response frame.

        The frame ends where its outer ``response`` element closes, so
        documents may nest elements of any name, ``response`` included.
        """
        deadline = deadline_after(timeout_ms)
        self._expect([FRAME_START], timeout_ms)

        text = self.process.after + self.process.buffer
        end = frame_end(text)
        while end is None:
            text += self._read(remaining_ms(deadline))
            end = frame_end(text)

        # Leave whatever follows the frame for the next receive
        self.process.buffer = text[end:]
        frame = text[:end]
        log_debug(f"Received {len(frame)} characters", address=self.address)
        return parse_frame(frame)

    def close(self) -> None:
        """Close the connection."""
        if self.process is not None:
            try:
                self.process.close()
            except OSError:
                pass
            finally:
                self.process = None
                log_info("Session closed", address=self.address)
