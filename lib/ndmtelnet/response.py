"""Response envelope, status code and document tree."""

from dataclasses import dataclass, field
from enum import Enum

STATUS_FAILED = 0x80000000
STATUS_CRITICAL = 0x40000000
STATUS_WARNING = 0x20000000
STATUS_MASK = 0xFFFFFFFF

EVENT_ROOT = "event"


class Severity(str, Enum):
    """Coarse outcome of a response."""

    INFO = "I"
    WARNING = "W"
    ERROR = "E"
    CRITICAL = "C"


def severity(failed: bool, flag: bool) -> Severity:
    """Classify a response from its two status bits.

    Parameters
    ----------
    failed : bool
        Whether the failure bit is set
    flag : bool
        The critical bit for a failed status, the warning bit otherwise

    Returns
    -------
    Severity
        Derived severity
    """
    if failed:
        return Severity.CRITICAL if flag else Severity.ERROR
    return Severity.WARNING if flag else Severity.INFO


@dataclass(frozen=True)
class ResponseStatus:
    """32-bit status code of a response."""

    code: int

    def __post_init__(self) -> None:
        if not 0 <= self.code <= STATUS_MASK:
            raise ValueError(f"Status code out of range: {self.code:#x}")

    @property
    def failed(self) -> bool:
        return bool(self.code & STATUS_FAILED)

    @property
    def succeeded(self) -> bool:
        return not self.failed

    @property
    def critical(self) -> bool:
        return self.failed and bool(self.code & STATUS_CRITICAL)

    @property
    def warning(self) -> bool:
        return self.succeeded and bool(self.code & STATUS_WARNING)

    @property
    def severity(self) -> Severity:
        return severity(self.failed, self.critical or self.warning)


@dataclass
class Element:
    """Document node owning its attributes and children."""

    name: str
    attributes: list[tuple[str, str]] = field(default_factory=list)
    value: str = ""
    children: list["Element"] = field(default_factory=list)


class ResponseDocument:
    """Owned element tree of a single response.

    The tree belongs to whoever received the response and must be released
    exactly once, before the next response is received.
    """

    def __init__(self, root: Element | None = None) -> None:
        self._root = root
        self._released = False

    @property
    def root(self) -> Element | None:
        if self._released:
            raise RuntimeError("Response document already released")
        return self._root

    @property
    def released(self) -> bool:
        return self._released

    def release(self) -> None:
        """Tear down the tree.

        Raises
        ------
        RuntimeError
            If the document was released before
        """
        if self._released:
            raise RuntimeError("Response document already released")

        pending = [self._root] if self._root is not None else []
        while pending:
            node = pending.pop()
            pending.extend(node.children)
            node.children = []
            node.attributes = []

        self._root = None
        self._released = True


@dataclass
class ResponseEnvelope:
    """One response fragment received for a command."""

    status: ResponseStatus
    message: str = ""
    document: ResponseDocument = field(default_factory=ResponseDocument)
    continued: bool = False

    @property
    def is_event(self) -> bool:
        """Whether the response is an asynchronous event notification."""
        root = self.document.root
        return root is not None and root.name == EVENT_ROOT
