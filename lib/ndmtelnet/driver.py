"""Command execution over an open session."""

from enum import Enum

import click

from lib.ndmtelnet.clock import format_duration, now_ms, remaining_ms
from lib.ndmtelnet.exceptions import SessionError
from lib.ndmtelnet.logging import log_debug, log_error, log_warn
from lib.ndmtelnet.render import render_document
from lib.ndmtelnet.response import ResponseEnvelope
from lib.ndmtelnet.session import Session


class Outcome(Enum):
    """Result of executing one command."""

    COMPLETED = "completed"
    REJECTED = "rejected"
    FATAL = "fatal"

    @property
    def is_fatal(self) -> bool:
        """Whether the whole run must stop."""
        return self is Outcome.FATAL


def status_line(
    envelope: ResponseEnvelope,
    command: str,
    duration_ms: int,
    is_event: bool,
) -> str:
    """Format the per-response status line."""
    if envelope.continued:
        suffix = " (continued)"
    elif is_event:
        suffix = " (event)"
    else:
        suffix = ""

    return (
        f"{envelope.status.severity.value} ({envelope.status.code:08X}) "
        f"[{format_duration(duration_ms)}] {command}{suffix}"
    )


def execute(
    session: Session,
    command: str,
    timeout_ms: int,
    show_responses: bool = False,
) -> Outcome:
    """Send a command and consume its responses.

    Continued responses and asynchronous events keep the receive loop going;
    the first other response ends it.

    Parameters
    ----------
    session : Session
        Open session
    command : str
        Command to execute
    timeout_ms : int
        Time budget for the whole command in milliseconds
    show_responses : bool, optional
        Render response documents, by default False

    Returns
    -------
    Outcome
        FATAL on a send or receive error, REJECTED if the device reported
        a failure, COMPLETED otherwise
    """
    begin = now_ms()
    deadline = begin + timeout_ms

    try:
        session.send(command, remaining_ms(deadline))
    except SessionError as e:
        click.echo(f"Failed to send a command: {e}.", err=True)
        log_error("Send failed", address=session.address, command=command)
        return Outcome.FATAL

    log_debug("Command sent", address=session.address, command=command)

    while True:
        # Continued commands like "show log" send multiple responses
        try:
            envelope = session.recv(remaining_ms(deadline))
        except SessionError as e:
            click.echo(f"Failed to receive a response: {e}.", err=True)
            log_error("Receive failed", address=session.address, command=command)
            return Outcome.FATAL

        document = envelope.document
        try:
            if envelope.status.failed:
                click.echo(
                    f"Failed to execute: 0x{envelope.status.code:08x}, {envelope.message}",
                    err=True,
                )
                log_warn(
                    "Command rejected",
                    address=session.address,
                    command=command,
                    duration=now_ms() - begin,
                )
                return Outcome.REJECTED

            if show_responses:
                click.echo(render_document(document), nl=False)

            is_event = envelope.is_event
            line = status_line(envelope, command, now_ms() - begin, is_event)
            click.echo(f"{line}\n" if show_responses else line)
        finally:
            document.release()

        if not (envelope.continued or is_event):
            break

    log_debug(
        "Command completed",
        address=session.address,
        command=command,
        duration=now_ms() - begin,
    )
    return Outcome.COMPLETED
