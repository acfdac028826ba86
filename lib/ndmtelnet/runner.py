"""Run orchestration: open a session and execute a command set."""

from collections.abc import Callable

import click

from lib.ndmtelnet.clock import format_duration, now_ms
from lib.ndmtelnet.config import NdmTelnetConfig
from lib.ndmtelnet.driver import execute
from lib.ndmtelnet.exceptions import CommandSourceError, SessionError
from lib.ndmtelnet.logging import log_error, log_info
from lib.ndmtelnet.session import Session
from lib.ndmtelnet.source import CommandSource, FileSource, InteractiveSource, LiteralSource
from lib.ndmtelnet.transport import PexpectSession

SessionFactory = Callable[..., Session]


class Runner:
    """Executes a command set over a single session."""

    def __init__(
        self,
        config: NdmTelnetConfig,
        session_factory: SessionFactory = PexpectSession,
    ) -> None:
        """Initialize runner.

        Parameters
        ----------
        config : NdmTelnetConfig
            Validated configuration
        session_factory : SessionFactory, optional
            Callable building a session from address, port, user, password
            and timeout, by default PexpectSession
        """
        self.config = config
        self.session_factory = session_factory

    def command_source(self) -> CommandSource:
        """Choose the command source for this run."""
        if self.config.command:
            return LiteralSource(self.config.command)
        if self.config.file_name:
            return FileSource(self.config.file_name)
        return InteractiveSource()

    def run(self) -> int:
        """Open a session, execute all commands and close the session.

        Returns
        -------
        int
            Process exit code
        """
        config = self.config
        begin = now_ms()
        exit_code = 1

        click.echo(f"Connecting to {config.user}@{config.address}:{config.port}...\n")

        try:
            session = self.session_factory(
                address=config.address,
                port=config.port,
                user=config.user,
                password=config.password,
                timeout=config.timeout,
            )
            with session:
                if self._execute_all(session):
                    exit_code = 0
        except SessionError as e:
            click.echo(f"Unable to open a telnet session: {e}.", err=True)
            log_error("Session failed", address=config.address)
        except CommandSourceError as e:
            click.echo(f"{e}.", err=True)
            log_error("Command source failed", address=config.address)
        finally:
            duration = now_ms() - begin
            prefix = "" if config.show_responses else "\n"
            click.echo(f"{prefix}Done in {format_duration(duration)}s.")
            log_info("Run finished", address=config.address, duration=duration)

        return exit_code

    def _execute_all(self, session: Session) -> bool:
        """Execute commands until the source ends or one fails fatally."""
        source = self.command_source()

        with source:
            if source.interactive:
                click.echo("Connected in an interactive mode, type a command.\n")

            for command in source:
                outcome = execute(
                    session,
                    command,
                    self.config.timeout,
                    show_responses=self.config.show_responses,
                )
                if outcome.is_fatal:
                    return False

                if source.interactive:
                    click.echo()

        return True
