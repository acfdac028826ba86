"""Click-based command line for the NDM telnet client."""

import logging
import sys

import click
from click.core import ParameterSource

from lib.ndmtelnet import __version__
from lib.ndmtelnet.config import NdmTelnetConfig, load_config
from lib.ndmtelnet.exceptions import ConfigurationError
from lib.ndmtelnet.logging import setup_logging
from lib.ndmtelnet.runner import Runner

BANNER = "Simple NDM telnet client."


def usage(config: NdmTelnetConfig) -> str:
    """Describe the options together with their current defaults.

    Parameters
    ----------
    config : NdmTelnetConfig
        Configuration supplying the defaults

    Returns
    -------
    str
        Option table
    """
    return (
        "NDM telnet client options:\n"
        f"    -A {{address}}   device address ({config.address})\n"
        f"    -P {{port}}      telnet port ({config.port})\n"
        f'    -u {{user}}      user name ("{config.user}")\n'
        f'    -p {{password}}  user password ("{config.password}")\n'
        f"    -t {{timeout}}   I/O timeout in milliseconds ({config.timeout})\n"
        f'    -c {{command}}   command to execute ("{config.command}")\n'
        f'    -f {{file name}} file name with a command set ("{config.file_name}")\n'
        f"    -s             show XML responses ({'yes' if config.show_responses else 'no'})"
    )


def setup_cli_logging(verbose: bool, quiet: bool, config: NdmTelnetConfig) -> None:
    """Set up logging for CLI.

    Parameters
    ----------
    verbose : bool
        Enable verbose logging
    quiet : bool
        Enable quiet logging
    config : NdmTelnetConfig
        Configuration with the default level and output format
    """
    if quiet:
        level = logging.ERROR
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.getLevelName(config.log_level.upper())
        if not isinstance(level, int):
            level = logging.WARNING

    setup_logging(level=level, json_output=config.log_json, log_file=config.log_file)


def _no_arguments(ctx: click.Context) -> bool:
    return all(
        ctx.get_parameter_source(name) is ParameterSource.DEFAULT for name in ctx.params
    )


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__)
@click.option("-A", "address", help="Device address")
@click.option("-P", "port", type=int, help="Telnet port")
@click.option("-u", "user", help="User name")
@click.option("-p", "password", help="User password")
@click.option("-t", "timeout", type=int, help="I/O timeout in milliseconds")
@click.option("-c", "command", help="Command to execute")
@click.option("-f", "file_name", help="File name with a command set")
@click.option("-s", "show_responses", is_flag=True, help="Show XML responses")
@click.option(
    "--config",
    "config_file",
    type=click.Path(exists=True, dir_okay=False),
    help="YAML configuration file",
)
@click.option("--verbose", "-v", is_flag=True, help="Verbose logging")
@click.option("--quiet", "-q", is_flag=True, help="Errors only")
@click.option("--json-logs", "log_json", is_flag=True, help="Log in JSON format")
@click.pass_context
def main(
    ctx: click.Context,
    address: str | None,
    port: int | None,
    user: str | None,
    password: str | None,
    timeout: int | None,
    command: str | None,
    file_name: str | None,
    show_responses: bool,
    config_file: str | None,
    verbose: bool,
    quiet: bool,
    log_json: bool,
) -> None:
    """Execute commands on an NDM device over telnet."""
    click.echo(BANNER)

    if _no_arguments(ctx):
        try:
            defaults = load_config()
        except ConfigurationError:
            defaults = NdmTelnetConfig.model_construct()
        click.echo(usage(defaults))
        sys.exit(1)

    overrides = {
        "address": address,
        "port": port,
        "user": user,
        "password": password,
        "timeout": timeout,
        "command": command,
        "file_name": file_name,
        "show_responses": show_responses or None,
        "log_json": log_json or None,
    }

    try:
        config = load_config(
            config_file,
            **{name: value for name, value in overrides.items() if value is not None},
        )
    except ConfigurationError as e:
        click.echo(f"{e}.", err=True)
        sys.exit(1)

    setup_cli_logging(verbose, quiet, config)
    sys.exit(Runner(config).run())


if __name__ == "__main__":
    main()
