"""Run the connection command for a selected host."""

import logging
import shlex
import subprocess
import time

from pssh.types import Host

logger = logging.getLogger(__name__)

DEFAULT_COMMAND = "ssh {name}"
DEFAULT_RETRY_DELAY = 2.0


class CommandTemplateError(Exception):
    """Error rendering the connection command template."""

    pass


class ConnectionCommandError(Exception):
    """The connection command could not be started."""

    pass


def render_command(template: str, host: Host) -> list[str]:
    """Fill the template with host fields and split it into argv."""
    fields = host.model_dump(exclude={"block"})
    try:
        command_line = template.format(**fields)
    except KeyError as e:
        raise CommandTemplateError(f"Unknown field {e} in command template") from e
    except (IndexError, ValueError) as e:
        raise CommandTemplateError(f"Could not parse command template: {e}") from e

    try:
        argv = shlex.split(command_line)
    except ValueError as e:
        raise CommandTemplateError(f"Could not split command {command_line!r}: {e}") from e

    if not argv:
        raise CommandTemplateError("Command is empty")
    return argv


def run_command(argv: list[str]) -> int:
    """Run argv attached to the current terminal and return its exit code."""
    try:
        completed = subprocess.run(argv)
    except OSError as e:
        raise ConnectionCommandError(f"Could not run {argv[0]}: {e}") from e
    return completed.returncode


def connect(
    host: Host,
    template: str = DEFAULT_COMMAND,
    loop: bool = False,
    retry_delay: float = DEFAULT_RETRY_DELAY,
) -> int:
    """
    Connect to host using the command template.

    With loop set, failed connections are retried every retry_delay seconds
    until one exits cleanly. Returns the final exit code.
    """
    argv = render_command(template, host)
    logger.info(f"Running command: {shlex.join(argv)}")

    if not loop:
        return run_command(argv)

    while True:
        exit_code = run_command(argv)
        if exit_code == 0:
            logger.info("Connection closed.")
            return exit_code

        logger.info(
            f"Connection failed (exit {exit_code}), retrying in {retry_delay:g} seconds. "
            "Press Ctrl+C to cancel."
        )
        time.sleep(retry_delay)
