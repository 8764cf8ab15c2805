"""Interactive loop: declutter many pages with one browser."""

import asyncio
import logging
import shlex
from collections.abc import Callable

import click

from declutter.cli._common import app, configure_logging, console
from declutter.cli.exec import build_request, exec_url, report_written, run_request
from declutter.exceptions import DeclutterError
from declutter.services.session import SessionManager

LOGGER = logging.getLogger(__name__)

PROMPT = "> "
EXIT_COMMAND = "exit"


def _parse_line(line: str) -> dict | None:
    """Parse one input line with the ``exec`` options; None when it was rejected."""
    try:
        ctx = exec_url.make_context("exec", shlex.split(line))
    except click.exceptions.Exit:
        # --help was printed
        return None
    except click.ClickException as e:
        e.show()
        return None
    except ValueError as e:
        console.print(f"[red]Could not parse input:[/red] {e}")
        return None
    return ctx.params


def repl_loop(read_line: Callable[[], str] | None = None) -> None:
    """
    Read ``exec`` arguments line by line and run the pipeline for each.

    All runs happen on one event loop and share one session, created from
    the first run's browser options and closed when the loop ends (``exit``,
    end of input or Ctrl+C). Argument and pipeline errors are printed and the
    loop carries on.

    Args:
        read_line: Source of input lines. Defaults to prompting on the console.
    """
    read_line = read_line or (lambda: console.input(PROMPT))
    session: SessionManager | None = None

    with asyncio.Runner() as runner:
        try:
            while True:
                try:
                    line = read_line().strip()
                except EOFError:
                    break
                if not line:
                    continue
                if line.lower() == EXIT_COMMAND:
                    break

                params = _parse_line(line)
                if params is None:
                    continue

                try:
                    request = build_request(params)
                    if session is None:
                        session = SessionManager(request.session_config)
                    paths = runner.run(run_request(request, session))
                except DeclutterError as e:
                    click.echo(f"Error Decluttering: {e.message}", err=True)
                    continue

                report_written(paths)
        finally:
            if session is not None:
                runner.run(session.close())
                LOGGER.debug("REPL session closed")


@app.command("repl", help="Declutter many URLs in one browser session, one exec command line at a time.")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Debug logging.")
def repl(verbose: bool) -> None:
    """Start an interactive declutter session.

    Each line takes the same arguments as ``declutter exec``, for example:

        > https://example.com/post --format html
        > example.com/other -f md -s TECH_TERMINAL
        > exit
    """
    configure_logging(verbose=verbose)
    console.print("Welcome to declutter REPL mode!")
    console.print(f"Type '{EXIT_COMMAND}' or press Ctrl+C to quit at any time.")
    try:
        repl_loop()
    except KeyboardInterrupt:
        pass
    console.print("Goodbye! Exiting REPL.")
