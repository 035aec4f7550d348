from __future__ import annotations

import os
import sys

import click

from smmake import __version__, settings
from smmake.engine import Engine
from smmake.errors import DescriptionFileError, SmmakeError
from smmake.parser import describe, parse_file
from smmake.runner import CommandRunner
from smmake.ui.console import Console, set_console


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.argument("target", required=False, default=settings.DEFAULT_TARGET)
@click.option(
    "-f",
    "--file",
    "makefile",
    default=settings.MAKEFILE,
    show_default=True,
    help="Build description to read (env: SMMAKE_FILE)",
)
@click.option(
    "-j",
    "--jobs",
    default=settings.JOBS,
    type=click.IntRange(min=1),
    help="Max targets running commands at once (default: unbounded, env: SMMAKE_JOBS)",
)
@click.option(
    "-C",
    "--directory",
    default=None,
    type=click.Path(exists=True, file_okay=False),
    help="Change to this directory before doing anything",
)
@click.option(
    "--shell-quoting/--no-shell-quoting",
    default=False,
    show_default=True,
    help="Split commands with shell-style quotes instead of plain whitespace",
)
@click.option("--list", "list_targets", is_flag=True, default=False, help="List targets and exit")
@click.option(
    "--debug",
    is_flag=True,
    default=settings.DEBUG,
    help="Show parsing/scheduling details and stack traces (env: SMMAKE_DEBUG)",
)
@click.version_option(__version__, "-v", "--version", prog_name="smmake", message="%(prog)s version %(version)s")
def cli(target, makefile, jobs, directory, shell_quoting, list_targets, debug):
    """smmake - Simple Multi-platform Make.

    Runs TARGET (default: all) from the build description, dependencies
    first and in parallel.

    \b
    Examples:
      smmake                       # Run the default target
      smmake test                  # Run the 'test' target
      smmake -f custom.mk build    # Use 'custom.mk' and run 'build'
    """
    console = Console(debug=debug)
    set_console(console)

    if directory:
        os.chdir(directory)

    console.print_debug(f"Attempting to parse Makefile: {makefile}")
    try:
        graph = parse_file(makefile)
    except DescriptionFileError as e:
        console.print_error(
            e.title,
            str(e),
            suggestion="Specify a build description explicitly:\n  smmake -f custom.mk build",
        )
        sys.exit(1)
    except SmmakeError as e:
        console.print_error(e.title, str(e))
        sys.exit(1)

    console.print_debug("Makefile parsed successfully")
    for line in describe(graph):
        console.print_debug(line)

    if list_targets:
        console.print_targets(f"{t.name} (pattern)" if t.pattern else t.name for t in graph)
        return

    engine = Engine(
        graph,
        CommandRunner(console, posix=shell_quoting),
        jobs=jobs,
        console=console,
    )

    console.print_debug(f"Attempting to execute target: {target}")
    try:
        engine.execute(target)
    except KeyboardInterrupt:
        console.print_info("\nInterrupted by user")
        sys.exit(130)
    except SmmakeError as e:
        console.print_error(e.title, str(e))
        if debug:
            console.print_exception(e)
        sys.exit(1)

    console.print_debug("Target execution completed")


if __name__ == "__main__":
    cli()
