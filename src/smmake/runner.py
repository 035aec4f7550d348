# runner.py
from __future__ import annotations

import os
import shlex
import subprocess
from pathlib import Path
from typing import Dict, List, Optional

from .errors import CommandFailed
from .model import Command
from .ui.console import Console, get_console


def split_command(text: str, posix: bool = False) -> List[str]:
    """
    Split a command line into program + arguments.

    By default whitespace is the only delimiter (no quoting, no escapes),
    so `echo "a b"` passes `"a` and `b"` through literally. With
    `posix=True` shell-style quoting is honoured via shlex. No shell is
    ever involved either way: pipes, redirects and globs are plain text.
    """
    if posix:
        return shlex.split(text)
    return text.split()


class CommandRunner:
    """
    Spawns one command at a time with the caller's stdout/stderr.

    Output is never captured; the child writes straight to our streams.
    """

    def __init__(
        self,
        console: Optional[Console] = None,
        *,
        posix: bool = False,
        cwd: str | Path | None = None,
        env: Optional[Dict[str, str]] = None,
    ):
        """
        Args:
            posix: split with shell-style quoting instead of plain whitespace
            cwd: working directory for every command (default: ours)
            env: extra variables layered over our environment
        """
        self.console = console
        self.posix = posix
        self.cwd = cwd
        self.env = env

    def run(self, command: Command, target: Optional[str] = None) -> None:
        """
        Run `command`; return on exit status 0, raise CommandFailed otherwise.

        A command that splits into zero tokens is a no-op and succeeds.
        """
        console = self.console or get_console()
        if not command.silent:
            console.print_command(command.text)

        try:
            argv = split_command(command.text, posix=self.posix)
        except ValueError as e:
            # shlex: unbalanced quotes
            raise CommandFailed(command=command.text, target=target, reason=str(e)) from e
        if not argv:
            return

        env = None
        if self.env:
            env = os.environ.copy()
            env.update(self.env)

        try:
            proc = subprocess.run(argv, cwd=self.cwd, env=env)
        except OSError as e:
            raise CommandFailed(command=command.text, target=target, reason=str(e)) from e

        if proc.returncode != 0:
            raise CommandFailed(
                command=command.text,
                target=target,
                exit_code=proc.returncode,
            )
