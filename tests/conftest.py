from __future__ import annotations

import sys
import threading
import time
from pathlib import Path

import pytest

from smmake.errors import CommandFailed
from smmake.parser import parse_text
from smmake.ui.console import Console, set_console


class RecordingRunner:
    """Stands in for CommandRunner: records (target, text) instead of spawning."""

    def __init__(self, fail=(), delay: float = 0.0, barrier: threading.Barrier | None = None):
        self.calls: list[tuple[str | None, str]] = []
        self.fail = set(fail)
        self.delay = delay
        self.barrier = barrier
        self.active = 0
        self.max_active = 0
        self._lock = threading.Lock()

    def run(self, command, target=None):
        with self._lock:
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        try:
            if self.barrier is not None:
                self.barrier.wait()
            if self.delay:
                time.sleep(self.delay)
            with self._lock:
                self.calls.append((target, command.text))
            if command.text in self.fail:
                raise CommandFailed(command=command.text, target=target, exit_code=1)
        finally:
            with self._lock:
                self.active -= 1

    @property
    def texts(self) -> list[str]:
        return [text for _, text in self.calls]


@pytest.fixture(autouse=True)
def quiet_console():
    console = Console(debug=False)
    set_console(console)
    yield console


@pytest.fixture
def recorder():
    return RecordingRunner()


@pytest.fixture
def graph_from():
    def _make(text: str):
        return parse_text(text)
    return _make


@pytest.fixture
def script(tmp_path: Path):
    """
    A tiny helper program: prints its args, optionally touches a file or
    prints an environment variable,
    exits with the code given by --exit.
    """
    path = tmp_path / "helper.py"
    path.write_text(
        "import os\n"
        "import sys\n"
        "args = sys.argv[1:]\n"
        "code = 0\n"
        "if args and args[0] == '--exit':\n"
        "    code = int(args[1])\n"
        "    args = args[2:]\n"
        "if args and args[0] == '--touch':\n"
        "    open(args[1], 'a').close()\n"
        "    args = args[2:]\n"
        "if args and args[0] == '--env':\n"
        "    print('ENV:' + os.environ.get(args[1], ''))\n"
        "    args = args[2:]\n"
        "print('ARGS:' + '|'.join(args))\n"
        "sys.exit(code)\n"
    )
    if " " in sys.executable or " " in str(path):
        pytest.skip("whitespace-split commands need paths without spaces")
    return f"{sys.executable} {path}"
