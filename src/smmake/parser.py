# parser.py
"""
Build-description parser.

Turns Makefile-like text into a `Graph`. Each physical line is classified
on its own (skip / command / target / variable) and fed to a small state
machine whose only state is the rule currently collecting commands.

Precedence for a line that is not indented with a tab:
  - contains `:` before any `=`  -> target line (`name: dep1 dep2`)
    (`NAME := value` is the exception and is an assignment)
  - otherwise contains `=`       -> variable line (`NAME = value`)
  - anything else                -> error

On target lines a `#` at the start of a word begins a comment. Variable
values and command text are kept verbatim, `#` included.

Variables are substituted into command text and into later variable
values exactly once, here. Target names and dependency lists are never
expanded.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Mapping, Optional, Tuple

from .errors import DescriptionFileError, ParseError
from .model import Command, Graph, Target

_VAR_RE = re.compile(r"\$(?:\(([^()]+)\)|\{([^{}]+)\})")
_COMMENT_RE = re.compile(r"(?:^|(?<=\s))#.*$")

# Line kinds
SKIP = "skip"
COMMAND = "command"
TARGET = "target"
VARIABLE = "variable"
INVALID = "invalid"


def expand_variables(text: str, variables: Mapping[str, str]) -> str:
    """Replace $(NAME) / ${NAME}; unknown references stay as written."""

    def _sub(m: re.Match) -> str:
        name = m.group(1) if m.group(1) is not None else m.group(2)
        return variables.get(name, m.group(0))

    return _VAR_RE.sub(_sub, text)


def classify(line: str) -> str:
    if not line.strip() or line.strip().startswith("#"):
        return SKIP
    if line.startswith("\t"):
        return COMMAND
    colon = line.find(":")
    equals = line.find("=")
    if colon != -1 and (equals == -1 or colon < equals):
        if line[colon + 1:colon + 2] == "=":
            return VARIABLE
        return TARGET
    if equals != -1:
        return VARIABLE
    return INVALID


@dataclass
class _Rule:
    """Rule being assembled; frozen into Target(s) when the next rule starts."""
    names: List[str]
    dependencies: Tuple[str, ...]
    lineno: int
    commands: List[Command] = field(default_factory=list)


class Parser:
    def __init__(self, source: str = "<string>"):
        self.source = source
        self.graph = Graph()
        self._rule: Optional[_Rule] = None

    def _error(self, lineno: int, message: str) -> ParseError:
        return ParseError(path=self.source, lineno=lineno, message=message)

    def feed(self, lineno: int, line: str) -> None:
        kind = classify(line)
        if kind == TARGET:
            # variable values and command text keep their `#`
            line = _COMMENT_RE.sub("", line)
        if kind == SKIP:
            return
        if kind == COMMAND:
            self._command(lineno, line)
        elif kind == TARGET:
            self._target(lineno, line)
        elif kind == VARIABLE:
            self._variable(lineno, line)
        else:
            hint = " (commands must be indented with a tab)" if line[:1].isspace() else ""
            raise self._error(lineno, f"expected a target, variable or command line{hint}")

    def close(self) -> Graph:
        self._flush()
        return self.graph

    # ------------------------------------------------------------------
    # Line handlers
    # ------------------------------------------------------------------

    def _command(self, lineno: int, line: str) -> None:
        if self._rule is None:
            raise self._error(lineno, "command found before any target")
        text = line[1:].strip()
        silent = False
        if text.startswith("@"):
            silent = True
            text = text[1:].strip()
        text = expand_variables(text, self.graph.variables)
        self._rule.commands.append(Command(text=text, silent=silent, lineno=lineno))

    def _target(self, lineno: int, line: str) -> None:
        head, _, tail = line.partition(":")
        names = head.split()
        if not names:
            raise self._error(lineno, "missing target name before ':'")
        for name in names:
            if name.count("%") > 1:
                raise self._error(lineno, f"pattern target '{name}' has more than one '%'")
        self._flush()
        self._rule = _Rule(names=names, dependencies=tuple(tail.split()), lineno=lineno)

    def _variable(self, lineno: int, line: str) -> None:
        name, _, value = line.partition("=")
        name = name.strip()
        if name.endswith(":"):
            name = name[:-1].rstrip()
        if not name:
            raise self._error(lineno, "missing variable name before '='")
        self.graph.variables[name] = expand_variables(value.strip(), self.graph.variables)

    def _flush(self) -> None:
        rule, self._rule = self._rule, None
        if rule is None:
            return
        commands = tuple(rule.commands)
        for name in rule.names:
            prefix, pct, suffix = name.partition("%")
            self.graph.add(
                Target(
                    name=name,
                    commands=commands,
                    dependencies=rule.dependencies,
                    pattern=bool(pct),
                    prefix=prefix if pct else "",
                    suffix=suffix if pct else "",
                    lineno=rule.lineno,
                )
            )


def parse_text(text: str, source: str = "<string>") -> Graph:
    parser = Parser(source)
    for lineno, line in enumerate(text.splitlines(), start=1):
        parser.feed(lineno, line)
    return parser.close()


def parse_file(path: str | Path) -> Graph:
    """
    Parse a build description from disk.

    Raises:
        DescriptionFileError: the file cannot be opened or read
        ParseError: a line cannot be understood
    """
    p = Path(path)
    try:
        text = p.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise DescriptionFileError(path=str(p), reason=str(e)) from e
    return parse_text(text, source=str(p))


def describe(graph: Graph) -> List[str]:
    """Human readable dump of a parsed graph (used by --debug)."""
    lines: List[str] = []
    for target in graph:
        kind = " (pattern)" if target.pattern else ""
        lines.append(f"Parsed target: {target.name}{kind}")
        lines.append(f"  Dependencies: {list(target.dependencies)}")
        lines.append("  Commands:")
        for cmd in target.commands:
            silent = "(silent) " if cmd.silent else ""
            lines.append(f"    {silent}{cmd.text}")
    return lines
