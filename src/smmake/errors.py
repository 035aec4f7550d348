# errors.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple


class SmmakeError(Exception):
    """Base class for everything the interpreter raises on purpose."""

    title = "Build failed"


@dataclass
class DescriptionFileError(SmmakeError):
    path: str
    reason: str

    title = "Cannot read build description"

    def __str__(self) -> str:
        return f"error opening makefile '{self.path}': {self.reason}"


@dataclass
class ParseError(SmmakeError):
    path: str
    lineno: int
    message: str

    title = "Invalid build description"

    def __str__(self) -> str:
        return f"{self.path}:{self.lineno}: {self.message}"


@dataclass
class TargetNotFound(SmmakeError):
    target: str

    title = "Unknown target"

    def __str__(self) -> str:
        return f"target '{self.target}' not found"


@dataclass
class CircularDependency(SmmakeError):
    target: str
    chain: Tuple[str, ...] = ()

    title = "Circular dependency"

    def __str__(self) -> str:
        msg = f"circular dependency detected for target '{self.target}'"
        if self.chain:
            msg += f" ({' -> '.join(self.chain)})"
        return msg


@dataclass
class CommandFailed(SmmakeError):
    """
    A command could not be spawned or exited nonzero.

    Exactly one of `exit_code` (the program ran and failed) or `reason`
    (the OS refused to start it) is set.
    """
    command: str
    target: Optional[str] = None
    exit_code: Optional[int] = None
    reason: Optional[str] = None

    title = "Command failed"

    def __str__(self) -> str:
        msg = f"error executing command '{self.command}'"
        if self.exit_code is not None:
            msg += f": exit status {self.exit_code}"
        elif self.reason:
            msg += f": {self.reason}"
        if self.target:
            msg = f"[{self.target}] {msg}"
        return msg


@dataclass
class DependencyFailed(SmmakeError):
    target: str
    dependency: str
    cause: SmmakeError = field(repr=False)

    def __str__(self) -> str:
        return f"error in dependency '{self.dependency}': {self.cause}"

    @property
    def title(self) -> str:  # type: ignore[override]
        return self.root_cause().title

    def root_cause(self) -> SmmakeError:
        err: SmmakeError = self
        while isinstance(err, DependencyFailed):
            err = err.cause
        return err
