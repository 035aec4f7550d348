# model.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple


@dataclass(frozen=True)
class Command:
    """A single command line of a target, variables already substituted."""
    text: str
    silent: bool = False
    lineno: Optional[int] = None


@dataclass(frozen=True)
class Target:
    """
    A build target: ordered commands + dependency names.

    Dependencies are names, not Target records. They are looked up at
    execution time, so a target may depend on one defined further down.

    Pattern targets (`%.o: ...`) carry the text before and after the `%`
    in `prefix` / `suffix`.
    """
    name: str
    commands: Tuple[Command, ...] = ()
    dependencies: Tuple[str, ...] = ()
    pattern: bool = False
    prefix: str = ""
    suffix: str = ""
    lineno: Optional[int] = None

    def matches(self, name: str) -> bool:
        if not self.pattern:
            return False
        if len(name) < len(self.prefix) + len(self.suffix):
            return False
        return name.startswith(self.prefix) and name.endswith(self.suffix)

    def stem(self, name: str) -> str:
        """The part of `name` matched by the `%`."""
        return name[len(self.prefix):len(name) - len(self.suffix)]

    def dependencies_for(self, name: str) -> Tuple[str, ...]:
        """
        Dependency names when building `name` with this target.

        For pattern targets every `%` in a dependency is replaced by the stem,
        so `%.o: %.c` building `main.o` depends on `main.c`.
        """
        if not self.pattern:
            return self.dependencies
        stem = self.stem(name)
        return tuple(dep.replace("%", stem) for dep in self.dependencies)


@dataclass
class Graph:
    """
    Parsed build description.

    `targets` preserves definition order. A duplicate definition replaces
    the earlier one and moves to the position of the new definition.
    `variables` is only used while parsing.
    """
    targets: Dict[str, Target] = field(default_factory=dict)
    variables: Dict[str, str] = field(default_factory=dict)

    def add(self, target: Target) -> None:
        self.targets.pop(target.name, None)
        self.targets[target.name] = target

    def get(self, name: str) -> Optional[Target]:
        return self.targets.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self.targets

    def __iter__(self) -> Iterator[Target]:
        return iter(self.targets.values())

    def __len__(self) -> int:
        return len(self.targets)

    def pattern_targets(self) -> List[Target]:
        return [t for t in self.targets.values() if t.pattern]
