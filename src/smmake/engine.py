# engine.py
from __future__ import annotations

import os
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from contextlib import nullcontext
from typing import Dict, List, Optional, Set, Tuple

from .errors import CircularDependency, DependencyFailed, SmmakeError, TargetNotFound
from .model import Graph, Target
from .patterns import PatternMatcher
from .runner import CommandRunner
from .ui.console import Console, get_console

UNSTARTED = "unstarted"
IN_PROGRESS = "in-progress"
DONE = "done"
FAILED = "failed"


class Engine:
    """
    Executes targets of a parsed Graph, dependencies first.

    Every requested name gets one Future, created under `_lock` by the first
    caller (the owner). Anyone else asking for the same name waits on that
    Future and reuses its outcome, so a target's commands run at most once
    per Engine and a failure is reported to every dependent.

    Cycles are detected two ways:
      - the chain of ancestors on the current call path is passed down, and
        a name reappearing in it is a cycle;
      - before blocking on a target owned by another branch, the dependency
        edges of in-progress targets are searched for a path back to one of
        our ancestors. Such a wait could never finish.

    Dependencies fan out one thread per edge. `jobs` caps how many targets
    may run their commands at the same time; waiting on dependencies does
    not hold a slot.
    """

    def __init__(
        self,
        graph: Graph,
        runner: Optional[CommandRunner] = None,
        *,
        jobs: Optional[int] = None,
        console: Optional[Console] = None,
        matcher: Optional[PatternMatcher] = None,
    ):
        if jobs is not None and jobs < 1:
            raise ValueError(f"jobs must be >= 1, got {jobs}")
        self.graph = graph
        self.console = console or get_console()
        self.runner = runner or CommandRunner(self.console)
        self.matcher = matcher or PatternMatcher(graph)
        self.jobs = jobs

        self._lock = threading.Lock()
        self._results: Dict[str, Future] = {}
        # in-progress target -> dependencies it is currently waiting for
        self._edges: Dict[str, Tuple[str, ...]] = {}
        self._slots = threading.BoundedSemaphore(jobs) if jobs else None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def execute(self, name: str = "all") -> None:
        """Build `name`; raise a SmmakeError describing the first failure."""
        self._execute(name, ())

    def state(self, name: str) -> str:
        """Lifecycle of `name`: unstarted, in-progress, done or failed."""
        with self._lock:
            fut = self._results.get(name)
        if fut is None:
            return UNSTARTED
        if not fut.done():
            return IN_PROGRESS
        return FAILED if fut.exception() is not None else DONE

    # ------------------------------------------------------------------
    # Admission
    # ------------------------------------------------------------------

    def _execute(self, name: str, ancestors: Tuple[str, ...]) -> None:
        if name in ancestors:
            raise CircularDependency(target=name, chain=ancestors + (name,))

        with self._lock:
            fut = self._results.get(name)
            owner = fut is None
            if owner:
                fut = Future()
                self._results[name] = fut
            elif not fut.done() and ancestors and self._reaches(name, set(ancestors)):
                raise CircularDependency(target=name, chain=ancestors + (name,))

        if not owner:
            self.console.print_debug(f"{name}: waiting for concurrent build")
            fut.result()
            return

        try:
            self._build(name, ancestors)
        except BaseException as e:
            fut.set_exception(e)
            raise
        fut.set_result(None)

    def _reaches(self, start: str, goals: Set[str]) -> bool:
        """Path from `start` to any of `goals` through in-progress edges? Call under _lock."""
        stack: List[str] = [start]
        seen: Set[str] = set()
        while stack:
            node = stack.pop()
            if node in goals:
                return True
            if node in seen:
                continue
            seen.add(node)
            stack.extend(self._edges.get(node, ()))
        return False

    # ------------------------------------------------------------------
    # Build steps
    # ------------------------------------------------------------------

    def _resolve(self, name: str) -> Optional[Target]:
        """
        Explicit rule, then pattern rule, then an existing file.

        Returns None when the name is satisfied by a file on disk; the
        file's age is never compared against anything.
        """
        target = self.graph.get(name)
        if target is not None:
            return target

        target = self.matcher.match(name)
        if target is not None:
            self.console.print_debug(f"{name}: using pattern rule '{target.name}'")
            return target

        if os.path.exists(name):
            self.console.print_debug(f"{name}: satisfied by existing file")
            return None

        raise TargetNotFound(target=name)

    def _build(self, name: str, ancestors: Tuple[str, ...]) -> None:
        target = self._resolve(name)
        if target is None:
            return

        deps = target.dependencies_for(name)
        if deps:
            with self._lock:
                self._edges[name] = deps
            try:
                self._satisfy(name, deps, ancestors + (name,))
            finally:
                with self._lock:
                    self._edges.pop(name, None)

        self._run_commands(name, target)
        self.console.print_debug(f"{name}: done")

    def _satisfy(self, name: str, deps: Tuple[str, ...], chain: Tuple[str, ...]) -> None:
        """
        Execute every dependency concurrently and wait for all of them.

        Branches are never cancelled. Once all have finished, the failure of
        the first dependency in declaration order is raised.
        """
        with ThreadPoolExecutor(max_workers=len(deps), thread_name_prefix="smmake") as pool:
            futures = [pool.submit(self._execute, dep, chain) for dep in deps]

        for dep, fut in zip(deps, futures):
            err = fut.exception()
            if err is None:
                continue
            if isinstance(err, SmmakeError):
                raise DependencyFailed(target=name, dependency=dep, cause=err) from err
            raise err

    def _run_commands(self, name: str, target: Target) -> None:
        if not target.commands:
            return
        with self._slots or nullcontext():
            for command in target.commands:
                self.runner.run(command, target=name)
