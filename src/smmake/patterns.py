# patterns.py
from __future__ import annotations

from typing import Optional

from .model import Graph, Target


class PatternMatcher:
    """
    Finds the pattern rule (`prefix%suffix`) that can build a concrete name.

    Candidates are tried in definition order, so the first matching rule in
    the file wins. Nothing is cached: every lookup rescans the graph.
    """

    def __init__(self, graph: Graph):
        self.graph = graph

    def match(self, name: str) -> Optional[Target]:
        for target in self.graph.pattern_targets():
            if target.matches(name):
                return target
        return None
