"""Transition graph construction and analysis."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from .schema import FsmTransition


@dataclass
class TransitionGraph:
    """Literal (from, to) pairs plus ordered adjacency of a definition.

    Built fresh for each validation pass.
    """

    pairs: set[tuple[str, str]] = field(default_factory=set)
    adjacency: dict[str, list[str]] = field(default_factory=dict)  # from -> [to, ...] in declaration order

    @classmethod
    def from_transitions(cls, transitions: Iterable[FsmTransition]) -> "TransitionGraph":
        graph = cls()
        for transition in transitions:
            graph.pairs.add((transition.from_state, transition.to_state))
            graph.adjacency.setdefault(transition.from_state, []).append(transition.to_state)
        return graph

    def has_edge(self, source: str, target: str) -> bool:
        return (source, target) in self.pairs

    def successors(self, state: str) -> list[str] | None:
        """Outgoing targets of `state`, or None if it never appears as a source."""
        return self.adjacency.get(state)

    def has_cycle_from(self, start: str) -> bool:
        """Check whether `start` can reach itself again.

        This is not a general cycle detector: a loop that never passes
        through `start` is not reported.
        """
        if self.has_edge(start, start):
            return True

        visited = {start}
        for neighbor in self.adjacency.get(start, []):
            if neighbor == start:
                return True
            if self._reaches(neighbor, start, visited):
                return True
        return False

    def _reaches(self, current: str, start: str, visited: set[str]) -> bool:
        stack = [iter(self.adjacency.get(current, []))]
        while stack:
            neighbor = next(stack[-1], None)
            if neighbor is None:
                stack.pop()
                continue
            if neighbor == start:
                return True
            if neighbor not in visited:
                visited.add(neighbor)
                stack.append(iter(self.adjacency.get(neighbor, [])))
        return False

    def reachable_from(self, start: str) -> set[str]:
        """All states reachable from start, including start."""
        visited: set[str] = set()
        stack = [start]

        while stack:
            current = stack.pop()
            if current in visited:
                continue
            visited.add(current)

            for target in self.adjacency.get(current, []):
                if target not in visited:
                    stack.append(target)

        return visited

    def unreachable_states(self, initial: str, states: Iterable[str]) -> list[str]:
        """Declared states that cannot be reached from `initial`, in declaration order."""
        reachable = self.reachable_from(initial)
        return [s for s in states if s not in reachable]
