"""Cycle detection for directed graphs given as ``node -> neighbours``.

Used on the entity dependency graph by the build and on the reference graph
extracted from serialized templates by post-synthesis checks.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping

_WHITE, _GRAY, _BLACK = 0, 1, 2


def normalize_cycle_key(cycle: list[str]) -> tuple[str, ...]:
    """Rotation-independent key for a closed cycle (last node repeats the first).

    >>> normalize_cycle_key(["C", "A", "B", "C"])
    ('A', 'B', 'C')
    >>> normalize_cycle_key(["A", "A"])
    ('A',)
    """
    nodes = cycle[:-1]
    if not nodes:
        return ()
    start = min(range(len(nodes)), key=nodes.__getitem__)
    return tuple(nodes[start:] + nodes[:start])


def detect_cycles(graph: Mapping[str, Iterable[str]]) -> list[list[str]]:
    """Return each elementary cycle found by depth-first search exactly once.

    Each cycle is listed without repeating its first node and rotated to
    start at its smallest member. A self-loop is a one-element cycle.
    Neighbours that are not keys of *graph* have no outgoing edges.

    >>> detect_cycles({"A": ["B"], "B": ["A"]})
    [['A', 'B']]
    >>> detect_cycles({"A": ["A"]})
    [['A']]
    """
    adjacency = {node: sorted(neighbours) for node, neighbours in graph.items()}
    color = dict.fromkeys(adjacency, _WHITE)
    parent: dict[str, str] = {}
    reported: set[tuple[str, ...]] = set()
    cycles: list[list[str]] = []

    for start in adjacency:
        if color[start] != _WHITE:
            continue
        color[start] = _GRAY
        stack: list[tuple[str, Iterator[str]]] = [(start, iter(adjacency[start]))]

        while stack:
            node, neighbours = stack[-1]
            neighbour = next(neighbours, None)
            if neighbour is None:
                color[node] = _BLACK
                stack.pop()
                continue

            state = color.get(neighbour)
            if state is None or state == _BLACK:
                continue
            if state == _WHITE:
                parent[neighbour] = node
                color[neighbour] = _GRAY
                stack.append((neighbour, iter(adjacency[neighbour])))
                continue

            # Back edge to a node on the current path
            cycle = [neighbour]
            current = node
            while current != neighbour:
                cycle.append(current)
                current = parent[current]
            cycle.append(neighbour)
            cycle.reverse()

            key = normalize_cycle_key(cycle)
            if key not in reported:
                reported.add(key)
                cycles.append(list(key))

    return cycles


__all__ = ["detect_cycles", "normalize_cycle_key"]
