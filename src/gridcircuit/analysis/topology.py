"""Junction, branch and loop discovery for grid circuits.

All passes work on a :class:`ComponentGraph`, an index-based view of the
circuit's component list with a removal mask. Pruning and loop enumeration
mutate only the mask of a scratch view, never the circuit itself.

Tie-breaks are load-bearing for reproducibility:

- junctions are collected in row-major grid order;
- incident components are visited in terminal connection order;
- scratch walks start at the first remaining component in list order.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
import logging
from typing import TYPE_CHECKING, Dict, FrozenSet, Iterable, Iterator, List, Optional, Tuple

from gridcircuit.circuits.core import (
    DEAD_END_BRANCH,
    Component,
    ComponentKind,
    Terminal,
)

if TYPE_CHECKING:
    from gridcircuit.circuits.grid import Circuit


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Junction:
    """A terminal with three or more incident components in the pruned graph."""

    terminal: Terminal
    components: Tuple[int, ...]


@dataclass(frozen=True)
class Loop:
    """Independent loop as a closed walk.

    ``terminals`` has one more entry than ``components`` and starts and ends
    on the same terminal; component ``k`` is walked from ``terminals[k]`` into
    ``terminals[k + 1]``.
    """

    components: Tuple[int, ...]
    terminals: Tuple[Terminal, ...]

    def steps(self) -> Iterator[Tuple[int, Terminal]]:
        """Yield ``(component index, terminal walked into)`` pairs."""
        for k, idx in enumerate(self.components):
            yield idx, self.terminals[k + 1]

    def __len__(self) -> int:
        return len(self.components)


@dataclass
class BranchLabels:
    """Result of a single branch-labelling pass."""

    branch: Dict[int, int] = field(default_factory=dict)
    direction: Dict[int, Terminal] = field(default_factory=dict)
    count: int = 0
    complete: bool = False


@dataclass(frozen=True)
class Topology:
    """Authoritative structure of a circuit, computed on its dead-end-free core."""

    junctions: Tuple[Junction, ...]
    branch_ids: Dict[int, int]
    directions: Dict[int, Terminal]
    loops: Tuple[Loop, ...]
    num_branches: int
    live_branch_count: int
    dead_ends: FrozenSet[int]

    @property
    def nodes(self) -> Tuple[Terminal, ...]:
        return tuple(junction.terminal for junction in self.junctions)

    @property
    def complete(self) -> bool:
        return self.live_branch_count > 0 and self.num_branches > 0


class ComponentGraph:
    """Index-based view over a circuit's components with a removal mask."""

    def __init__(self, circuit: "Circuit", include: Optional[Iterable[int]] = None) -> None:
        self.components: List[Component] = circuit.components
        self.terminals: List[Terminal] = list(circuit.iter_terminals())
        self._index: Dict[Component, int] = {comp: idx for idx, comp in enumerate(self.components)}
        selected = range(len(self.components)) if include is None else include
        self._alive = [False] * len(self.components)
        for idx in selected:
            self._alive[idx] = True

    def copy(self) -> "ComponentGraph":
        """Return a scratch view sharing the circuit but not the removal mask."""
        clone = copy.copy(self)
        clone._alive = list(self._alive)
        return clone

    def is_alive(self, idx: int) -> bool:
        return self._alive[idx]

    def remove(self, idx: int) -> None:
        self._alive[idx] = False

    def alive_indices(self) -> List[int]:
        return [idx for idx, alive in enumerate(self._alive) if alive]

    def connections(self, terminal: Terminal) -> List[int]:
        """Alive components incident to ``terminal``, in connection order."""
        indices = []
        for comp in terminal.connections:
            idx = self._index[comp]
            if self._alive[idx]:
                indices.append(idx)
        return indices

    def degree(self, terminal: Terminal) -> int:
        return len(self.connections(terminal))

    def next_component(self, terminal: Terminal, arrived_by: int) -> int:
        """Pick the first incident component other than the one just traversed."""
        incident = self.connections(terminal)
        return incident[0] if incident[0] != arrived_by else incident[1]

    def other_end(self, idx: int, terminal: Terminal) -> Terminal:
        return self.components[idx].other_end(terminal)


def find_nodes(graph: ComponentGraph) -> List[Terminal]:
    """Return junction terminals (degree > 2) in row-major grid order."""
    return [terminal for terminal in graph.terminals if graph.degree(terminal) > 2]


def label_branches(graph: ComponentGraph, nodes: List[Terminal]) -> BranchLabels:
    """Partition alive components into branches and assign current directions.

    Each branch is walked outward from a junction through pass-through
    terminals; the direction of every component is the terminal it is walked
    into. Walks that reach a terminal with fewer than two connections are dead
    ends and do not consume a branch number.
    """
    labels = BranchLabels()
    alive = graph.alive_indices()
    if not alive:
        return labels

    if not nodes:
        # Junction-free circuit: a single closed loop or a single open chain.
        idx = alive[0]
        prev = graph.components[idx].terminal_a
        for _ in range(len(alive)):
            labels.branch[idx] = 0
            nxt = graph.other_end(idx, prev)
            if graph.degree(nxt) < 2:
                return labels
            labels.direction[idx] = nxt
            idx = graph.next_component(nxt, idx)
            prev = nxt
        labels.count = 1
    else:
        for node in nodes:
            for start in graph.connections(node):
                if start in labels.branch:
                    continue
                walk: List[int] = []
                idx, terminal = start, node
                dead_end = False
                while True:
                    walk.append(idx)
                    labels.branch[idx] = labels.count
                    nxt = graph.other_end(idx, terminal)
                    if graph.degree(nxt) < 2:
                        dead_end = True
                        break
                    labels.direction[idx] = nxt
                    if graph.degree(nxt) > 2:
                        break
                    terminal = nxt
                    idx = graph.next_component(terminal, idx)
                if dead_end:
                    for member in walk:
                        labels.branch[member] = DEAD_END_BRANCH
                        labels.direction.pop(member, None)
                else:
                    labels.count += 1

    for idx in alive:
        labels.branch.setdefault(idx, DEAD_END_BRANCH)
    labels.complete = labels.count > 0
    return labels


def prune_dead_ends(graph: ComponentGraph) -> List[int]:
    """Remove dangling components one at a time until none remain.

    A component dangles when either endpoint has exactly one alive connection.
    Returns the removed indices in removal order.
    """
    removed: List[int] = []
    while True:
        for idx in reversed(graph.alive_indices()):
            comp = graph.components[idx]
            if graph.degree(comp.terminal_a) == 1 or graph.degree(comp.terminal_b) == 1:
                graph.remove(idx)
                removed.append(idx)
                break
        else:
            return removed


def find_loops(graph: ComponentGraph) -> List[Loop]:
    """Enumerate a set of independent loops of a dead-end-free graph.

    Each iteration walks from the first remaining component until a terminal
    repeats, trims any lead-in tail so the walk is a proper cycle, records it,
    then removes the loop's first component and the dead ends that creates.
    """
    scratch = graph.copy()
    loops: List[Loop] = []
    while True:
        alive = scratch.alive_indices()
        if not alive:
            return loops
        idx = alive[0]
        prev = scratch.components[idx].terminal_a
        visited: List[Terminal] = [prev]
        members: List[int] = []
        while True:
            members.append(idx)
            nxt = scratch.other_end(idx, prev)
            closed = nxt in visited
            visited.append(nxt)
            if closed:
                break
            idx = scratch.next_component(nxt, idx)
            prev = nxt
        start = visited.index(visited[-1])
        loop = Loop(components=tuple(members[start:]), terminals=tuple(visited[start:]))
        loops.append(loop)
        scratch.remove(loop.components[0])
        prune_dead_ends(scratch)


def analyze_topology(circuit: "Circuit", include: Optional[Iterable[int]] = None) -> Topology:
    """Discover junctions, branches and independent loops of a circuit.

    ``include`` restricts the analysis to a subset of component indices.
    Components stripped as dead ends, and any never reached by a branch walk,
    are labelled with the dead-end branch.
    """
    graph = ComponentGraph(circuit, include)

    live = label_branches(graph, find_nodes(graph))
    logger.debug(
        "Live labelling: %d branches over %d components (complete=%s).",
        live.count,
        len(graph.alive_indices()),
        live.complete,
    )

    core = graph.copy()
    dead_ends = prune_dead_ends(core)
    nodes = find_nodes(core)
    labels = label_branches(core, nodes)
    loops = find_loops(core) if labels.count > 0 else []

    branch_ids: Dict[int, int] = {}
    directions: Dict[int, Terminal] = {}
    for idx in graph.alive_indices():
        branch_ids[idx] = labels.branch.get(idx, DEAD_END_BRANCH) if core.is_alive(idx) else DEAD_END_BRANCH
        if branch_ids[idx] != DEAD_END_BRANCH:
            directions[idx] = labels.direction[idx]

    junctions = tuple(Junction(terminal=node, components=tuple(core.connections(node))) for node in nodes)
    topology = Topology(
        junctions=junctions,
        branch_ids=branch_ids,
        directions=directions,
        loops=tuple(loops),
        num_branches=labels.count,
        live_branch_count=live.count,
        dead_ends=frozenset(dead_ends),
    )
    logger.debug(
        "Pruned core: %d junctions, %d branches, %d loops, %d dead-end components.",
        len(junctions),
        topology.num_branches,
        len(topology.loops),
        len(topology.dead_ends),
    )
    for number, loop in enumerate(topology.loops):
        logger.debug("Loop %d: components %s.", number, list(loop.components))
    return topology


def has_short_circuit(circuit: "Circuit") -> bool:
    """Return True when a battery lies on a closed loop containing no resistor."""
    include = [idx for idx, comp in enumerate(circuit.components) if comp.kind is not ComponentKind.RESISTOR]
    topology = analyze_topology(circuit, include)
    for loop in topology.loops:
        for idx in loop.components:
            if circuit.components[idx].kind is ComponentKind.BATTERY:
                logger.debug("Battery %s closes a zero-resistance loop.", circuit.components[idx])
                return True
    return False
