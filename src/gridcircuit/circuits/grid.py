"""Grid circuit container: terminals, components and the solve pipeline."""

from __future__ import annotations

import logging
from typing import Iterator, List, Optional

import numpy as np

from gridcircuit.analysis.kirchhoff import SolverOptions, assemble_kirchhoff_system, solve_kirchhoff_system
from gridcircuit.analysis.potentials import calculate_potentials
from gridcircuit.analysis.topology import Topology, analyze_topology, has_short_circuit
from gridcircuit.circuits.core import (
    DEAD_END_BRANCH,
    Component,
    ComponentKind,
    Position,
    Terminal,
)
from gridcircuit.errors import (
    CircuitNotSolvableError,
    CircuitValidationError,
    IncompleteCircuitError,
    ShortCircuitError,
)


logger = logging.getLogger(__name__)


class Circuit:
    """Resistive DC network laid out on a fixed ``rows`` x ``cols`` terminal grid.

    At most one component may join any unordered pair of terminals. Call
    :meth:`solve` after every edit; each call recomputes topology, branch
    currents and terminal potentials from scratch.
    """

    def __init__(self, rows: int, cols: int, options: Optional[SolverOptions] = None) -> None:
        if rows <= 0 or cols <= 0:
            raise CircuitValidationError("Grid dimensions must be positive.")
        self.rows = rows
        self.cols = cols
        self.options = options or SolverOptions()
        self.num_branches = 0
        self.topology: Optional[Topology] = None
        self._terminals = [[Terminal(r, c) for c in range(cols)] for r in range(rows)]
        self._components: List[Component] = []

    @property
    def components(self) -> List[Component]:
        return self._components

    def terminal(self, row: int, col: int) -> Terminal:
        if not (0 <= row < self.rows and 0 <= col < self.cols):
            raise CircuitValidationError(f"Terminal ({row}, {col}) is outside the {self.rows}x{self.cols} grid.")
        return self._terminals[row][col]

    def iter_terminals(self) -> Iterator[Terminal]:
        """Iterate terminals in row-major order."""
        for row in self._terminals:
            yield from row

    def potentials(self) -> np.ndarray:
        """Return terminal potentials as a ``rows`` x ``cols`` array (inf where unset)."""
        return np.array([[terminal.potential for terminal in row] for row in self._terminals], dtype=float)

    def get_component(self, r1: int, c1: int, r2: int, c2: int) -> Optional[Component]:
        first = self.terminal(r1, c1)
        second = self.terminal(r2, c2)
        for comp in self._components:
            if comp.touches(first) and comp.touches(second):
                return comp
        return None

    def add_wire(self, r1: int, c1: int, r2: int, c2: int) -> Optional[Component]:
        return self._add(Component.wire(self.terminal(r1, c1), self.terminal(r2, c2)))

    def add_resistor(self, r1: int, c1: int, r2: int, c2: int, resistance: float) -> Optional[Component]:
        return self._add(Component.resistor(self.terminal(r1, c1), self.terminal(r2, c2), resistance))

    def add_battery(
        self,
        r1: int,
        c1: int,
        r2: int,
        c2: int,
        voltage: float,
        positive_end: Optional[Position] = None,
    ) -> Optional[Component]:
        """Add a battery; the positive end defaults to the first endpoint."""
        positive = self.terminal(*positive_end) if positive_end is not None else None
        return self._add(Component.battery(self.terminal(r1, c1), self.terminal(r2, c2), voltage, positive))

    def add_component(self, component: Component) -> Optional[Component]:
        """Add a component built against any grid of matching positions.

        Endpoints are rebound to this circuit's terminals. Returns ``None`` if the
        terminal pair is already occupied.
        """
        a = self.terminal(*component.terminal_a.position)
        b = self.terminal(*component.terminal_b.position)
        if component.kind is ComponentKind.RESISTOR:
            rebound = Component.resistor(a, b, component.resistance)
        elif component.kind is ComponentKind.BATTERY:
            positive = self.terminal(*component.positive_end.position)
            rebound = Component.battery(a, b, component.voltage, positive)
        else:
            rebound = Component.wire(a, b)
        return self._add(rebound)

    def remove_component(self, component: Component) -> None:
        """Remove ``component`` and sever it from both endpoint terminals."""
        for idx, comp in enumerate(self._components):
            if comp is component:
                del self._components[idx]
                break
        else:
            raise CircuitValidationError(f"Component {component} is not part of this circuit.")
        component.terminal_a.disconnect(component)
        component.terminal_b.disconnect(component)
        component.reset()

    def remove_component_at(self, r1: int, c1: int, r2: int, c2: int) -> Optional[Component]:
        """Remove the component between two positions, if any, and return it."""
        comp = self.get_component(r1, c1, r2, c2)
        if comp is not None:
            self.remove_component(comp)
        return comp

    def copy(self) -> "Circuit":
        """Copy grid shape and component values; solve state is not copied."""
        clone = Circuit(self.rows, self.cols, options=self.options)
        for comp in self._components:
            clone.add_component(comp)
        return clone

    def reset(self) -> None:
        """Return every component and terminal to its unsolved state."""
        for comp in self._components:
            comp.reset()
        for terminal in self.iter_terminals():
            terminal.reset()
        self.num_branches = 0
        self.topology = None

    def solve(self) -> np.ndarray:
        """
        Solve for branch currents and terminal potentials.

        Returns the current in each branch indexed by branch id. Raises a
        CircuitNotSolvableError subclass for incomplete circuits, short circuits
        and singular systems; the circuit is left with topology labels only.
        """
        self.reset()
        topology = analyze_topology(self)
        self._apply_topology(topology)

        try:
            if not topology.complete:
                raise IncompleteCircuitError("No complete circuit: every path ends in a dead end.")
            if has_short_circuit(self):
                raise ShortCircuitError("A battery is connected across a zero-resistance loop.")
            system = assemble_kirchhoff_system(self, topology)
            currents = solve_kirchhoff_system(system, self.options)
        except CircuitNotSolvableError as exc:
            logger.info("Circuit not solvable: %s", exc)
            raise

        for comp in self._components:
            comp.current = 0.0 if comp.is_dead_end else float(currents[comp.branch])
        calculate_potentials(self, topology)
        logger.debug("Solved %d branch currents: %s", currents.size, currents)
        return currents

    def _apply_topology(self, topology: Topology) -> None:
        for idx, comp in enumerate(self._components):
            comp.branch = topology.branch_ids.get(idx, DEAD_END_BRANCH)
            comp.current_direction = topology.directions.get(idx)
        self.num_branches = topology.num_branches if topology.complete else 0
        self.topology = topology

    def _add(self, component: Component) -> Optional[Component]:
        if self.get_component(*component.terminal_a.position, *component.terminal_b.position) is not None:
            logger.debug("Terminal pair %s-%s is already occupied.", component.terminal_a, component.terminal_b)
            return None
        self._components.append(component)
        component.terminal_a.connect(component)
        component.terminal_b.connect(component)
        return component

    def __str__(self) -> str:
        """Components grouped by branch, followed by the dead-end group."""
        lines: List[str] = []
        for branch in range(self.num_branches):
            lines.append(f"Branch {branch}")
            lines.extend(str(comp) for comp in self._components if comp.branch == branch)
            lines.append("")
        dead_ends = [comp for comp in self._components if comp.branch == DEAD_END_BRANCH]
        if dead_ends:
            lines.append(f"Branch {DEAD_END_BRANCH}")
            lines.extend(str(comp) for comp in dead_ends)
            lines.append("")
        return "\n".join(lines)
