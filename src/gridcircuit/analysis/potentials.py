"""Terminal potential back-propagation from solved branch currents."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, List

from gridcircuit.analysis.topology import Topology
from gridcircuit.circuits.core import Component, ComponentKind, Terminal

if TYPE_CHECKING:
    from gridcircuit.circuits.grid import Circuit


logger = logging.getLogger(__name__)


def calculate_potentials(circuit: "Circuit", topology: Topology) -> None:
    """
    Assign a potential to every terminal reachable from the solved circuit.

    One endpoint of the first loop's first component is anchored at 0 V and
    potentials are relaxed outward across components with exactly one known
    endpoint until a full pass makes no progress. Potentials are then shifted
    so the minimum over the grid is exactly 0.

    Leftover components are then scanned once in list order, and only those
    whose first endpoint (``terminal_a``) is still unknown get both ends
    forced to 0 V. A floating chain can therefore keep an unset far terminal.
    This is a compatibility fallback for fragments that never connect to the
    solved circuit, not a physically derived value.
    """
    anchor = circuit.components[topology.loops[0].components[0]].terminal_a
    anchor.potential = 0.0

    pending: List[Component] = list(circuit.components)
    progress = True
    while progress:
        progress = False
        for position, comp in enumerate(pending):
            known_a = comp.terminal_a.has_potential
            known_b = comp.terminal_b.has_potential
            if known_a == known_b:
                continue
            known, other = (comp.terminal_a, comp.terminal_b) if known_a else (comp.terminal_b, comp.terminal_a)
            other.potential = _propagate(comp, known)
            del pending[position]
            progress = True
            break

    known_potentials = [terminal.potential for terminal in circuit.iter_terminals() if terminal.has_potential]
    floor = min(known_potentials)
    for terminal in circuit.iter_terminals():
        if terminal.has_potential:
            terminal.potential -= floor

    unresolved = 0
    for comp in pending:
        if not comp.terminal_a.has_potential:
            comp.terminal_a.potential = 0.0
            comp.terminal_b.potential = 0.0
            unresolved += 1
    if unresolved:
        logger.debug("Forced %d unresolved components to 0 V.", unresolved)


def _propagate(comp: Component, known: Terminal) -> float:
    """Potential of the far endpoint of ``comp`` given the potential at ``known``."""
    if comp.kind is ComponentKind.BATTERY:
        if known == comp.positive_end:
            return known.potential - comp.voltage
        return known.potential + comp.voltage
    if comp.is_dead_end:
        return known.potential
    drop = comp.resistance * comp.current
    if comp.current_direction == known:
        return known.potential + drop
    return known.potential - drop
