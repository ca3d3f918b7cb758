"""Consistency checks for solved circuits."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, Iterable, List, Optional

import networkx as nx
import numpy as np

from gridcircuit.analysis.topology import Topology
from gridcircuit.circuits.core import ComponentKey, ComponentKind, Position

if TYPE_CHECKING:
    from gridcircuit.circuits.grid import Circuit


@dataclass(frozen=True)
class KirchhoffReport:
    """Residuals of Kirchhoff's laws and of the potential map for a solved circuit."""

    kcl: Dict[Position, float]
    kvl: List[float]
    potentials: Dict[ComponentKey, float]
    tol: float
    details: dict = field(default_factory=dict)

    @property
    def max_residual(self) -> float:
        values = list(self.kcl.values()) + list(self.kvl) + list(self.potentials.values())
        if not values:
            return 0.0
        return float(np.max(np.abs(values)))

    @property
    def ok(self) -> bool:
        return self.max_residual <= self.tol


def kcl_residuals(circuit: "Circuit") -> Dict[Position, float]:
    """Net current (in minus out) at every terminal with three or more connections."""
    residuals: Dict[Position, float] = {}
    for terminal in circuit.iter_terminals():
        if terminal.num_connections() <= 2:
            continue
        net = 0.0
        for comp in terminal.connections:
            if comp.current_direction is None:
                continue
            net += comp.current if comp.current_direction == terminal else -comp.current
        residuals[terminal.position] = net
    return residuals


def kvl_residuals(circuit: "Circuit", topology: Optional[Topology] = None) -> List[float]:
    """Signed IR drop minus signed EMF around every independent loop."""
    topology = topology or circuit.topology
    if topology is None:
        return []
    residuals = []
    for loop in topology.loops:
        drop = 0.0
        emf = 0.0
        for idx, entered in loop.steps():
            comp = circuit.components[idx]
            sign = 1.0 if comp.current_direction == entered else -1.0
            drop += sign * comp.resistance * comp.current
            if comp.kind is ComponentKind.BATTERY:
                emf += comp.voltage if comp.positive_end == entered else -comp.voltage
        residuals.append(drop - emf)
    return residuals


def potential_residuals(circuit: "Circuit") -> Dict[ComponentKey, float]:
    """Mismatch between endpoint potentials and each solved component's law.

    Batteries must raise their positive end by their voltage; resistors and
    wires must drop ``R * I`` along their current direction.
    """
    residuals: Dict[ComponentKey, float] = {}
    for comp in circuit.components:
        if comp.is_dead_end or comp.current_direction is None:
            continue
        if comp.kind is ComponentKind.BATTERY:
            negative = comp.other_end(comp.positive_end)
            residual = (comp.positive_end.potential - negative.potential) - comp.voltage
        else:
            source = comp.other_end(comp.current_direction)
            residual = (source.potential - comp.current_direction.potential) - comp.resistance * comp.current
        residuals[comp.key()] = residual
    return residuals


def check_solution(circuit: "Circuit", tol: float = 1e-9) -> KirchhoffReport:
    """Collect all residuals of a solved circuit into one report."""
    return KirchhoffReport(
        kcl=kcl_residuals(circuit),
        kvl=kvl_residuals(circuit),
        potentials=potential_residuals(circuit),
        tol=float(tol),
        details={"n_branches": circuit.num_branches},
    )


def component_graph(circuit: "Circuit", include: Optional[Iterable[int]] = None) -> nx.Graph:
    """Build an undirected networkx graph over terminal positions."""
    graph = nx.Graph()
    selected = range(len(circuit.components)) if include is None else include
    for idx in selected:
        comp = circuit.components[idx]
        graph.add_edge(comp.terminal_a.position, comp.terminal_b.position, index=idx, kind=comp.kind.value)
    return graph


def cycle_rank(circuit: "Circuit", include: Optional[Iterable[int]] = None) -> int:
    """Dimension of the cycle space: edges - nodes + connected components."""
    graph = component_graph(circuit, include)
    return graph.number_of_edges() - graph.number_of_nodes() + nx.number_connected_components(graph)
