"""Topology discovery, Kirchhoff solve and solution checks."""

from gridcircuit.analysis.checks import check_solution, cycle_rank, kcl_residuals, kvl_residuals, potential_residuals
from gridcircuit.analysis.kirchhoff import SolverOptions, assemble_kirchhoff_system, solve_kirchhoff_system
from gridcircuit.analysis.potentials import calculate_potentials
from gridcircuit.analysis.topology import (
    ComponentGraph,
    Junction,
    Loop,
    Topology,
    analyze_topology,
    find_loops,
    find_nodes,
    has_short_circuit,
    label_branches,
    prune_dead_ends,
)

__all__ = [
    "ComponentGraph",
    "Junction",
    "Loop",
    "Topology",
    "analyze_topology",
    "find_loops",
    "find_nodes",
    "has_short_circuit",
    "label_branches",
    "prune_dead_ends",
    "SolverOptions",
    "assemble_kirchhoff_system",
    "solve_kirchhoff_system",
    "calculate_potentials",
    "check_solution",
    "cycle_rank",
    "kcl_residuals",
    "kvl_residuals",
    "potential_residuals",
]
