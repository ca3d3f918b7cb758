"""Grid circuit package initialization."""

from gridcircuit.circuits import Circuit, Component, ComponentKey, ComponentKind, Terminal
from gridcircuit.analysis import SolverOptions, Topology, analyze_topology, check_solution
from gridcircuit.circuits.core import DEAD_END_BRANCH, UNASSIGNED_BRANCH, UNSET_POTENTIAL
from gridcircuit.data import KirchhoffSystem
from gridcircuit.errors import (
    CircuitValidationError,
    CircuitNotSolvableError,
    IncompleteCircuitError,
    ShortCircuitError,
    SingularCircuitError,
)

__all__ = [
    "Circuit",
    "Component",
    "ComponentKey",
    "ComponentKind",
    "Terminal",
    "DEAD_END_BRANCH",
    "UNASSIGNED_BRANCH",
    "UNSET_POTENTIAL",
    "KirchhoffSystem",
    "SolverOptions",
    "Topology",
    "analyze_topology",
    "check_solution",
    "CircuitValidationError",
    "CircuitNotSolvableError",
    "IncompleteCircuitError",
    "ShortCircuitError",
    "SingularCircuitError",
]
