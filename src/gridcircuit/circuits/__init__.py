"""Circuit primitives and the grid container."""

from gridcircuit.circuits.core import Component, ComponentKey, ComponentKind, Terminal
from gridcircuit.circuits.grid import Circuit
from gridcircuit.circuits.layout_io import circuit_from_json, circuit_to_json, load_layout, save_layout

__all__ = [
    "Circuit",
    "Component",
    "ComponentKey",
    "ComponentKind",
    "Terminal",
    "circuit_from_json",
    "circuit_to_json",
    "load_layout",
    "save_layout",
]
