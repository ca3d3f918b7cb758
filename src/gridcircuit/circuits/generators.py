"""Reference circuit generators."""

from __future__ import annotations

from typing import Callable, Dict, Optional, Sequence

from gridcircuit.circuits.grid import Circuit
from gridcircuit.errors import CircuitValidationError


def series_loop(voltage: float = 6.0, resistance: float = 3.0) -> Circuit:
    """One battery and one resistor closed into a single junction-free loop."""
    circuit = Circuit(2, 2)
    circuit.add_battery(0, 0, 1, 0, voltage, positive_end=(0, 0))
    circuit.add_wire(0, 0, 0, 1)
    circuit.add_resistor(0, 1, 1, 1, resistance)
    circuit.add_wire(1, 1, 1, 0)
    return circuit


def divider_circuit(
    voltage: float = 10.0,
    series_resistance: float = 1.0,
    left_resistance: float = 5.0,
    right_resistance: float = 2.0,
) -> Circuit:
    """Battery feeding a series resistor and then two resistors in parallel."""
    circuit = Circuit(2, 3)
    circuit.add_battery(0, 0, 1, 0, voltage, positive_end=(0, 0))
    circuit.add_resistor(0, 0, 0, 1, series_resistance)
    circuit.add_resistor(0, 1, 1, 1, left_resistance)
    circuit.add_wire(0, 1, 0, 2)
    circuit.add_resistor(0, 2, 1, 2, right_resistance)
    circuit.add_wire(1, 2, 1, 1)
    circuit.add_wire(1, 1, 1, 0)
    return circuit


def stub_circuit(voltage: float = 6.0, resistance: float = 3.0, stub_resistance: float = 4.0) -> Circuit:
    """Series loop with an extra resistor dangling from one of its terminals."""
    circuit = Circuit(3, 2)
    circuit.add_battery(0, 0, 1, 0, voltage, positive_end=(0, 0))
    circuit.add_wire(0, 0, 0, 1)
    circuit.add_resistor(0, 1, 1, 1, resistance)
    circuit.add_wire(1, 1, 1, 0)
    circuit.add_resistor(1, 1, 2, 1, stub_resistance)
    return circuit


def shorted_battery(voltage: float = 6.0) -> Circuit:
    """Battery whose terminals are joined by a resistance-free wire path."""
    circuit = Circuit(2, 2)
    circuit.add_battery(0, 0, 1, 0, voltage, positive_end=(0, 0))
    circuit.add_wire(0, 0, 0, 1)
    circuit.add_wire(0, 1, 1, 1)
    circuit.add_wire(1, 1, 1, 0)
    return circuit


def parallel_ladder(
    resistances: Sequence[float],
    voltage: float = 12.0,
    series: Optional[Sequence[Optional[float]]] = None,
    stub_columns: Sequence[int] = (),
) -> Circuit:
    """
    Resistor rungs in parallel across a battery.

    The battery sits in column 0 between rows 0 and 1 with its positive end on
    top. Rung ``k`` is a resistor in column ``k + 1``. The bottom rail is wire;
    top-rail segment ``k`` is a resistor when ``series[k]`` is set, otherwise
    wire. Each column in ``stub_columns`` gets a 1 ohm resistor hanging from
    the bottom rail into an otherwise empty third row.
    """
    n_rungs = len(resistances)
    if n_rungs == 0:
        raise CircuitValidationError("Ladder needs at least one rung.")
    if series is not None and len(series) != n_rungs:
        raise CircuitValidationError("Series values must match the number of rungs.")
    rows = 3 if stub_columns else 2
    circuit = Circuit(rows, n_rungs + 1)
    circuit.add_battery(0, 0, 1, 0, voltage, positive_end=(0, 0))
    for col in range(n_rungs):
        segment = series[col] if series is not None else None
        if segment:
            circuit.add_resistor(0, col, 0, col + 1, segment)
        else:
            circuit.add_wire(0, col, 0, col + 1)
        circuit.add_wire(1, col, 1, col + 1)
        circuit.add_resistor(0, col + 1, 1, col + 1, resistances[col])
    for col in stub_columns:
        circuit.add_resistor(1, col, 2, col, 1.0)
    return circuit


GeneratorFn = Callable[..., Circuit]


_REGISTRY: Dict[str, GeneratorFn] = {
    "series": series_loop,
    "divider": divider_circuit,
    "stub": stub_circuit,
    "short": shorted_battery,
}


def available() -> list[str]:
    return sorted(_REGISTRY)


def generate(name: str, **kwargs) -> Optional[Circuit]:
    """Lookup and invoke a reference generator by name."""
    fn = _REGISTRY.get(name)
    if fn is None:
        return None
    return fn(**kwargs)
