"""Core circuit data structures for resistive DC grid networks."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
import math
from typing import List, NamedTuple, Optional, Tuple

from gridcircuit.errors import CircuitValidationError


Position = Tuple[int, int]

UNASSIGNED_BRANCH = -1
DEAD_END_BRANCH = 999
UNSET_POTENTIAL = math.inf


class ComponentKind(str, Enum):
    """Discriminant for the component variants."""

    WIRE = "wire"
    RESISTOR = "resistor"
    BATTERY = "battery"


class ComponentKey(NamedTuple):
    """Order-independent identity of a component: endpoints, kind and value."""

    row1: int
    col1: int
    row2: int
    col2: int
    kind: ComponentKind
    value: float
    positive_end: Optional[Position] = None


@dataclass(eq=False)
class Terminal:
    """Grid terminal owning its ordered list of incident components.

    Terminals compare equal when their grid positions match, including across
    independent circuits. The incidence list keeps connection order, which
    drives tie-breaks during traversal.
    """

    row: int
    col: int
    connections: List["Component"] = field(default_factory=list, repr=False)
    potential: float = UNSET_POTENTIAL

    @property
    def position(self) -> Position:
        return (self.row, self.col)

    @property
    def has_potential(self) -> bool:
        return self.potential != UNSET_POTENTIAL

    def connect(self, component: "Component") -> None:
        self.connections.append(component)

    def disconnect(self, component: "Component") -> None:
        for idx, connected in enumerate(self.connections):
            if connected is component:
                del self.connections[idx]
                return
        raise CircuitValidationError(f"Component is not connected to terminal {self}.")

    def num_connections(self) -> int:
        return len(self.connections)

    def reset(self) -> None:
        self.potential = UNSET_POTENTIAL

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Terminal):
            return NotImplemented
        return self.row == other.row and self.col == other.col

    def __hash__(self) -> int:
        return hash((self.row, self.col))

    def __str__(self) -> str:
        return f"({self.row}, {self.col})"


@dataclass(eq=False)
class Component:
    """Two-terminal element: a wire, a resistor or an ideal battery.

    ``kind`` selects the payload: ``resistance`` for resistors, ``voltage`` and
    ``positive_end`` for batteries. ``branch``, ``current`` and
    ``current_direction`` are recomputed on every solve; current flows from the
    other endpoint toward ``current_direction``.
    """

    kind: ComponentKind
    terminal_a: Terminal
    terminal_b: Terminal
    resistance: float = 0.0
    voltage: float = 0.0
    positive_end: Optional[Terminal] = None
    branch: int = UNASSIGNED_BRANCH
    current: float = 0.0
    current_direction: Optional[Terminal] = None

    def __post_init__(self) -> None:
        self.kind = ComponentKind(self.kind)
        if self.terminal_a == self.terminal_b:
            raise CircuitValidationError("Component endpoints must be distinct terminals.")
        if self.kind is ComponentKind.RESISTOR:
            _validate_resistance(self.resistance)
        elif self.resistance != 0.0:
            raise CircuitValidationError(f"A {self.kind.value} has no resistance.")
        if self.kind is ComponentKind.BATTERY:
            _validate_voltage(self.voltage)
            self.set_positive_end(self.positive_end or self.terminal_a)
        elif self.voltage != 0.0 or self.positive_end is not None:
            raise CircuitValidationError(f"A {self.kind.value} has no voltage.")

    @classmethod
    def wire(cls, terminal_a: Terminal, terminal_b: Terminal) -> "Component":
        return cls(ComponentKind.WIRE, terminal_a, terminal_b)

    @classmethod
    def resistor(cls, terminal_a: Terminal, terminal_b: Terminal, resistance: float) -> "Component":
        return cls(ComponentKind.RESISTOR, terminal_a, terminal_b, resistance=float(resistance))

    @classmethod
    def battery(
        cls,
        terminal_a: Terminal,
        terminal_b: Terminal,
        voltage: float,
        positive_end: Optional[Terminal] = None,
    ) -> "Component":
        return cls(
            ComponentKind.BATTERY,
            terminal_a,
            terminal_b,
            voltage=float(voltage),
            positive_end=positive_end,
        )

    @property
    def endpoints(self) -> Tuple[Terminal, Terminal]:
        return (self.terminal_a, self.terminal_b)

    @property
    def value(self) -> float:
        """Resistance for resistors, voltage for batteries, zero for wires."""
        if self.kind is ComponentKind.RESISTOR:
            return self.resistance
        if self.kind is ComponentKind.BATTERY:
            return self.voltage
        return 0.0

    @property
    def is_dead_end(self) -> bool:
        return self.branch == DEAD_END_BRANCH

    def touches(self, terminal: Terminal) -> bool:
        return terminal == self.terminal_a or terminal == self.terminal_b

    def other_end(self, terminal: Terminal) -> Terminal:
        if terminal == self.terminal_a:
            return self.terminal_b
        if terminal == self.terminal_b:
            return self.terminal_a
        raise CircuitValidationError(f"Terminal {terminal} is not an endpoint of {self}.")

    def set_resistance(self, resistance: float) -> None:
        if self.kind is not ComponentKind.RESISTOR:
            raise CircuitValidationError(f"Cannot set the resistance of a {self.kind.value}.")
        _validate_resistance(resistance)
        self.resistance = float(resistance)

    def set_voltage(self, voltage: float) -> None:
        if self.kind is not ComponentKind.BATTERY:
            raise CircuitValidationError(f"Cannot set the voltage of a {self.kind.value}.")
        _validate_voltage(voltage)
        self.voltage = float(voltage)

    def set_positive_end(self, terminal: Terminal) -> None:
        if self.kind is not ComponentKind.BATTERY:
            raise CircuitValidationError(f"A {self.kind.value} has no positive end.")
        self._check_endpoint(terminal)
        self.positive_end = self.terminal_a if terminal == self.terminal_a else self.terminal_b

    def reset(self) -> None:
        """Clear per-solve state."""
        self.branch = UNASSIGNED_BRANCH
        self.current = 0.0
        self.current_direction = None

    def key(self) -> ComponentKey:
        first, second = sorted((self.terminal_a.position, self.terminal_b.position))
        positive = self.positive_end.position if self.positive_end is not None else None
        return ComponentKey(
            row1=first[0],
            col1=first[1],
            row2=second[0],
            col2=second[1],
            kind=self.kind,
            value=float(self.value),
            positive_end=positive,
        )

    def describe(self) -> str:
        if self.kind is ComponentKind.RESISTOR:
            return f"Resistor {self.resistance:g} ohms"
        if self.kind is ComponentKind.BATTERY:
            return f"Battery {self.voltage:g} V  positive end {self.positive_end}"
        return "Wire"

    def _check_endpoint(self, terminal: Terminal) -> None:
        if terminal != self.terminal_a and terminal != self.terminal_b:
            raise CircuitValidationError(
                f"Positive end {terminal} must be one of the battery endpoints."
            )

    def __str__(self) -> str:
        direction = str(self.current_direction) if self.current_direction is not None else "None"
        return (
            f"{self.terminal_a} to {self.terminal_b}  "
            f"Current Direction: {direction}  "
            f"Current: {self.current:.6g}  "
            f"{self.describe()}"
        )


def _validate_resistance(resistance: float) -> None:
    if not math.isfinite(resistance) or resistance <= 0:
        raise CircuitValidationError("Resistor value must be positive and finite.")


def _validate_voltage(voltage: float) -> None:
    if not math.isfinite(voltage) or voltage < 0:
        raise CircuitValidationError("Battery voltage must be non-negative and finite.")
