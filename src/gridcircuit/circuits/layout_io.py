"""JSON import/export for grid circuit layouts."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List

from gridcircuit.circuits.core import Component, ComponentKind
from gridcircuit.circuits.grid import Circuit
from gridcircuit.errors import CircuitValidationError


LAYOUT_VERSION = 1


def circuit_to_json(circuit: Circuit) -> str:
    """Serialize a circuit layout to deterministic JSON."""
    payload = _circuit_to_dict(circuit)
    return json.dumps(payload, sort_keys=True, separators=(",", ":"))


def circuit_from_json(text: str) -> Circuit:
    """Deserialize a circuit layout from JSON."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise CircuitValidationError(f"Layout is not valid JSON: {exc}") from exc
    return _circuit_from_dict(data)


def save_layout(circuit: Circuit, path: Path | str) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(circuit_to_json(circuit), encoding="utf-8")
    return path


def load_layout(path: Path | str) -> Circuit:
    return circuit_from_json(Path(path).read_text(encoding="utf-8"))


def _circuit_to_dict(circuit: Circuit) -> Dict[str, Any]:
    return {
        "version": LAYOUT_VERSION,
        "rows": circuit.rows,
        "cols": circuit.cols,
        "components": [_component_to_dict(comp) for comp in circuit.components],
    }


def _component_to_dict(comp: Component) -> Dict[str, Any]:
    entry: Dict[str, Any] = {
        "kind": comp.kind.value,
        "a": list(comp.terminal_a.position),
        "b": list(comp.terminal_b.position),
    }
    if comp.kind is ComponentKind.RESISTOR:
        entry["resistance"] = comp.resistance
    elif comp.kind is ComponentKind.BATTERY:
        entry["voltage"] = comp.voltage
        entry["positive"] = list(comp.positive_end.position)
    return entry


def _circuit_from_dict(data: Dict[str, Any]) -> Circuit:
    if not isinstance(data, dict):
        raise CircuitValidationError("Layout must be a JSON object.")
    version = data.get("version", LAYOUT_VERSION)
    if version != LAYOUT_VERSION:
        raise CircuitValidationError(f"Unsupported layout version: {version}")
    try:
        circuit = Circuit(int(data["rows"]), int(data["cols"]))
        entries: List[Dict[str, Any]] = list(data.get("components", []))
    except (KeyError, TypeError, ValueError) as exc:
        raise CircuitValidationError(f"Invalid layout header: {exc}") from exc

    for position, entry in enumerate(entries):
        try:
            kind = ComponentKind(entry["kind"])
            r1, c1 = _position(entry["a"])
            r2, c2 = _position(entry["b"])
            if kind is ComponentKind.RESISTOR:
                added = circuit.add_resistor(r1, c1, r2, c2, float(entry["resistance"]))
            elif kind is ComponentKind.BATTERY:
                positive = _position(entry["positive"]) if "positive" in entry else None
                added = circuit.add_battery(r1, c1, r2, c2, float(entry["voltage"]), positive)
            else:
                added = circuit.add_wire(r1, c1, r2, c2)
        except CircuitValidationError:
            raise
        except (KeyError, TypeError, ValueError) as exc:
            raise CircuitValidationError(f"Invalid component #{position}: {exc}") from exc
        if added is None:
            raise CircuitValidationError(f"Component #{position} duplicates an occupied terminal pair.")
    return circuit


def _position(value: Any) -> tuple[int, int]:
    row, col = value
    return int(row), int(col)
