import pytest

from gridcircuit.circuits import Circuit, Component, ComponentKind
from gridcircuit.circuits.core import DEAD_END_BRANCH, UNASSIGNED_BRANCH, UNSET_POTENTIAL, Terminal
from gridcircuit.circuits.generators import divider_circuit, series_loop
from gridcircuit.errors import CircuitValidationError


def test_terminals_compare_by_position_across_circuits():
    left = Circuit(2, 2).terminal(0, 1)
    right = Circuit(3, 3).terminal(0, 1)
    assert left == right
    assert hash(left) == hash(right)
    assert left is not right
    assert left != Circuit(2, 2).terminal(1, 0)


def test_new_terminal_has_unset_potential():
    terminal = Terminal(0, 0)
    assert terminal.potential == UNSET_POTENTIAL
    assert not terminal.has_potential
    assert terminal.num_connections() == 0


def test_terminal_disconnect_of_non_member_raises():
    circuit = Circuit(2, 2)
    wire = circuit.add_wire(0, 0, 0, 1)
    with pytest.raises(CircuitValidationError):
        circuit.terminal(1, 1).disconnect(wire)


def test_add_component_connects_both_terminals_in_order():
    circuit = Circuit(2, 3)
    first = circuit.add_wire(0, 1, 0, 0)
    second = circuit.add_resistor(0, 1, 1, 1, 10.0)
    third = circuit.add_battery(0, 1, 0, 2, 9.0)
    assert circuit.terminal(0, 1).connections == [first, second, third]
    assert circuit.terminal(0, 0).connections == [first]
    assert circuit.components == [first, second, third]


def test_duplicate_terminal_pair_is_rejected():
    circuit = Circuit(2, 2)
    assert circuit.add_resistor(0, 0, 0, 1, 5.0) is not None
    assert circuit.add_wire(0, 1, 0, 0) is None
    assert circuit.add_battery(0, 0, 0, 1, 3.0) is None
    assert len(circuit.components) == 1
    assert circuit.terminal(0, 0).num_connections() == 1


@pytest.mark.parametrize("resistance", [0.0, -1.0, float("inf"), float("nan")])
def test_resistor_value_must_be_positive(resistance):
    circuit = Circuit(2, 2)
    with pytest.raises(CircuitValidationError):
        circuit.add_resistor(0, 0, 0, 1, resistance)
    assert circuit.components == []


def test_battery_voltage_must_be_non_negative():
    circuit = Circuit(2, 2)
    with pytest.raises(CircuitValidationError):
        circuit.add_battery(0, 0, 1, 0, -1.5)
    assert circuit.add_battery(0, 0, 1, 0, 0.0) is not None


def test_endpoints_must_be_distinct_and_on_grid():
    circuit = Circuit(2, 2)
    with pytest.raises(CircuitValidationError):
        circuit.add_wire(0, 0, 0, 0)
    with pytest.raises(CircuitValidationError):
        circuit.add_wire(0, 0, 0, 2)
    with pytest.raises(CircuitValidationError):
        Circuit(0, 3)


def test_battery_positive_end_defaults_to_first_endpoint():
    circuit = Circuit(2, 2)
    battery = circuit.add_battery(1, 0, 0, 0, 6.0)
    assert battery.positive_end is circuit.terminal(1, 0)

    battery.set_positive_end(circuit.terminal(0, 0))
    assert battery.positive_end is circuit.terminal(0, 0)

    with pytest.raises(CircuitValidationError):
        battery.set_positive_end(circuit.terminal(1, 1))


def test_explicit_positive_end_binds_to_circuit_terminal():
    circuit = Circuit(2, 2)
    battery = circuit.add_battery(0, 0, 1, 0, 6.0, positive_end=(1, 0))
    assert battery.positive_end is circuit.terminal(1, 0)
    with pytest.raises(CircuitValidationError):
        circuit.add_battery(0, 1, 1, 1, 6.0, positive_end=(0, 0))


def test_kind_specific_mutators():
    circuit = Circuit(2, 2)
    wire = circuit.add_wire(0, 0, 0, 1)
    resistor = circuit.add_resistor(0, 1, 1, 1, 4.0)
    battery = circuit.add_battery(1, 1, 1, 0, 2.0)

    resistor.set_resistance(8.0)
    assert resistor.resistance == 8.0
    battery.set_voltage(4.5)
    assert battery.voltage == 4.5

    with pytest.raises(CircuitValidationError):
        wire.set_resistance(1.0)
    with pytest.raises(CircuitValidationError):
        resistor.set_voltage(1.0)
    with pytest.raises(CircuitValidationError):
        resistor.set_resistance(0.0)
    with pytest.raises(CircuitValidationError):
        wire.set_positive_end(wire.terminal_a)


def test_component_value_by_kind():
    circuit = Circuit(2, 2)
    assert circuit.add_wire(0, 0, 0, 1).value == 0.0
    assert circuit.add_resistor(0, 1, 1, 1, 4.0).value == 4.0
    assert circuit.add_battery(1, 1, 1, 0, 2.0).value == 2.0
    assert [comp.kind for comp in circuit.components] == [
        ComponentKind.WIRE,
        ComponentKind.RESISTOR,
        ComponentKind.BATTERY,
    ]


def test_component_key_is_endpoint_order_independent():
    forward = Circuit(2, 2).add_battery(0, 0, 1, 0, 6.0, positive_end=(0, 0))
    backward = Circuit(2, 2).add_battery(1, 0, 0, 0, 6.0, positive_end=(0, 0))
    assert forward.key() == backward.key()
    assert forward.key() != Circuit(2, 2).add_battery(0, 0, 1, 0, 6.0, positive_end=(1, 0)).key()
    assert forward.key() != Circuit(2, 2).add_battery(0, 0, 1, 0, 5.0, positive_end=(0, 0)).key()


def test_other_end_and_touches():
    circuit = Circuit(2, 2)
    wire = circuit.add_wire(0, 0, 0, 1)
    assert wire.other_end(circuit.terminal(0, 0)) is circuit.terminal(0, 1)
    assert wire.other_end(circuit.terminal(0, 1)) is circuit.terminal(0, 0)
    assert wire.touches(Terminal(0, 1))
    with pytest.raises(CircuitValidationError):
        wire.other_end(circuit.terminal(1, 1))


def test_remove_component_severs_terminals():
    circuit = series_loop()
    wire = circuit.get_component(0, 1, 0, 0)
    circuit.remove_component(wire)
    assert wire not in circuit.components
    assert circuit.terminal(0, 0).num_connections() == 1
    assert circuit.terminal(0, 1).num_connections() == 1
    with pytest.raises(CircuitValidationError):
        circuit.remove_component(wire)


def test_remove_component_at_position():
    circuit = series_loop()
    removed = circuit.remove_component_at(1, 1, 0, 1)
    assert removed is not None and removed.kind is ComponentKind.RESISTOR
    assert circuit.get_component(0, 1, 1, 1) is None
    assert circuit.remove_component_at(0, 1, 1, 1) is None
    assert len(circuit.components) == 3


def test_copy_keeps_shape_and_values_only():
    circuit = divider_circuit()
    circuit.solve()
    clone = circuit.copy()

    assert [comp.key() for comp in clone.components] == [comp.key() for comp in circuit.components]
    assert all(a is not b for a, b in zip(clone.components, circuit.components))
    assert all(comp.branch == UNASSIGNED_BRANCH for comp in clone.components)
    assert all(comp.current == 0.0 and comp.current_direction is None for comp in clone.components)
    assert not any(terminal.has_potential for terminal in clone.iter_terminals())

    clone.solve()
    assert [comp.current for comp in clone.components] == [comp.current for comp in circuit.components]


def test_add_component_rebinds_foreign_terminals():
    source = Circuit(2, 2)
    battery = Component.battery(source.terminal(0, 0), source.terminal(1, 0), 3.0, source.terminal(1, 0))
    target = Circuit(2, 2)
    added = target.add_component(battery)
    assert added is not battery
    assert added.terminal_a is target.terminal(0, 0)
    assert added.positive_end is target.terminal(1, 0)
    assert target.add_component(battery) is None


def test_reset_clears_solve_state():
    circuit = divider_circuit()
    circuit.solve()
    circuit.reset()
    assert circuit.num_branches == 0
    assert circuit.topology is None
    for comp in circuit.components:
        assert comp.branch == UNASSIGNED_BRANCH
        assert comp.current == 0.0
        assert comp.current_direction is None
    assert all(terminal.potential == UNSET_POTENTIAL for terminal in circuit.iter_terminals())
    assert DEAD_END_BRANCH not in [comp.branch for comp in circuit.components]
