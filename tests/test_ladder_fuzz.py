import numpy as np
import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from gridcircuit.analysis import check_solution, cycle_rank
from gridcircuit.circuits.core import DEAD_END_BRANCH
from gridcircuit.circuits.generators import parallel_ladder
from gridcircuit.circuits.layout_io import circuit_from_json, circuit_to_json


_values = st.floats(min_value=0.5, max_value=500.0, allow_nan=False, allow_infinity=False)


@st.composite
def _ladders(draw):
    n_rungs = draw(st.integers(min_value=1, max_value=5))
    rungs = draw(st.lists(_values, min_size=n_rungs, max_size=n_rungs))
    series = draw(st.lists(st.one_of(st.none(), _values), min_size=n_rungs, max_size=n_rungs))
    voltage = draw(st.floats(min_value=0.5, max_value=48.0, allow_nan=False, allow_infinity=False))
    stubs = draw(st.lists(st.integers(min_value=0, max_value=n_rungs), max_size=2, unique=True))
    return parallel_ladder(rungs, voltage=voltage, series=series, stub_columns=stubs)


@settings(max_examples=60, deadline=None)
@given(_ladders())
def test_ladder_solutions_satisfy_kirchhoff(circuit):
    currents = circuit.solve()

    assert np.isfinite(currents).all()
    assert currents.size == circuit.num_branches
    assert len(circuit.topology.loops) == cycle_rank(circuit)
    assert check_solution(circuit, tol=1e-6).ok

    known = [terminal.potential for terminal in circuit.iter_terminals() if terminal.has_potential]
    assert min(known) == 0.0
    assert max(known) == pytest.approx(circuit.components[0].voltage)

    for comp in circuit.components:
        if comp.is_dead_end:
            assert comp.current == 0.0
            assert comp.current_direction is None


@settings(max_examples=30, deadline=None)
@given(_ladders())
def test_ladder_solve_is_stable_across_copies_and_layouts(circuit):
    currents = circuit.solve()
    branches = [comp.branch for comp in circuit.components]

    again = circuit.solve()
    assert np.array_equal(currents, again)

    for clone in (circuit.copy(), circuit_from_json(circuit_to_json(circuit))):
        assert np.array_equal(clone.solve(), currents)
        assert [comp.branch for comp in clone.components] == branches


@settings(max_examples=40, deadline=None)
@given(st.lists(_values, min_size=1, max_size=6), st.floats(min_value=1.0, max_value=24.0))
def test_parallel_rungs_see_full_battery_voltage(resistances, voltage):
    circuit = parallel_ladder(resistances, voltage=voltage)
    circuit.solve()
    for col, resistance in enumerate(resistances, start=1):
        rung = circuit.get_component(0, col, 1, col)
        assert abs(rung.current) == pytest.approx(voltage / resistance, rel=1e-9)
        assert rung.branch != DEAD_END_BRANCH
