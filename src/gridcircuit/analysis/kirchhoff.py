"""Kirchhoff current/voltage law assembly and sparse solve."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import TYPE_CHECKING, List

import numpy as np
import scipy.sparse as sp
import scipy.sparse.linalg as spla

from gridcircuit.analysis.topology import Loop, Topology
from gridcircuit.circuits.core import DEAD_END_BRANCH, Component, ComponentKind, Terminal
from gridcircuit.data import KirchhoffSystem
from gridcircuit.errors import SingularCircuitError

if TYPE_CHECKING:
    from gridcircuit.circuits.grid import Circuit


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SolverOptions:
    """Configuration for the branch-current solve."""

    permc_spec: str = "COLAMD"
    cond_threshold: float = 1e12
    enable_diagnostics: bool = True
    max_dense_diagnostics: int = 200


def assemble_kirchhoff_system(circuit: "Circuit", topology: Topology) -> KirchhoffSystem:
    """
    Assemble the branch-current system A i = b.

    Rows:
    - one KCL row per junction except the last: +1 for each incident component
      whose current direction is the junction, -1 otherwise; constant 0.
    - one KVL row per independent loop: +R when walking a component along its
      current direction, -R against it; the constant is the EMF gained, +V when
      a battery is walked into its positive end and -V otherwise.

    A junction-free single-branch circuit collapses to the 1x1 equation
    (sum of signed resistances) i = (sum of signed EMF) over its only loop.
    """
    components = circuit.components
    n_branches = topology.num_branches
    if n_branches == 1 and not topology.junctions:
        resistance, emf = _loop_terms(components, topology, topology.loops[0])
        A = sp.csc_matrix(np.array([[resistance]], dtype=float))
        b = np.array([emf], dtype=float)
        logger.debug("Single-loop equation: %g * i = %g.", resistance, emf)
        return KirchhoffSystem(A=A, b=b, meta={"n_kcl": 0, "n_kvl": 1, "single_loop": True})

    n_kcl = max(len(topology.junctions) - 1, 0)
    n_rows = n_kcl + len(topology.loops)
    if n_rows != n_branches:
        raise SingularCircuitError(
            f"Kirchhoff system is not square: {n_rows} equations for {n_branches} branch currents."
        )

    A = sp.lil_matrix((n_rows, n_branches), dtype=float)
    b = np.zeros(n_rows, dtype=float)

    for row, junction in enumerate(topology.junctions[:n_kcl]):
        for idx in junction.components:
            branch = _branch_of(topology, idx)
            if topology.directions[idx] == junction.terminal:
                A[row, branch] += 1.0
            else:
                A[row, branch] -= 1.0

    for offset, loop in enumerate(topology.loops):
        row = n_kcl + offset
        for idx, entered in loop.steps():
            comp = components[idx]
            branch = _branch_of(topology, idx)
            sign = 1.0 if topology.directions[idx] == entered else -1.0
            A[row, branch] += sign * comp.resistance
            b[row] += _emf_gain(comp, entered)

    meta = {"n_kcl": n_kcl, "n_kvl": len(topology.loops), "single_loop": False}
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("Kirchhoff coefficients:\n%s\nconstants: %s", A.toarray(), b)
    return KirchhoffSystem(A=A.tocsc(), b=b, meta=meta)


def solve_kirchhoff_system(system: KirchhoffSystem, options: SolverOptions | None = None) -> np.ndarray:
    """Solve for branch currents, raising SingularCircuitError on degenerate systems."""
    options = options or SolverOptions()
    if not system.is_square:
        raise SingularCircuitError("Kirchhoff system is not square.")

    A = system.A.tocsc()
    try:
        lu = spla.splu(A, permc_spec=options.permc_spec)
        currents = lu.solve(system.b)
    except RuntimeError as exc:
        raise SingularCircuitError("Kirchhoff system is singular.") from exc

    if not np.isfinite(currents).all():
        raise SingularCircuitError("Kirchhoff solve produced non-finite currents.")

    if options.enable_diagnostics and A.shape[0] <= options.max_dense_diagnostics:
        cond = float(np.linalg.cond(A.toarray()))
        logger.debug("Kirchhoff system %dx%d, condition number %.3g.", A.shape[0], A.shape[1], cond)
        if not np.isfinite(cond) or cond > options.cond_threshold:
            raise SingularCircuitError(
                f"Kirchhoff system is ill-conditioned (cond={cond:.3g}, threshold={options.cond_threshold:.3g})."
            )

    return np.asarray(currents, dtype=float)


def _branch_of(topology: Topology, idx: int) -> int:
    branch = topology.branch_ids[idx]
    if branch == DEAD_END_BRANCH:
        raise SingularCircuitError("Loop or junction references a dead-end component.")
    return branch


def _emf_gain(comp: Component, entered: Terminal) -> float:
    if comp.kind is not ComponentKind.BATTERY:
        return 0.0
    return comp.voltage if comp.positive_end == entered else -comp.voltage


def _loop_terms(components: List[Component], topology: Topology, loop: Loop) -> tuple[float, float]:
    resistance = 0.0
    emf = 0.0
    for idx, entered in loop.steps():
        comp = components[idx]
        sign = 1.0 if topology.directions[idx] == entered else -1.0
        resistance += sign * comp.resistance
        emf += _emf_gain(comp, entered)
    return resistance, emf
