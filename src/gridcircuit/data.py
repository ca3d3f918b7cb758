"""Shared data objects for the Kirchhoff solver."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict

import numpy as np
import scipy.sparse as sp


@dataclass
class KirchhoffSystem:
    """Square linear system A i = b in the branch currents i."""

    A: sp.spmatrix
    b: np.ndarray
    meta: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.A.shape[0] != self.b.shape[0]:
            raise ValueError("A rows must match the length of b.")

    @property
    def n_branches(self) -> int:
        return int(self.A.shape[1])

    @property
    def is_square(self) -> bool:
        return self.A.shape[0] == self.A.shape[1]
