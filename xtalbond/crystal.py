"""
Crystal accessor: atoms in a periodic box plus the bond graph it owns.
"""

from __future__ import annotations

import logging
import math
from typing import List, Optional

import numpy as np

from .geometry import Atoms, Box, distance, distance_matrix
from .graph import CROSS_BOUNDARY_RTOL, DEFAULT_BOND_TYPE, BondGraph, make_bond, remove_all_bonds

logger = logging.getLogger(__name__)


class Crystal:
    """
    Atoms and box are treated as read-only; only `bonds` is mutated by the
    bonding routines.
    """

    def __init__(self, name: str, box: Box, atoms: Atoms):
        self.name = name
        self.box = box
        self.atoms = atoms
        self.bonds = BondGraph(atoms.n)

    def __repr__(self) -> str:
        return f"Crystal(name={self.name!r}, n_atoms={self.n}, n_bonds={self.bonds.n_edges})"

    @property
    def n(self) -> int:
        return self.atoms.n

    @property
    def species(self) -> List[str]:
        return self.atoms.species

    @property
    def has_bonds(self) -> bool:
        return self.bonds.n_edges > 0

    def distance(self, i: int, j: int, apply_pbc: bool = True) -> float:
        return distance(self.atoms, self.box, i, j, apply_pbc)

    def distance_matrix(self, apply_pbc: bool = True) -> np.ndarray:
        return distance_matrix(self.atoms, self.box, apply_pbc)

    def make_bond(self, i: int, j: int, bond_type: str = DEFAULT_BOND_TYPE) -> bool:
        return make_bond(self.bonds, i, j, self.atoms, box=self.box, bond_type=bond_type)

    def remove_bonds(self) -> None:
        remove_all_bonds(self.bonds)


def calc_missing_bond_distances(crystal: Crystal) -> int:
    """Fill in unknown distances and boundary flags; returns how many were filled."""
    filled = 0
    for i, j, bond in crystal.bonds.edges():
        if bond.distance is None:
            bond.distance = crystal.distance(i, j, True)
            filled += 1
        if bond.cross_boundary is None:
            bond.cross_boundary = not math.isclose(
                crystal.distance(i, j, False), bond.distance, rel_tol=CROSS_BOUNDARY_RTOL
            )
    if filled:
        logger.info("Computed %d missing bond distances in %s", filled, crystal.name)
    return filled


def compare_bonds(crystal_a: Crystal, crystal_b: Crystal, atol: float = 0.0) -> bool:
    """
    True when both crystals bond the same atoms, matching atoms by species and
    fractional position (within `atol`) rather than by index.
    """
    if crystal_a.bonds.n_edges != crystal_b.bonds.n_edges:
        return False

    def same_atom(i: int, j: int) -> bool:
        return crystal_a.species[i] == crystal_b.species[j] and np.allclose(
            crystal_a.atoms.xf[i], crystal_b.atoms.xf[j], rtol=0.0, atol=atol
        )

    remaining = [(i, j) for i, j, _ in crystal_b.bonds.edges()]
    for a_i, a_j, _ in crystal_a.bonds.edges():
        match: Optional[int] = None
        for idx, (b_i, b_j) in enumerate(remaining):
            if (same_atom(a_i, b_i) and same_atom(a_j, b_j)) or (
                same_atom(a_i, b_j) and same_atom(a_j, b_i)
            ):
                match = idx
                break
        if match is None:
            return False
        remaining.pop(match)
    return not remaining
