"""Post-hoc chemical sanity checks on a bond graph."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, List, Sequence

from .chem_data import get_max_bonds
from .graph import BondGraph

if TYPE_CHECKING:  # pragma: no cover
    from .crystal import Crystal

logger = logging.getLogger(__name__)


def find_bond_violations(bonds: BondGraph, species: Sequence[str], crystal_name: str) -> List[str]:
    violations: List[str] = []
    for a in range(bonds.n_vertices):
        n_bonds = bonds.degree(a)
        symbol = species[a]
        if n_bonds == 0:
            violations.append(
                f"atom {a} = {symbol} in {crystal_name} is not bonded to any other atom."
            )
            continue
        cap = get_max_bonds(symbol)
        if cap is not None and n_bonds > cap:
            violations.append(
                f"{symbol} atom {a} in {crystal_name} has {n_bonds} bonds (at most {cap} expected)."
            )
    return violations


def bond_sanity_check(bonds: BondGraph, species: Sequence[str], crystal_name: str) -> bool:
    """
    Checks that every atom has at least one bond, hydrogen at most one and
    carbon at most four. Each violation is logged as a warning.

    Returns True when all checks pass.
    """
    violations = find_bond_violations(bonds, species, crystal_name)
    for message in violations:
        logger.warning(message)
    return not violations


def check_crystal(crystal: "Crystal") -> bool:
    return bond_sanity_check(crystal.bonds, crystal.species, crystal.name)
