"""
Undirected bond graph over a fixed set of atoms.

Bond inference creates edges only through `make_bond`, so every edge carries
the same metadata record.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
import math
from typing import Dict, Iterator, List, Optional, Set, Tuple

from .geometry import Atoms, Box, distance

logger = logging.getLogger(__name__)

DEFAULT_BOND_TYPE = "single"
# relative tolerance used to decide whether a bond wraps around the cell
CROSS_BOUNDARY_RTOL = 1e-8


class BondsAlreadyPresentError(ValueError):
    """Raised when bonds are inferred into a graph that already has edges."""


@dataclass
class Bond:
    """Per-edge metadata. `None` marks a value that is not known."""

    bond_type: str = DEFAULT_BOND_TYPE
    distance: Optional[float] = None
    cross_boundary: Optional[bool] = None


EdgeKey = Tuple[int, int]


def _edge_key(i: int, j: int) -> EdgeKey:
    return (i, j) if i < j else (j, i)


class BondGraph:
    def __init__(self, n_vertices: int):
        if n_vertices < 0:
            raise ValueError("A bond graph cannot have a negative number of vertices.")
        self._n = n_vertices
        self._adjacency: List[Set[int]] = [set() for _ in range(n_vertices)]
        self._edges: Dict[EdgeKey, Bond] = {}

    @property
    def n_vertices(self) -> int:
        return self._n

    @property
    def n_edges(self) -> int:
        return len(self._edges)

    def __len__(self) -> int:
        return len(self._edges)

    def __repr__(self) -> str:
        return f"BondGraph(n_vertices={self._n}, n_edges={self.n_edges})"

    def _check_vertex(self, i: int) -> None:
        if not 0 <= i < self._n:
            raise ValueError(f"Atom index {i} is out of range for {self._n} atoms.")

    def has_edge(self, i: int, j: int) -> bool:
        return _edge_key(i, j) in self._edges

    def get_bond(self, i: int, j: int) -> Bond:
        try:
            return self._edges[_edge_key(i, j)]
        except KeyError:
            raise KeyError(f"No bond between atoms {i} and {j}.") from None

    def neighbors(self, i: int) -> List[int]:
        self._check_vertex(i)
        return sorted(self._adjacency[i])

    def degree(self, i: int) -> int:
        self._check_vertex(i)
        return len(self._adjacency[i])

    def edges(self) -> Iterator[Tuple[int, int, Bond]]:
        """Yield (i, j, bond) with i < j, in sorted order."""
        for i, j in sorted(self._edges):
            yield i, j, self._edges[(i, j)]

    def check_pair(self, i: int, j: int) -> None:
        self._check_vertex(i)
        self._check_vertex(j)
        if i == j:
            raise ValueError(f"Cannot bond atom {i} to itself.")

    def add_edge(self, i: int, j: int, bond: Bond) -> bool:
        self.check_pair(i, j)
        key = _edge_key(i, j)
        if key in self._edges:
            return False
        self._edges[key] = bond
        self._adjacency[i].add(j)
        self._adjacency[j].add(i)
        return True

    def remove_edge(self, i: int, j: int) -> bool:
        key = _edge_key(i, j)
        if self._edges.pop(key, None) is None:
            return False
        self._adjacency[i].discard(j)
        self._adjacency[j].discard(i)
        return True

    def clear(self) -> None:
        self._edges.clear()
        for adjacent in self._adjacency:
            adjacent.clear()


def make_bond(
    bonds: BondGraph,
    i: int,
    j: int,
    atoms: Atoms,
    box: Optional[Box] = None,
    bond_type: str = DEFAULT_BOND_TYPE,
) -> bool:
    """
    Create the bond i-j and attach its metadata.

    With a box, the stored distance is the minimum-image distance and
    `cross_boundary` records whether it differs from the same-image distance.
    Without one (e.g. bonds read from storage) both are left unknown.

    If the bond already exists the first record is kept and False is returned.
    """
    bonds.check_pair(i, j)
    if bonds.has_edge(i, j):
        logger.debug("Bond %d-%d already present; keeping existing record", i, j)
        return False
    if box is not None:
        periodic_distance = distance(atoms, box, i, j, True)
        same_image_distance = distance(atoms, box, i, j, False)
        bond = Bond(
            bond_type=bond_type,
            distance=periodic_distance,
            cross_boundary=not math.isclose(
                same_image_distance, periodic_distance, rel_tol=CROSS_BOUNDARY_RTOL
            ),
        )
    else:
        bond = Bond(bond_type=bond_type)
    return bonds.add_edge(i, j, bond)


def remove_all_bonds(bonds: BondGraph) -> None:
    """Delete every edge; the vertex set is untouched."""
    bonds.clear()
