"""
Bond inference for crystals.

Two strategies populate `crystal.bonds`:
    - `infer_bonds`: ordered species-pair distance rules
    - `infer_geometry_based_bonds`: Voronoi-face adjacency filtered by
      covalent-radius distance windows

Both require an empty bond graph, create edges only through `make_bond` and
finish with the sanity check, whose result they return.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

import numpy as np
from scipy.spatial import Voronoi

from .chem_data import CovalentRadiusTable, bond_window, get_covalent_radii, lookup_radius
from .crystal import Crystal
from .geometry import minimum_image
from .graph import BondsAlreadyPresentError
from .rules import BondingRuleSet, RuleContext, RuleSource, default_rule_context
from .sanity import check_crystal

logger = logging.getLogger(__name__)

DEFAULT_VORONOI_RADIUS = 6.0  # Angstrom
DEFAULT_SIGMA = 3.0
DEFAULT_MIN_TOL = 0.25  # Angstrom
# singular values below this fraction of the largest count as a flat direction
FLAT_RTOL = 1e-6


def _require_no_bonds(crystal: Crystal) -> None:
    if crystal.has_bonds:
        raise BondsAlreadyPresentError(
            f"The crystal {crystal.name} already has bonds. Remove them with "
            "`remove_bonds` before inferring new ones."
        )


def is_bonded(
    crystal: Crystal,
    i: int,
    j: int,
    bonding_rules: RuleSource,
    include_periodic: bool = True,
) -> bool:
    """
    Whether atoms i and j are bonded under `bonding_rules`.

    The first rule whose species pattern matches the pair decides; later rules
    are never consulted. Pairs no rule matches are not bonded.
    """
    r = crystal.distance(i, j, include_periodic)
    species_i = crystal.species[i]
    species_j = crystal.species[j]
    for rule in bonding_rules:
        if rule.matches(species_i, species_j):
            return rule.accepts(r)
    return False


def infer_bonds(
    crystal: Crystal,
    include_periodic: bool,
    bonding_rules: Optional[RuleSource] = None,
    context: Optional[RuleContext] = None,
) -> bool:
    """
    Bond every pair of atoms in `crystal` that the bonding rules accept.

    Without explicit `bonding_rules`, a snapshot of the rule context (the
    process default unless `context` is given) is used. Put a `("*", "*")`
    rule last to let unparameterized species bond at all.

    Returns the result of the bond sanity check.
    """
    _require_no_bonds(crystal)
    if bonding_rules is None:
        bonding_rules = (context or default_rule_context()).get()
    rules = BondingRuleSet(bonding_rules)

    for i in range(crystal.n):
        for j in range(i + 1, crystal.n):
            if is_bonded(crystal, i, j, rules, include_periodic=include_periodic):
                crystal.make_bond(i, j)

    logger.info("Inferred %d bonds in %s from %d rules", crystal.bonds.n_edges, crystal.name, len(rules))
    return check_crystal(crystal)


def neighborhood(
    crystal: Crystal, i: int, r: float, dm: np.ndarray
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Atoms within distance `r` of atom i.

    Returns:
        ids: indices of the neighboring atoms
        xs: Cartesian positions, shape (len(ids) + 1, 3), centered on atom i.
            Row 0 is atom i itself (the origin); the rest are the nearest
            periodic images of the neighbors, in the order of `ids`.
        rs: distances of the neighbors from atom i
    """
    ids = np.flatnonzero((dm[i] > 0.0) & (dm[i] < r))
    rs = dm[i, ids]
    dxf = minimum_image(crystal.atoms.xf[ids] - crystal.atoms.xf[i], crystal.box.periodic)
    xs = np.vstack([np.zeros((1, 3)), crystal.box.to_cartesian(dxf).reshape(-1, 3)])
    return ids, xs, rs


def _affine_coordinates(points: np.ndarray) -> np.ndarray:
    """
    Coordinates of `points` in the principal axes of the affine subspace they
    span, shape (n, rank). Collinear points give one column, coplanar two.
    """
    centered = points - points.mean(axis=0)
    _, singular_values, axes = np.linalg.svd(centered, full_matrices=False)
    if singular_values.size == 0 or singular_values[0] == 0.0:
        return np.zeros((len(points), 0))
    rank = int(np.count_nonzero(singular_values > FLAT_RTOL * singular_values[0]))
    return centered @ axes[:rank].T


def _all_pairs(n_points: int) -> np.ndarray:
    pairs = [(a, b) for a in range(n_points) for b in range(a + 1, n_points)]
    return np.array(pairs, dtype=int).reshape(-1, 2)


def voronoi_ridges(points: np.ndarray) -> np.ndarray:
    """
    Pairs of point indices whose Voronoi cells share a facet, shape (m, 2).

    Points confined to a plane are tessellated in that plane, and points on a
    line are adjacent only to their neighbors along it. A simplex
    (rank + 1 points) has every pair adjacent; Qhull cannot build it.
    """
    points = np.asarray(points, dtype=float).reshape(-1, 3)
    n_points = len(points)
    if n_points < 2:
        return np.zeros((0, 2), dtype=int)
    coords = _affine_coordinates(points)
    rank = coords.shape[1]
    if rank == 0:
        # coincident points
        return np.zeros((0, 2), dtype=int)
    if rank == 1:
        order = np.argsort(coords[:, 0], kind="stable")
        return np.sort(np.column_stack([order[:-1], order[1:]]), axis=1)
    if n_points < rank + 2:
        return _all_pairs(n_points)
    return np.asarray(Voronoi(coords).ridge_points, dtype=int)


def shared_voronoi_faces(ids: np.ndarray, xs: np.ndarray) -> np.ndarray:
    """
    Neighbors (atom indices from `ids`) whose Voronoi cell shares a facet with
    the cell of the origin, `xs[0]`. Repeated ridges are not collapsed.
    """
    if len(ids) != len(xs) - 1:
        raise ValueError("Expected one position per neighbor plus the origin.")
    ids = np.asarray(ids, dtype=int)
    if len(ids) == 0:
        return ids
    ridges = np.sort(voronoi_ridges(xs), axis=1)
    to_origin = ridges[ridges[:, 0] == 0, 1]
    # row k of xs is neighbor k - 1
    return ids[to_origin - 1]


def bonded_atoms(
    crystal: Crystal,
    i: int,
    dm: np.ndarray,
    r: float = DEFAULT_VORONOI_RADIUS,
    sigma: float = DEFAULT_SIGMA,
    min_tol: float = DEFAULT_MIN_TOL,
    covalent_radii: Optional[CovalentRadiusTable] = None,
) -> List[int]:
    """
    Atoms bonded to atom i by the Voronoi method: neighbors sharing a Voronoi
    face with i whose distance lies within the covalent-radius window
    (bounds included).
    """
    if covalent_radii is None:
        covalent_radii = get_covalent_radii()
    radius_i = lookup_radius(covalent_radii, crystal.species[i])
    ids, xs, _ = neighborhood(crystal, i, r, dm)
    bonded: List[int] = []
    for j in shared_voronoi_faces(ids, xs):
        radius_j = lookup_radius(covalent_radii, crystal.species[j])
        min_dist, max_dist = bond_window(radius_i, radius_j, sigma, min_tol)
        if min_dist <= dm[i, j] <= max_dist:
            bonded.append(int(j))
    return bonded


def infer_geometry_based_bonds(
    crystal: Crystal,
    include_periodic: bool,
    r: float = DEFAULT_VORONOI_RADIUS,
    sigma: float = DEFAULT_SIGMA,
    min_tol: float = DEFAULT_MIN_TOL,
    covalent_radii: Optional[CovalentRadiusTable] = None,
) -> bool:
    """
    Bond atoms that share a Voronoi face and sit within the sum of their
    covalent radii plus a tolerance.

    Each atom is judged from its own neighborhood, so a pair can be reached
    from both sides; the second attempt leaves the existing bond untouched.

    Returns the result of the bond sanity check.
    """
    _require_no_bonds(crystal)
    if covalent_radii is None:
        covalent_radii = get_covalent_radii()
    dm = crystal.distance_matrix(include_periodic)
    for i in range(crystal.n):
        for j in bonded_atoms(crystal, i, dm, r, sigma, min_tol, covalent_radii):
            crystal.make_bond(i, j)

    logger.info("Inferred %d bonds in %s from Voronoi neighborhoods", crystal.bonds.n_edges, crystal.name)
    return check_crystal(crystal)
