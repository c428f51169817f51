"""
Periodic geometry primitives for bond inference.

Conventions:
    - Fractional coordinates are stored row-wise, shape (n, 3)
    - `Box.f_to_c` maps fractional to Cartesian; its columns are the
      lattice vectors in Angstrom
    - Distances are in Angstrom
"""

from __future__ import annotations

from dataclasses import dataclass, field
import math
from typing import Iterable, List, Sequence, Tuple

import numpy as np


Periodicity = Tuple[bool, bool, bool]

FULLY_PERIODIC: Periodicity = (True, True, True)


def minimum_image(dxf: np.ndarray, periodic: Periodicity = FULLY_PERIODIC) -> np.ndarray:
    """Wrap fractional displacements into [-0.5, 0.5) along periodic axes."""
    dxf = np.array(dxf, dtype=float)
    wrapped = dxf - np.floor(dxf + 0.5)
    mask = np.asarray(periodic, dtype=bool)
    return np.where(mask, wrapped, dxf)


@dataclass(eq=False)
class Box:
    """Unit cell transform plus periodicity flags."""

    f_to_c: np.ndarray
    periodic: Periodicity = FULLY_PERIODIC
    c_to_f: np.ndarray = field(init=False, repr=False)

    def __post_init__(self) -> None:
        matrix = np.array(self.f_to_c, dtype=float)
        if matrix.shape != (3, 3):
            raise ValueError(f"Box transform must be 3x3, got shape {matrix.shape}.")
        if abs(np.linalg.det(matrix)) < 1e-12:
            raise ValueError("Box transform is singular.")
        self.f_to_c = matrix
        self.c_to_f = np.linalg.inv(matrix)
        self.periodic = tuple(bool(flag) for flag in self.periodic)  # type: ignore[assignment]

    @classmethod
    def from_parameters(
        cls,
        a: float,
        b: float,
        c: float,
        alpha: float = 90.0,
        beta: float = 90.0,
        gamma: float = 90.0,
        periodic: Periodicity = FULLY_PERIODIC,
    ) -> "Box":
        """Build a box from lattice lengths (Angstrom) and angles (degrees)."""
        alpha_r, beta_r, gamma_r = (math.radians(x) for x in (alpha, beta, gamma))
        cos_a, cos_b, cos_g = math.cos(alpha_r), math.cos(beta_r), math.cos(gamma_r)
        sin_g = math.sin(gamma_r)
        volume_factor = math.sqrt(
            1.0 - cos_a**2 - cos_b**2 - cos_g**2 + 2.0 * cos_a * cos_b * cos_g
        )
        f_to_c = np.array(
            [
                [a, b * cos_g, c * cos_b],
                [0.0, b * sin_g, c * (cos_a - cos_b * cos_g) / sin_g],
                [0.0, 0.0, c * volume_factor / sin_g],
            ]
        )
        # clean up the round-off in orthogonal cells
        f_to_c[np.abs(f_to_c) < 1e-12] = 0.0
        return cls(f_to_c, periodic)

    @classmethod
    def cubic(cls, a: float, periodic: Periodicity = FULLY_PERIODIC) -> "Box":
        return cls(a * np.identity(3), periodic)

    @property
    def lengths(self) -> Tuple[float, float, float]:
        a, b, c = np.linalg.norm(self.f_to_c, axis=0)
        return float(a), float(b), float(c)

    def to_cartesian(self, xf: np.ndarray) -> np.ndarray:
        return np.asarray(xf, dtype=float) @ self.f_to_c.T

    def to_fractional(self, xc: np.ndarray) -> np.ndarray:
        return np.asarray(xc, dtype=float) @ self.c_to_f.T


@dataclass(eq=False)
class Atoms:
    """Species labels and fractional coordinates of the atoms in a cell."""

    species: List[str]
    xf: np.ndarray

    def __post_init__(self) -> None:
        self.species = [str(symbol) for symbol in self.species]
        coords = np.array(self.xf, dtype=float).reshape(-1, 3)
        if coords.shape[0] != len(self.species):
            raise ValueError(
                f"Got {len(self.species)} species but {coords.shape[0]} coordinate rows."
            )
        coords.setflags(write=False)
        self.xf = coords

    @property
    def n(self) -> int:
        return len(self.species)

    @classmethod
    def from_cartesian(
        cls, species: Iterable[str], positions: Sequence[Sequence[float]], box: Box
    ) -> "Atoms":
        return cls(list(species), box.to_fractional(np.asarray(positions, dtype=float)))


def distance(atoms: Atoms, box: Box, i: int, j: int, apply_pbc: bool) -> float:
    """Cartesian distance between atoms i and j, optionally under minimum image."""
    dxf = atoms.xf[i] - atoms.xf[j]
    if apply_pbc:
        dxf = minimum_image(dxf, box.periodic)
    return float(np.linalg.norm(box.f_to_c @ dxf))


def distance_matrix(atoms: Atoms, box: Box, apply_pbc: bool) -> np.ndarray:
    """Symmetric n x n matrix of interatomic distances with a zero diagonal."""
    dxf = atoms.xf[:, np.newaxis, :] - atoms.xf[np.newaxis, :, :]
    if apply_pbc:
        dxf = minimum_image(dxf, box.periodic)
    dm = np.linalg.norm(dxf @ box.f_to_c.T, axis=2)
    np.fill_diagonal(dm, 0.0)
    return dm


def cartesian_offset(atoms: Atoms, box: Box, i: int, j: int) -> np.ndarray:
    """Minimum-image Cartesian vector pointing from atom i to atom j."""
    return box.f_to_c @ minimum_image(atoms.xf[j] - atoms.xf[i], box.periodic)
