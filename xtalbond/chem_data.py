"""Element metadata used for covalent-radius driven bonding heuristics.

Radii and estimated standard deviations follow Cordero et al., "Covalent
radii revisited", Dalton Trans. (2008) 2832-2838. Carbon uses the sp3 value,
Mn/Fe/Co the low-spin values. Elements reported without an e.s.d. carry 0.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Tuple

WILDCARD = "*"


@dataclass(frozen=True)
class CovalentRadius:
    radius_angstrom: float
    esd_pm: float


# symbol: (radius in Angstrom, e.s.d. in pm)
_CORDERO_RADII: Dict[str, Tuple[float, float]] = {
    "H": (0.31, 5.0),
    "He": (0.28, 0.0),
    "Li": (1.28, 7.0),
    "Be": (0.96, 3.0),
    "B": (0.84, 3.0),
    "C": (0.76, 1.0),
    "N": (0.71, 1.0),
    "O": (0.66, 2.0),
    "F": (0.57, 3.0),
    "Ne": (0.58, 0.0),
    "Na": (1.66, 9.0),
    "Mg": (1.41, 7.0),
    "Al": (1.21, 4.0),
    "Si": (1.11, 2.0),
    "P": (1.07, 3.0),
    "S": (1.05, 3.0),
    "Cl": (1.02, 4.0),
    "Ar": (1.06, 10.0),
    "K": (2.03, 12.0),
    "Ca": (1.76, 10.0),
    "Sc": (1.70, 7.0),
    "Ti": (1.60, 8.0),
    "V": (1.53, 8.0),
    "Cr": (1.39, 5.0),
    "Mn": (1.39, 5.0),
    "Fe": (1.32, 3.0),
    "Co": (1.26, 3.0),
    "Ni": (1.24, 4.0),
    "Cu": (1.32, 4.0),
    "Zn": (1.22, 4.0),
    "Ga": (1.22, 3.0),
    "Ge": (1.20, 4.0),
    "As": (1.19, 4.0),
    "Se": (1.20, 4.0),
    "Br": (1.20, 3.0),
    "Kr": (1.16, 4.0),
    "Rb": (2.20, 9.0),
    "Sr": (1.95, 10.0),
    "Y": (1.90, 7.0),
    "Zr": (1.75, 7.0),
    "Nb": (1.64, 6.0),
    "Mo": (1.54, 5.0),
    "Tc": (1.47, 7.0),
    "Ru": (1.46, 7.0),
    "Rh": (1.42, 7.0),
    "Pd": (1.39, 6.0),
    "Ag": (1.45, 5.0),
    "Cd": (1.44, 9.0),
    "In": (1.42, 5.0),
    "Sn": (1.39, 4.0),
    "Sb": (1.39, 5.0),
    "Te": (1.38, 4.0),
    "I": (1.39, 3.0),
    "Xe": (1.40, 9.0),
    "Cs": (2.44, 11.0),
    "Ba": (2.15, 11.0),
    "La": (2.07, 8.0),
    "Ce": (2.04, 9.0),
    "Pr": (2.03, 7.0),
    "Nd": (2.01, 6.0),
    "Pm": (1.99, 0.0),
    "Sm": (1.98, 8.0),
    "Eu": (1.98, 6.0),
    "Gd": (1.96, 6.0),
    "Tb": (1.94, 5.0),
    "Dy": (1.92, 7.0),
    "Ho": (1.92, 7.0),
    "Er": (1.89, 6.0),
    "Tm": (1.90, 10.0),
    "Yb": (1.87, 8.0),
    "Lu": (1.87, 8.0),
    "Hf": (1.75, 10.0),
    "Ta": (1.70, 8.0),
    "W": (1.62, 7.0),
    "Re": (1.51, 7.0),
    "Os": (1.44, 4.0),
    "Ir": (1.41, 6.0),
    "Pt": (1.36, 5.0),
    "Au": (1.36, 6.0),
    "Hg": (1.32, 5.0),
    "Tl": (1.45, 7.0),
    "Pb": (1.46, 5.0),
    "Bi": (1.48, 4.0),
    "Po": (1.40, 4.0),
    "At": (1.50, 0.0),
    "Rn": (1.50, 0.0),
    "Fr": (2.60, 0.0),
    "Ra": (2.21, 2.0),
    "Ac": (2.15, 0.0),
    "Th": (2.06, 6.0),
    "Pa": (2.00, 0.0),
    "U": (1.96, 7.0),
    "Np": (1.90, 1.0),
    "Pu": (1.87, 1.0),
    "Am": (1.80, 6.0),
    "Cm": (1.69, 3.0),
}

# Upper bound on the number of bonds the sanity checker tolerates.
MAX_BONDS: Dict[str, int] = {
    "H": 1,
    "C": 4,
}

CovalentRadiusTable = Mapping[str, CovalentRadius]


def get_covalent_radii() -> Dict[str, CovalentRadius]:
    """Return a fresh copy of the bundled Cordero table."""

    return {
        symbol: CovalentRadius(radius_angstrom=radius, esd_pm=esd)
        for symbol, (radius, esd) in _CORDERO_RADII.items()
    }


def get_max_bonds(symbol: str) -> Optional[int]:
    """Return the bond cap for symbol, or None when unconstrained."""

    return MAX_BONDS.get(symbol)


def bond_window(
    radius_i: CovalentRadius,
    radius_j: CovalentRadius,
    sigma: float = 3.0,
    min_tol: float = 0.25,
) -> Tuple[float, float]:
    """Distance window (min, max) in Angstrom for a covalent pair.

    The window is the sum of covalent radii widened by `sigma` e.s.d.s of the
    pair, but never by less than `min_tol`.
    """
    radii_sum = radius_i.radius_angstrom + radius_j.radius_angstrom
    margin = max(min_tol, sigma * (radius_i.esd_pm + radius_j.esd_pm) / 100)
    return radii_sum - margin, radii_sum + margin


def lookup_radius(covalent_radii: CovalentRadiusTable, symbol: str) -> CovalentRadius:
    radius = covalent_radii.get(symbol)
    if radius is None:
        raise ValueError(f"No covalent radius data for species '{symbol}'.")
    return radius
