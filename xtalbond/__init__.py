"""Bond inference and bond graphs for periodic crystal structures."""

from .bonding import (
    bonded_atoms,
    infer_bonds,
    infer_geometry_based_bonds,
    is_bonded,
    neighborhood,
    shared_voronoi_faces,
    voronoi_ridges,
)
from .chem_data import CovalentRadius, bond_window, get_covalent_radii
from .crystal import Crystal, calc_missing_bond_distances, compare_bonds
from .geometry import Atoms, Box, distance, distance_matrix, minimum_image
from .graph import Bond, BondGraph, BondsAlreadyPresentError, make_bond, remove_all_bonds
from .rules import (
    BondingRule,
    BondingRuleSet,
    RuleContext,
    build_default_rules,
    default_rule_context,
)
from .sanity import bond_sanity_check, check_crystal

__all__ = [
    "Atoms",
    "Bond",
    "BondGraph",
    "BondingRule",
    "BondingRuleSet",
    "BondsAlreadyPresentError",
    "Box",
    "CovalentRadius",
    "Crystal",
    "RuleContext",
    "bond_sanity_check",
    "bond_window",
    "bonded_atoms",
    "build_default_rules",
    "calc_missing_bond_distances",
    "check_crystal",
    "compare_bonds",
    "default_rule_context",
    "distance",
    "distance_matrix",
    "get_covalent_radii",
    "infer_bonds",
    "infer_geometry_based_bonds",
    "is_bonded",
    "make_bond",
    "minimum_image",
    "neighborhood",
    "remove_all_bonds",
    "shared_voronoi_faces",
    "voronoi_ridges",
]

__version__ = "0.1.0"
