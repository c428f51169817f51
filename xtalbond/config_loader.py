"""
Utilities for loading crystals and bonding settings from YAML configuration files.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

import numpy as np
import yaml

from .bonding import (
    DEFAULT_MIN_TOL,
    DEFAULT_SIGMA,
    DEFAULT_VORONOI_RADIUS,
    infer_bonds,
    infer_geometry_based_bonds,
)
from .crystal import Crystal
from .geometry import Atoms, Box
from .rule_io import parse_rule, read_bonding_rules
from .rules import BondingRule, BondingRuleSet, RuleContext

BONDING_METHODS = ("rules", "voronoi")


@dataclass
class BondingSettings:
    method: str = "rules"
    include_periodic: bool = True
    voronoi_radius_angstrom: float = DEFAULT_VORONOI_RADIUS
    sigma: float = DEFAULT_SIGMA
    min_tol_angstrom: float = DEFAULT_MIN_TOL
    rules: Optional[BondingRuleSet] = None
    # resolved rules_file path; its rules are already merged into `rules`
    rules_file: Optional[Path] = None


@dataclass
class CrystalBundle:
    """Container returned by configuration loader."""

    crystal: Crystal
    settings: BondingSettings
    metadata: Dict[str, Any] = field(default_factory=dict)


def load_crystal_from_yaml(path: Path) -> CrystalBundle:
    """Load a Crystal, its bonding settings and metadata from a YAML config."""
    path = Path(path)
    data = _load_yaml(path)
    metadata = data.get("metadata") or {}
    box = _build_box(data.get("box"), path)
    atoms = _build_atoms(data.get("atoms") or [], box, path)
    settings = _build_settings(data.get("bonding") or {}, path)
    name = str(metadata.get("name", path.stem))
    return CrystalBundle(crystal=Crystal(name, box, atoms), settings=settings, metadata=metadata)


def run_bonding(bundle: CrystalBundle, context: Optional[RuleContext] = None) -> bool:
    """Infer bonds for the bundled crystal with its settings; returns sanity."""
    settings = bundle.settings
    if settings.method == "voronoi":
        return infer_geometry_based_bonds(
            bundle.crystal,
            settings.include_periodic,
            r=settings.voronoi_radius_angstrom,
            sigma=settings.sigma,
            min_tol=settings.min_tol_angstrom,
        )
    return infer_bonds(
        bundle.crystal,
        settings.include_periodic,
        bonding_rules=settings.rules,
        context=context,
    )


def _load_yaml(path: Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        content = yaml.safe_load(handle)
    if not isinstance(content, dict):
        raise ValueError(f"YAML file {path} must contain a mapping at the root.")
    return content


def _build_box(config: Optional[Dict[str, Any]], path: Path) -> Box:
    if not isinstance(config, dict):
        raise ValueError(f"{path}: a 'box' section is required.")
    periodic = _periodicity(config.get("periodic", True), path)
    if config.get("f_to_c") is not None:
        matrix = np.array(config["f_to_c"], dtype=float)
        if matrix.shape != (3, 3):
            raise ValueError(f"{path}: box.f_to_c must be a 3x3 matrix.")
        return Box(matrix, periodic)
    lengths = config.get("lengths_angstrom")
    if lengths is None:
        raise ValueError(f"{path}: box requires lengths_angstrom or f_to_c.")
    angles = config.get("angles_degrees", (90.0, 90.0, 90.0))
    a, b, c = _tuple3(lengths)
    alpha, beta, gamma = _tuple3(angles)
    return Box.from_parameters(a, b, c, alpha, beta, gamma, periodic=periodic)


def _flag(value: Any, key: str, path: Path) -> bool:
    if not isinstance(value, bool):
        raise ValueError(f"{path}: {key} must be true or false, got {value!r}.")
    return value


def _periodicity(value: Any, path: Path) -> Tuple[bool, bool, bool]:
    if isinstance(value, bool):
        return (value, value, value)
    if isinstance(value, (list, tuple)) and len(value) == 3:
        a, b, c = (_flag(flag, "box.periodic", path) for flag in value)
        return a, b, c
    raise ValueError(f"{path}: box.periodic must be a boolean or a list of 3 booleans.")


def _build_atoms(atom_list: List[Dict[str, Any]], box: Box, path: Path) -> Atoms:
    species: List[str] = []
    coords: List[Tuple[float, float, float]] = []
    for index, atom in enumerate(atom_list):
        symbol = atom.get("species", atom.get("element"))
        if not symbol:
            raise ValueError(f"{path}: atom {index} has no species.")
        if atom.get("frac") is not None:
            xf = _tuple3(atom["frac"])
        elif atom.get("position_angstrom") is not None:
            xf = tuple(box.to_fractional(np.array(_tuple3(atom["position_angstrom"]))))
        else:
            raise ValueError(f"{path}: atom {index} requires frac or position_angstrom.")
        species.append(str(symbol))
        coords.append(xf)  # type: ignore[arg-type]
    return Atoms(species, np.array(coords, dtype=float).reshape(-1, 3))


def _build_settings(config: Dict[str, Any], path: Path) -> BondingSettings:
    method = str(config.get("method", "rules")).lower()
    if method not in BONDING_METHODS:
        raise ValueError(f"{path}: bonding.method must be one of {BONDING_METHODS}, got '{method}'.")

    rules: Optional[BondingRuleSet] = None
    rules_file: Optional[Path] = None
    if config.get("rules_file"):
        rules_file = path.parent / str(config["rules_file"])
        rules = read_bonding_rules(rules_file)
    if config.get("rules"):
        inline = BondingRuleSet(
            _parse_rule_entry(entry, f"{path}: bonding.rules[{k}]")
            for k, entry in enumerate(config["rules"])
        )
        # inline rules take precedence over those read from rules_file
        rules = inline + rules if rules is not None else inline

    return BondingSettings(
        method=method,
        include_periodic=_flag(config.get("include_periodic", True), "bonding.include_periodic", path),
        voronoi_radius_angstrom=float(config.get("voronoi_radius_angstrom", DEFAULT_VORONOI_RADIUS)),
        sigma=float(config.get("sigma", DEFAULT_SIGMA)),
        min_tol_angstrom=float(config.get("min_tol_angstrom", DEFAULT_MIN_TOL)),
        rules=rules,
        rules_file=rules_file,
    )


def _parse_rule_entry(entry: Any, source: str) -> BondingRule:
    if isinstance(entry, dict):
        try:
            fields = [
                entry["species_i"],
                entry["species_j"],
                entry["min_dist_angstrom"],
                entry["max_dist_angstrom"],
            ]
        except KeyError as exc:
            raise ValueError(f"{source}: missing key {exc.args[0]!r}.") from exc
    elif isinstance(entry, (list, tuple)):
        fields = list(entry)
    else:
        raise ValueError(f"{source}: a rule must be a mapping or a list.")
    return parse_rule([str(value) for value in fields], source=source)


def _tuple3(value: Any) -> Tuple[float, float, float]:
    if not isinstance(value, Iterable):
        raise ValueError("Vector field must be iterable with 3 numbers.")
    values = list(value)
    if len(values) != 3:
        raise ValueError("Vector field must contain exactly 3 entries.")
    return float(values[0]), float(values[1]), float(values[2])
