"""
Flat-file persistence for bonding rules and bond listings.

Rule files are comma-separated with one rule per line and no header:
    species_i,species_j,min_dist,max_dist
`*` denotes the wildcard species.
"""

from __future__ import annotations

import csv
import json
import pathlib
from typing import Any, Dict, List, Union

from .graph import BondGraph
from .rules import BondingRule, BondingRuleSet, RuleSource

PathLike = Union[str, pathlib.Path]

RULE_FIELDS = 4


def format_rule(rule: BondingRule) -> str:
    return "%s,%s,%f,%f" % (rule.species_i, rule.species_j, rule.min_dist, rule.max_dist)


def parse_rule(fields: List[str], source: str = "<string>") -> BondingRule:
    if len(fields) != RULE_FIELDS:
        raise ValueError(
            f"{source}: expected {RULE_FIELDS} comma-separated fields, got {len(fields)}."
        )
    species_i, species_j, min_text, max_text = (value.strip() for value in fields)
    try:
        min_dist = float(min_text)
        max_dist = float(max_text)
    except ValueError as exc:
        raise ValueError(f"{source}: could not parse distances from {fields!r}") from exc
    return BondingRule(species_i, species_j, min_dist, max_dist)


def write_bonding_rules(path: PathLike, bonding_rules: RuleSource) -> None:
    path = pathlib.Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as handle:
        for rule in bonding_rules:
            handle.write(format_rule(rule) + "\n")


def read_bonding_rules(path: PathLike) -> BondingRuleSet:
    """Read a rule file. A malformed line fails the whole read."""
    path = pathlib.Path(path)
    rules = BondingRuleSet()
    with path.open("r", encoding="utf-8", newline="") as handle:
        for line_number, fields in enumerate(csv.reader(handle), start=1):
            if not fields or all(not value.strip() for value in fields):
                continue
            rules.append(parse_rule(fields, source=f"{path}:{line_number}"))
    return rules


def bond_records(bonds: BondGraph) -> List[Dict[str, Any]]:
    """Edge listing for export; unknown values are None."""
    return [
        {
            "i": i,
            "j": j,
            "type": bond.bond_type,
            "distance": bond.distance,
            "cross_boundary": bond.cross_boundary,
        }
        for i, j, bond in bonds.edges()
    ]


def write_bond_records(path: PathLike, bonds: BondGraph) -> None:
    path = pathlib.Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as handle:
        json.dump({"n_atoms": bonds.n_vertices, "bonds": bond_records(bonds)}, handle, indent=2)
        handle.write("\n")
