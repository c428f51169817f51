"""
Bond inference driver for crystals described in YAML configuration files.

Example:
    python scripts/infer_bonds.py --config config/presets/water_box.yaml --out bonds.json

- `--method` overrides `bonding.method` from the config (rules or voronoi).
- `--rules` replaces the configured rules with a rule CSV
  (species_i,species_j,min_dist,max_dist per line, `*` as wildcard).
- `--strict` exits with status 1 when the bond sanity check fails.
"""

from __future__ import annotations

import argparse
import json
import logging
import pathlib
import sys
from typing import List, Optional

from xtalbond.config_loader import BONDING_METHODS, load_crystal_from_yaml, run_bonding
from xtalbond.rule_io import bond_records, read_bonding_rules, write_bond_records, write_bonding_rules
from xtalbond.rules import default_rule_context

logger = logging.getLogger("infer_bonds")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Infer bonds in a periodic crystal.")
    parser.add_argument(
        "--config",
        type=pathlib.Path,
        required=True,
        help="Path to the YAML crystal/bonding configuration.",
    )
    parser.add_argument(
        "--method",
        choices=BONDING_METHODS,
        default=None,
        help="Override the bonding method from the config.",
    )
    parser.add_argument(
        "--rules",
        type=pathlib.Path,
        default=None,
        help="Rule CSV to use instead of the configured rules.",
    )
    parser.add_argument(
        "--out",
        type=pathlib.Path,
        default=None,
        help="Destination for the JSON bond listing (printed when omitted).",
    )
    parser.add_argument(
        "--write-rules",
        type=pathlib.Path,
        default=None,
        help="Write the rules used for rule-based inference to this CSV.",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Exit with status 1 when the bond sanity check fails.",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    bundle = load_crystal_from_yaml(args.config)
    if args.method:
        bundle.settings.method = args.method
    if args.rules:
        bundle.settings.rules = read_bonding_rules(args.rules)

    if args.write_rules:
        rules = bundle.settings.rules if bundle.settings.rules is not None else default_rule_context().get()
        write_bonding_rules(args.write_rules, rules)
        logger.info("Wrote %d bonding rules to %s", len(rules), args.write_rules)

    sane = run_bonding(bundle)
    crystal = bundle.crystal
    logger.info(
        "%s: %d atoms, %d bonds, sanity %s",
        crystal.name,
        crystal.n,
        crystal.bonds.n_edges,
        "passed" if sane else "failed",
    )

    if args.out:
        write_bond_records(args.out, crystal.bonds)
        logger.info("Saved bond listing to %s", args.out)
    else:
        print(json.dumps(bond_records(crystal.bonds), indent=2))

    if args.strict and not sane:
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
