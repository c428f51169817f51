"""Tests for bonding rule files and bond listings."""

from __future__ import annotations

import json

import pytest

from xtalbond.rule_io import (
    bond_records,
    read_bonding_rules,
    write_bond_records,
    write_bonding_rules,
)
from xtalbond.rules import BondingRule


def test_rule_file_round_trip(tmp_path, water_rules) -> None:
    path = tmp_path / "rules.csv"
    write_bonding_rules(path, water_rules)
    assert path.read_text(encoding="utf-8").splitlines() == [
        "H,*,0.400000,1.200000",
        "*,*,0.400000,1.900000",
    ]
    assert read_bonding_rules(path) == water_rules


def test_read_preset_rule_file(project_root, water_rules) -> None:
    assert read_bonding_rules(project_root / "config" / "presets" / "water_rules.csv") == water_rules


def test_read_skips_blank_lines(tmp_path) -> None:
    path = tmp_path / "rules.csv"
    path.write_text("Ca,O,0.4,2.0\n\n*,*,0.4,1.9\n", encoding="utf-8")
    rules = read_bonding_rules(path)
    assert list(rules) == [BondingRule("Ca", "O", 0.4, 2.0), BondingRule("*", "*", 0.4, 1.9)]


@pytest.mark.parametrize(
    "line",
    ["H,*,0.4", "H,*,0.4,1.2,extra", "H,*,short,1.2"],
)
def test_malformed_rule_line_fails_read(tmp_path, line) -> None:
    path = tmp_path / "rules.csv"
    path.write_text(f"*,*,0.4,1.9\n{line}\n", encoding="utf-8")
    with pytest.raises(ValueError, match=":2"):
        read_bonding_rules(path)


def test_bond_records(split_pair, tmp_path) -> None:
    split_pair.make_bond(0, 1)
    records = bond_records(split_pair.bonds)
    assert len(records) == 1
    record = records[0]
    assert (record["i"], record["j"], record["type"]) == (0, 1, "single")
    assert record["distance"] == pytest.approx(1.0)
    assert record["cross_boundary"] is True

    out = tmp_path / "out" / "bonds.json"
    write_bond_records(out, split_pair.bonds)
    data = json.loads(out.read_text(encoding="utf-8"))
    assert data["n_atoms"] == 2
    assert data["bonds"][0]["cross_boundary"] is True
