"""Tests for the command line bond inference driver."""

from __future__ import annotations

import json

from scripts.infer_bonds import main


def test_writes_bond_listing(project_root, tmp_path) -> None:
    out = tmp_path / "bonds.json"
    status = main(["--config", str(project_root / "config" / "presets" / "water_box.yaml"), "--out", str(out)])
    assert status == 0
    data = json.loads(out.read_text(encoding="utf-8"))
    assert [(b["i"], b["j"]) for b in data["bonds"]] == [(0, 1), (0, 2)]


def test_method_override_and_rule_dump(project_root, tmp_path, capsys) -> None:
    rules_out = tmp_path / "rules.csv"
    status = main(
        [
            "--config",
            str(project_root / "config" / "presets" / "water_box.yaml"),
            "--method",
            "voronoi",
            "--write-rules",
            str(rules_out),
        ]
    )
    assert status == 0
    assert rules_out.read_text(encoding="utf-8").splitlines()[0] == "H,*,0.400000,1.200000"
    printed = json.loads(capsys.readouterr().out)
    assert len(printed) == 2


def test_strict_mode_reports_failed_sanity(project_root, tmp_path) -> None:
    rules = tmp_path / "loose.csv"
    rules.write_text("*,*,0.4,1.9\n", encoding="utf-8")
    args = [
        "--config",
        str(project_root / "config" / "presets" / "water_box.yaml"),
        "--rules",
        str(rules),
        "--out",
        str(tmp_path / "bonds.json"),
    ]
    assert main(args) == 0
    assert main(args + ["--strict"]) == 1
