"""Tests for the bond graph and the bond creation primitive."""

from __future__ import annotations

import pytest

from xtalbond.crystal import calc_missing_bond_distances, compare_bonds
from xtalbond.graph import Bond, BondGraph, make_bond, remove_all_bonds


def test_make_bond_records_metadata(water) -> None:
    assert water.make_bond(0, 1)
    bond = water.bonds.get_bond(1, 0)
    assert bond.bond_type == "single"
    assert bond.distance == pytest.approx(0.96, abs=1e-3)
    assert bond.cross_boundary is False


def test_make_bond_flags_bonds_across_the_boundary(split_pair) -> None:
    split_pair.make_bond(0, 1, bond_type="double")
    bond = split_pair.bonds.get_bond(0, 1)
    assert bond.bond_type == "double"
    assert bond.distance == pytest.approx(1.0)
    assert bond.cross_boundary is True


def test_make_bond_without_box_leaves_metadata_unknown(water) -> None:
    make_bond(water.bonds, 0, 2, water.atoms)
    assert water.bonds.get_bond(0, 2) == Bond("single", None, None)


def test_repeated_bond_keeps_first_record(water) -> None:
    assert make_bond(water.bonds, 0, 1, water.atoms, bond_type="double")
    assert not water.make_bond(1, 0)
    assert water.bonds.n_edges == 1
    assert water.bonds.get_bond(0, 1).bond_type == "double"
    assert water.bonds.get_bond(0, 1).distance is None


def test_make_bond_rejects_bad_indices(water) -> None:
    with pytest.raises(ValueError):
        water.make_bond(0, 0)
    with pytest.raises(ValueError):
        water.make_bond(0, 3)
    assert water.bonds.n_edges == 0


def test_graph_queries(water) -> None:
    water.make_bond(0, 1)
    water.make_bond(2, 0)
    graph = water.bonds
    assert graph.n_vertices == 3
    assert len(graph) == 2
    assert graph.neighbors(0) == [1, 2]
    assert graph.degree(1) == 1
    assert [(i, j) for i, j, _ in graph.edges()] == [(0, 1), (0, 2)]
    with pytest.raises(KeyError):
        graph.get_bond(1, 2)


def test_remove_edge(water) -> None:
    water.make_bond(0, 1)
    assert water.bonds.remove_edge(1, 0)
    assert not water.bonds.remove_edge(1, 0)
    assert water.bonds.degree(0) == 0


def test_remove_all_bonds_is_idempotent(water) -> None:
    remove_all_bonds(water.bonds)
    assert water.bonds.n_edges == 0
    water.make_bond(0, 1)
    water.make_bond(0, 2)
    water.remove_bonds()
    assert water.bonds.n_edges == 0
    assert water.bonds.n_vertices == 3
    water.remove_bonds()
    assert water.bonds.n_edges == 0
    assert all(water.bonds.degree(a) == 0 for a in range(3))


def test_bonds_can_be_rebuilt_after_clearing(water) -> None:
    water.make_bond(0, 1, bond_type="double")
    remove_all_bonds(water.bonds)
    assert not water.bonds.has_edge(0, 1)
    assert water.make_bond(0, 1)
    assert water.bonds.get_bond(0, 1).bond_type == "single"
    assert water.bonds.neighbors(1) == [0]


def test_empty_graph() -> None:
    graph = BondGraph(0)
    assert list(graph.edges()) == []
    with pytest.raises(ValueError):
        BondGraph(-1)


def test_calc_missing_bond_distances(split_pair) -> None:
    make_bond(split_pair.bonds, 0, 1, split_pair.atoms)
    assert calc_missing_bond_distances(split_pair) == 1
    bond = split_pair.bonds.get_bond(0, 1)
    assert bond.distance == pytest.approx(1.0)
    assert bond.cross_boundary is True
    assert calc_missing_bond_distances(split_pair) == 0


def test_compare_bonds_matches_by_position(water) -> None:
    from xtalbond import Atoms, Crystal

    # same atoms listed in a different order
    order = [2, 0, 1]
    shuffled = Crystal(
        "water_shuffled",
        water.box,
        Atoms([water.species[k] for k in order], water.atoms.xf[order]),
    )
    water.make_bond(0, 1)
    water.make_bond(0, 2)
    shuffled.make_bond(1, 2)
    assert not compare_bonds(water, shuffled)
    shuffled.make_bond(0, 1)
    assert compare_bonds(water, shuffled)
    assert compare_bonds(shuffled, water, atol=1e-6)
