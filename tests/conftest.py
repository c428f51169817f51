"""
Shared pytest fixtures for xtalbond.

These fixtures expose small reference crystals and rule sets so tests can
build upon them without duplicating setup.
"""

from __future__ import annotations

import pathlib
import sys
from typing import List, Sequence

import numpy as np
import pytest

REPO_ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from xtalbond import Atoms, BondingRule, BondingRuleSet, Box, Crystal  # noqa: E402

# O-H 0.96 A, H-O-H 104.5 degrees, H-H ~1.52 A
WATER_POSITIONS = [
    (5.0, 5.0, 5.0),
    (5.7590, 5.5878, 5.0),
    (4.2410, 5.5878, 5.0),
]

# C-H 1.09 A, tetrahedral
_CH = 1.09 / np.sqrt(3.0)
METHANE_POSITIONS = [
    (6.0, 6.0, 6.0),
    (6.0 + _CH, 6.0 + _CH, 6.0 + _CH),
    (6.0 + _CH, 6.0 - _CH, 6.0 - _CH),
    (6.0 - _CH, 6.0 + _CH, 6.0 - _CH),
    (6.0 - _CH, 6.0 - _CH, 6.0 + _CH),
]


def build_crystal(
    name: str, species: List[str], positions: Sequence[Sequence[float]], box: Box
) -> Crystal:
    return Crystal(name, box, Atoms.from_cartesian(species, positions, box))


@pytest.fixture(scope="session")
def project_root() -> pathlib.Path:
    """Return repository root directory."""
    return REPO_ROOT


@pytest.fixture
def water_rules() -> BondingRuleSet:
    return BondingRuleSet([BondingRule("H", "*", 0.4, 1.2), BondingRule("*", "*", 0.4, 1.9)])


@pytest.fixture
def water() -> Crystal:
    return build_crystal("water", ["O", "H", "H"], WATER_POSITIONS, Box.cubic(10.0))


@pytest.fixture
def methane() -> Crystal:
    return build_crystal("methane", ["C", "H", "H", "H", "H"], METHANE_POSITIONS, Box.cubic(12.0))


@pytest.fixture
def split_pair() -> Crystal:
    """O-H pair 1.0 A apart only through the x boundary of a 10 A cube."""
    box = Box.cubic(10.0)
    return Crystal("split_pair", box, Atoms(["O", "H"], [[0.05, 0.5, 0.5], [0.95, 0.5, 0.5]]))
