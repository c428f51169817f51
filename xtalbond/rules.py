"""
Species-pair distance rules for rule-based bond inference.

Rules are applied in order: the first rule whose species pattern matches a
pair decides, whether its distance window grants the bond or not.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import singledispatch
import logging
from typing import Iterable, Iterator, List, Optional, Sequence, Union, overload

from .chem_data import WILDCARD, CovalentRadiusTable, bond_window, get_covalent_radii

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExactPair:
    species_a: str
    species_b: str


@dataclass(frozen=True)
class OneWildcard:
    species: str


@dataclass(frozen=True)
class AllWildcard:
    pass


SpeciesPattern = Union[ExactPair, OneWildcard, AllWildcard]


@singledispatch
def pattern_matches(pattern: SpeciesPattern, species_i: str, species_j: str) -> bool:
    raise TypeError(f"Unsupported species pattern: {pattern!r}")


@pattern_matches.register
def _(pattern: AllWildcard, species_i: str, species_j: str) -> bool:
    return True


@pattern_matches.register
def _(pattern: OneWildcard, species_i: str, species_j: str) -> bool:
    return pattern.species in (species_i, species_j)


@pattern_matches.register
def _(pattern: ExactPair, species_i: str, species_j: str) -> bool:
    return sorted((species_i, species_j)) == sorted((pattern.species_a, pattern.species_b))


@dataclass(frozen=True)
class BondingRule:
    """
    Bond two atoms of species `species_i` and `species_j` (in either order)
    when their distance lies strictly between `min_dist` and `max_dist`.

    `"*"` is a wildcard species.
    """

    species_i: str
    species_j: str
    min_dist: float
    max_dist: float

    @property
    def pattern(self) -> SpeciesPattern:
        if self.species_i == WILDCARD and self.species_j == WILDCARD:
            return AllWildcard()
        if self.species_i == WILDCARD:
            return OneWildcard(self.species_j)
        if self.species_j == WILDCARD:
            return OneWildcard(self.species_i)
        return ExactPair(self.species_i, self.species_j)

    def matches(self, species_i: str, species_j: str) -> bool:
        return pattern_matches(self.pattern, species_i, species_j)

    def accepts(self, r: float) -> bool:
        return self.min_dist < r < self.max_dist


class BondingRuleSet:
    """Ordered, priority-ranked collection of bonding rules."""

    def __init__(self, rules: Iterable[BondingRule] = ()):
        self._rules: List[BondingRule] = list(rules)

    def __iter__(self) -> Iterator[BondingRule]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    @overload
    def __getitem__(self, index: int) -> BondingRule: ...

    @overload
    def __getitem__(self, index: slice) -> "BondingRuleSet": ...

    def __getitem__(self, index):
        if isinstance(index, slice):
            return BondingRuleSet(self._rules[index])
        return self._rules[index]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, BondingRuleSet):
            return self._rules == other._rules
        if isinstance(other, (list, tuple)):
            return self._rules == list(other)
        return NotImplemented

    def __add__(self, other: Iterable[BondingRule]) -> "BondingRuleSet":
        return BondingRuleSet([*self._rules, *other])

    def __repr__(self) -> str:
        return f"BondingRuleSet({self._rules!r})"

    def append(self, *rules: BondingRule) -> None:
        """Add rules behind the existing ones (lowest priority)."""
        self._rules.extend(rules)

    def extend(self, rules: Iterable[BondingRule]) -> None:
        self._rules.extend(rules)

    def prepend(self, *rules: BondingRule) -> None:
        """Add rules ahead of the existing ones (highest priority)."""
        self._rules[0:0] = rules

    def copy(self) -> "BondingRuleSet":
        return BondingRuleSet(self._rules)

    def first_match(self, species_i: str, species_j: str) -> Optional[BondingRule]:
        for rule in self._rules:
            if rule.matches(species_i, species_j):
                return rule
        return None

    def format_table(self) -> str:
        return "\n".join(
            f"{r.species_i}\t{r.species_j}\t{r.min_dist:.3f}\t{r.max_dist:.3f}" for r in self._rules
        )


RuleSource = Union[BondingRuleSet, Sequence[BondingRule]]


def build_default_rules(
    covalent_radii: Optional[CovalentRadiusTable] = None,
    sigma: float = 3.0,
    min_tol: float = 0.25,
) -> BondingRuleSet:
    """
    One rule per unordered species pair (self-pairs included) from covalent
    radius data. Species are enumerated in sorted order so repeated calls
    produce identical rule sets.

    Use `append`/`prepend` on the result to layer custom rules, e.g.
    `rules.prepend(BondingRule("Cu", "*", 0.1, 2.6))`.
    """
    if covalent_radii is None:
        covalent_radii = get_covalent_radii()
    symbols = sorted(covalent_radii)
    rules = BondingRuleSet()
    for idx, symbol_a in enumerate(symbols):
        for symbol_b in symbols[idx:]:
            min_dist, max_dist = bond_window(
                covalent_radii[symbol_a], covalent_radii[symbol_b], sigma, min_tol
            )
            rules.append(BondingRule(symbol_a, symbol_b, min_dist, max_dist))
    return rules


class RuleContext:
    """
    Holder for the "current" bonding rule set.

    Readers receive snapshots from `get()`, so replacing the rules later does
    not affect an inference already in progress. A context created without
    rules starts from `build_default_rules()` the first time it is read.
    """

    def __init__(self, rules: Optional[RuleSource] = None):
        self._rules: Optional[BondingRuleSet] = BondingRuleSet(rules) if rules is not None else None

    def get(self) -> BondingRuleSet:
        if self._rules is None:
            self._rules = build_default_rules()
            logger.debug("Initialized bonding rule context with %d default rules", len(self._rules))
        return self._rules.copy()

    def set(self, rules: RuleSource) -> None:
        self._rules = BondingRuleSet(rules)

    def add(self, rules: RuleSource) -> None:
        """Put `rules` in front of the current rules."""
        self.set(BondingRuleSet(rules) + self.get())

    def append(self, rules: RuleSource) -> None:
        """Put `rules` behind the current rules."""
        self.set(self.get() + rules)

    def reset(self) -> None:
        self._rules = None


_DEFAULT_CONTEXT = RuleContext()


def default_rule_context() -> RuleContext:
    """The process-wide context used when inference is not handed one."""
    return _DEFAULT_CONTEXT
