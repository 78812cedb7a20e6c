"""
Pytest configuration and fixtures for emergent_ca tests.
"""

import itertools

import numpy as np
import pytest

from emergent_ca.automaton import Rule, RULE_LENGTH


class SequenceRandom:
    """Deterministic stand-in for a Generator: replays fixed [0, 1) draws."""

    def __init__(self, values):
        self._values = itertools.cycle(values)

    def random(self, size=None):
        if size is None:
            return next(self._values)
        return np.array([next(self._values) for _ in range(size)])


@pytest.fixture
def sequence_random():
    """Factory for fixed-sequence random sources."""
    return SequenceRandom


@pytest.fixture
def rng() -> np.random.Generator:
    """Seeded random source."""
    return np.random.default_rng(12345)


@pytest.fixture
def zeros_rule() -> Rule:
    return Rule(table=np.zeros(RULE_LENGTH, dtype=np.uint8))


@pytest.fixture
def ones_rule() -> Rule:
    return Rule(table=np.ones(RULE_LENGTH, dtype=np.uint8))


@pytest.fixture
def identity_rule() -> Rule:
    """Each cell keeps its own value (key bit 3 is the center)."""
    return Rule.from_bits((key >> 3) & 1 for key in range(RULE_LENGTH))
