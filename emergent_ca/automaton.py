"""1D radius-3 binary cellular automaton for the density classification task."""

import numpy as np
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional

RULE_LENGTH = 128  # 2**7 neighborhoods
RADIUS = 3
CONVERGENCE_WINDOW = 5
MIN_VERDICT_HISTORY = 10
DISPLAY_STEP_LIMIT = 200


@dataclass(eq=False)
class Rule:
    """Lookup table from a 7-cell neighborhood key to the successor bit.

    Key bit 6 is the leftmost cell (i-3), bit 0 the rightmost (i+3).
    Tables are mutable (the GA mutates offspring in place), so rules compare
    by content but are not hashable.
    """
    table: np.ndarray

    def __post_init__(self):
        table = np.asarray(self.table)
        if table.shape != (RULE_LENGTH,):
            raise ValueError(f"rule must have exactly {RULE_LENGTH} entries, got shape {table.shape}")
        if not np.all((table == 0) | (table == 1)):
            raise ValueError("rule entries must all be 0 or 1")
        self.table = table.astype(np.uint8)

    @classmethod
    def from_bits(cls, bits: Iterable[int]) -> "Rule":
        return cls(table=np.array(list(bits)))

    @classmethod
    def from_hex(cls, hex_str: str) -> "Rule":
        """Parse the 32-digit hex notation (entry 0 is the top bit of the first digit)."""
        hex_str = hex_str.strip().lower()
        if len(hex_str) != RULE_LENGTH // 4:
            raise ValueError(f"hex rule must have {RULE_LENGTH // 4} digits, got {len(hex_str)}")
        try:
            value = int(hex_str, 16)
        except ValueError:
            raise ValueError(f"invalid hex rule '{hex_str}'") from None
        return cls.from_bits((value >> (RULE_LENGTH - 1 - i)) & 1 for i in range(RULE_LENGTH))

    @classmethod
    def random(cls, rng=None) -> "Rule":
        """Draw 128 independent fair bits from the random source."""
        if rng is None:
            rng = np.random.default_rng()
        draws = np.asarray(rng.random(RULE_LENGTH))
        return cls(table=(draws >= 0.5).astype(np.uint8))

    def to_hex(self) -> str:
        value = 0
        for bit in self.table:
            value = (value << 1) | int(bit)
        return f"{value:0{RULE_LENGTH // 4}x}"

    def copy(self) -> "Rule":
        return Rule(table=self.table.copy())

    def lambda_parameter(self) -> float:
        """Langton's lambda: fraction of neighborhoods mapping to 1."""
        return float(np.mean(self.table))

    def __len__(self):
        return RULE_LENGTH

    def __getitem__(self, key):
        return self.table[key]

    def __eq__(self, other):
        if not isinstance(other, Rule):
            return False
        return np.array_equal(self.table, other.table)


class ParticleType(Enum):
    ALPHA = "alpha"
    BETA = "beta"
    GAMMA = "gamma"
    DOMAIN = "domain"


# Indexed by the 3-bit pattern (prev << 2) | (current << 1) | next.
# 000 and 111 cannot sit on a wall; they fall back to DOMAIN.
_PATTERN_TYPES = (
    ParticleType.DOMAIN,  # 000
    ParticleType.ALPHA,   # 001
    ParticleType.BETA,    # 010
    ParticleType.ALPHA,   # 011
    ParticleType.GAMMA,   # 100
    ParticleType.BETA,    # 101
    ParticleType.GAMMA,   # 110
    ParticleType.DOMAIN,  # 111
)


def classify_pattern(prev: int, current: int, nxt: int) -> ParticleType:
    """Classify the 3-cell pattern centred on a domain wall."""
    return _PATTERN_TYPES[(int(prev) << 2) | (int(current) << 1) | int(nxt)]


@dataclass
class Particle:
    """A domain wall observed in the current configuration.

    Velocity is always 0: trajectories are not tracked across steps.
    """
    position: int
    type: ParticleType
    velocity: int = 0


class CellularAutomaton:
    """Periodic 1D binary automaton with a radius-3 neighborhood.

    All randomness comes from ``rng``, anything exposing numpy Generator's
    ``random(size=None)``. Two automata built from identically seeded sources
    produce identical histories.
    """

    def __init__(self, size: int, rule: Optional[Rule] = None, rng=None):
        if isinstance(size, bool) or not isinstance(size, (int, np.integer)) or size <= 0:
            raise ValueError(f"size must be a positive integer, got {size!r}")
        if rule is not None and not isinstance(rule, Rule):
            rule = Rule(table=rule)
        self.size = int(size)
        self.rng = rng if rng is not None else np.random.default_rng()
        self.rule = rule if rule is not None else Rule.random(self.rng)
        self.configuration = np.zeros(self.size, dtype=np.uint8)
        self.history: List[np.ndarray] = []
        self.particles: List[Particle] = []
        self.initial_density = 0.0
        self.correct_classification = 0
        self.reset()

    def reset(self):
        """Reseed the lattice at a random density and clear history."""
        density = self.rng.random()
        draws = np.asarray(self.rng.random(self.size))
        self._start_from((draws < density).astype(np.uint8))

    def set_configuration(self, cells: Iterable[int]):
        """Start over from a caller-supplied initial configuration."""
        config = np.array(list(cells))
        if config.shape != (self.size,):
            raise ValueError(f"configuration must have {self.size} cells, got {config.size}")
        if not np.all((config == 0) | (config == 1)):
            raise ValueError("configuration cells must all be 0 or 1")
        self._start_from(config.astype(np.uint8))

    def _start_from(self, config: np.ndarray):
        self.configuration = config
        self.history = [config.copy()]
        self.initial_density = self.density()
        self.correct_classification = 1 if self.initial_density > 0.5 else 0
        self.particles = []

    def density(self) -> float:
        """Fraction of 1s in the current configuration."""
        return float(np.mean(self.configuration))

    def neighborhood_keys(self) -> np.ndarray:
        """7-bit neighborhood key for every cell, with wraparound."""
        keys = np.zeros(self.size, dtype=np.intp)
        for bit, shift in enumerate(range(-RADIUS, RADIUS + 1)):
            # np.roll(c, -shift)[i] == c[i + shift]; i+3 lands on bit 0
            keys |= np.roll(self.configuration, -shift).astype(np.intp) << (2 * RADIUS - bit)
        return keys

    def step(self):
        """Advance all cells synchronously by one generation."""
        self.configuration = self.rule.table[self.neighborhood_keys()]
        self.history.append(self.configuration.copy())
        self.detect_particles()

    def run(self, max_steps: int) -> int:
        """Step until converged or ``max_steps`` taken. Returns steps taken."""
        steps = 0
        while steps < max_steps and not self.is_converged():
            self.step()
            steps += 1
        return steps

    def detect_particles(self) -> List[Particle]:
        """Find domain walls (cell differs from its left neighbor) and classify them."""
        config = self.configuration
        prev = np.roll(config, 1)
        nxt = np.roll(config, -1)
        walls = np.flatnonzero(prev != config)
        patterns = (prev[walls] << 2) | (config[walls] << 1) | nxt[walls]
        self.particles = [
            Particle(position=int(pos), type=_PATTERN_TYPES[int(pattern)])
            for pos, pattern in zip(walls, patterns)
        ]
        return self.particles

    def verdict(self) -> Optional[int]:
        """1 if the lattice is all 1s, 0 if all 0s, None if mixed."""
        final = self.history[-1] if self.history else self.configuration
        if np.all(final == 1):
            return 1
        if np.all(final == 0):
            return 0
        return None

    def classification_label(self) -> str:
        return {1: "ALL 1s", 0: "ALL 0s", None: "MIXED"}[self.verdict()]

    def get_fitness(self) -> float:
        """Score the classification: 1.0 correct, 0.0 wrong, 0.5 undecided."""
        if len(self.history) < MIN_VERDICT_HISTORY:
            return 0.0
        verdict = self.verdict()
        if verdict is None:
            return 0.5
        return 1.0 if verdict == self.correct_classification else 0.0

    def is_converged(self) -> bool:
        """True once the last five configurations are identical."""
        if len(self.history) < CONVERGENCE_WINDOW:
            return False
        recent = self.history[-CONVERGENCE_WINDOW:]
        return all(np.array_equal(recent[0], config) for config in recent[1:])


# Well-known density classification rules, in the standard hex notation
PREDEFINED_RULE_HEX: Dict[str, str] = {
    "majority": "000101170117177f0117177f177f7fff",
    "expand": "0505408305c90101200b0efb94c7cff7",
    "particle": "0504058705000f77037755837bffb77f",
    "gkl": "005f005f005f005f005fff5f005fff5f",
}

PREDEFINED_RULES: Dict[str, Rule] = {
    name: Rule.from_hex(hex_str) for name, hex_str in PREDEFINED_RULE_HEX.items()
}

MAJORITY = PREDEFINED_RULES["majority"]
BLOCK_EXPANDING = PREDEFINED_RULES["expand"]
PARTICLE_BASED = PREDEFINED_RULES["particle"]
GKL = PREDEFINED_RULES["gkl"]


def get_rule(name: str, rng=None) -> Rule:
    """Resolve a catalog name, 'random', or a 32-digit hex rule."""
    key = name.strip().lower()
    if key == "random":
        return Rule.random(rng)
    if key in PREDEFINED_RULES:
        return PREDEFINED_RULES[key].copy()
    if len(key) == RULE_LENGTH // 4:
        return Rule.from_hex(key)
    names = ", ".join(sorted(PREDEFINED_RULES))
    raise ValueError(f"unknown rule '{name}' (expected random, one of {names}, or 32 hex digits)")
