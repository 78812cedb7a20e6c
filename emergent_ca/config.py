"""
Configuration dataclass for evolution runs.

Defaults reproduce the classic density classification experiment:
50 rules, 2% mutation, 10 trials per rule, 10% elitism, tournaments of 5.
"""

from dataclasses import dataclass, asdict
from typing import Any, Optional

import numpy as np


@dataclass
class EvolutionConfig:
    """
    Complete configuration for a GA run.

    Attributes:
        population_size: Number of rules per generation
        mutation_rate: Per-gene flip probability applied to offspring
        lattice_size: Width of the lattice used to score rules
        generations: Number of generations the CLI runs
        seed: Seed for the random source (None = fresh entropy)
        test_cases: Independent trials averaged per fitness evaluation
        elite_fraction: Share of the population copied unchanged
        tournament_size: Draws per tournament selection
        step_budget_factor: Trial step budget as a multiple of lattice_size
    """

    population_size: int = 50
    mutation_rate: float = 0.02
    lattice_size: int = 149
    generations: int = 50
    seed: Optional[int] = None

    test_cases: int = 10
    elite_fraction: float = 0.1
    tournament_size: int = 5
    step_budget_factor: float = 1.5

    def __post_init__(self) -> None:
        self._validate()

    def _validate(self) -> None:
        if self.population_size < 1:
            raise ValueError(f"population_size must be >= 1, got {self.population_size}")

        if not 0 <= self.mutation_rate <= 1:
            raise ValueError(f"mutation_rate must be in [0, 1], got {self.mutation_rate}")

        if self.lattice_size < 1:
            raise ValueError(f"lattice_size must be >= 1, got {self.lattice_size}")

        if self.generations < 0:
            raise ValueError(f"generations must be >= 0, got {self.generations}")

        if self.test_cases < 1:
            raise ValueError(f"test_cases must be >= 1, got {self.test_cases}")

        if not 0 <= self.elite_fraction <= 1:
            raise ValueError(f"elite_fraction must be in [0, 1], got {self.elite_fraction}")

        if self.tournament_size < 1:
            raise ValueError(f"tournament_size must be >= 1, got {self.tournament_size}")

        if self.step_budget_factor <= 0:
            raise ValueError(f"step_budget_factor must be > 0, got {self.step_budget_factor}")

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary for serialization."""
        return asdict(self)

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "EvolutionConfig":
        return cls(**d)

    @classmethod
    def from_args(cls, args: Any) -> "EvolutionConfig":
        """Create config from argparse namespace."""
        known_fields = {f.name for f in cls.__dataclass_fields__.values()}
        config_dict = {k: v for k, v in vars(args).items() if k in known_fields and v is not None}
        return cls(**config_dict)

    def make_rng(self) -> np.random.Generator:
        """Random source for this run; same seed, same run."""
        return np.random.default_rng(self.seed)
