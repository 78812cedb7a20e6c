"""Genetic algorithm evolving rule tables for density classification."""

import math
import numpy as np
from typing import List, Optional, Callable
from dataclasses import dataclass, field

from .automaton import CellularAutomaton, Rule, RULE_LENGTH
from .config import EvolutionConfig


@dataclass
class Individual:
    """A candidate rule with its fitness score."""
    rule: Rule
    fitness: float = 0.0


@dataclass
class SearchResult:
    """Results from a genetic search run."""
    best_rule: Optional[Rule]
    best_fitness: float
    population: List[Rule]
    generation: int
    fitness_history: List[float] = field(default_factory=list)


def evaluate_rule(
    rule: Rule,
    lattice_size: int,
    rng=None,
    test_cases: int = 10,
    step_budget_factor: float = 1.5,
) -> float:
    """
    Average the classification score of ``rule`` over independent trials.

    Each trial starts a fresh automaton from ``rng`` and steps it until it
    converges or ``floor(lattice_size * step_budget_factor)`` steps pass.
    """
    if rng is None:
        rng = np.random.default_rng()
    if test_cases < 1:
        raise ValueError(f"test_cases must be >= 1, got {test_cases}")

    max_steps = math.floor(lattice_size * step_budget_factor)
    total = 0.0
    for _ in range(test_cases):
        ca = CellularAutomaton(lattice_size, rule, rng=rng)
        ca.run(max_steps)
        total += ca.get_fitness()
    return total / test_cases


class GeneticAlgorithm:
    """Evolves a population of radius-3 rules toward density classification.

    Every random draw goes through ``rng.random``, so a seeded source
    reproduces a run exactly. The evaluation trials share that same stream.
    """

    def __init__(
        self,
        population_size: int = 50,
        mutation_rate: float = 0.02,
        rng=None,
        test_cases: int = 10,
        elite_fraction: float = 0.1,
        tournament_size: int = 5,
        step_budget_factor: float = 1.5,
    ):
        if (isinstance(population_size, bool) or not isinstance(population_size, (int, np.integer))
                or population_size < 1):
            raise ValueError(f"population_size must be an integer >= 1, got {population_size!r}")
        if not 0 <= mutation_rate <= 1:
            raise ValueError(f"mutation_rate must be in [0, 1], got {mutation_rate}")
        if test_cases < 1:
            raise ValueError(f"test_cases must be >= 1, got {test_cases}")
        if not 0 <= elite_fraction <= 1:
            raise ValueError(f"elite_fraction must be in [0, 1], got {elite_fraction}")
        if tournament_size < 1:
            raise ValueError(f"tournament_size must be >= 1, got {tournament_size}")
        if step_budget_factor <= 0:
            raise ValueError(f"step_budget_factor must be > 0, got {step_budget_factor}")
        self.population_size = population_size
        self.mutation_rate = mutation_rate
        self.rng = rng if rng is not None else np.random.default_rng()
        self.test_cases = test_cases
        self.elite_fraction = elite_fraction
        self.tournament_size = tournament_size
        self.step_budget_factor = step_budget_factor

        self.population: List[Rule] = []
        self.generation = 0
        self.best_fitness = 0.0
        self.best_rule: Optional[Rule] = None
        self.fitness_history: List[float] = []
        self.initialize()

    @classmethod
    def from_config(cls, config: EvolutionConfig, rng=None) -> "GeneticAlgorithm":
        return cls(
            population_size=config.population_size,
            mutation_rate=config.mutation_rate,
            rng=rng if rng is not None else config.make_rng(),
            test_cases=config.test_cases,
            elite_fraction=config.elite_fraction,
            tournament_size=config.tournament_size,
            step_budget_factor=config.step_budget_factor,
        )

    def initialize(self):
        """Start over with a random population and no history."""
        self.population = [Rule.random(self.rng) for _ in range(self.population_size)]
        self.generation = 0
        self.best_fitness = 0.0
        self.best_rule = None
        self.fitness_history = []

    def evaluate_fitness(self, rule: Rule, lattice_size: int) -> float:
        """Mean classification score over independent random trials."""
        return evaluate_rule(
            rule,
            lattice_size,
            rng=self.rng,
            test_cases=self.test_cases,
            step_budget_factor=self.step_budget_factor,
        )

    def tournament_select(self, scored: List[Individual], tournament_size: Optional[int] = None) -> Rule:
        """Best of ``tournament_size`` draws with replacement; first seen wins ties."""
        if tournament_size is None:
            tournament_size = self.tournament_size
        best = None
        best_fitness = -1.0
        for _ in range(tournament_size):
            candidate = scored[int(self.rng.random() * len(scored))]
            if candidate.fitness > best_fitness:
                best = candidate.rule
                best_fitness = candidate.fitness
        return best

    def crossover(self, parent1: Rule, parent2: Rule) -> Rule:
        """Single-point crossover producing one new rule."""
        point = int(self.rng.random() * RULE_LENGTH)
        return Rule(table=np.concatenate([parent1.table[:point], parent2.table[point:]]))

    def mutate(self, rule: Rule) -> Rule:
        """Flip each gene with probability ``mutation_rate``, in place."""
        flips = np.asarray(self.rng.random(RULE_LENGTH)) < self.mutation_rate
        rule.table[flips] ^= 1
        return rule

    def evolve(self, lattice_size: int):
        """Score the population and breed the next generation."""
        scored = [Individual(rule=rule, fitness=self.evaluate_fitness(rule, lattice_size))
                  for rule in self.population]

        # sorted() is stable, so equal scores keep population order
        scored = sorted(scored, key=lambda x: x.fitness, reverse=True)

        # Ties replace the stored best (>=), unlike tournament_select (>)
        if scored[0].fitness >= self.best_fitness:
            self.best_fitness = scored[0].fitness
            self.best_rule = scored[0].rule.copy()

        self.fitness_history.append(self.best_fitness)

        elite_count = math.floor(self.population_size * self.elite_fraction)
        new_population: List[Rule] = [ind.rule.copy() for ind in scored[:elite_count]]

        while len(new_population) < self.population_size:
            parent1 = self.tournament_select(scored)
            parent2 = self.tournament_select(scored)
            offspring = self.crossover(parent1, parent2)
            self.mutate(offspring)
            new_population.append(offspring)

        self.population = new_population
        self.generation += 1

    def showcase(self, lattice_size: int) -> Optional[CellularAutomaton]:
        """Fresh automaton running the best rule for ``lattice_size`` steps."""
        if self.best_rule is None:
            return None
        ca = CellularAutomaton(lattice_size, self.best_rule.copy(), rng=self.rng)
        for _ in range(lattice_size):
            ca.step()
        return ca

    def run(
        self,
        generations: int,
        lattice_size: int,
        callback: Optional[Callable[[int, "GeneticAlgorithm"], None]] = None,
        verbose: bool = True,
    ) -> SearchResult:
        """Run the genetic algorithm for a number of generations."""
        for _ in range(generations):
            self.evolve(lattice_size)

            if verbose:
                lam = self.best_rule.lambda_parameter() if self.best_rule is not None else 0.0
                print(f"Gen {self.generation:3d}: Best={self.best_fitness:.4f} (lambda={lam:.3f})")

            if callback:
                callback(self.generation, self)

        return SearchResult(
            best_rule=self.best_rule,
            best_fitness=self.best_fitness,
            population=self.population,
            generation=self.generation,
            fitness_history=list(self.fitness_history),
        )
