"""Emergent computation - evolve 1D cellular automata that classify density."""

from .automaton import CellularAutomaton, Rule, Particle, ParticleType, PREDEFINED_RULES, get_rule
from .config import EvolutionConfig
from .search import GeneticAlgorithm, evaluate_rule

__all__ = [
    "CellularAutomaton",
    "Rule",
    "Particle",
    "ParticleType",
    "PREDEFINED_RULES",
    "get_rule",
    "EvolutionConfig",
    "GeneticAlgorithm",
    "evaluate_rule",
]
