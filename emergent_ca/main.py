#!/usr/bin/env python3
"""CLI for evolving and inspecting density classification automata."""

import argparse
import sys

import numpy as np

from .automaton import CellularAutomaton, PREDEFINED_RULES, DISPLAY_STEP_LIMIT, get_rule
from .config import EvolutionConfig
from .search import GeneticAlgorithm, evaluate_rule


def format_row(config: np.ndarray) -> str:
    return "".join("#" if cell else "." for cell in config)


def cmd_evolve(args):
    """Run the genetic algorithm."""
    try:
        config = EvolutionConfig.from_args(args)
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)

    print(f"Starting evolution...")
    print(f"  Population: {config.population_size}")
    print(f"  Mutation rate: {config.mutation_rate}")
    print(f"  Generations: {config.generations}")
    print(f"  Lattice size: {config.lattice_size}")
    print()

    ga = GeneticAlgorithm.from_config(config)
    result = ga.run(config.generations, config.lattice_size, verbose=True)

    if result.best_rule is None:
        print("\nNo generations were run.")
        return

    print(f"\nBest rule found: {result.best_rule.to_hex()}")
    print(f"Fitness: {result.best_fitness:.4f}")


def cmd_simulate(args):
    """Run a single automaton and print its space-time diagram."""
    rng = np.random.default_rng(args.seed)
    try:
        rule = get_rule(args.rule, rng)
        ca = CellularAutomaton(args.lattice_size, rule, rng=rng)
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)

    if not args.quiet:
        print(format_row(ca.configuration))
    while len(ca.history) < args.steps and not ca.is_converged():
        ca.step()
        if not args.quiet:
            print(format_row(ca.configuration))

    if not args.quiet:
        print()
    print(f"Rule:            {ca.rule.to_hex()}")
    print(f"Steps:           {len(ca.history) - 1}")
    print(f"Initial density: {ca.initial_density:.4f}")
    print(f"Expected:        {'ALL 1s' if ca.correct_classification else 'ALL 0s'}")
    print(f"Result:          {ca.classification_label()}")
    print(f"Particles:       {len(ca.particles)}")
    print(f"Fitness:         {ca.get_fitness():.1f}")


def cmd_evaluate(args):
    """Evaluate a rule's mean classification fitness."""
    rng = np.random.default_rng(args.seed)
    try:
        rule = get_rule(args.rule, rng)
        fitness = evaluate_rule(rule, args.lattice_size, rng=rng, test_cases=args.trials)
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)

    print(f"Rule:     {rule.to_hex()}")
    print(f"Lambda:   {rule.lambda_parameter():.4f}")
    print(f"Trials:   {args.trials}")
    print(f"Fitness:  {fitness:.4f}")


def cmd_rules(args):
    """List the predefined rules."""
    print(f"{'Name':<10}{'Lambda':<10}{'Hex'}")
    print("-" * 52)
    for name, rule in PREDEFINED_RULES.items():
        print(f"{name:<10}{rule.lambda_parameter():<10.4f}{rule.to_hex()}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Evolve 1D cellular automata for the density classification task"
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    evolve_parser = subparsers.add_parser("evolve", help="Run the genetic algorithm")
    evolve_parser.add_argument("-g", "--generations", type=int, default=50, help="Number of generations")
    evolve_parser.add_argument("-p", "--population", dest="population_size", type=int, default=50, help="Population size")
    evolve_parser.add_argument("-m", "--mutation", dest="mutation_rate", type=float, default=0.02, help="Mutation rate")
    evolve_parser.add_argument("--lattice-size", type=int, default=149, help="Lattice size for fitness trials")
    evolve_parser.add_argument("--seed", type=int, default=None, help="Random seed")
    evolve_parser.set_defaults(func=cmd_evolve)

    sim_parser = subparsers.add_parser("simulate", help="Run one automaton")
    sim_parser.add_argument("rule", type=str, help="'random', a predefined name, or 32 hex digits")
    sim_parser.add_argument("--lattice-size", type=int, default=149, help="Lattice size")
    sim_parser.add_argument("--steps", type=int, default=DISPLAY_STEP_LIMIT, help="Maximum history rows")
    sim_parser.add_argument("--seed", type=int, default=None, help="Random seed")
    sim_parser.add_argument("-q", "--quiet", action="store_true", help="Only print the summary")
    sim_parser.set_defaults(func=cmd_simulate)

    eval_parser = subparsers.add_parser("evaluate", help="Evaluate a rule's fitness")
    eval_parser.add_argument("rule", type=str, help="'random', a predefined name, or 32 hex digits")
    eval_parser.add_argument("--lattice-size", type=int, default=149, help="Lattice size")
    eval_parser.add_argument("--trials", type=int, default=10, help="Number of trials to average")
    eval_parser.add_argument("--seed", type=int, default=None, help="Random seed")
    eval_parser.set_defaults(func=cmd_evaluate)

    rules_parser = subparsers.add_parser("rules", help="List predefined rules")
    rules_parser.set_defaults(func=cmd_rules)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    args.func(args)


if __name__ == "__main__":
    main()
