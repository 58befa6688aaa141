"""Layout optimization with a genetic algorithm over permutations of keys."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import yaml

from kblayout.permutator import LayoutPermutator

log = logging.getLogger(__name__)

FitnessFunction = Callable[[str], int]
Genome = List[int]

_COUNT_FIELDS = ("population_size", "generation_limit", "num_individuals_per_parents")
_RATIO_FIELDS = ("selection_ratio", "mutation_rate", "reinsertion_ratio")


@dataclass
class GeneticParameters:
    """Parameters for a genetic optimization run."""

    population_size: int = 100
    generation_limit: int = 2000
    num_individuals_per_parents: int = 2
    selection_ratio: float = 0.7
    mutation_rate: float = 0.1
    reinsertion_ratio: float = 0.7

    @classmethod
    def from_yaml(cls, filename: str | Path) -> "GeneticParameters":
        """Read parameters from a YAML file; every parameter must be present."""
        with open(filename, encoding="utf-8") as handle:
            data = yaml.safe_load(handle)
        if not isinstance(data, dict):
            raise ValueError(f"Expected a mapping of parameters in '{filename}'")

        missing = [name for name in _COUNT_FIELDS + _RATIO_FIELDS if name not in data]
        if missing:
            raise ValueError(f"Missing parameters in '{filename}': {', '.join(missing)}")

        values: Dict[str, object] = {}
        for name in _COUNT_FIELDS:
            value = data[name]
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ValueError(f"Parameter '{name}' must be a non-negative integer")
            values[name] = value
        for name in _RATIO_FIELDS:
            value = data[name]
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValueError(f"Parameter '{name}' must be a number")
            values[name] = float(value)
        return cls(**values)  # type: ignore[arg-type]


def cycle_crossover(parents: Sequence[Sequence[int]], rng: random.Random) -> List[Genome]:
    """Cycle crossover of each parent with the next one (the last with the first).

    One cycle, started at a random position, is copied from the first parent;
    all other positions come from the second parent.
    """
    if len(parents) < 2:
        return []
    children: List[Genome] = []
    for p1, p2 in zip(parents, list(parents[1:]) + [parents[0]]):
        length = len(p1)
        if length == 0:
            raise ValueError("Cannot cross over empty genomes")
        if len(p2) != length:
            raise ValueError("Parents must have the same length")
        position = {value: index for index, value in enumerate(p1)}

        def locate(value: int) -> int:
            try:
                return position[value]
            except KeyError:
                raise ValueError(f"Value {value!r} is missing from the first parent") from None

        offspring: List[Optional[int]] = [None] * length
        start = rng.randrange(length)
        offspring[start] = p1[start]
        index = locate(p2[start])
        while index != start:
            offspring[index] = p1[index]
            index = locate(p2[index])

        children.append(
            [own if own is not None else other for own, other in zip(offspring, p2)]
        )
    return children


def _select_parents(
    population: List[Genome],
    fitness: List[int],
    params: GeneticParameters,
) -> List[List[Genome]]:
    """Take the fittest individuals, grouped into tuples of parents."""
    num_parents = int(len(population) * params.selection_ratio + 0.5)
    ranked = sorted(range(len(population)), key=lambda i: fitness[i], reverse=True)
    pool: List[List[Genome]] = []
    cursor = 0
    for _ in range(num_parents):
        group = []
        for _ in range(params.num_individuals_per_parents):
            group.append(list(population[ranked[cursor % len(ranked)]]))
            cursor += 1
        pool.append(group)
    return pool


def _mutate(genome: Genome, rate: float, rng: random.Random) -> Genome:
    """Swap two random genes with the given probability."""
    if len(genome) >= 2 and rng.random() < rate:
        first, second = rng.sample(range(len(genome)), 2)
        genome[first], genome[second] = genome[second], genome[first]
    return genome


def _reinsert(
    population: List[Genome],
    offspring: List[Genome],
    params: GeneticParameters,
    rng: random.Random,
) -> List[Genome]:
    """Replace part of the population by randomly chosen offspring."""
    size = len(population)
    num_offspring = min(len(offspring), size, int(size * params.reinsertion_ratio + 0.5))
    chosen = rng.sample(offspring, num_offspring)
    survivors = rng.sample(population, size - num_offspring)
    return chosen + survivors


def optimize(
    params: GeneticParameters,
    layout_str: str,
    fixed_characters: str,
    fitness_function: FitnessFunction,
    start_with_layout: bool = False,
    cache_results: bool = True,
) -> Tuple[str, int]:
    """Run the genetic optimization and return the best layout and its fitness.

    ``fitness_function`` maps a layout string to a fitness value; higher is
    better. With ``cache_results`` every distinct layout is evaluated once.
    """
    if params.population_size < 1:
        raise ValueError("Population size must be at least one")
    if params.generation_limit < 1:
        raise ValueError("Generation limit must be at least one")
    if params.num_individuals_per_parents < 1:
        raise ValueError("Each parent group needs at least one individual")

    rng = random.Random()
    permutator = LayoutPermutator(layout_str, fixed_characters)
    base = permutator.get_permutable_indices()
    population: List[Genome] = []
    for _ in range(params.population_size):
        genome = list(base)
        if not start_with_layout:
            rng.shuffle(genome)
        population.append(genome)

    cache: Optional[Dict[str, int]] = {} if cache_results else None

    def evaluate(genome: Sequence[int]) -> int:
        layout = permutator.generate_string(genome)
        if cache is None:
            return fitness_function(layout)
        if layout not in cache:
            cache[layout] = fitness_function(layout)
        return cache[layout]

    log.info("Starting optimization with: %r", params)
    best: Optional[Tuple[int, Genome]] = None

    for generation in range(1, params.generation_limit + 1):
        fitness = [evaluate(genome) for genome in population]
        top = max(range(len(population)), key=lambda i: fitness[i])
        if best is None or fitness[top] > best[0]:
            if best is not None:
                log.info(
                    "New best in generation %d (pop: %d): %s (fitness: %d)",
                    generation,
                    len(population),
                    permutator.generate_string(population[top]),
                    fitness[top],
                )
            best = (fitness[top], list(population[top]))
        log.info(
            "Generation %d: average_fitness: %d, best fitness: %d, all time best: %d, "
            "generation's best: %s",
            generation,
            sum(fitness) // len(fitness),
            fitness[top],
            best[0],
            permutator.generate_string(population[top]),
        )
        if generation == params.generation_limit:
            break

        parents = _select_parents(population, fitness, params)
        offspring = [
            _mutate(child, params.mutation_rate, rng)
            for group in parents
            for child in group
        ]
        population = _reinsert(population, offspring, params, rng)

    assert best is not None
    best_layout = permutator.generate_string(best[1])
    log.info("Final result after generation %d: %s", params.generation_limit, best_layout)
    return best_layout, best[0]