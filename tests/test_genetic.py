import random

import pytest

from kblayout.genetic import GeneticParameters, cycle_crossover, optimize


class _FixedRng:
    def __init__(self, value):
        self.value = value

    def randrange(self, stop):
        return self.value


TARGET = "afedcb"


def _matches(layout):
    return sum(a == b for a, b in zip(layout, TARGET))


def test_default_parameters():
    params = GeneticParameters()
    assert params.population_size == 100
    assert params.generation_limit == 2000
    assert params.num_individuals_per_parents == 2
    assert params.selection_ratio == 0.7
    assert params.mutation_rate == 0.1
    assert params.reinsertion_ratio == 0.7


def test_from_yaml_reads_all_fields(tmp_path):
    path = tmp_path / "params.yml"
    path.write_text(
        "population_size: 12\n"
        "generation_limit: 5\n"
        "num_individuals_per_parents: 3\n"
        "selection_ratio: 0.5\n"
        "mutation_rate: 0.25\n"
        "reinsertion_ratio: 1\n",
        encoding="utf-8",
    )
    params = GeneticParameters.from_yaml(path)
    assert params == GeneticParameters(12, 5, 3, 0.5, 0.25, 1.0)


def test_from_yaml_missing_field(tmp_path):
    path = tmp_path / "params.yml"
    path.write_text("population_size: 12\n", encoding="utf-8")
    with pytest.raises(ValueError):
        GeneticParameters.from_yaml(path)


def test_from_yaml_rejects_negative_count(tmp_path):
    path = tmp_path / "params.yml"
    path.write_text(
        "population_size: -1\ngeneration_limit: 5\nnum_individuals_per_parents: 2\n"
        "selection_ratio: 0.5\nmutation_rate: 0.1\nreinsertion_ratio: 0.5\n",
        encoding="utf-8",
    )
    with pytest.raises(ValueError):
        GeneticParameters.from_yaml(path)


def test_cycle_crossover_worked_example():
    a = [0, 1, 2, 3]
    b = [1, 0, 3, 2]
    children = cycle_crossover([a, b], _FixedRng(0))
    assert children == [[0, 1, 3, 2], [1, 0, 2, 3]]


def test_cycle_crossover_children_are_permutations():
    rng = random.Random(3)
    parents = []
    for _ in range(4):
        genome = list(range(10))
        rng.shuffle(genome)
        parents.append(genome)
    children = cycle_crossover(parents, rng)
    assert len(children) == len(parents)
    for index, child in enumerate(children):
        p1 = parents[index]
        p2 = parents[(index + 1) % len(parents)]
        assert sorted(child) == list(range(10))
        assert all(c in (x, y) for c, x, y in zip(child, p1, p2))


def test_cycle_crossover_identical_parents():
    genome = [4, 2, 0, 1, 3]
    children = cycle_crossover([genome, list(genome)], random.Random(1))
    assert children == [genome, genome]


def test_cycle_crossover_single_parent_yields_nothing():
    assert cycle_crossover([[0, 1, 2]], random.Random(1)) == []


def test_cycle_crossover_mismatched_values():
    with pytest.raises(ValueError):
        cycle_crossover([[0, 1], [2, 3]], _FixedRng(0))


def test_optimize_keeps_fixed_and_permutes():
    params = GeneticParameters(
        population_size=10,
        generation_limit=15,
        num_individuals_per_parents=2,
        selection_ratio=0.7,
        mutation_rate=0.5,
        reinsertion_ratio=0.7,
    )
    layout, fitness = optimize(params, "abcdef", "a", _matches, False, True)
    assert layout[0] == "a"
    assert sorted(layout) == sorted("abcdef")
    assert fitness == _matches(layout)


def test_optimize_never_worse_than_start():
    params = GeneticParameters(6, 8, 2, 0.7, 0.3, 0.7)
    layout, fitness = optimize(params, "abcdef", "a", _matches, True, False)
    assert fitness >= _matches("abcdef")
    assert fitness == _matches(layout)


def test_optimize_cache_evaluates_each_layout_once():
    calls = []

    def fitness(layout):
        calls.append(layout)
        return _matches(layout)

    params = GeneticParameters(8, 10, 2, 0.7, 0.5, 0.7)
    layout, best = optimize(params, "abcdef", "", fitness, False, True)
    assert len(calls) == len(set(calls))
    assert layout in calls
    assert best == _matches(layout)
    assert best == max(_matches(seen) for seen in calls)


def test_optimize_single_generation_from_layout():
    params = GeneticParameters(4, 1, 2, 0.7, 0.1, 0.7)
    layout, fitness = optimize(params, "abcdef", "", _matches, True, True)
    assert layout == "abcdef"
    assert fitness == _matches("abcdef")


def test_optimize_rejects_empty_population():
    params = GeneticParameters(0, 5, 2, 0.7, 0.1, 0.7)
    with pytest.raises(ValueError):
        optimize(params, "abc", "", _matches, False, True)