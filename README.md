# kblayout

Building blocks for evaluating and optimizing keyboard layouts from ngram
statistics: ngram frequency data, the splitting of higher-layer keys into
base keys and modifiers, aggregation of metric results, and two optimizers
(simulated annealing and a genetic algorithm) that search over permutations
of a layout string.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Modules

### `kblayout.ngrams`

`Unigrams`, `Bigrams` and `Trigrams` hold a `grams` dictionary mapping a
character (unigrams) or a tuple of characters (bigrams, trigrams) to a weight.

- `from_text(text)` counts the ngrams of a text; carriage returns are ignored.
- `from_frequencies_str(data)` and `from_file(filename)` read frequency data:
  one entry per line, a weight, a single space and the ngram. In the ngram,
  `\n` stands for a line break and `\\` for a backslash. Weights of repeated
  entries are added. A bigram or trigram entry with too few characters raises
  `ValueError`, as does a line without a space.
- `total_weight()` is the sum of all weights.
- `tops(fraction)` keeps the most common ngrams until their combined weight
  reaches the given fraction of the total.
- `exclude_char(c)` drops every ngram containing `c`.
- `save_frequencies(filename)` writes the ngrams, most common first, in the
  same format, creating parent directories as needed.
- `increase_common(params)` returns a copy in which ngrams above
  `params.critical_fraction` of the total weight are boosted linearly by
  `params.factor`, provided the total weight exceeds
  `params.total_weight_threshold` and `params.enabled` is set.

`IncreaseCommonNgramsConfig` (defaults: enabled, critical fraction 0.001,
factor 2.0, threshold 20.0) and `NgramsConfig` hold these settings;
`increase_common_ngrams(weights, config)` applies the boost to a mapping in
place.

### `kblayout.modifier_combinations`

For a symbol reached by holding modifiers and pressing a base key:

- `take_one_layerkey(base_key, modifiers, weight)` yields the base key and
  each modifier as unigrams.
- `take_two_layerkey(base_key, modifiers, weight, same_key_mod_factor)` yields
  each `(modifier, base_key)` bigram and both orders of every modifier pair,
  the latter scaled by `same_key_mod_factor`.
- `take_three_layerkey(...)` yields trigrams of two modifiers followed by the
  base key (scaled once) and all orders of three modifiers (scaled twice);
  nothing with fewer than two modifiers.
- `insert_or_add_weight(grams, key, weight)` adds to a weight mapping.

### `kblayout.results`

- `Normalization` (with `fixed`, `weight_found`, `weight_all` constructors and
  a `NormalizationKind`) says how a metric's cost is divided: by a fixed
  value, by the value times the mapped ngram weight, or by the value times
  all ngram weight. A NaN result becomes 0.
- `MetricResult` is one metric's name, cost, optional message, weight and
  normalization.
- `MetricResults` groups results of one `MetricType` (`LAYOUT`, `UNIGRAM`,
  `BIGRAM`, `TRIGRAM`) with the found and not-found ngram weights.
  `add_result` stores a `NormalizedMetricResult`; `total_cost()` and
  `unnormalized_total_cost()` aggregate the weighted costs.
- `EvaluationResult` holds a layout string and its `MetricResults`;
  `total_cost()` sums the non-empty groups and `optimization_score()` is
  `1e8 / total_cost`, truncated and clamped to the range of an unsigned
  64-bit integer. Iterating it yields the groups; `str()` gives a readable
  report.

All result classes offer `to_dict()` and `from_dict()` for serialization.

### `kblayout.sval`

`SvalKeyDirection.from_key(key, closest_center)` tells whether a key (any
object with a `matrix_position`) is the center of its cluster or lies north,
south, east or west of it; a key in neither row nor column of the center
raises `ValueError`.

### `kblayout.permutator`

`LayoutPermutator(layout, fixed)` splits a layout string into fixed keys
(those in `fixed`) and permutable ones. A permutation is a list of target
positions for the permutable keys.

- `get_permutable_indices()` is the identity permutation (the original layout).
- `generate_random()` is a random permutation.
- `generate_string(permutation)` builds the layout string.
- `perform_n_swaps(permutation, n)` swaps `n` random pairs.
- `switch_n_keys(permutation, n)` shuffles `n` random entries among themselves.

### `kblayout.annealing`

`optimize(process_name, params, layout_str, fixed_characters, cost_function,
start_with_layout=False, cache=None, observer=None)` runs simulated annealing
and returns the best layout string and its cost. `cost_function` maps a
layout string to a cost (lower is better). An optional `cache` mapping stores
costs by layout string. `observer`, if given, is called with an
`IterationState` after every iteration; otherwise progress is logged through
`logging`.

`AnnealingParameters` (defaults: initial temperature 150, one key switch per
step, stop after 5000 iterations without acceptance, at most 100 000
iterations) can be read with `from_yaml`. When `init_temp` is `None`, the
initial temperature is the spread of costs along a random walk of 100
neighbouring layouts (`cost_standard_deviation`). `correct_init_temp()`
replaces a non-positive temperature by the smallest positive float.

### `kblayout.genetic`

`optimize(params, layout_str, fixed_characters, fitness_function,
start_with_layout=False, cache_results=True)` runs a genetic algorithm and
returns the best layout string and its fitness. `fitness_function` maps a
layout string to an integer (higher is better). Each generation selects the
fittest individuals, mutates them by swapping two keys, and reinserts them
into the population.

`GeneticParameters` (population 100, 2000 generations, 2 individuals per
parent group, selection ratio 0.7, mutation rate 0.1, reinsertion ratio 0.7)
can be read with `from_yaml`, which requires every parameter.
`cycle_crossover(parents, rng)` performs cycle crossover between neighbouring
parents.

## Example

```python
from kblayout.ngrams import Bigrams, IncreaseCommonNgramsConfig
from kblayout.annealing import AnnealingParameters, optimize

bigrams = Bigrams.from_text("the quick brown fox")
common = bigrams.tops(0.5).increase_common(IncreaseCommonNgramsConfig())

def cost(layout: str) -> float:
    return float(layout.index("e"))

best, best_cost = optimize(
    "demo", AnnealingParameters(max_iters=500), "abcdef", "a", cost
)
print(best, best_cost)
```

## What is not included

The package does not model keyboards or layouts itself: there is no layout
generator, no metric implementations and no evaluator that turns a layout
string into an `EvaluationResult`. The optimizers therefore take a cost or
fitness function supplied by the caller. There is no command-line program,
web service or storage of evaluated layouts.