"""Layout optimization by simulated annealing over permutations of keys."""

from __future__ import annotations

import logging
import math
import random
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, MutableMapping, Optional, Sequence, Tuple

import yaml

from kblayout.permutator import LayoutPermutator

log = logging.getLogger(__name__)

CostFunction = Callable[[str], float]
Observer = Callable[["IterationState"], None]

_USED_NEIGHBORS = 100
_LOG_EVERY = 100


@dataclass
class AnnealingParameters:
    """Parameters for a simulated annealing run."""

    init_temp: Optional[float] = 150.0
    """Initial temperature; computed from the cost spread when ``None``."""
    key_switches: int = 1
    """Number of key pairs swapped in each modification of the layout."""
    stall_accepted: int = 5000
    """Stop after this many iterations without an accepted solution."""
    max_iters: int = 100_000
    """Maximum number of iterations."""

    @classmethod
    def from_yaml(cls, filename: str | Path) -> "AnnealingParameters":
        """Read parameters from a YAML file."""
        with open(filename, encoding="utf-8") as handle:
            data = yaml.safe_load(handle)
        if not isinstance(data, dict):
            raise ValueError(f"Expected a mapping of parameters in '{filename}'")

        missing = [
            name for name in ("key_switches", "stall_accepted", "max_iters") if name not in data
        ]
        if missing:
            raise ValueError(f"Missing parameters in '{filename}': {', '.join(missing)}")

        counts = {}
        for name in ("key_switches", "stall_accepted", "max_iters"):
            value = data[name]
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ValueError(f"Parameter '{name}' must be a non-negative integer")
            counts[name] = value

        init_temp = data.get("init_temp")
        return cls(
            init_temp=None if init_temp is None else float(init_temp),
            **counts,
        )

    def correct_init_temp(self) -> None:
        """Replace a non-positive initial temperature by the smallest positive float."""
        if self.init_temp is not None and self.init_temp <= 0.0:
            self.init_temp = sys.float_info.min


@dataclass
class IterationState:
    """Snapshot of the annealing run after one iteration."""

    iteration: int
    param: List[int]
    cost: float
    prev_cost: float
    best_param: List[int]
    best_cost: float
    prev_best_param: Optional[List[int]]
    temperature: float
    accepted: bool
    is_best: bool
    layout: str
    best_layout: str


def cost_standard_deviation(
    initial_indices: Sequence[int],
    cost_function: CostFunction,
    permutator: LayoutPermutator,
    key_pair_switches: int,
) -> float:
    """Standard deviation of the costs along a random walk of neighbouring layouts.

    The value serves as an initial temperature for simulated annealing.
    """
    costs: List[float] = []
    current = list(initial_indices)
    for _ in range(_USED_NEIGHBORS):
        costs.append(cost_function(permutator.generate_string(current)))
        current = permutator.perform_n_swaps(current, key_pair_switches)

    average = sum(costs) / len(costs)
    variance = sum((cost - average) ** 2 for cost in costs) / _USED_NEIGHBORS
    return math.sqrt(variance)


def _acceptance_probability(cost_increase: float, temperature: float) -> float:
    exponent = cost_increase / temperature
    if exponent > 700.0:
        return 0.0
    return 1.0 / (1.0 + math.exp(exponent))


def _default_observer(process_name: str) -> Observer:
    prefix = f"{process_name}:"

    def observe(state: IterationState) -> None:
        if state.is_best:
            reason = "First tested layout:" if state.iteration == 0 else "New best:"
            log.info("%s %s %s (%6.1f)", prefix, reason, state.best_layout, state.best_cost)
        if state.iteration > 0 and state.iteration % _LOG_EVERY == 0:
            log.info(
                "%s n: %3d, current: %s (%6.1f), best: %s (%6.1f), temp: %.5f°",
                prefix,
                state.iteration,
                state.layout,
                state.cost,
                state.best_layout,
                state.best_cost,
                state.temperature,
            )

    return observe


def optimize(
    process_name: str,
    params: AnnealingParameters,
    layout_str: str,
    fixed_characters: str,
    cost_function: CostFunction,
    start_with_layout: bool = False,
    cache: Optional[MutableMapping[str, float]] = None,
    observer: Optional[Observer] = None,
) -> Tuple[str, float]:
    """Run one simulated annealing optimization and return the best layout and its cost.

    ``cost_function`` maps a layout string to its cost. If ``cache`` is given,
    costs are looked up in and stored to it by layout string. If ``observer``
    is given it is called after every iteration instead of the default logging.
    """
    permutator = LayoutPermutator(layout_str, fixed_characters)
    initial = (
        permutator.get_permutable_indices()
        if start_with_layout
        else permutator.generate_random()
    )
    prefix = f"{process_name}:"

    def evaluate(indices: Sequence[int]) -> float:
        layout = permutator.generate_string(indices)
        if cache is None:
            return cost_function(layout)
        if layout in cache:
            return cache[layout]
        value = cost_function(layout)
        cache[layout] = value
        return value

    init_temp = params.init_temp
    if init_temp is None:
        log.info("%s Calculating initial temperature", prefix)
        init_temp = cost_standard_deviation(
            initial, cost_function, permutator, params.key_switches
        )
        log.info("%s Initial temperature = %s°", prefix, init_temp)
    if not init_temp > 0.0:
        raise ValueError("Initial temperature must be positive")

    notify = observer if observer is not None else _default_observer(process_name)
    log.info(
        "%s Starting optimization with: initial_temperature: %.2f°, %r",
        prefix,
        init_temp,
        params,
    )

    rng = random.Random()
    param = list(initial)
    cost = evaluate(param)
    best_param, best_cost = list(param), cost
    prev_best_param: Optional[List[int]] = None
    temperature = init_temp
    stall_iterations = 0
    iteration = 0

    while iteration < params.max_iters:
        candidate = permutator.perform_n_swaps(param, params.key_switches)
        candidate_cost = evaluate(candidate)
        used_temperature = temperature
        accepted = candidate_cost < cost or _acceptance_probability(
            candidate_cost - cost, used_temperature
        ) > rng.random()
        temperature = init_temp / (iteration + 2)

        prev_cost = cost
        if accepted:
            param, cost = candidate, candidate_cost
            stall_iterations = 0
        else:
            stall_iterations += 1

        new_best = cost < best_cost
        if new_best:
            prev_best_param = best_param
            best_param, best_cost = list(param), cost

        notify(
            IterationState(
                iteration=iteration,
                param=list(param),
                cost=cost,
                prev_cost=prev_cost,
                best_param=list(best_param),
                best_cost=best_cost,
                prev_best_param=None if prev_best_param is None else list(prev_best_param),
                temperature=used_temperature,
                accepted=accepted,
                is_best=new_best or iteration == 0,
                layout=permutator.generate_string(param),
                best_layout=permutator.generate_string(best_param),
            )
        )
        iteration += 1
        if stall_iterations > params.stall_accepted:
            break

    return permutator.generate_string(best_param), best_cost