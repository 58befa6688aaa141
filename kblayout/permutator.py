"""Permutation of the movable keys of a layout string."""

from __future__ import annotations

import random
from typing import List, Sequence


class LayoutPermutator:
    """Split a layout into fixed and permutable keys and rebuild layout strings.

    A permutation is a list of target positions, one per permutable key in
    the order those keys appear in the layout given to the constructor.
    """

    def __init__(self, layout: str, fixed: str) -> None:
        self._perm_keys: List[str] = []
        self._perm_indices: List[int] = []
        self._fixed_keys: List[str] = []
        self._fixed_indices: List[int] = []
        self._rng = random.Random()

        for index, char in enumerate(layout):
            if char in fixed:
                self._fixed_keys.append(char)
                self._fixed_indices.append(index)
            else:
                self._perm_keys.append(char)
                self._perm_indices.append(index)

    def generate_string(self, permutation: Sequence[int]) -> str:
        """Build a layout string placing each permutable key at its given position."""
        result = ["-"] * (len(self._fixed_keys) + len(self._perm_keys))
        for index, char in zip(self._fixed_indices, self._fixed_keys):
            result[index] = char
        for index, char in zip(permutation, self._perm_keys):
            result[index] = char
        return "".join(result)

    def generate_random(self) -> List[int]:
        """A random permutation of the permutable positions."""
        indices = list(self._perm_indices)
        self._rng.shuffle(indices)
        return indices

    def perform_n_swaps(self, permutation: Sequence[int], nr_switches: int) -> List[int]:
        """Swap ``nr_switches`` random pairs of entries of the permutation."""
        indices = list(permutation)
        if nr_switches > 0 and len(indices) < 2:
            raise ValueError("At least two permutable keys are needed to swap")
        for _ in range(nr_switches):
            first, second = self._rng.sample(range(len(indices)), 2)
            indices[first], indices[second] = indices[second], indices[first]
        return indices

    def switch_n_keys(self, permutation: Sequence[int], n_keys: int) -> List[int]:
        """Randomly reassign up to ``n_keys`` entries of the permutation among themselves."""
        indices = list(permutation)
        sources = self._rng.sample(range(len(permutation)), min(n_keys, len(permutation)))
        targets = list(sources)
        self._rng.shuffle(targets)
        for source, target in zip(sources, targets):
            indices[target] = permutation[source]
        return indices

    def get_permutable_indices(self) -> List[int]:
        """Positions of the permutable keys in the layout given to the constructor."""
        return list(self._perm_indices)