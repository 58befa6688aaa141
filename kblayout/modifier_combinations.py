"""Expand a key and the modifiers that reach it into weighted ngrams.

A symbol on a higher layer is typed by holding one or more modifiers and
pressing a base key. These helpers yield the unigrams, bigrams and trigrams
that such a key press produces on its own.
"""

from __future__ import annotations

from itertools import combinations
from typing import Hashable, Iterator, MutableMapping, Sequence, Tuple, TypeVar

K = TypeVar("K", bound=Hashable)


def take_one_layerkey(
    base_key: K, modifiers: Sequence[K], weight: float
) -> Iterator[Tuple[K, float]]:
    """Yield the base key, then each modifier, all with the given weight."""
    yield base_key, weight
    for modifier in modifiers:
        yield modifier, weight


def take_two_layerkey(
    base_key: K,
    modifiers: Sequence[K],
    weight: float,
    same_key_mod_factor: float,
) -> Iterator[Tuple[Tuple[K, K], float]]:
    """Yield bigrams of each modifier with the base key and of modifier pairs.

    For every modifier ``m1`` the bigram ``(m1, base_key)`` comes first with the
    plain weight, followed, for every later modifier ``m2``, by ``(m1, m2)`` and
    ``(m2, m1)`` with the weight scaled by ``same_key_mod_factor``.
    """
    pair_weight = weight * same_key_mod_factor
    for index, first in enumerate(modifiers):
        yield (first, base_key), weight
        for second in modifiers[index + 1:]:
            yield (first, second), pair_weight
            yield (second, first), pair_weight


def take_three_layerkey(
    base_key: K,
    modifiers: Sequence[K],
    weight: float,
    same_key_mod_factor: float,
) -> Iterator[Tuple[Tuple[K, K, K], float]]:
    """Yield trigrams combining two modifiers with the base key, or three modifiers.

    With fewer than two modifiers nothing is yielded. For each pair of
    modifiers both orders followed by the base key are yielded with the weight
    scaled once by ``same_key_mod_factor``; for each further modifier all six
    orders of the three modifiers follow, scaled twice.
    """
    pair_weight = weight * same_key_mod_factor
    triple_weight = weight * same_key_mod_factor * same_key_mod_factor
    for i, outer in enumerate(modifiers):
        for j in range(i + 1, len(modifiers)):
            middle = modifiers[j]
            yield (outer, middle, base_key), pair_weight
            yield (middle, outer, base_key), pair_weight
            for inner in modifiers[j + 1:]:
                yield (outer, middle, inner), triple_weight
                yield (outer, inner, middle), triple_weight
                yield (middle, outer, inner), triple_weight
                yield (middle, inner, outer), triple_weight
                yield (inner, outer, middle), triple_weight
                yield (inner, middle, outer), triple_weight


def insert_or_add_weight(
    grams: MutableMapping[K, float], key: K, weight: float
) -> None:
    """Add ``weight`` to the entry for ``key``, creating it if missing."""
    grams[key] = grams.get(key, 0.0) + weight


__all__ = [
    "take_one_layerkey",
    "take_two_layerkey",
    "take_three_layerkey",
    "insert_or_add_weight",
    "combinations",
][:4]