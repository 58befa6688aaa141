"""Unigram, bigram and trigram frequency data used for layout evaluation."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import (
    Callable,
    Dict,
    Hashable,
    Iterable,
    Iterator,
    MutableMapping,
    Tuple,
    TypeVar,
)

log = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)


@dataclass
class IncreaseCommonNgramsConfig:
    """Parameters for raising the weight of already common ngrams."""

    enabled: bool = True
    critical_fraction: float = 0.001
    factor: float = 2.0
    total_weight_threshold: float = 20.0


@dataclass
class NgramsConfig:
    """Configuration parameters for ngram processing."""

    increase_common_ngrams: IncreaseCommonNgramsConfig = field(
        default_factory=IncreaseCommonNgramsConfig
    )


def increase_common_ngrams(
    symbol_weights: MutableMapping[Hashable, float],
    config: IncreaseCommonNgramsConfig,
) -> None:
    """Raise, in place, the weights of ngrams above the critical fraction."""
    if not config.enabled:
        return

    total_weight = sum(symbol_weights.values())
    critical_point = config.critical_fraction * total_weight

    for key, weight in symbol_weights.items():
        if weight > critical_point and total_weight > config.total_weight_threshold:
            symbol_weights[key] = weight + (weight - critical_point) * (config.factor - 1.0)


def _unescape(s: str) -> str:
    return s.replace("\\n", "\n").replace("\\\\", "\\")


def _escape(s: str) -> str:
    return s.replace("\\", "\\\\").replace("\n", "\\n")


def _lines(data: str) -> Iterator[str]:
    """Split on line feeds only, dropping a trailing carriage return per line."""
    parts = data.split("\n")
    if parts and parts[-1] == "":
        parts.pop()
    for line in parts:
        yield line[:-1] if line.endswith("\r") else line


def _format_weight(weight: float) -> str:
    """Format a weight as a plain decimal number without exponent."""
    if math.isnan(weight):
        return "NaN"
    if math.isinf(weight):
        return "inf" if weight > 0 else "-inf"
    if weight.is_integer():
        if weight == 0 and math.copysign(1.0, weight) < 0:
            return "-0"
        return str(int(weight))
    return format(Decimal(repr(weight)), "f")


def _accumulate(pairs: Iterable[Tuple[K, float]]) -> Dict[K, float]:
    grams: Dict[K, float] = {}
    for key, weight in pairs:
        grams[key] = grams.get(key, 0.0) + weight
    return grams


def _windows(text: str, size: int) -> Iterator[Tuple[str, ...]]:
    """Sliding windows of ``size`` characters, ignoring carriage returns."""
    chars = text.replace("\r", "")
    return zip(*(chars[offset:] for offset in range(size)))


def _frequency_entries(data: str, label: str) -> Iterator[Tuple[float, str]]:
    """Yield ``(weight, ngram)`` from lines of the form ``<weight> <ngram>``."""
    for line in _lines(data):
        parts = line.lstrip().split(" ", 1)
        if len(parts) < 2:
            raise ValueError(f"Malformed {label} line: {line!r}")
        yield float(parts[0]), _unescape(parts[1])


def _ngram_chars(ngram: str, label: str, size: int) -> Tuple[str, ...]:
    chars = tuple(ngram)
    if len(chars) != size:
        log.info("Len of %s %r is unequal %d: %r", label, ngram, size, chars)
    if len(chars) < size:
        raise ValueError(f"{label} entry {ngram!r} has fewer than {size} characters")
    return chars[:size]


def _tops(grams: Dict[K, float], fraction: float, label: str) -> Dict[K, float]:
    target_weight = fraction * sum(grams.values())
    accumulated = 0.0
    kept: Dict[K, float] = {}
    for key, weight in sorted(grams.items(), key=lambda kv: kv[1], reverse=True):
        if not accumulated < target_weight:
            break
        accumulated += weight
        kept[key] = weight
    log.info(
        "%s: Reducing from originally %d to the top %d ngrams.",
        label,
        len(grams),
        len(kept),
    )
    return kept


def _save(
    grams: Dict[K, float],
    filename: str | Path,
    key_chars: Callable[[K], Tuple[str, ...]],
) -> None:
    path = Path(filename)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise OSError(f"Unable to create directory '{path}': {exc}") from exc

    ordered = sorted(grams.items(), key=lambda kv: kv[1], reverse=True)
    try:
        with path.open("w", encoding="utf-8", newline="") as out:
            for key, weight in ordered:
                text = "".join(_escape(c) for c in key_chars(key))
                out.write(f"{_format_weight(weight)} {text}\n")
    except OSError as exc:
        raise OSError(f"Unable to create file '{path}': {exc}") from exc


def _increased(grams: Dict[K, float], params: IncreaseCommonNgramsConfig) -> Dict[K, float]:
    result = dict(grams)
    increase_common_ngrams(result, params)
    return result


@dataclass
class Unigrams:
    """Single characters with their frequencies (weights)."""

    grams: Dict[str, float] = field(default_factory=dict)

    @classmethod
    def from_text(cls, text: str) -> "Unigrams":
        """Count the characters of a text, ignoring carriage returns."""
        return cls(_accumulate((window[0], 1.0) for window in _windows(text, 1)))

    @classmethod
    def from_frequencies_str(cls, data: str) -> "Unigrams":
        """Read unigrams from lines of the form ``<weight> <unigram>``."""

        def entries() -> Iterator[Tuple[str, float]]:
            for weight, ngram in _frequency_entries(data, "Unigrams"):
                if len(ngram) != 1:
                    log.error("Len of unigram %r is unequal one: %r", ngram, list(ngram))
                yield (ngram[0] if ngram else " "), weight

        return cls(_accumulate(entries()))

    @classmethod
    def from_file(cls, filename: str | Path) -> "Unigrams":
        """Read unigrams and weights from a frequency file."""
        return cls.from_frequencies_str(Path(filename).read_text(encoding="utf-8"))

    def total_weight(self) -> float:
        """Total weight of all unigrams."""
        return sum(self.grams.values())

    def tops(self, fraction: float) -> "Unigrams":
        """Keep only the most common unigrams up to the given combined fraction."""
        return Unigrams(_tops(self.grams, fraction, "Unigrams"))

    def exclude_char(self, exclude: str) -> "Unigrams":
        """Drop the given character."""
        return Unigrams({c: w for c, w in self.grams.items() if c != exclude})

    def save_frequencies(self, filename: str | Path) -> None:
        """Write the unigrams, most common first, to a frequency file."""
        _save(self.grams, filename, lambda key: (key,))

    def increase_common(self, params: IncreaseCommonNgramsConfig) -> "Unigrams":
        """Return a copy with the weights of common unigrams increased."""
        return Unigrams(_increased(self.grams, params))


@dataclass
class Bigrams:
    """Pairs of characters with their frequencies (weights)."""

    grams: Dict[Tuple[str, str], float] = field(default_factory=dict)

    @classmethod
    def from_text(cls, text: str) -> "Bigrams":
        """Count the bigrams of a text, ignoring carriage returns."""
        return cls(_accumulate((window, 1.0) for window in _windows(text, 2)))

    @classmethod
    def from_frequencies_str(cls, data: str) -> "Bigrams":
        """Read bigrams from lines of the form ``<weight> <bigram>``."""
        return cls(
            _accumulate(
                (_ngram_chars(ngram, "Bigrams", 2), weight)
                for weight, ngram in _frequency_entries(data, "Bigrams")
            )
        )

    @classmethod
    def from_file(cls, filename: str | Path) -> "Bigrams":
        """Read bigrams and weights from a frequency file."""
        return cls.from_frequencies_str(Path(filename).read_text(encoding="utf-8"))

    def total_weight(self) -> float:
        """Total weight of all bigrams."""
        return sum(self.grams.values())

    def tops(self, fraction: float) -> "Bigrams":
        """Keep only the most common bigrams up to the given combined fraction."""
        return Bigrams(_tops(self.grams, fraction, "Bigrams"))

    def exclude_char(self, exclude: str) -> "Bigrams":
        """Drop every bigram that contains the given character."""
        return Bigrams({k: w for k, w in self.grams.items() if exclude not in k})

    def save_frequencies(self, filename: str | Path) -> None:
        """Write the bigrams, most common first, to a frequency file."""
        _save(self.grams, filename, tuple)

    def increase_common(self, params: IncreaseCommonNgramsConfig) -> "Bigrams":
        """Return a copy with the weights of common bigrams increased."""
        return Bigrams(_increased(self.grams, params))


@dataclass
class Trigrams:
    """Triples of characters with their frequencies (weights)."""

    grams: Dict[Tuple[str, str, str], float] = field(default_factory=dict)

    @classmethod
    def from_text(cls, text: str) -> "Trigrams":
        """Count the trigrams of a text, ignoring carriage returns."""
        return cls(_accumulate((window, 1.0) for window in _windows(text, 3)))

    @classmethod
    def from_frequencies_str(cls, data: str) -> "Trigrams":
        """Read trigrams from lines of the form ``<weight> <trigram>``."""
        return cls(
            _accumulate(
                (_ngram_chars(ngram, "Trigrams", 3), weight)
                for weight, ngram in _frequency_entries(data, "Trigrams")
            )
        )

    @classmethod
    def from_file(cls, filename: str | Path) -> "Trigrams":
        """Read trigrams and weights from a frequency file."""
        return cls.from_frequencies_str(Path(filename).read_text(encoding="utf-8"))

    def total_weight(self) -> float:
        """Total weight of all trigrams."""
        return sum(self.grams.values())

    def tops(self, fraction: float) -> "Trigrams":
        """Keep only the most common trigrams up to the given combined fraction."""
        return Trigrams(_tops(self.grams, fraction, "Trigrams"))

    def exclude_char(self, exclude: str) -> "Trigrams":
        """Drop every trigram that contains the given character."""
        return Trigrams({k: w for k, w in self.grams.items() if exclude not in k})

    def save_frequencies(self, filename: str | Path) -> None:
        """Write the trigrams, most common first, to a frequency file."""
        _save(self.grams, filename, tuple)

    def increase_common(self, params: IncreaseCommonNgramsConfig) -> "Trigrams":
        """Return a copy with the weights of common trigrams increased."""
        return Trigrams(_increased(self.grams, params))