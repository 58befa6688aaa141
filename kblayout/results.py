"""Results of metric evaluations and their normalized aggregation."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional

_USIZE_MAX = 2**64 - 1


def _divide(numerator: float, denominator: float) -> float:
    """Floating point division that yields inf/NaN instead of raising."""
    try:
        return numerator / denominator
    except ZeroDivisionError:
        if numerator == 0 or math.isnan(numerator):
            return math.nan
        sign = math.copysign(1.0, numerator) * math.copysign(1.0, denominator)
        return math.copysign(math.inf, sign)


def _fmt(value: float, precision: int) -> str:
    """Fixed-point formatting with NaN and infinity spelled out."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    return f"{value:.{precision}f}"


class NormalizationKind(Enum):
    """How the total cost of a metric evaluation is normalized."""

    FIXED = "fixed"
    WEIGHT_FOUND = "weight_found"
    WEIGHT_ALL = "weight_all"


@dataclass(frozen=True)
class Normalization:
    """A normalization strategy together with its fixed value."""

    kind: NormalizationKind
    value: float

    @classmethod
    def fixed(cls, value: float) -> "Normalization":
        """Divide the cost by a fixed value."""
        return cls(NormalizationKind.FIXED, value)

    @classmethod
    def weight_found(cls, value: float) -> "Normalization":
        """Divide the cost by the value times the weight of mapped ngrams."""
        return cls(NormalizationKind.WEIGHT_FOUND, value)

    @classmethod
    def weight_all(cls, value: float) -> "Normalization":
        """Divide the cost by the value times the weight of all ngrams."""
        return cls(NormalizationKind.WEIGHT_ALL, value)

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.kind.value, "value": self.value}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Normalization":
        return cls(NormalizationKind(data["type"]), float(data["value"]))


class MetricType(Enum):
    """Which data a metric operates on."""

    LAYOUT = "Layout"
    UNIGRAM = "Unigram"
    BIGRAM = "Bigram"
    TRIGRAM = "Trigram"


@dataclass
class MetricResult:
    """The result of an individual metric evaluation."""

    name: str
    cost: float
    message: Optional[str]
    weight: float
    normalization: Normalization

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "cost": self.cost,
            "message": self.message,
            "weight": self.weight,
            "normalization": self.normalization.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MetricResult":
        return cls(
            name=data["name"],
            cost=float(data["cost"]),
            message=data.get("message"),
            weight=float(data["weight"]),
            normalization=Normalization.from_dict(data["normalization"]),
        )


@dataclass
class NormalizedMetricResult:
    """A metric result with its normalized weighted and unweighted cost."""

    core: MetricResult
    weighted_cost: float
    unweighted_cost: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "core": self.core.to_dict(),
            "weighted_cost": self.weighted_cost,
            "unweighted_cost": self.unweighted_cost,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NormalizedMetricResult":
        return cls(
            core=MetricResult.from_dict(data["core"]),
            weighted_cost=float(data["weighted_cost"]),
            unweighted_cost=float(data["unweighted_cost"]),
        )


@dataclass
class MetricResults:
    """Metric results that all operate on the same kind of data."""

    metric_type: MetricType
    found_weight: float
    not_found_weight: float
    metric_costs: List[NormalizedMetricResult] = field(default_factory=list)

    def add_result(self, metric_cost: MetricResult) -> None:
        """Normalize a metric result and append it."""
        self.metric_costs.append(
            NormalizedMetricResult(
                core=metric_cost,
                weighted_cost=self._compute_metric_cost(metric_cost, True, True),
                unweighted_cost=self._compute_metric_cost(metric_cost, True, False),
            )
        )

    def _normalize_value(self, value: float, normalization: Normalization) -> float:
        t = normalization.value
        if normalization.kind is NormalizationKind.FIXED:
            result = _divide(value, t)
        elif normalization.kind is NormalizationKind.WEIGHT_FOUND:
            result = _divide(value, t * self.found_weight)
        else:
            result = _divide(value, t * (self.found_weight + self.not_found_weight))
        # a zero cost is preferred over NaN
        return 0.0 if math.isnan(result) else result

    def _compute_metric_cost(
        self, metric_cost: MetricResult, normalize: bool, weight: bool
    ) -> float:
        cost = metric_cost.weight * metric_cost.cost if weight else metric_cost.cost
        if normalize:
            return self._normalize_value(cost, metric_cost.normalization)
        return cost

    def _aggregate_metric_costs(self, normalize: bool, weight: bool) -> float:
        return sum(
            (self._compute_metric_cost(m.core, normalize, weight) for m in self.metric_costs),
            0.0,
        )

    def total_cost(self) -> float:
        """Weighted and normalized total cost of all metrics."""
        return self._aggregate_metric_costs(True, True)

    def unnormalized_total_cost(self) -> float:
        """Weighted but not normalized total cost of all metrics."""
        return self._aggregate_metric_costs(False, True)

    def __str__(self) -> str:
        lines = [f"{self.metric_type.value} metrics:"]
        if self.metric_type is not MetricType.LAYOUT:
            total = self.not_found_weight + self.found_weight
            percent = _divide(100.0 * self.not_found_weight, total)
            lines.append(f"  Not found: {_fmt(percent, 4)}% of {_fmt(total, 4)}")
        for metric_cost in self.metric_costs:
            cost = _fmt(metric_cost.weighted_cost, 2).rjust(7)
            name = metric_cost.core.name.ljust(35)
            message = metric_cost.core.message or ""
            lines.append(f"  {cost} {name} | {message}")
        return "".join(line + "\n" for line in lines)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "metric_type": self.metric_type.value,
            "found_weight": self.found_weight,
            "not_found_weight": self.not_found_weight,
            "metric_costs": [m.to_dict() for m in self.metric_costs],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MetricResults":
        return cls(
            metric_type=MetricType(data["metric_type"]),
            found_weight=float(data["found_weight"]),
            not_found_weight=float(data["not_found_weight"]),
            metric_costs=[NormalizedMetricResult.from_dict(m) for m in data["metric_costs"]],
        )


@dataclass
class EvaluationResult:
    """The complete evaluation of a layout across all metric types."""

    layout: str
    individual_results: List[MetricResults] = field(default_factory=list)

    def total_cost(self) -> float:
        """Sum of the total costs of all non-empty metric groups."""
        return sum(
            (r.total_cost() for r in self.individual_results if r.metric_costs), 0.0
        )

    def optimization_score(self) -> int:
        """Score that grows as the total cost shrinks, saturated to an unsigned range."""
        score = _divide(1e8, self.total_cost())
        if math.isnan(score) or score <= 0:
            return 0
        if math.isinf(score) or score >= _USIZE_MAX:
            return _USIZE_MAX
        return int(score)

    def __iter__(self) -> Iterator[MetricResults]:
        return iter(self.individual_results)

    def __str__(self) -> str:
        parts = [f"{results}\n" for results in self.individual_results]
        parts.append(
            f"Cost: {_fmt(self.total_cost(), 2)} "
            f"(optimization score: {self.optimization_score()})\n"
        )
        return "".join(parts)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "layout": self.layout,
            "individual_results": [r.to_dict() for r in self.individual_results],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EvaluationResult":
        return cls(
            layout=data["layout"],
            individual_results=[MetricResults.from_dict(r) for r in data["individual_results"]],
        )