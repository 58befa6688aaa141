import json
import math

import pytest

from kblayout.results import (
    EvaluationResult,
    MetricResult,
    MetricResults,
    MetricType,
    Normalization,
    NormalizationKind,
)


def _metric(name="m", cost=10.0, weight=2.0, normalization=None, message=None):
    return MetricResult(
        name=name,
        cost=cost,
        message=message,
        weight=weight,
        normalization=normalization or Normalization.fixed(4.0),
    )


def test_add_result_fixed_normalization():
    results = MetricResults(MetricType.UNIGRAM, 100.0, 0.0)
    results.add_result(_metric())
    entry = results.metric_costs[0]
    assert entry.weighted_cost == 5.0
    assert entry.unweighted_cost == 2.5


def test_nan_cost_becomes_zero():
    results = MetricResults(MetricType.BIGRAM, 0.0, 0.0)
    results.add_result(_metric(cost=0.0, normalization=Normalization.weight_found(1.0)))
    assert results.metric_costs[0].weighted_cost == 0.0


def test_division_by_zero_weight_gives_infinity():
    results = MetricResults(MetricType.BIGRAM, 0.0, 0.0)
    results.add_result(_metric(cost=3.0, normalization=Normalization.weight_all(1.0)))
    assert math.isinf(results.metric_costs[0].weighted_cost)
    assert results.metric_costs[0].weighted_cost > 0


def test_weight_all_equals_weight_found_without_missing_weight():
    found = MetricResults(MetricType.TRIGRAM, 50.0, 0.0)
    found.add_result(_metric(normalization=Normalization.weight_found(3.0)))
    every = MetricResults(MetricType.TRIGRAM, 50.0, 0.0)
    every.add_result(_metric(normalization=Normalization.weight_all(3.0)))
    assert found.total_cost() == pytest.approx(every.total_cost())


def test_weight_all_is_smaller_when_weight_missing():
    found = MetricResults(MetricType.TRIGRAM, 50.0, 50.0)
    found.add_result(_metric(normalization=Normalization.weight_found(1.0)))
    every = MetricResults(MetricType.TRIGRAM, 50.0, 50.0)
    every.add_result(_metric(normalization=Normalization.weight_all(1.0)))
    assert every.total_cost() < found.total_cost()


def test_total_cost_is_sum_of_weighted_costs():
    results = MetricResults(MetricType.UNIGRAM, 10.0, 5.0)
    results.add_result(_metric("a", cost=1.5, weight=3.0))
    results.add_result(_metric("b", cost=7.0, weight=0.5, normalization=Normalization.weight_found(2.0)))
    expected = sum(m.weighted_cost for m in results.metric_costs)
    assert results.total_cost() == pytest.approx(expected)


def test_unnormalized_matches_total_with_unit_fixed_normalization():
    results = MetricResults(MetricType.LAYOUT, 0.0, 0.0)
    results.add_result(_metric(normalization=Normalization.fixed(1.0)))
    results.add_result(_metric(cost=4.0, weight=1.5, normalization=Normalization.fixed(1.0)))
    assert results.unnormalized_total_cost() == pytest.approx(results.total_cost())


def test_evaluation_total_cost_sums_groups():
    a = MetricResults(MetricType.UNIGRAM, 10.0, 0.0)
    a.add_result(_metric())
    b = MetricResults(MetricType.BIGRAM, 10.0, 0.0)
    b.add_result(_metric(cost=3.0))
    empty = MetricResults(MetricType.TRIGRAM, 10.0, 0.0)
    evaluation = EvaluationResult("abc", [a, b, empty])
    assert evaluation.total_cost() == pytest.approx(a.total_cost() + b.total_cost())


def test_optimization_score_for_unit_cost():
    results = MetricResults(MetricType.LAYOUT, 0.0, 0.0)
    results.add_result(_metric(cost=1.0, weight=1.0, normalization=Normalization.fixed(1.0)))
    assert EvaluationResult("x", [results]).optimization_score() == 100_000_000


def test_optimization_score_saturates_for_zero_cost():
    assert EvaluationResult("x", []).optimization_score() == 2**64 - 1


def test_optimization_score_negative_cost_is_zero():
    results = MetricResults(MetricType.LAYOUT, 0.0, 0.0)
    results.add_result(_metric(cost=-1.0, weight=1.0, normalization=Normalization.fixed(1.0)))
    assert EvaluationResult("x", [results]).optimization_score() == 0


def test_iteration_yields_groups_in_order():
    groups = [MetricResults(t, 1.0, 0.0) for t in MetricType]
    evaluation = EvaluationResult("layout", groups)
    assert list(evaluation) == groups


def test_layout_group_display_has_no_not_found_line():
    results = MetricResults(MetricType.LAYOUT, 0.0, 0.0)
    results.add_result(_metric(name="Shortcut keys", message="detail"))
    text = str(results)
    assert text.startswith("Layout metrics:\n")
    assert "Not found" not in text
    assert "Shortcut keys" in text
    assert text.rstrip("\n").endswith("| detail")


def test_ngram_group_display_has_not_found_line():
    results = MetricResults(MetricType.UNIGRAM, 3.0, 1.0)
    text = str(results)
    assert text.splitlines()[0] == "Unigram metrics:"
    assert text.splitlines()[1].startswith("  Not found: ")


def test_evaluation_display_ends_with_cost_line():
    results = MetricResults(MetricType.LAYOUT, 0.0, 0.0)
    results.add_result(_metric(cost=1.0, weight=1.0, normalization=Normalization.fixed(1.0)))
    text = str(EvaluationResult("x", [results]))
    assert text.splitlines()[-1] == "Cost: 1.00 (optimization score: 100000000)"


def test_normalization_serialized_form():
    assert Normalization.weight_found(1.0).to_dict() == {"type": "weight_found", "value": 1.0}
    assert Normalization.from_dict({"type": "fixed", "value": 2}).kind is NormalizationKind.FIXED


def test_evaluation_round_trip_through_json():
    results = MetricResults(MetricType.BIGRAM, 8.0, 2.0)
    results.add_result(_metric(message="note", normalization=Normalization.weight_all(1.0)))
    evaluation = EvaluationResult("qwertz", [results])
    restored = EvaluationResult.from_dict(json.loads(json.dumps(evaluation.to_dict())))
    assert restored == evaluation
    assert restored.total_cost() == evaluation.total_cost()


def test_unknown_normalization_type_rejected():
    with pytest.raises(ValueError):
        Normalization.from_dict({"type": "bogus", "value": 1.0})