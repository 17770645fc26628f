import pytest

from polyedge.constants import Direction
from polyedge.core.evaluator import StrategyEvaluator, create_evaluator
from polyedge.core.models import BaseModel, BaselineModel, RandomModel
from polyedge.core.ta_model import TAModel
from polyedge.utils.quote import MarketQuote


class FixedModel(BaseModel):
    def __init__(self, name, direction, confidence, should_trade=True):
        super().__init__(name=name)
        self.direction = direction
        self.confidence = confidence
        self.trade = should_trade

    def evaluate(self, candles, quote, remaining_minutes=None):
        edge = self.calculate_edge(self.direction, self.confidence, quote)
        return self.create_result(self.direction, self.confidence, edge, self.trade, "fixed")


class BrokenModel(BaseModel):
    def evaluate(self, candles, quote, remaining_minutes=None):
        raise RuntimeError("boom")


def test_default_models():
    ev = StrategyEvaluator()
    assert [type(m) for m in ev.models] == [TAModel, BaselineModel]


def test_rejects_non_models():
    with pytest.raises(TypeError):
        StrategyEvaluator([object()])
    ev = StrategyEvaluator([])
    with pytest.raises(TypeError):
        ev.add_model("not a model")


def test_failing_model_is_isolated(even_quote):
    ev = StrategyEvaluator([BrokenModel("Broken"), FixedModel("A", Direction.UP, 0.7)])
    run = ev.evaluate([], even_quote)
    assert len(run.results) == 2
    broken = run.results[0]
    assert broken.model == "Broken"
    assert broken.direction is None
    assert broken.confidence == 0.0
    assert broken.should_trade is False
    assert broken.reason == "Error: boom"
    assert ev.get_model_recommendation(run).model == "A"


def test_recommendation_picks_highest_edge(even_quote):
    ev = StrategyEvaluator([
        FixedModel("low", Direction.UP, 0.6),
        FixedModel("high", Direction.DOWN, 0.8),
        FixedModel("idle", Direction.UP, 0.95, should_trade=False),
    ])
    ev.evaluate([], even_quote)
    rec = ev.get_model_recommendation()
    assert rec.model == "high"
    assert rec.edge == pytest.approx(0.3)


def test_recommendation_tie_goes_to_first_registered(even_quote):
    ev = StrategyEvaluator([
        FixedModel("first", Direction.UP, 0.7),
        FixedModel("second", Direction.DOWN, 0.7),
    ])
    ev.evaluate([], even_quote)
    assert ev.get_model_recommendation().model == "first"


def test_no_recommendation_without_trade(even_quote):
    ev = StrategyEvaluator([BaselineModel()])
    assert ev.get_model_recommendation() is None
    ev.evaluate([], even_quote)
    assert ev.get_model_recommendation() is None


def test_summary_shape(uptrend, even_quote):
    ev = StrategyEvaluator()
    assert ev.get_summary() == {"evaluated": False, "message": "No evaluation performed yet"}

    ev.evaluate(uptrend, even_quote, remaining_minutes=7)
    summary = ev.get_summary()
    assert summary["evaluated"] is True
    assert summary["market_prices"] == {"up": "50.0%", "down": "50.0%"}
    assert summary["remaining_minutes"] == 7
    assert summary["candle_count"] == len(uptrend)
    assert [m["model"] for m in summary["models"]] == ["TA-Model", "Baseline-Model"]
    assert summary["recommendation"]["model"] == "TA-Model"
    assert summary["recommendation"]["direction"] == "Up"


def test_compare_models(uptrend, even_quote):
    ev = StrategyEvaluator()
    run = ev.evaluate(uptrend, even_quote)
    rows = ev.compare_models("down", run)
    ta, baseline = rows
    assert ta["predicted"] == "Up"
    assert ta["actual"] == "Down"
    assert ta["traded_incorrectly"] is True
    assert baseline["correctly_avoided"] is True

    rows = ev.compare_models(Direction.UP)
    assert rows[0]["traded_correctly"] is True
    assert ev.compare_models("sideways") is None


def test_registry_helpers():
    ev = create_evaluator(include_random=True, seed=1)
    assert [m.name for m in ev.models] == ["TA-Model", "Baseline-Model", "Random-Model"]
    assert isinstance(ev.get_model("Random-Model"), RandomModel)
    assert ev.remove_model("Random-Model") is True
    assert ev.remove_model("Random-Model") is False
    assert ev.get_model("Random-Model") is None


def test_results_passed_explicitly_ignore_cache(even_quote):
    ev = StrategyEvaluator([FixedModel("A", Direction.UP, 0.7)])
    first = ev.evaluate([], even_quote)
    ev.evaluate([], MarketQuote(up=0.9, down=0.1))
    assert ev.get_model_recommendation(first).edge == pytest.approx(0.2)
    assert ev.get_model_recommendation().edge == pytest.approx(-0.2)
