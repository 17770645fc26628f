"""
Strategy evaluator: runs every registered model over the same tick and
picks the strongest trading recommendation.

A failing model never aborts the pass; it is replaced by a zero-confidence
no-trade result carrying the error.

`last_run` is a single-writer cache: one evaluator must not serve
overlapping evaluate() calls. Use one evaluator per concurrent context,
or pass the returned EvaluationRun around explicitly.
"""
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, Sequence

from ..config import TAConfig
from ..constants import Direction
from ..utils.candle import Candle
from ..utils.logger import log
from ..utils.quote import MarketQuote
from .models import BaseModel, BaselineModel, EvaluationResult, RandomModel
from .ta_model import TAModel

@dataclass
class EvaluationRun:
    results: list[EvaluationResult]
    quote: Optional[MarketQuote]
    remaining_minutes: Optional[int]
    candle_count: int
    evaluation_time_ms: float
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

class StrategyEvaluator:
    def __init__(self, models: Optional[list[BaseModel]] = None):
        self.models: list[BaseModel] = list(models) if models is not None else [
            TAModel(),
            BaselineModel(),
        ]
        for m in self.models:
            self._check_model(m)
        self.last_run: Optional[EvaluationRun] = None

    @staticmethod
    def _check_model(model):
        if not isinstance(model, BaseModel):
            raise TypeError(f"Invalid model {model!r}: must be a BaseModel")

    # ------------------------------------------------------------------
    def evaluate(self, candles: Sequence[Candle], quote: MarketQuote,
                 remaining_minutes: Optional[int] = None) -> EvaluationRun:
        t0 = time.perf_counter()
        results: list[EvaluationResult] = []

        for model in self.models:
            try:
                results.append(model.evaluate(candles, quote, remaining_minutes))
            except Exception as e:
                log.error("Model %s failed: %s", model.name, e, exc_info=True)
                results.append(EvaluationResult(
                    model=model.name,
                    direction=None,
                    confidence=0.0,
                    edge=0.0,
                    should_trade=False,
                    reason=f"Error: {e}",
                ))

        try:
            candle_count = len(candles) if candles is not None else 0
        except TypeError:
            candle_count = 0

        run = EvaluationRun(
            results=results,
            quote=quote,
            remaining_minutes=remaining_minutes,
            candle_count=candle_count,
            evaluation_time_ms=(time.perf_counter() - t0) * 1000,
        )
        self.last_run = run
        log.debug("Evaluation complete: %d models in %.1fms", len(results), run.evaluation_time_ms)
        return run

    def _run(self, run: Optional[EvaluationRun]) -> Optional[EvaluationRun]:
        return run if run is not None else self.last_run

    def get_model_recommendation(self, run: Optional[EvaluationRun] = None
                                 ) -> Optional[EvaluationResult]:
        """Highest-edge result that wants to trade. Equal edges: first registered model wins."""
        run = self._run(run)
        if run is None:
            return None
        best: Optional[EvaluationResult] = None
        for r in run.results:
            if r.should_trade and (best is None or r.edge > best.edge):
                best = r
        return best

    def get_all_results(self, run: Optional[EvaluationRun] = None) -> list[EvaluationResult]:
        run = self._run(run)
        return list(run.results) if run else []

    def get_summary(self, run: Optional[EvaluationRun] = None) -> dict:
        run = self._run(run)
        if run is None:
            return {"evaluated": False, "message": "No evaluation performed yet"}

        rec = self.get_model_recommendation(run)
        quote = run.quote if isinstance(run.quote, MarketQuote) else None
        return {
            "evaluated": True,
            "timestamp": run.timestamp,
            "market_prices": {
                "up": f"{quote.up:.1%}",
                "down": f"{quote.down:.1%}",
            } if quote else None,
            "remaining_minutes": run.remaining_minutes,
            "candle_count": run.candle_count,
            "evaluation_time_ms": round(run.evaluation_time_ms, 3),
            "models": [
                {
                    "model": r.model,
                    "direction": r.direction.value if r.direction else None,
                    "confidence": f"{r.confidence:.1%}",
                    "edge": f"{r.edge:.1%}",
                    "should_trade": r.should_trade,
                }
                for r in run.results
            ],
            "recommendation": {
                "model": rec.model,
                "direction": rec.direction.value if rec.direction else None,
                "edge": f"{rec.edge:.1%}",
                "reason": rec.reason,
            } if rec else None,
        }

    def compare_models(self, actual_outcome, run: Optional[EvaluationRun] = None
                       ) -> Optional[list[dict]]:
        """Backtesting helper: grade each model's call against the realized direction."""
        run = self._run(run)
        actual = Direction.parse(actual_outcome)
        if run is None or actual is None:
            return None

        comparison = []
        for r in run.results:
            correct = r.direction is actual
            comparison.append({
                "model": r.model,
                "predicted": r.direction.value if r.direction else None,
                "actual": actual.value,
                "correct": correct,
                "should_trade": r.should_trade,
                "edge": r.edge,
                "traded_correctly": r.should_trade and correct,
                "traded_incorrectly": r.should_trade and not correct,
                "correctly_avoided": not r.should_trade and not correct,
            })
        return comparison

    # ------------------------------------------------------------------
    def add_model(self, model: BaseModel):
        self._check_model(model)
        self.models.append(model)

    def remove_model(self, name: str) -> bool:
        before = len(self.models)
        self.models = [m for m in self.models if m.name != name]
        return len(self.models) < before

    def get_model(self, name: str) -> Optional[BaseModel]:
        return next((m for m in self.models if m.name == name), None)

def create_evaluator(ta_config: Optional[TAConfig] = None, include_random: bool = False,
                     seed: Optional[int] = None) -> StrategyEvaluator:
    """Standard model set: TA + baseline, optionally the random sanity check."""
    ta_config = ta_config or TAConfig()
    models: list[BaseModel] = [
        TAModel(ta_config),
        BaselineModel(edge_threshold=ta_config.edge_threshold),
    ]
    if include_random:
        models.append(RandomModel(edge_threshold=ta_config.edge_threshold, seed=seed))
    return StrategyEvaluator(models)
