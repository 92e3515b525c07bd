"""Metric logging helpers for pipeline stages."""

from __future__ import annotations

from knowledge_federation.models.domain import FanOutResult, RankedResult
from knowledge_federation.observability.logger import get_logger

logger = get_logger("metrics")


def log_fan_out_metrics(trace_id: str, result: FanOutResult, cached: bool = False) -> None:
    logger.info(
        "fan_out_metrics",
        trace_id=trace_id,
        items=len(result.items),
        failed_sources=result.failed,
        timed_out_sources=result.timed_out,
        cached=cached,
    )


def log_ranking_metrics(trace_id: str, candidates: int, ranked: list[RankedResult]) -> None:
    logger.info(
        "ranking_metrics",
        trace_id=trace_id,
        candidates=candidates,
        kept=len(ranked),
        dropped=candidates - len(ranked),
        top_scores=[round(r.score, 2) for r in ranked[:5]],
    )


def log_latency(trace_id: str, stage: str, duration_ms: float) -> None:
    logger.info(
        "latency",
        trace_id=trace_id,
        stage=stage,
        duration_ms=round(duration_ms, 2),
    )
