"""Aggregation and presentation of per-object outcomes."""

from pathlib import Path
from typing import Iterable, Optional

from .models import ObjectOutcome, RunSummary
from .observability import MetricsCollector
from .protocols import LoggerProtocol


def summarize_outcomes(outcomes: Iterable[ObjectOutcome]) -> RunSummary:
    """
    Aggregate per-object outcomes into run totals.

    Args:
        outcomes: One outcome per attempted source object

    Returns:
        RunSummary with the totals and the outcomes in their original order
    """
    outcome_list = list(outcomes)
    return RunSummary(
        objects_attempted=len(outcome_list),
        objects_with_failures=sum(1 for o in outcome_list if o.has_failures),
        objects_failed_fetch=sum(1 for o in outcome_list if o.fetch_error),
        variants_published=sum(o.published_count for o in outcome_list),
        variants_failed=sum(o.failed_count for o in outcome_list),
        outcomes=outcome_list,
    )


def write_summary_json(summary: RunSummary, path: str) -> Path:
    """Write the summary as JSON and return the written path."""
    target = Path(path)
    target.write_text(summary.model_dump_json(indent=2), encoding="utf-8")
    return target


class ResultReporter:
    """Logs a finished run: every object, its locations, then the totals."""

    def __init__(self, logger: LoggerProtocol):
        self._logger = logger

    def report(
        self,
        summary: RunSummary,
        total_time: float = 0.0,
        metrics_collector: Optional[MetricsCollector] = None,
    ) -> None:
        self._logger.info("=" * 80)
        self._logger.info("PROCESSING COMPLETED")
        self._logger.info("=" * 80)

        for outcome in summary.outcomes:
            self._logger.info(outcome.source_key)
            if outcome.fetch_error:
                self._logger.warning(f"  fetch failed: {outcome.fetch_error}")
            for variant in outcome.variants:
                self._logger.info(f"  {variant.variant_name}: {variant.location}")
            for failure in outcome.failures:
                self._logger.warning(
                    f"  {failure.variant_name}: {failure.stage} failed: {failure.error}"
                )

        self._logger.info("=" * 80)
        self._logger.info(f"Total execution time: {total_time:.1f}s")
        self._logger.info(f"Images attempted: {summary.objects_attempted}")
        self._logger.info(f"Images with failures: {summary.objects_with_failures}")
        self._logger.info(f"Variants published: {summary.variants_published}")
        self._logger.info(f"Variants failed: {summary.variants_failed}")

        if metrics_collector is not None:
            for operation in metrics_collector.operations():
                stats = metrics_collector.get_summary(operation)
                self._logger.info(
                    f"  {operation}: {stats['total_operations']} calls, "
                    f"{stats['failed_operations']} failed, "
                    f"avg {stats['avg_duration'] * 1000:.1f}ms"
                )

        self._logger.info("=" * 80)
