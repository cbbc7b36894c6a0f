"""Tests for result aggregation and reporting."""

import json

from image_variants.core.models import ObjectOutcome, ProcessedVariant, VariantFailure
from image_variants.core.observability import MetricsCollector
from image_variants.core.reporting import ResultReporter, summarize_outcomes, write_summary_json
from image_variants.testing.fakes import FakeLogger


def _outcomes():
    published = ObjectOutcome(
        source_key="pics/a.jpg",
        variants=[
            ProcessedVariant(
                variant_name="default",
                derived_key="pics/a-default.jpg",
                location="s3://bucket/pics/a-default.jpg",
                content_type="image/jpeg",
                size_bytes=10,
            ),
            ProcessedVariant(
                variant_name="sd_320x180",
                derived_key="pics/a-sd_320x180.jpg",
                location="s3://bucket/pics/a-sd_320x180.jpg",
                content_type="image/jpeg",
                size_bytes=5,
            ),
        ],
        failures=[VariantFailure(variant_name="hd_1280x720", stage="publish", error="PublishError: denied")],
    )
    not_fetched = ObjectOutcome(source_key="pics/b.png", fetch_error="FetchError: gone")
    clean = ObjectOutcome(
        source_key="pics/c.png",
        variants=[
            ProcessedVariant(
                variant_name="default",
                derived_key="pics/c-default.png",
                location="s3://bucket/pics/c-default.png",
            )
        ],
    )
    return [published, not_fetched, clean]


class TestSummarizeOutcomes:
    """Tests for summarize_outcomes."""

    def test_totals(self):
        """Test counters across objects."""
        summary = summarize_outcomes(_outcomes())

        assert summary.objects_attempted == 3
        assert summary.objects_with_failures == 2
        assert summary.objects_failed_fetch == 1
        assert summary.variants_published == 3
        assert summary.variants_failed == 1
        assert [o.source_key for o in summary.outcomes] == ["pics/a.jpg", "pics/b.png", "pics/c.png"]

    def test_empty(self):
        """Test an empty run has zero totals."""
        summary = summarize_outcomes([])
        assert summary.objects_attempted == 0
        assert summary.variants_published == 0
        assert summary.outcomes == []


class TestWriteSummaryJson:
    """Tests for write_summary_json."""

    def test_writes_json(self, tmp_path):
        """Test the summary is written as parseable JSON."""
        target = write_summary_json(summarize_outcomes(_outcomes()), str(tmp_path / "summary.json"))

        data = json.loads(target.read_text(encoding="utf-8"))
        assert data["variants_published"] == 3
        assert data["outcomes"][0]["variants"][1]["location"] == "s3://bucket/pics/a-sd_320x180.jpg"
        assert data["outcomes"][1]["fetch_error"] == "FetchError: gone"


class TestResultReporter:
    """Tests for ResultReporter."""

    def test_report_lists_locations_and_failures(self):
        """Test every published location and every failure is logged."""
        logger = FakeLogger()

        ResultReporter(logger).report(summarize_outcomes(_outcomes()), total_time=1.25)

        info = [log["message"] for log in logger.get_logs("INFO")]
        warnings = [log["message"] for log in logger.get_logs("WARNING")]
        assert "  default: s3://bucket/pics/a-default.jpg" in info
        assert "  sd_320x180: s3://bucket/pics/a-sd_320x180.jpg" in info
        assert "Total execution time: 1.2s" in info or "Total execution time: 1.3s" in info
        assert "Variants published: 3" in info
        assert "Variants failed: 1" in info
        assert "  hd_1280x720: publish failed: PublishError: denied" in warnings
        assert "  fetch failed: FetchError: gone" in warnings

    def test_report_includes_metrics(self):
        """Test per-operation metrics are summarized when collected."""
        logger = FakeLogger()
        metrics = MetricsCollector()
        metrics.record("fetch", 0.0, True)

        ResultReporter(logger).report(summarize_outcomes([]), metrics_collector=metrics)

        assert any(
            log["message"].startswith("  fetch: 1 calls, 0 failed") for log in logger.get_logs("INFO")
        )
