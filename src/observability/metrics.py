"""
Prometheus metrics for monitoring the signal network.

Defines and exposes metrics for:
- Beat claims and reclaims
- Signal filing and corrections
- Brief compilation
- Bounties posted
- Rate-limit denials
- Revenue credited to correspondents

Metrics are exposed via HTTP endpoint for Prometheus scraping.
"""

import logging

from prometheus_client import (
    REGISTRY,
    Counter,
    Histogram,
    start_http_server,
)

from src.config.settings import get_settings

logger = logging.getLogger(__name__)

# Buckets for latency histograms (in seconds)
LATENCY_BUCKETS = (0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0)


class MetricsCollector:
    """
    Prometheus metrics collector for the signal network.

    Usage:
        metrics = get_metrics()
        metrics.start_server()

        metrics.record_signal_filed(beat_slug="bitcoin-macro")
        metrics.record_rate_limited("signals")
    """

    def __init__(self):
        """Initialize Prometheus metrics."""

        self.beats_claimed = Counter(
            "signal_network_beats_claimed_total",
            "Total beat claims",
            ["kind"],  # kind: new, reclaim
        )

        self.beats_expired = Counter(
            "signal_network_beats_expired_total",
            "Total beats flipped to inactive by the staleness check",
        )

        self.signals_filed = Counter(
            "signal_network_signals_filed_total",
            "Total signals filed",
            ["beat"],
        )

        self.signals_corrected = Counter(
            "signal_network_signals_corrected_total",
            "Total signal corrections",
        )

        self.briefs_compiled = Counter(
            "signal_network_briefs_compiled_total",
            "Total brief compilations",
            ["mode"],  # mode: window, fallback
        )

        self.brief_compile_latency = Histogram(
            "signal_network_brief_compile_latency_seconds",
            "Time to compile a brief",
            buckets=LATENCY_BUCKETS,
        )

        self.bounties_created = Counter(
            "signal_network_bounties_created_total",
            "Total bounties posted",
        )

        self.rate_limited = Counter(
            "signal_network_rate_limited_total",
            "Total requests denied by a rate limit",
            ["action"],
        )

        self.revenue_credited = Counter(
            "signal_network_revenue_credited_sats_total",
            "Total sats credited to correspondents",
        )

        self.payments_settled = Counter(
            "signal_network_payments_settled_total",
            "Total brief payments by outcome",
            ["status"],  # status: settled, rejected, error
        )

        logger.info("Prometheus metrics initialized")

    def start_server(self, port: int | None = None) -> None:
        """
        Start Prometheus metrics HTTP server.

        Args:
            port: Port to expose metrics on (default from settings)
        """
        settings = get_settings()
        port = port or settings.metrics_port

        start_http_server(port, registry=REGISTRY)
        logger.info(f"Prometheus metrics server started on port {port}")

    def record_beat_claimed(self, reclaimed: bool) -> None:
        self.beats_claimed.labels(kind="reclaim" if reclaimed else "new").inc()

    def record_beat_expired(self) -> None:
        self.beats_expired.inc()

    def record_signal_filed(self, beat_slug: str) -> None:
        self.signals_filed.labels(beat=beat_slug).inc()

    def record_signal_corrected(self) -> None:
        self.signals_corrected.inc()

    def record_brief_compiled(self, fallback: bool, latency: float | None = None) -> None:
        """
        Record a brief compilation.

        Args:
            fallback: Whether the lookback window was empty and the
                most-recent fallback was used
            latency: Optional compile latency in seconds
        """
        self.briefs_compiled.labels(mode="fallback" if fallback else "window").inc()
        if latency is not None:
            self.brief_compile_latency.observe(latency)

    def record_bounty_created(self) -> None:
        self.bounties_created.inc()

    def record_rate_limited(self, action: str) -> None:
        self.rate_limited.labels(action=action).inc()

    def record_revenue_credited(self, amount: int) -> None:
        if amount > 0:
            self.revenue_credited.inc(amount)

    def record_payment(self, status: str) -> None:
        self.payments_settled.labels(status=status).inc()


# Global metrics instance
_metrics: MetricsCollector | None = None


def get_metrics() -> MetricsCollector:
    """Get global metrics collector instance."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsCollector()
    return _metrics
