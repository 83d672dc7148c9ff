"""
Prometheus metrics for the analysis pipeline
Tracks provider attempts, classified errors, breaker state and normalizer tiers
"""

from prometheus_client import (
    Counter,
    Histogram,
    Gauge,
    generate_latest,
    CONTENT_TYPE_LATEST
)
from fastapi import Response


analysis_requests = Counter(
    'analysis_requests_total',
    'Analysis requests by the path that produced the result',
    ['path']
)

provider_attempts = Counter(
    'provider_attempts_total',
    'Inference provider call attempts',
    ['provider', 'outcome']
)

provider_errors = Counter(
    'provider_errors_total',
    'Classified inference provider errors',
    ['provider', 'category']
)

circuit_breaker_open = Gauge(
    'circuit_breaker_open',
    'Circuit breaker state per provider (0=closed, 1=open)',
    ['provider']
)

normalizer_tiers = Counter(
    'normalizer_tier_total',
    'Responses normalized per parsing tier',
    ['tier']
)

analysis_duration = Histogram(
    'analysis_duration_seconds',
    'End-to-end analysis request duration',
    buckets=(0.5, 1, 2, 5, 10, 30, 60, 120, 300)
)


def metrics_response() -> Response:
    """Render the default registry for a /metrics endpoint"""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
