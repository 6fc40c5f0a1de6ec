"""
Pipeline tuning configuration

Batch sizes, concurrency limits, provider delays and retry policy for the
generation pipeline and the exporter. Every value can be overridden from the
environment.
"""

import os


def _env_int(name: str, default: int, minimum: int = 0) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return max(int(raw), minimum)
    except (TypeError, ValueError):
        return default


def _env_float(name: str, default: float, minimum: float = 0.0) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return max(float(raw), minimum)
    except (TypeError, ValueError):
        return default


# Script Splitter
SPLIT_BATCH_SIZE = _env_int("SPLIT_BATCH_SIZE", 40, 1)
SPLIT_CONCURRENCY = _env_int("SPLIT_CONCURRENCY", 3, 1)

# Style Director
STYLE_CHUNK_SIZE = _env_int("STYLE_CHUNK_SIZE", 20, 1)
STYLE_CONCURRENCY = _env_int("STYLE_CONCURRENCY", 5, 1)
ALLOWED_STYLE_CHUNK_SIZES = (20, 50)

# Image Resolver
PRIMARY_LOOKUP_DELAY = _env_float("PRIMARY_LOOKUP_DELAY", 1.0)
SECONDARY_LOOKUP_DELAY = _env_float("SECONDARY_LOOKUP_DELAY", 0.3)
BREAKER_FAILURE_THRESHOLD = _env_int("BREAKER_FAILURE_THRESHOLD", 3, 1)
BREAKER_RESET_TIMEOUT = _env_float("BREAKER_RESET_TIMEOUT", 300.0)

# Infographic Enricher
INFOGRAPHIC_CONTEXT_SLIDES = 10
INFOGRAPHIC_MAX_LINES = _env_int("INFOGRAPHIC_MAX_LINES", 5, 2)

# Exporter
EXPORT_MAX_RETRIES = _env_int("EXPORT_MAX_RETRIES", 3, 0)
EXPORT_RETRY_BASE_DELAY = _env_float("EXPORT_RETRY_BASE_DELAY", 1.0)
VIDEO_POLL_INTERVAL = _env_float("VIDEO_POLL_INTERVAL", 3.0)
VIDEO_POLL_MAX_ATTEMPTS = _env_int("VIDEO_POLL_MAX_ATTEMPTS", 60, 1)
DEFAULT_SLIDE_DURATION = _env_float("DEFAULT_SLIDE_DURATION", 3.0, 0.5)

# Upstream HTTP
HTTP_TIMEOUT = _env_float("HTTP_TIMEOUT", 60.0, 1.0)
