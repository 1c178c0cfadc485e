from __future__ import annotations

from contextlib import contextmanager

from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest

registry = CollectorRegistry(auto_describe=True)

TRANSLATION_CALLS_TOTAL = Counter(
    "assetstudio_translation_calls_total",
    "Translation API calls partitioned by outcome.",
    ["status"],
    registry=registry,
)

TRANSLATION_CALL_DURATION = Histogram(
    "assetstudio_translation_call_duration_seconds",
    "Latency of translation API calls.",
    registry=registry,
)

NORMALIZED_LANGUAGES = Counter(
    "assetstudio_normalized_languages_total",
    "Languages resolved by the response normalizer, labeled by the candidate location.",
    ["candidate"],
    registry=registry,
)

NORMALIZATION_FAILURES = Counter(
    "assetstudio_normalization_failures_total",
    "Upstream payloads from which no language could be resolved.",
    registry=registry,
)

EXPORTED_PANELS_TOTAL = Counter(
    "assetstudio_exported_panels_total",
    "Panel images produced by the export pipeline.",
    ["mode"],
    registry=registry,
)

EXPORT_DURATION = Histogram(
    "assetstudio_export_duration_seconds",
    "Time spent capturing and cropping the board.",
    ["mode"],
    registry=registry,
)


@contextmanager
def track_translation_call():
    timer = TRANSLATION_CALL_DURATION.time()
    timer.__enter__()
    try:
        yield
        TRANSLATION_CALLS_TOTAL.labels(status="success").inc()
    except Exception:
        TRANSLATION_CALLS_TOTAL.labels(status="error").inc()
        raise
    finally:
        timer.__exit__(None, None, None)


@contextmanager
def track_export(mode: str):
    with EXPORT_DURATION.labels(mode=mode).time():
        yield


def record_normalized_language(candidate: str) -> None:
    NORMALIZED_LANGUAGES.labels(candidate=candidate).inc()


def record_normalization_failure() -> None:
    NORMALIZATION_FAILURES.inc()


def record_exported_panels(mode: str, count: int) -> None:
    EXPORTED_PANELS_TOTAL.labels(mode=mode).inc(count)


def get_metrics_payload() -> bytes:
    return generate_latest(registry)
