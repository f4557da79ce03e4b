"""Monitoring configuration for the quiz engine."""
from prometheus_client import Counter, Gauge, Histogram, start_http_server

# Quiz metrics
quizzes_started = Counter(
    "vocabquiz_quizzes_started_total",
    "Total number of quizzes started",
    ["mode"],
)

quizzes_completed = Counter(
    "vocabquiz_quizzes_completed_total",
    "Total number of quizzes completed",
    ["mode", "review"],
)

answers_graded = Counter(
    "vocabquiz_answers_graded_total",
    "Total number of answers applied to word mastery",
    ["result"],
)

# Word management metrics
words_added = Counter(
    "vocabquiz_words_added_total",
    "Total number of words added",
)

words_imported = Counter(
    "vocabquiz_words_imported_total",
    "Total number of words accepted by bulk import",
)

history_entries = Counter(
    "vocabquiz_history_entries_total",
    "Total number of quiz history entries recorded",
)

# Durable store metrics
store_write_errors = Counter(
    "vocabquiz_store_write_errors_total",
    "Total number of failed write batches to the durable store",
)

pending_writes = Gauge(
    "vocabquiz_pending_writes",
    "Number of write operations waiting for the durable store",
)

flush_duration = Histogram(
    "vocabquiz_flush_duration_seconds",
    "Duration of write-behind flushes in seconds",
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 5.0],
)


def start_monitoring(port: int = 9090) -> None:
    """Start the Prometheus metrics server."""
    start_http_server(port)
