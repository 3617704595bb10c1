"""Monitoring configuration for the puzzle trainer."""
from prometheus_client import Counter, Histogram, start_http_server

# Import metrics
puzzles_imported = Counter(
    "chesstrainer_puzzles_imported_total",
    "Total number of puzzles imported into the catalogue",
)

puzzle_import_failures = Counter(
    "chesstrainer_puzzle_import_failures_total",
    "Total number of dataset rows rejected during import",
    ["reason"],
)

# Training set metrics
training_sets_created = Counter(
    "chesstrainer_training_sets_created_total",
    "Total number of training sets assembled",
)

training_set_errors = Counter(
    "chesstrainer_training_set_errors_total",
    "Total number of rejected training set requests",
    ["error_type"],
)

# Performance metrics
request_duration = Histogram(
    "chesstrainer_request_duration_seconds",
    "Duration of HTTP requests in seconds",
    ["handler"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 5.0],
)


def start_monitoring(port: int = 9090) -> None:
    """Start the Prometheus metrics server."""
    start_http_server(port)
