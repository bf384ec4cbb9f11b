# Centralized Prometheus metrics for the dispatch pipeline. Counters are
# labelled by route pattern (never raw path) so series stay bounded.

from prometheus_client import Counter, Histogram

# Every dispatched request, by matched route pattern and outcome.
# outcome: handled|short_circuit|not_found
DISPATCH_TOTAL = Counter(
    "hrms_dispatch_total",
    "Requests dispatched through the route table",
    ["route", "outcome"],
)

# Rejections produced by the access-control middleware.
ACCESS_DENIED_TOTAL = Counter(
    "hrms_access_denied_total",
    "Requests rejected by the access-control pipeline",
    ["middleware", "code"],
)

# Login attempts grouped by outcome (success|fail|inactive).
LOGIN_ATTEMPTS_TOTAL = Counter(
    "hrms_login_attempts_total",
    "Login attempts grouped by outcome",
    ["outcome"],
)

REQUEST_LATENCY = Histogram(
    "hrms_api_request_latency_seconds",
    "Latency of API requests in seconds",
    ["method", "endpoint"],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1, 2, 5],
)


def record_dispatch(route: str, outcome: str) -> None:
    DISPATCH_TOTAL.labels(route=route, outcome=outcome).inc()


def record_access_denied(middleware: str, code: str) -> None:
    ACCESS_DENIED_TOTAL.labels(middleware=middleware, code=code).inc()


def record_login_attempt(outcome: str) -> None:
    LOGIN_ATTEMPTS_TOTAL.labels(outcome=outcome).inc()
