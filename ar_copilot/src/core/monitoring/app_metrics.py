from prometheus_client import Counter, Gauge
import structlog

logger = structlog.get_logger(__name__)

# --- Prometheus Metric Definitions ---
# Defined globally so they are registered with the default REGISTRY

# 1. Account Record Metrics
ACCOUNT_OPERATIONS_TOTAL = Counter(
    'account_operations_total',
    'Total patient account operations, labeled by operation and outcome.',
    ['operation', 'outcome']  # e.g., create/update/delete/get/list/select_denial_code, success/not_found/invalid
)

ACCOUNTS_STORED_GAUGE = Gauge(
    'accounts_stored_gauge',
    'Current number of patient account records held by the store.'
)

# 2. Comment Metrics
RCM_COMMENTS_GENERATED_TOTAL = Counter(
    'rcm_comments_generated_total',
    'Total RCM comments generated, labeled by the template used.',
    ['template']  # a denial code from the table, or 'generic'
)

# 3. Export Metrics
SESSION_EXPORTS_TOTAL = Counter(
    'session_exports_total',
    'Total session CSV exports produced.'
)

logger.info("Application Prometheus metrics defined in app_metrics.py.")


class MetricsCollector:
    """
    Collects and exposes application metrics using Prometheus client.
    """

    def __init__(self):
        logger.info("MetricsCollector initialized (stateless, uses global metrics).")

    def record_account_operation(self, operation: str, outcome: str):
        ACCOUNT_OPERATIONS_TOTAL.labels(operation=operation, outcome=outcome).inc()

    def set_accounts_stored(self, count: int):
        """Sets the current number of stored account records."""
        ACCOUNTS_STORED_GAUGE.set(count)

    def record_comment_generated(self, template: str):
        RCM_COMMENTS_GENERATED_TOTAL.labels(template=template).inc()

    def record_session_export(self, account_count: int):
        SESSION_EXPORTS_TOTAL.inc()
        logger.debug("Session export metric recorded", account_count=account_count)
