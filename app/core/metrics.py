"""Prometheus metrics for monitoring"""
from prometheus_client import Counter, Histogram, Gauge, CollectorRegistry, generate_latest

registry = CollectorRegistry()

request_count = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'status'],
    registry=registry
)

request_duration = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint'],
    registry=registry
)

messages_sent = Counter(
    'messages_sent_total',
    'Total messages stored',
    ['kind', 'channel'],
    registry=registry
)

whatsapp_links = Counter(
    'whatsapp_links_total',
    'WhatsApp deep links generated per recipient',
    ['status'],
    registry=registry
)

policy_denials = Counter(
    'policy_denials_total',
    'Requests refused by the access policy',
    ['outcome'],
    registry=registry
)

store_errors = Counter(
    'store_errors_total',
    'Database failures surfaced to callers',
    ['error'],
    registry=registry
)

rate_limit_exceeded = Counter(
    'rate_limit_exceeded_total',
    'Total rate limit exceeded events',
    registry=registry
)

audit_logs_created = Counter(
    'audit_logs_created_total',
    'Total audit logs created',
    ['action'],
    registry=registry
)

redis_connected = Gauge(
    'redis_connected',
    'Redis connection status (1=connected, 0=disconnected)',
    registry=registry
)


def get_metrics_text() -> str:
    """Generate Prometheus metrics in text format"""
    return generate_latest(registry).decode('utf-8')
