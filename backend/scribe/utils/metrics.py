"""
Prometheus metrics definitions for the API.
All metrics are registered here and can be imported by other modules.
"""
from prometheus_client import Counter, Histogram

# HTTP request metrics
http_requests_total = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'path', 'status']
)

http_request_duration_seconds = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'path'],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0]
)

# Error metrics
errors_total = Counter(
    'errors_total',
    'Total errors',
    ['error_type']
)

# Admission control
rate_limit_rejections_total = Counter(
    'rate_limit_rejections_total',
    'Requests rejected by the rate limiter',
    ['operation']
)

# Summarization
summaries_generated_total = Counter(
    'summaries_generated_total',
    'Total summaries generated',
    ['model', 'plan']
)

upgrade_prompts_total = Counter(
    'upgrade_prompts_total',
    'Upgrade prompts returned to callers',
    ['required_plan']
)

summary_quality_score = Histogram(
    'summary_quality_score',
    'Overall quality score of generated summaries',
    ['model'],
    buckets=[0.1, 0.2, 0.3, 0.4, 0.5, 0.6, 0.7, 0.8, 0.9, 1.0]
)

# Smart tagging
tagging_requests_total = Counter(
    'tagging_requests_total',
    'Smart tagging requests by outcome',
    ['outcome']
)

# Usage metering
ai_usage_records_total = Counter(
    'ai_usage_records_total',
    'Usage records written',
    ['operation', 'success']
)

ai_usage_write_failures_total = Counter(
    'ai_usage_write_failures_total',
    'Usage records that could not be persisted',
    ['operation']
)

ai_cost_usd_total = Counter(
    'ai_cost_usd_total',
    'Approximate AI spend in USD',
    ['model', 'operation']
)

# AI provider metrics
ai_provider_requests_total = Counter(
    'ai_provider_requests_total',
    'Total AI provider requests',
    ['provider', 'operation']
)

ai_provider_failures_total = Counter(
    'ai_provider_failures_total',
    'Total AI provider failures',
    ['provider', 'operation']
)

ai_provider_latency_seconds = Histogram(
    'ai_provider_latency_seconds',
    'AI provider request latency in seconds',
    ['provider', 'operation'],
    buckets=[0.1, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0]
)

ai_provider_tokens_total = Counter(
    'ai_provider_tokens_total',
    'Total AI provider tokens used',
    ['provider', 'operation', 'token_type']
)
