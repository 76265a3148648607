"""
Production logging utility for structured JSON logging.

Provides event-specific logging functions with mandatory fields:
- timestamp (ISO8601)
- level
- service
- event

Optional fields (included when applicable):
- summary_id
- user_id
- model_id
- duration_ms

Usage:
    from scribe.utils.logging import configure_logging, log_summary_generated

    configure_logging('scribe-api', 'INFO')
    log_summary_generated(logger, summary_id='123', user_id='456', model_id='gpt-4o', duration_ms=845.2)
"""
import logging
import sys
from typing import Optional, Dict, Any
from pythonjsonlogger import jsonlogger


class StructuredLogger:
    """Structured JSON logger with mandatory fields."""

    _service_name = None
    _configured = False

    @classmethod
    def configure(cls, service_name: str, log_level: str = "INFO"):
        """
        Configure structured JSON logging for the application.

        Args:
            service_name: Service identifier (e.g. scribe-api)
            log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        """
        if cls._configured:
            return  # Already configured

        cls._service_name = service_name

        # Remove default handlers
        root_logger = logging.getLogger()
        root_logger.handlers = []

        # Create JSON formatter
        formatter = jsonlogger.JsonFormatter(
            '%(timestamp)s %(level)s %(name)s %(message)s',
            timestamp=True,
            json_ensure_ascii=False
        )

        # Create console handler (for docker logs)
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(formatter)

        # Configure root logger
        root_logger.addHandler(handler)
        root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

        # Add service name to all log records via filter
        class ServiceFilter(logging.Filter):
            def filter(self, record):
                record.service = cls._service_name
                return True

        handler.addFilter(ServiceFilter())
        cls._configured = True


def _build_log_extra(
    event: str,
    summary_id: Optional[str] = None,
    user_id: Optional[str] = None,
    model_id: Optional[str] = None,
    duration_ms: Optional[float] = None,
    **kwargs
) -> Dict[str, Any]:
    """
    Build extra fields for structured logging.

    Args:
        event: Event name (mandatory)
        summary_id: Optional summary ID
        user_id: Optional user ID
        model_id: Optional AI model ID
        duration_ms: Optional duration in milliseconds
        **kwargs: Additional fields

    Returns:
        Dictionary of extra fields
    """
    extra = {
        "event": event,
        **kwargs
    }

    if summary_id:
        extra["summary_id"] = summary_id
    if user_id:
        extra["user_id"] = user_id
    if model_id:
        extra["model_id"] = model_id
    if duration_ms is not None:
        extra["duration_ms"] = round(duration_ms, 2)

    return extra


# Summarization event functions

def log_summary_generated(
    logger: logging.Logger,
    summary_id: str,
    user_id: str,
    model_id: str,
    duration_ms: float,
    plan: Optional[str] = None,
    cost_usd: Optional[float] = None,
    **kwargs
):
    """
    Log a completed summarization request.

    Args:
        logger: Logger instance
        summary_id: Persisted summary ID (required)
        user_id: Caller ID (required)
        model_id: Model that served the request (required)
        duration_ms: End-to-end duration in milliseconds (required)
        plan: Optional resolved plan
        cost_usd: Optional computed cost
        **kwargs: Additional fields
    """
    extra = _build_log_extra(
        event="summary_generated",
        summary_id=summary_id,
        user_id=user_id,
        model_id=model_id,
        duration_ms=duration_ms,
        **kwargs
    )
    if plan:
        extra["plan"] = plan
    if cost_usd is not None:
        extra["cost_usd"] = cost_usd

    logger.info(f"Summary generated: {summary_id}", extra=extra)


def log_summary_failed(
    logger: logging.Logger,
    user_id: str,
    model_id: Optional[str] = None,
    duration_ms: Optional[float] = None,
    error: Optional[str] = None,
    include_traceback: bool = True,
    **kwargs
):
    """
    Log a failed summarization request.

    Args:
        logger: Logger instance
        user_id: Caller ID (required)
        model_id: Optional model that was being invoked
        duration_ms: Optional duration in milliseconds
        error: Internal error message (never returned to the caller)
        include_traceback: Whether to include stack trace (default: True for errors)
        **kwargs: Additional fields
    """
    extra = _build_log_extra(
        event="summary_failed",
        user_id=user_id,
        model_id=model_id,
        duration_ms=duration_ms,
        **kwargs
    )
    if error:
        extra["error"] = str(error)

    message = f"Summary failed for user {user_id}"
    if error:
        message += f" - {error}"

    # Include stack trace for errors (production-safe)
    if include_traceback:
        exc_info = sys.exc_info()
        if exc_info[0] is not None:
            logger.error(message, extra=extra, exc_info=exc_info)
        else:
            logger.error(message, extra=extra)
    else:
        logger.error(message, extra=extra)


def log_rate_limited(
    logger: logging.Logger,
    client_id: str,
    operation: str,
    limit: int,
    retry_after_seconds: int,
    **kwargs
):
    """
    Log an admission-control rejection.

    Args:
        logger: Logger instance
        client_id: Rate-limit key (required)
        operation: Operation class (auth, summarize, tagging) (required)
        limit: Attempts allowed per window (required)
        retry_after_seconds: Seconds until the window resets (required)
        **kwargs: Additional fields
    """
    extra = _build_log_extra(
        event="rate_limited",
        client_id=client_id,
        operation=operation,
        limit=limit,
        retry_after_seconds=retry_after_seconds,
        **kwargs
    )

    logger.warning(f"Rate limit exceeded: {operation} for {client_id}", extra=extra)


# Usage metering event functions

def log_usage_recorded(
    logger: logging.Logger,
    user_id: str,
    model_id: str,
    operation: str,
    tokens_used: int,
    cost_usd: float,
    success: bool,
    **kwargs
):
    """Log a persisted usage record."""
    extra = _build_log_extra(
        event="usage_recorded",
        user_id=user_id,
        model_id=model_id,
        operation=operation,
        tokens_used=tokens_used,
        cost_usd=cost_usd,
        success=success,
        **kwargs
    )

    logger.debug(f"Usage recorded: {operation} on {model_id}", extra=extra)


def log_usage_write_failed(
    logger: logging.Logger,
    user_id: str,
    model_id: str,
    operation: str,
    error: str,
    **kwargs
):
    """
    Log a usage record that could not be persisted.

    Usage accounting is a non-critical side channel, so this is the only
    trace such a failure leaves.
    """
    extra = _build_log_extra(
        event="usage_write_failed",
        user_id=user_id,
        model_id=model_id,
        operation=operation,
        error=str(error),
        **kwargs
    )

    logger.error(f"Usage write failed: {operation} on {model_id} - {error}", extra=extra)


# Smart tagging event functions

def log_tagging_completed(
    logger: logging.Logger,
    summary_id: str,
    user_id: str,
    duration_ms: float,
    confidence_score: Optional[float] = None,
    **kwargs
):
    """Log successful tag extraction."""
    extra = _build_log_extra(
        event="tagging_completed",
        summary_id=summary_id,
        user_id=user_id,
        duration_ms=duration_ms,
        **kwargs
    )
    if confidence_score is not None:
        extra["confidence_score"] = confidence_score

    logger.info(f"Tags extracted: {summary_id}", extra=extra)


def log_tagging_failed(
    logger: logging.Logger,
    summary_id: str,
    user_id: str,
    error: str,
    duration_ms: Optional[float] = None,
    **kwargs
):
    """Log failed tag extraction."""
    extra = _build_log_extra(
        event="tagging_failed",
        summary_id=summary_id,
        user_id=user_id,
        duration_ms=duration_ms,
        error=str(error),
        **kwargs
    )

    logger.error(f"Tagging failed: {summary_id} - {error}", extra=extra)


# Provider event functions

def log_provider_request(
    logger: logging.Logger,
    provider: str,
    operation: str,
    duration_ms: Optional[float] = None,
    model_id: Optional[str] = None,
    **kwargs
):
    """
    Log AI provider request event.

    Args:
        logger: Logger instance
        provider: Provider name (openai, deepseek, openrouter, anthropic) (required)
        operation: Operation name (summarize, tag) (required)
        duration_ms: Optional duration in milliseconds
        model_id: Optional catalog model ID
        **kwargs: Additional fields
    """
    extra = _build_log_extra(
        event="provider_request",
        model_id=model_id,
        duration_ms=duration_ms,
        provider=provider,
        operation=operation,
        **kwargs
    )

    logger.info(f"Provider request: {provider}.{operation}", extra=extra)


def log_provider_failure(
    logger: logging.Logger,
    provider: str,
    operation: str,
    error: str,
    duration_ms: Optional[float] = None,
    model_id: Optional[str] = None,
    include_traceback: bool = False,
    **kwargs
):
    """
    Log AI provider failure event.

    Args:
        logger: Logger instance
        provider: Provider name (required)
        operation: Operation name (required)
        error: Error message (required)
        duration_ms: Optional duration in milliseconds
        model_id: Optional catalog model ID
        include_traceback: Whether to include stack trace (default: False for provider failures)
        **kwargs: Additional fields
    """
    extra = _build_log_extra(
        event="provider_failure",
        model_id=model_id,
        duration_ms=duration_ms,
        provider=provider,
        operation=operation,
        error=str(error),
        **kwargs
    )

    message = f"Provider failure: {provider}.{operation} - {error}"

    # Stack traces for provider failures are optional (usually not needed)
    if include_traceback:
        exc_info = sys.exc_info()
        if exc_info[0] is not None:
            logger.error(message, extra=extra, exc_info=exc_info)
        else:
            logger.error(message, extra=extra)
    else:
        logger.error(message, extra=extra)


def configure_logging(service_name: str, log_level: str = "INFO"):
    """Configure logging (alias for StructuredLogger.configure)."""
    StructuredLogger.configure(service_name, log_level)
