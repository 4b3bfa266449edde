"""
Logging and tracing bootstrap shared by the API and the Streamlit client.

Log records are emitted as JSON with the service name, the bound request id and,
when tracing is on, the active trace/span ids. `setup_telemetry` wires both
halves into a FastAPI app; `configure_logging` is the logging half alone.
"""

from __future__ import annotations

import logging
import os
from contextvars import ContextVar, Token
from dataclasses import dataclass
from typing import Mapping, Optional
from uuid import uuid4

from fastapi import FastAPI, Request
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.logging import LoggingInstrumentor
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.trace import Span, SpanContext
from pythonjsonlogger import jsonlogger

CORRELATION_ID_HEADER = "x-request-id"
DEFAULT_OTLP_ENDPOINT = "http://localhost:4318/v1/traces"
LOG_FIELDS = "%(asctime)s %(levelname)s %(name)s %(message)s %(trace_id)s %(span_id)s %(service_name)s %(request_id)s"
RequestContextToken = Token

_TRUE_VALUES = {"1", "true", "yes", "on"}
_logging_configured = False
_request_id_ctx_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


@dataclass(frozen=True)
class TelemetrySettings:
    service_name: str
    log_level: str = "INFO"
    enable_traces: bool = False
    console_export: bool = False
    otlp_endpoint: str = DEFAULT_OTLP_ENDPOINT


def load_telemetry_settings(service_name: str, env: Optional[Mapping[str, str]] = None) -> TelemetrySettings:
    """Read telemetry switches from the environment; `OTEL_SERVICE_NAME` overrides the given name."""
    source = os.environ if env is None else env
    level = source.get("LOG_LEVEL", "INFO").strip().upper() or "INFO"
    if not isinstance(logging.getLevelName(level), int):
        level = "INFO"
    return TelemetrySettings(
        service_name=source.get("OTEL_SERVICE_NAME") or service_name,
        log_level=level,
        enable_traces=source.get("ENABLE_TELEMETRY", "false").strip().lower() in _TRUE_VALUES,
        console_export=source.get("OTEL_CONSOLE_EXPORT", "false").strip().lower() in _TRUE_VALUES,
        otlp_endpoint=source.get("OTEL_EXPORTER_OTLP_ENDPOINT") or DEFAULT_OTLP_ENDPOINT,
    )


def setup_telemetry(app: FastAPI, service_name: str) -> TelemetrySettings:
    """
    Configure JSON logging and, when `ENABLE_TELEMETRY` is set, OTLP tracing.

    Args:
        app: FastAPI app whose requests should produce spans.
        service_name: Default logical service name for logs and the trace resource.
    Returns:
        The settings that were applied.
    """
    settings = load_telemetry_settings(service_name)
    _configure_logging(settings)

    if settings.enable_traces:
        _configure_tracing(settings)
        FastAPIInstrumentor.instrument_app(app)
        LoggingInstrumentor().instrument(set_logging_format=False)
    return settings


def configure_logging(service_name: str) -> TelemetrySettings:
    settings = load_telemetry_settings(service_name)
    _configure_logging(settings)
    return settings


def ensure_request_id(request: Optional[Request], header_name: str = CORRELATION_ID_HEADER) -> str:
    """Reuse the inbound request id header when present, otherwise mint a UUID4."""
    if request is not None:
        existing = request.headers.get(header_name) or getattr(request.state, "request_id", None)
        if existing:
            request.state.request_id = existing
            return existing

    request_id = os.getenv("REQUEST_ID_PREFIX", "") + str(uuid4())
    if request is not None:
        request.state.request_id = request_id
    return request_id


def bind_request_context(request_id: Optional[str]) -> RequestContextToken:
    return _request_id_ctx_var.set(request_id)


def reset_request_context(token: Optional[RequestContextToken]) -> None:
    if token is not None:
        _request_id_ctx_var.reset(token)


def _configure_logging(settings: TelemetrySettings) -> None:
    global _logging_configured
    if _logging_configured:
        return

    handler = logging.StreamHandler()
    handler.setFormatter(jsonlogger.JsonFormatter(LOG_FIELDS))
    handler.addFilter(TelemetryLogFilter(settings.service_name, settings.enable_traces))
    logging.basicConfig(level=settings.log_level, handlers=[handler], force=True)
    _logging_configured = True


def _configure_tracing(settings: TelemetrySettings) -> None:
    if isinstance(trace.get_tracer_provider(), TracerProvider):
        return

    provider = TracerProvider(resource=Resource.create({SERVICE_NAME: settings.service_name}))
    provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=settings.otlp_endpoint)))
    if settings.console_export:
        provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))
    trace.set_tracer_provider(provider)


class TelemetryLogFilter(logging.Filter):
    """Stamps every record with service, request and trace identifiers."""

    def __init__(self, service_name: str, traces_enabled: bool) -> None:
        super().__init__()
        self._service_name = service_name
        self._traces_enabled = traces_enabled

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: D401
        record.service_name = self._service_name
        record.request_id = _request_id_ctx_var.get()
        record.trace_id = None
        record.span_id = None

        if self._traces_enabled:
            span = trace.get_current_span()
            span_context = span.get_span_context() if isinstance(span, Span) else None
            if isinstance(span_context, SpanContext) and span_context.is_valid:
                record.trace_id = format(span_context.trace_id, "032x")
                record.span_id = format(span_context.span_id, "016x")
        return True
