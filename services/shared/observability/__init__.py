"""
Shared observability helpers (telemetry, privacy utilities).

The API and the Streamlit client import from here so log records carry the
same fields everywhere.
"""

from .privacy import hash_email, hash_payload
from .telemetry import (
    CORRELATION_ID_HEADER,
    RequestContextToken,
    TelemetryLogFilter,
    TelemetrySettings,
    bind_request_context,
    configure_logging,
    ensure_request_id,
    load_telemetry_settings,
    reset_request_context,
    setup_telemetry,
)

__all__ = [
    "hash_email",
    "hash_payload",
    "CORRELATION_ID_HEADER",
    "RequestContextToken",
    "TelemetryLogFilter",
    "TelemetrySettings",
    "bind_request_context",
    "configure_logging",
    "ensure_request_id",
    "load_telemetry_settings",
    "reset_request_context",
    "setup_telemetry",
]
