from __future__ import annotations

import os
import threading
from contextlib import contextmanager
from typing import Any, Dict, Iterator

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

_lock = threading.Lock()
_initialized = False
_tracer = None


def _otlp_endpoint() -> str | None:
    endpoint = os.environ.get("BLOBBER_OTLP_ENDPOINT")
    host = os.environ.get("BLOBBER_OTLP_HOST")
    port = os.environ.get("BLOBBER_OTLP_PORT") or "4318"
    if not endpoint and host:
        endpoint = f"http://{host}:{port}/v1/traces"
    return endpoint or None


def _setup_tracer() -> None:
    global _initialized, _tracer
    with _lock:
        if _initialized:
            return
        _initialized = True

        endpoint = _otlp_endpoint()
        if not endpoint:
            return

        service_name = os.environ.get("BLOBBER_SERVICE_NAME", "blobber")
        resource = Resource.create({"service.name": service_name})
        provider = TracerProvider(resource=resource)
        provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=endpoint)))
        trace.set_tracer_provider(provider)
        _tracer = trace.get_tracer(service_name)


def _get_tracer():
    _setup_tracer()
    return _tracer


def reset_tracing() -> None:
    """Forgets the tracer so the next span re-reads the environment. Used by tests."""
    global _initialized, _tracer
    with _lock:
        _initialized = False
        _tracer = None


@contextmanager
def trace_span(name: str, attributes: Dict[str, Any] | None = None) -> Iterator[Any]:
    tracer = _get_tracer()
    if tracer is None:
        yield None
        return
    with tracer.start_as_current_span(name) as span:
        if attributes:
            for key, value in attributes.items():
                if value is None:
                    continue
                span.set_attribute(key, value)
        yield span
