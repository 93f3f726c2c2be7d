import pytest
from unittest.mock import patch

from blobber_api.observability import tracing


@pytest.fixture(autouse=True)
def _fresh_tracing():
    tracing.reset_tracing()
    yield
    tracing.reset_tracing()


def test_trace_span_disabled_without_endpoint(monkeypatch):
    monkeypatch.delenv("BLOBBER_OTLP_ENDPOINT", raising=False)
    monkeypatch.delenv("BLOBBER_OTLP_HOST", raising=False)

    with tracing.trace_span("blob.get", {"blob.key": "a.json"}) as span:
        assert span is None


def test_otlp_endpoint_from_host(monkeypatch):
    monkeypatch.delenv("BLOBBER_OTLP_ENDPOINT", raising=False)
    monkeypatch.setenv("BLOBBER_OTLP_HOST", "collector")
    monkeypatch.delenv("BLOBBER_OTLP_PORT", raising=False)

    assert tracing._otlp_endpoint() == "http://collector:4318/v1/traces"


def test_trace_span_enabled(monkeypatch):
    monkeypatch.setenv("BLOBBER_OTLP_ENDPOINT", "http://collector:4318/v1/traces")

    with patch.object(tracing, "OTLPSpanExporter") as exporter_cls, patch.object(
        tracing, "BatchSpanProcessor"
    ), patch.object(tracing.trace, "set_tracer_provider") as set_provider:
        with tracing.trace_span("blob.get", {"blob.key": "a.json", "blob.size": None}) as span:
            assert span is not None

    exporter_cls.assert_called_once_with(endpoint="http://collector:4318/v1/traces")
    set_provider.assert_called_once()
