"""Tests for tracing configuration."""

from unittest.mock import MagicMock, patch

from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider

from person_registry.observability.tracing import configure_tracing


class TestConfigureTracing:
    """Tests for configure_tracing setup."""

    def test_returns_sdk_tracer_provider(self) -> None:
        provider = configure_tracing(service_name="test-svc", environment="test")
        assert isinstance(provider, TracerProvider)
        assert provider.resource.attributes["service.name"] == "test-svc"
        assert trace.get_tracer_provider().get_tracer("test") is not None

    def test_instruments_fastapi_app(self) -> None:
        """Test that FastAPIInstrumentor is called with the app."""
        app = MagicMock()
        with patch(
            "person_registry.observability.tracing.FastAPIInstrumentor"
        ) as mock_instrumentor:
            configure_tracing(app=app, service_name="test-svc", environment="test")
            mock_instrumentor.instrument_app.assert_called_once()
            call_kwargs = mock_instrumentor.instrument_app.call_args
            assert call_kwargs[1]["app"] is app

    def test_excludes_health_and_metrics_urls(self) -> None:
        """Test that health and metrics endpoints are excluded."""
        app = MagicMock()
        with patch(
            "person_registry.observability.tracing.FastAPIInstrumentor"
        ) as mock_instrumentor:
            configure_tracing(app=app, service_name="test-svc", environment="test")
            call_kwargs = mock_instrumentor.instrument_app.call_args
            excluded = call_kwargs[1]["excluded_urls"]
            assert "healthz" in excluded
            assert "readyz" in excluded
            assert "metrics" in excluded

    def test_console_exporter_when_debug(self) -> None:
        """Test console exporter is added in debug mode."""
        with patch(
            "person_registry.observability.tracing.ConsoleSpanExporter"
        ) as mock_console:
            configure_tracing(service_name="test-svc", environment="test", debug=True)
            mock_console.assert_called_once()

    def test_no_console_exporter_when_not_debug(self) -> None:
        """Test console exporter is NOT added without debug."""
        with patch(
            "person_registry.observability.tracing.ConsoleSpanExporter"
        ) as mock_console:
            configure_tracing(service_name="test-svc", environment="test", debug=False)
            mock_console.assert_not_called()

    def test_otlp_exporter_only_with_endpoint(self) -> None:
        with patch(
            "person_registry.observability.tracing.OTLPSpanExporter"
        ) as mock_exporter:
            configure_tracing(service_name="test-svc")
            mock_exporter.assert_not_called()
            configure_tracing(
                service_name="test-svc", otlp_endpoint="http://collector:4318"
            )
            mock_exporter.assert_called_once_with(endpoint="http://collector:4318")
