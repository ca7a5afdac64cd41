"""OpenTelemetry tracing setup for the lifecycle service.

Exporters: console (development), otlp (gRPC, e.g. http://collector:4317)
or none. Instruments FastAPI, the SQLAlchemy engine and stdlib logging.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.logging import LoggingInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    ConsoleSpanExporter,
    SpanExporter,
)
from opentelemetry.sdk.trace.sampling import TraceIdRatioBased
from sqlalchemy.ext.asyncio import AsyncEngine

from app.core.config import Settings

logger = logging.getLogger(__name__)


class TelemetryConfig:
    """Owns the tracer provider for one process.

    Setup failures are logged and leave tracing off; they never stop the
    service from starting.
    """

    def __init__(
        self,
        service_name: str,
        service_version: str,
        *,
        enabled: bool = True,
        environment: str = "development",
        exporter: str = "console",
        otlp_endpoint: str | None = None,
        sample_rate: float = 1.0,
    ) -> None:
        self.service_name = service_name
        self.service_version = service_version
        self.enabled = enabled
        self.environment = environment
        self.exporter = exporter
        self.otlp_endpoint = otlp_endpoint
        self.sample_rate = sample_rate
        self.tracer_provider: TracerProvider | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> TelemetryConfig:
        return cls(
            settings.app_name,
            settings.app_version,
            enabled=settings.telemetry_enabled,
            environment=settings.environment,
            exporter=settings.telemetry_exporter,
            otlp_endpoint=settings.telemetry_otlp_endpoint,
            sample_rate=settings.telemetry_sample_rate,
        )

    def _build_exporter(self) -> SpanExporter | None:
        if self.exporter == "otlp" and self.otlp_endpoint:
            logger.info("Using OTLP span exporter: %s", self.otlp_endpoint)
            return OTLPSpanExporter(
                endpoint=self.otlp_endpoint,
                insecure=self.otlp_endpoint.startswith("http://"),
            )
        if self.exporter == "none":
            return None
        if self.exporter != "console":
            logger.warning("Unknown exporter type '%s', using console", self.exporter)
        return ConsoleSpanExporter()

    def setup(self) -> TracerProvider | None:
        """Create and register the global tracer provider; None when disabled."""
        if not self.enabled:
            logger.info("Telemetry disabled")
            return None
        try:
            provider = TracerProvider(
                resource=Resource(
                    attributes={
                        SERVICE_NAME: self.service_name,
                        SERVICE_VERSION: self.service_version,
                        "deployment.environment": self.environment,
                    }
                ),
                sampler=TraceIdRatioBased(self.sample_rate),
            )
            exporter = self._build_exporter()
            if exporter is not None:
                provider.add_span_processor(BatchSpanProcessor(exporter))
            trace.set_tracer_provider(provider)
        except Exception:
            logger.exception("Failed to initialize telemetry")
            return None
        self.tracer_provider = provider
        logger.info(
            "OpenTelemetry initialized: service=%s, exporter=%s",
            self.service_name,
            self.exporter,
        )
        return provider

    def instrument(self, app: FastAPI | None = None, engine: AsyncEngine | None = None) -> None:
        """Instrument logging, and FastAPI / the SQLAlchemy engine when given."""
        if self.tracer_provider is None:
            return
        try:
            LoggingInstrumentor().instrument(
                tracer_provider=self.tracer_provider, set_logging_format=False
            )
            if app is not None:
                FastAPIInstrumentor.instrument_app(
                    app,
                    tracer_provider=self.tracer_provider,
                    excluded_urls="/api/v1/health",
                )
            if engine is not None:
                SQLAlchemyInstrumentor().instrument(
                    engine=engine.sync_engine, tracer_provider=self.tracer_provider
                )
        except Exception:
            logger.exception("Failed to instrument application")

    def shutdown(self) -> None:
        """Flush remaining spans and stop the provider."""
        if self.tracer_provider is None:
            return
        try:
            self.tracer_provider.shutdown()
        except Exception:
            logger.exception("Error during telemetry shutdown")
        else:
            logger.info("Telemetry shutdown complete")
        self.tracer_provider = None
