import os
from typing import Optional


class Settings:
    """
    Centralized client configuration.

    Backed by environment variables so the same code can talk to a local
    mock control-plane or a real regional endpoint without changes.

    Fields:
      - AUTOSCALE_API_URL: base URL of the autoscale API (tenant scoped)
      - AUTOSCALE_AUTH_TOKEN: token sent as X-Auth-Token (acquired elsewhere)
      - AUTOSCALE_HTTP_TIMEOUT_SECONDS: per-request timeout for the transport
      - AUTOSCALE_LOG_LEVEL: log level applied by setup_otel()
      - OTEL_SERVICE_NAME / OTEL_EXPORTER_OTLP_ENDPOINT / AUTOSCALE_ENV:
        telemetry resource and exporter settings
    """

    # ------------------------------------------------------------------
    # API endpoint
    # ------------------------------------------------------------------
    AUTOSCALE_API_URL: str = os.getenv("AUTOSCALE_API_URL", "http://127.0.0.1:9000/v1.0")
    AUTOSCALE_AUTH_TOKEN: Optional[str] = os.getenv("AUTOSCALE_AUTH_TOKEN") or None

    # Transport timeout only; the client itself never retries.
    AUTOSCALE_HTTP_TIMEOUT_SECONDS: float = float(
        os.getenv("AUTOSCALE_HTTP_TIMEOUT_SECONDS", "10")
    )

    # ------------------------------------------------------------------
    # Logging / telemetry
    # ------------------------------------------------------------------
    LOG_LEVEL: str = os.getenv("AUTOSCALE_LOG_LEVEL", "INFO")
    OTEL_SERVICE_NAME: str = os.getenv("OTEL_SERVICE_NAME", "autoscale-policy-client")
    OTEL_ENDPOINT: str = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT", "http://localhost:4317")
    ENVIRONMENT: str = os.getenv("AUTOSCALE_ENV", "dev")

    def __init__(self) -> None:
        self.AUTOSCALE_API_URL = self.AUTOSCALE_API_URL.rstrip("/")
        # A zero or negative timeout would make every call fail instantly.
        if self.AUTOSCALE_HTTP_TIMEOUT_SECONDS < 1:
            self.AUTOSCALE_HTTP_TIMEOUT_SECONDS = 1.0


settings = Settings()
