"""
requests-based PolicyService talking to the autoscale REST API.

Exposes:
- POST   /groups/{groupId}/policies
- PUT    /groups/{groupId}/policies/{policyId}
- DELETE /groups/{groupId}/policies/{policyId}
- POST   /groups/{groupId}/policies/{policyId}/execute
- GET    /groups/{groupId}/policies/{policyId}/webhooks
- GET    /groups/{groupId}/policies/{policyId}

One request per call. No retries: a non-2xx status is mapped to the
ServiceError family and raised to the caller unchanged.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, Optional
from urllib.parse import quote

import requests
from opentelemetry import trace
from prometheus_client import Counter, Histogram

from ..config import Settings, settings
from ..utils.errors import ServiceError, error_for_status
from .policy_service import ServiceResponse

logger = logging.getLogger("autoscale.service.http")
tracer = trace.get_tracer(__name__)

# -------------------------------------------------------------------------
# Prometheus metrics for autoscale API calls
# -------------------------------------------------------------------------

AUTOSCALE_API_CALLS_TOTAL = Counter(
    "autoscale_api_calls_total",
    "Total autoscale API calls made by the policy client",
    ["operation", "status"],
)

AUTOSCALE_API_ERRORS_TOTAL = Counter(
    "autoscale_api_errors_total",
    "Total failed autoscale API calls (HTTP >= 400 or transport failure)",
    ["operation", "status"],
)

AUTOSCALE_API_LATENCY_SECONDS = Histogram(
    "autoscale_api_latency_seconds",
    "Latency of autoscale API calls",
    ["operation"],
    buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1, 2, 5, 10),
)


def _segment(value: str) -> str:
    return quote(str(value), safe="")


class HttpPolicyService:
    """
    Thin HTTP wiring for scaling-policy operations.

    The session is injected so callers own authentication, proxies and
    connection pooling; an optional token is sent as X-Auth-Token.
    """

    def __init__(
        self,
        base_url: str,
        *,
        session: Optional[requests.Session] = None,
        auth_token: Optional[str] = None,
        timeout_seconds: float = 10.0,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout_seconds = timeout_seconds

        self.session.headers.update(
            {"Accept": "application/json", "Content-Type": "application/json"}
        )
        if auth_token:
            self.session.headers["X-Auth-Token"] = auth_token

        logger.info("HttpPolicyService initialized with base URL: %s", self.base_url)

    @classmethod
    def from_settings(
        cls,
        config: Settings = settings,
        session: Optional[requests.Session] = None,
    ) -> "HttpPolicyService":
        return cls(
            config.AUTOSCALE_API_URL,
            session=session,
            auth_token=config.AUTOSCALE_AUTH_TOKEN,
            timeout_seconds=config.AUTOSCALE_HTTP_TIMEOUT_SECONDS,
        )

    # ------------------------------------------------------------------
    # Internal HTTP helpers
    # ------------------------------------------------------------------

    def _policies_path(self, group_id: str) -> str:
        return f"/groups/{_segment(group_id)}/policies"

    def _policy_path(self, group_id: str, policy_id: str) -> str:
        return f"{self._policies_path(group_id)}/{_segment(policy_id)}"

    def _decode(self, resp: requests.Response, operation: str) -> Any:
        if not resp.content:
            return {}
        try:
            return resp.json()
        except ValueError as exc:
            raise ServiceError(
                f"Autoscale API returned non-JSON for {operation}: {resp.text[:200]}",
                status_code=resp.status_code,
                response_text=resp.text,
                operation=operation,
            ) from exc

    def _request(
        self,
        operation: str,
        method: str,
        path: str,
        payload: Any = None,
    ) -> ServiceResponse:
        url = f"{self.base_url}{path}"

        with tracer.start_as_current_span(f"autoscale.http.{operation}") as span:
            span.set_attribute("autoscale.http.method", method)
            span.set_attribute("autoscale.http.path", path)

            start = time.time()
            try:
                resp = self.session.request(
                    method,
                    url,
                    json=payload,
                    timeout=self.timeout_seconds,
                )
            except requests.exceptions.RequestException as exc:
                duration = time.time() - start
                AUTOSCALE_API_CALLS_TOTAL.labels(operation=operation, status="transport_error").inc()
                AUTOSCALE_API_ERRORS_TOTAL.labels(operation=operation, status="transport_error").inc()
                AUTOSCALE_API_LATENCY_SECONDS.labels(operation=operation).observe(duration)
                logger.error("Autoscale API %s %s unreachable: %s", method, url, exc)
                span.record_exception(exc)
                raise ServiceError(
                    f"Autoscale API unreachable: {exc}",
                    operation=operation,
                ) from exc

            duration = time.time() - start
            status = str(resp.status_code)
            AUTOSCALE_API_CALLS_TOTAL.labels(operation=operation, status=status).inc()
            AUTOSCALE_API_LATENCY_SECONDS.labels(operation=operation).observe(duration)
            span.set_attribute("autoscale.http.status_code", resp.status_code)

            if resp.status_code >= 400:
                AUTOSCALE_API_ERRORS_TOTAL.labels(operation=operation, status=status).inc()
                logger.warning(
                    "Autoscale API %s %s -> %s in %.3fs: %s",
                    method,
                    path,
                    resp.status_code,
                    duration,
                    resp.text[:200],
                )
                error = error_for_status(resp.status_code)(
                    f"Autoscale API HTTP {resp.status_code} on {operation}: {resp.text[:200]}",
                    status_code=resp.status_code,
                    response_text=resp.text,
                    operation=operation,
                )
                span.record_exception(error)
                raise error

            body = self._decode(resp, operation)
            logger.info("Autoscale API %s %s -> %s in %.3fs", method, path, resp.status_code, duration)
            return ServiceResponse(
                status_code=resp.status_code,
                body=body,
                headers=dict(resp.headers),
            )

    # ------------------------------------------------------------------
    # PolicyService
    # ------------------------------------------------------------------

    def create_policy(self, group_id: str, change_set: Dict[str, Any]) -> ServiceResponse:
        # The API creates policies in batches; we always send a batch of one.
        return self._request("create_policy", "POST", self._policies_path(group_id), [change_set])

    def update_policy(
        self, group_id: str, policy_id: str, change_set: Dict[str, Any]
    ) -> ServiceResponse:
        return self._request("update_policy", "PUT", self._policy_path(group_id, policy_id), change_set)

    def delete_policy(self, group_id: str, policy_id: str) -> ServiceResponse:
        return self._request("delete_policy", "DELETE", self._policy_path(group_id, policy_id))

    def execute_policy(self, group_id: str, policy_id: str) -> ServiceResponse:
        return self._request(
            "execute_policy",
            "POST",
            f"{self._policy_path(group_id, policy_id)}/execute",
        )

    def list_webhooks(self, group_id: str, policy_id: str) -> ServiceResponse:
        return self._request(
            "list_webhooks",
            "GET",
            f"{self._policy_path(group_id, policy_id)}/webhooks",
        )

    def get_policy(self, group_id: str, policy_id: str) -> ServiceResponse:
        return self._request("get_policy", "GET", self._policy_path(group_id, policy_id))
