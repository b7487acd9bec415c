"""
Service interface consumed by the Policy orchestrator.

Implementations perform one request per call and raise the ServiceError
family (NotFound, BadRequest, InternalServerError, ServiceError) on failure.
HttpPolicyService is the requests-based implementation; tests inject fakes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Protocol


@dataclass
class ServiceResponse:
    status_code: int
    # Decoded JSON body; {} when the response carried none (e.g. 204)
    body: Any = field(default_factory=dict)
    headers: Dict[str, str] = field(default_factory=dict)


class PolicyService(Protocol):
    def create_policy(self, group_id: str, change_set: Dict[str, Any]) -> ServiceResponse:
        """Create one policy. Body: {"policies": [policyObject, ...]}."""
        ...

    def update_policy(
        self, group_id: str, policy_id: str, change_set: Dict[str, Any]
    ) -> ServiceResponse:
        """Update a policy. Body: policyObject (may be empty)."""
        ...

    def delete_policy(self, group_id: str, policy_id: str) -> ServiceResponse:
        ...

    def execute_policy(self, group_id: str, policy_id: str) -> ServiceResponse:
        ...

    def list_webhooks(self, group_id: str, policy_id: str) -> ServiceResponse:
        """Body: {"webhooks": [...], "webhooks_links": [...]}."""
        ...

    def get_policy(self, group_id: str, policy_id: str) -> ServiceResponse:
        """Body: {"policy": policyObject}."""
        ...
