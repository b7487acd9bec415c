"""
Policy orchestrator.

Wraps a PolicyRecord and an injected PolicyService:
  - checks local preconditions (identity, required attributes)
  - validates the record for its policy type
  - builds the minimal change-set
  - performs exactly one service call per operation
  - merges the server's view back into the record

Either an operation fully succeeds, or it raises and the record is left
exactly as it was before the call.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Mapping, Optional

from opentelemetry import trace

from ..models.policy_models import SERVER_FIELDS, PolicyRecord, apply_server_state
from ..models.webhook_models import WebhookCollection
from ..utils.errors import MissingRequiredAttributes, ServiceError
from .change_set import build_change_set
from .policy_service import PolicyService
from .validation import validate

logger = logging.getLogger("autoscale.policy")
tracer = trace.get_tracer(__name__)


class PolicyState(str, Enum):
    UNSAVED = "unsaved"
    SAVED = "saved"
    UPDATING = "updating"
    DELETED = "deleted"


def _created_policy(body: Any) -> Mapping[str, Any]:
    """Pick the policy object out of a create response ({"policies": [...]})."""
    try:
        return body["policies"][0]
    except (KeyError, IndexError, TypeError) as exc:
        raise ServiceError(
            "Create response did not contain a policy object",
            operation="create_policy",
        ) from exc


class Policy:
    """
    A single scaling policy of an autoscale group.

    Build it empty, from keyword fields, or from an existing PolicyRecord
    (e.g. one returned by a listing). The PolicyService is always injected.
    """

    def __init__(
        self,
        service: PolicyService,
        record: Optional[PolicyRecord] = None,
        **fields: Any,
    ) -> None:
        if record is not None and fields:
            raise TypeError("Pass either a PolicyRecord or keyword fields, not both")

        self.service = service
        self.record = record if record is not None else PolicyRecord(**fields)
        self.state = PolicyState.SAVED if self.record.is_persisted else PolicyState.UNSAVED

    def __repr__(self) -> str:
        return (
            f"Policy(id={self.record.id!r}, group_id={self.record.group_id!r}, "
            f"name={self.record.name!r}, state={self.state.value})"
        )

    @property
    def id(self) -> Optional[str]:
        return self.record.id

    @property
    def group_id(self) -> Optional[str]:
        return self.record.group_id

    # ------------------------------------------------------------------
    # Preconditions
    # ------------------------------------------------------------------

    def _requires(self, *attributes: str) -> None:
        missing = [a for a in attributes if getattr(self.record, a) in (None, "")]
        if missing:
            logger.info("Policy %r missing required attributes: %s", self.record.name, missing)
            raise MissingRequiredAttributes(missing)

    def _requires_identity(self) -> None:
        self._requires("group_id", "id")

    def _assign(self, merged: PolicyRecord) -> None:
        # Write the already-validated server view onto the caller's record in place.
        for attr in SERVER_FIELDS.values():
            setattr(self.record, attr, getattr(merged, attr))

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def save(self) -> bool:
        """
        Create the policy on the control-plane.

        Requires group_id, name, type and cooldown. On success the record's
        fields are overwritten with the server's copy, which carries the new
        id and links. A response without a policy id is rejected.

        Raises:
            MissingRequiredAttributes: a required attribute is not set.
            MissingRequiredField: the record fails type validation.
            ServiceError: NotFound / BadRequest / InternalServerError or any
                other remote failure.
        """
        self._requires("group_id", "name", "type", "cooldown")
        validate(self.record)
        change_set = build_change_set(self.record)

        with tracer.start_as_current_span("autoscale.policy.save") as span:
            span.set_attribute("autoscale.group_id", self.record.group_id)
            span.set_attribute("autoscale.policy.type", self.record.type.value)

            response = self.service.create_policy(self.record.group_id, change_set)
            merged = apply_server_state(self.record, _created_policy(response.body))
            if not merged.is_persisted:
                raise ServiceError(
                    "Create response did not contain a policy id",
                    operation="create_policy",
                )
            self._assign(merged)
            self.state = PolicyState.SAVED

            span.set_attribute("autoscale.policy_id", self.record.id or "")

        logger.info("Created policy %s (%s) in group %s", self.record.id, self.record.name, self.record.group_id)
        return True

    def update(self) -> bool:
        """
        Push local changes of an existing policy.

        Only fields that are set are sent, so unset fields keep their
        server-side values. The response body (if any) is merged back.
        """
        self._requires_identity()
        validate(self.record)
        change_set = build_change_set(self.record)

        previous_state = self.state
        self.state = PolicyState.UPDATING

        with tracer.start_as_current_span("autoscale.policy.update") as span:
            span.set_attribute("autoscale.group_id", self.record.group_id)
            span.set_attribute("autoscale.policy_id", self.record.id)
            span.set_attribute("autoscale.change_set.keys", sorted(change_set))

            try:
                response = self.service.update_policy(self.record.group_id, self.record.id, change_set)
                self._assign(apply_server_state(self.record, response.body or {}))
            except Exception:
                self.state = previous_state
                raise

            self.state = PolicyState.SAVED

        logger.info("Updated policy %s in group %s: %s", self.record.id, self.record.group_id, sorted(change_set))
        return True

    def destroy(self) -> bool:
        """
        Delete the policy. The record itself is left untouched; discarding
        it is up to the caller.
        """
        self._requires_identity()

        with tracer.start_as_current_span("autoscale.policy.destroy") as span:
            span.set_attribute("autoscale.group_id", self.record.group_id)
            span.set_attribute("autoscale.policy_id", self.record.id)
            self.service.delete_policy(self.record.group_id, self.record.id)

        self.state = PolicyState.DELETED
        logger.info("Deleted policy %s in group %s", self.record.id, self.record.group_id)
        return True

    def execute(self) -> bool:
        """Trigger the policy once, regardless of its schedule or alarm."""
        self._requires_identity()

        with tracer.start_as_current_span("autoscale.policy.execute") as span:
            span.set_attribute("autoscale.group_id", self.record.group_id)
            span.set_attribute("autoscale.policy_id", self.record.id)
            self.service.execute_policy(self.record.group_id, self.record.id)

        logger.info("Executed policy %s in group %s", self.record.id, self.record.group_id)
        return True

    def fetch_webhooks(self) -> WebhookCollection:
        """
        Fetch the webhooks of this policy as a new collection scoped to
        (group_id, policy id). The Policy is not modified.
        """
        self._requires_identity()

        with tracer.start_as_current_span("autoscale.policy.webhooks") as span:
            span.set_attribute("autoscale.group_id", self.record.group_id)
            span.set_attribute("autoscale.policy_id", self.record.id)

            response = self.service.list_webhooks(self.record.group_id, self.record.id)
            webhooks = WebhookCollection.from_response(self.record.group_id, self.record.id, response.body)
            span.set_attribute("autoscale.webhook_count", len(webhooks))

        return webhooks

    def reload(self) -> bool:
        """Replace local state with the server's current copy of the policy."""
        self._requires_identity()

        with tracer.start_as_current_span("autoscale.policy.reload") as span:
            span.set_attribute("autoscale.group_id", self.record.group_id)
            span.set_attribute("autoscale.policy_id", self.record.id)

            response = self.service.get_policy(self.record.group_id, self.record.id)
            body = response.body
            server_policy = body.get("policy", body) if isinstance(body, Mapping) else body
            self._assign(apply_server_state(self.record, server_policy))

        self.state = PolicyState.SAVED
        logger.debug("Reloaded policy %s in group %s", self.record.id, self.record.group_id)
        return True
