from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as ModelValidationError

from ..utils.errors import ServiceError
from .policy_models import Link


class Webhook(BaseModel):
    """An externally-triggerable execution handle attached to a policy."""

    model_config = ConfigDict(extra="ignore")

    id: str
    name: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None
    links: List[Link] = Field(default_factory=list)

    @property
    def capability_url(self) -> Optional[str]:
        """Anonymous execution URL (the ``capability`` link), if exposed."""
        for link in self.links:
            if link.rel == "capability":
                return link.href
        return None


@dataclass
class WebhookCollection:
    """
    Webhooks of one policy, scoped to (group_id, policy_id).

    Built fresh from a list-webhooks response; owned by the caller and
    independent of the Policy that produced it.
    """
    group_id: str
    policy_id: str
    webhooks: List[Webhook] = field(default_factory=list)
    links: List[Link] = field(default_factory=list)

    @classmethod
    def from_response(
        cls,
        group_id: str,
        policy_id: str,
        body: Optional[Mapping[str, Any]],
    ) -> "WebhookCollection":
        body = body or {}
        if not isinstance(body, Mapping):
            raise ServiceError(f"Expected a webhook collection, got {type(body).__name__}")

        try:
            webhooks = [Webhook.model_validate(w) for w in body.get("webhooks") or []]
            links = [Link.model_validate(link) for link in body.get("webhooks_links") or []]
        except ModelValidationError as exc:
            raise ServiceError(f"Malformed webhook collection from server: {exc}") from exc

        return cls(group_id=group_id, policy_id=policy_id, webhooks=webhooks, links=links)

    def get(self, webhook_id: str) -> Optional[Webhook]:
        for webhook in self.webhooks:
            if webhook.id == webhook_id:
                return webhook
        return None

    def __iter__(self) -> Iterator[Webhook]:
        return iter(self.webhooks)

    def __len__(self) -> int:
        return len(self.webhooks)
