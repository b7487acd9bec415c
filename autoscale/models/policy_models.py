"""
Pydantic models for autoscale scaling policies.

PolicyRecord mirrors the control-plane's policy object. Python attributes
are snake_case; the wire names (changePercent, desiredCapacity, groupId) are
kept as aliases so records can be built straight from API payloads.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as ModelValidationError

from ..utils.errors import ServiceError


# ---------------------------------------------------------------------------
# Policy Types
# ---------------------------------------------------------------------------

class PolicyType(str, Enum):
    WEBHOOK = "webhook"
    SCHEDULE = "schedule"
    CLOUD_MONITORING = "cloud_monitoring"


# ---------------------------------------------------------------------------
# Navigational references
# ---------------------------------------------------------------------------

class Link(BaseModel):
    model_config = ConfigDict(extra="ignore")

    href: str
    rel: Optional[str] = None


# ---------------------------------------------------------------------------
# Policy record
# ---------------------------------------------------------------------------

class PolicyRecord(BaseModel):
    """
    Local state of a single scaling policy.

    Every field is optional: a record starts empty (or pre-populated from a
    prior listing) and is filled in by the caller before save()/update().
    Which fields are actually required depends on the operation and on the
    policy type; that is decided by the validation service, not here.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        validate_assignment=True,
        extra="ignore",
    )

    id: Optional[str] = Field(
        None,
        description="Server-assigned policy id; empty until the first create.",
    )
    group_id: Optional[str] = Field(
        None,
        alias="groupId",
        description="Owning scaling group. Never taken from server responses.",
    )
    name: Optional[str] = None
    type: Optional[PolicyType] = None

    # Scaling amount. The API expects one of these three, but does not
    # enforce exclusivity client-side.
    change: Optional[int] = Field(None, description="Fixed delta to the group size")
    change_percent: Optional[float] = Field(
        None,
        alias="changePercent",
        description="Percentage delta to the group size",
    )
    desired_capacity: Optional[int] = Field(
        None,
        alias="desiredCapacity",
        description="Absolute target size of the group",
    )

    cooldown: Optional[int] = Field(
        None,
        description="Seconds before the policy can be triggered again",
    )

    # e.g. {"cron": "23 * * * *"} or {"at": "2013-06-05T03:12Z"} for schedule
    # policies, {"check": {...}, "alarm_criteria": {...}} for cloud_monitoring.
    args: Optional[Dict[str, Any]] = None

    links: List[Link] = Field(default_factory=list)

    @property
    def is_persisted(self) -> bool:
        return bool(self.id)


# Wire key -> PolicyRecord attribute for everything the server is
# authoritative on. groupId is intentionally absent.
SERVER_FIELDS: Dict[str, str] = {
    "id": "id",
    "links": "links",
    "name": "name",
    "change": "change",
    "changePercent": "change_percent",
    "cooldown": "cooldown",
    "type": "type",
    "args": "args",
    "desiredCapacity": "desired_capacity",
}


def apply_server_state(record: PolicyRecord, server_fields: Mapping[str, Any]) -> PolicyRecord:
    """
    Return a new record with the server's view of the policy applied.

    Each known field present in ``server_fields`` overwrites the local value
    (an explicit null included). Unknown keys are ignored. The input record
    is never modified, so a malformed server object leaves the caller's
    state exactly as it was.

    Raises:
        ServiceError: if ``server_fields`` is not a mapping or does not
            validate as a policy object.
    """
    if not isinstance(server_fields, Mapping):
        raise ServiceError(f"Expected a policy object, got {type(server_fields).__name__}")

    data = record.model_dump()
    for wire_key, attr in SERVER_FIELDS.items():
        if wire_key in server_fields:
            data[attr] = server_fields[wire_key]

    if data["links"] is None:
        data["links"] = []

    try:
        return PolicyRecord.model_validate(data)
    except ModelValidationError as exc:
        raise ServiceError(f"Malformed policy object from server: {exc}") from exc
