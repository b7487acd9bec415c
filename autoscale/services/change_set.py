"""
Change-set construction for create/update requests.

Only fields that are set on the record are sent. The control-plane treats
an explicit null as "clear this value", so a partial update must never
carry keys the caller did not set.
"""

from __future__ import annotations

from typing import Any, Dict, Tuple

from ..models.policy_models import PolicyRecord, PolicyType

# (wire key, record attribute), in request order.
CHANGE_SET_FIELDS: Tuple[Tuple[str, str], ...] = (
    ("name", "name"),
    ("change", "change"),
    ("changePercent", "change_percent"),
    ("cooldown", "cooldown"),
    ("type", "type"),
    ("desiredCapacity", "desired_capacity"),
)


def build_change_set(record: PolicyRecord) -> Dict[str, Any]:
    change_set: Dict[str, Any] = {}

    for wire_key, attr in CHANGE_SET_FIELDS:
        value = getattr(record, attr)
        if value is None:
            continue
        if isinstance(value, PolicyType):
            value = value.value
        change_set[wire_key] = value

    # args are only meaningful to the API for schedule policies
    if record.type == PolicyType.SCHEDULE and record.args is not None:
        change_set["args"] = dict(record.args)

    return change_set
