"""
Attribute validation for scaling policies.

Pure checks run before any create/update call. The generic rule (type must
be set) applies to every record; additional rules are looked up by policy
type, so new policy types only need to register their own check.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict

from ..models.policy_models import PolicyRecord, PolicyType
from ..utils.errors import MissingRequiredField

logger = logging.getLogger("autoscale.validation")

TypeRule = Callable[[PolicyRecord], None]

_TYPE_RULES: Dict[PolicyType, TypeRule] = {}


def register_type_rule(policy_type: PolicyType) -> Callable[[TypeRule], TypeRule]:
    """Register the structural check for one policy type (replaces any previous one)."""

    def decorator(rule: TypeRule) -> TypeRule:
        _TYPE_RULES[PolicyType(policy_type)] = rule
        return rule

    return decorator


@register_type_rule(PolicyType.SCHEDULE)
def _check_schedule_args(record: PolicyRecord) -> None:
    args = record.args or {}
    if args.get("cron") is None and args.get("at") is None:
        raise MissingRequiredField("args.cron|args.at")


def validate(record: PolicyRecord) -> bool:
    """
    Check that a record is consistent enough to submit.

    Returns True, or raises MissingRequiredField naming the offending field.
    """
    if record.type is None:
        logger.debug("Policy %r rejected: type is not set", record.name)
        raise MissingRequiredField("type")

    rule = _TYPE_RULES.get(record.type)
    if rule is not None:
        rule(record)

    return True
