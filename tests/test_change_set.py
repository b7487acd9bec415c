import itertools

import pytest

from autoscale.models.policy_models import PolicyRecord, PolicyType
from autoscale.services.change_set import build_change_set

OPTIONAL_FIELDS = {
    "name": ("name", "p1"),
    "change": ("change", 2),
    "change_percent": ("changePercent", 12.5),
    "cooldown": ("cooldown", 30),
    "desired_capacity": ("desiredCapacity", 4),
}


def test_schedule_policy_change_set():
    record = PolicyRecord(name="p1", type="schedule", cooldown=60, args={"cron": "*/5 * * * *"})

    assert build_change_set(record) == {
        "name": "p1",
        "type": "schedule",
        "cooldown": 60,
        "args": {"cron": "*/5 * * * *"},
    }


def test_webhook_policy_never_sends_args():
    record = PolicyRecord(type="webhook", change=1, args={"ignored": "x"})

    change_set = build_change_set(record)

    assert change_set == {"change": 1, "type": "webhook"}
    assert "args" not in change_set


def test_cloud_monitoring_policy_never_sends_args():
    record = PolicyRecord(
        type="cloud_monitoring",
        change_percent=-10,
        args={"check": {"type": "remote.http"}, "alarm_criteria": {"criteria": "..."}},
    )
    assert "args" not in build_change_set(record)


@pytest.mark.parametrize("size", range(len(OPTIONAL_FIELDS) + 1))
def test_only_set_fields_are_emitted(size):
    for combo in itertools.combinations(OPTIONAL_FIELDS, size):
        fields = {attr: OPTIONAL_FIELDS[attr][1] for attr in combo}
        record = PolicyRecord(type="webhook", **fields)

        change_set = build_change_set(record)

        expected_keys = {OPTIONAL_FIELDS[attr][0] for attr in combo} | {"type"}
        assert set(change_set) == expected_keys
        assert None not in change_set.values()


@pytest.mark.parametrize("policy_type", list(PolicyType))
@pytest.mark.parametrize("size", range(len(OPTIONAL_FIELDS) + 1))
def test_args_emitted_only_for_schedule(policy_type, size):
    for combo in itertools.combinations(OPTIONAL_FIELDS, size):
        fields = {attr: OPTIONAL_FIELDS[attr][1] for attr in combo}
        record = PolicyRecord(type=policy_type, args={"cron": "23 * * * *"}, **fields)

        change_set = build_change_set(record)

        assert ("args" in change_set) == (policy_type is PolicyType.SCHEDULE)
        assert set(change_set) - {"args"} == {OPTIONAL_FIELDS[attr][0] for attr in combo} | {"type"}


def test_empty_record_yields_empty_change_set():
    assert build_change_set(PolicyRecord()) == {}


def test_identity_and_links_are_never_sent():
    record = PolicyRecord(
        id="p-1",
        group_id="g-1",
        type="webhook",
        links=[{"href": "https://example.com/p-1", "rel": "self"}],
    )
    assert build_change_set(record) == {"type": "webhook"}


def test_schedule_without_args_omits_key():
    assert build_change_set(PolicyRecord(type="schedule", cooldown=0)) == {
        "cooldown": 0,
        "type": "schedule",
    }


def test_change_set_is_deterministic_and_detached():
    record = PolicyRecord(name="p1", type="schedule", args={"at": "2013-06-05T03:12Z"})

    first = build_change_set(record)
    second = build_change_set(record)
    assert first == second
    assert list(first) == list(second)

    first["args"]["at"] = "changed"
    assert record.args == {"at": "2013-06-05T03:12Z"}
