from datetime import datetime, timezone

import pytest

from releaseflow.conditions import (
    Condition,
    ConditionReason,
    ConditionStatus,
    ConditionType,
    find_condition,
    is_condition_true,
    set_condition,
)


def test_set_condition_appends_new_condition_with_plain_values():
    conditions = []
    set_condition(conditions, ConditionType.DEPLOYED, ConditionStatus.TRUE, ConditionReason.SUCCEEDED)
    assert len(conditions) == 1
    data = conditions[0].to_dict()
    assert data["type"] == "Deployed"
    assert data["status"] == "True"
    assert data["reason"] == "Succeeded"
    assert data["message"] == ""


def test_set_condition_updates_existing_entry():
    conditions = []
    set_condition(conditions, ConditionType.PROCESSED, ConditionStatus.FALSE, ConditionReason.PROGRESSING, "start")
    set_condition(conditions, ConditionType.PROCESSED, ConditionStatus.FALSE, ConditionReason.FAILED, "boom")
    assert len(conditions) == 1
    assert conditions[0].reason == "Failed"
    assert conditions[0].message == "boom"


def test_transition_time_kept_when_status_unchanged():
    conditions = []
    first = set_condition(conditions, ConditionType.RELEASED, ConditionStatus.FALSE, ConditionReason.PROGRESSING)
    stamp = first.last_transition_time
    set_condition(conditions, ConditionType.RELEASED, ConditionStatus.FALSE, ConditionReason.FAILED)
    assert conditions[0].last_transition_time == stamp


def test_transition_time_moves_when_status_changes():
    conditions = []
    condition = set_condition(conditions, ConditionType.RELEASED, ConditionStatus.FALSE, ConditionReason.PROGRESSING)
    old = datetime(2000, 1, 1, tzinfo=timezone.utc)
    condition.last_transition_time = old
    set_condition(conditions, ConditionType.RELEASED, ConditionStatus.TRUE, ConditionReason.SUCCEEDED)
    assert conditions[0].status is ConditionStatus.TRUE
    assert conditions[0].last_transition_time > old


def test_string_and_enum_types_are_interchangeable():
    conditions = []
    set_condition(conditions, "Processed", "True", "Succeeded")
    found = find_condition(conditions, ConditionType.PROCESSED)
    assert found is conditions[0]
    assert found.status is ConditionStatus.TRUE


def test_find_condition_missing_returns_none():
    conditions = []
    set_condition(conditions, ConditionType.DEPLOYED, ConditionStatus.TRUE, ConditionReason.SUCCEEDED)
    assert find_condition(conditions, ConditionType.VALIDATED) is None


@pytest.mark.parametrize(
    "status, expected",
    [
        (ConditionStatus.TRUE, True),
        (ConditionStatus.FALSE, False),
        (ConditionStatus.UNKNOWN, False),
    ],
)
def test_is_condition_true(status, expected):
    conditions = []
    set_condition(conditions, ConditionType.VALIDATED, status, ConditionReason.SUCCEEDED)
    assert is_condition_true(conditions, ConditionType.VALIDATED) is expected


def test_is_condition_true_when_missing():
    assert is_condition_true([], ConditionType.VALIDATED) is False


def test_condition_round_trip():
    original = Condition(
        type=ConditionType.DEPLOYED,
        status=ConditionStatus.FALSE,
        reason=ConditionReason.FAILED,
        message="foo",
        last_transition_time=datetime(2023, 5, 6, 7, 8, 9, tzinfo=timezone.utc),
    )
    restored = Condition.from_dict(original.to_dict())
    assert restored == original


def test_from_dict_rejects_unknown_status():
    with pytest.raises(ValueError):
        Condition.from_dict({"type": "Deployed", "status": "Maybe"})


def test_from_dict_requires_type():
    with pytest.raises(ValueError):
        Condition.from_dict({"status": "True"})