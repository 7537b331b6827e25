"""Status conditions used to track the phases of a release."""

from __future__ import annotations

from collections.abc import Mapping, MutableSequence, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from releaseflow.meta import format_timestamp, parse_timestamp


class ConditionType(str, Enum):
    """Condition types that track the phases of a release."""

    DEPLOYED = "Deployed"
    POST_ACTIONS_EXECUTED = "PostActionsExecuted"
    PROCESSED = "Processed"
    RELEASED = "Released"
    VALIDATED = "Validated"

    def __str__(self) -> str:
        return self.value


class ConditionReason(str, Enum):
    """Reasons recorded on release conditions."""

    FAILED = "Failed"
    PROGRESSING = "Progressing"
    SUCCEEDED = "Succeeded"

    def __str__(self) -> str:
        return self.value


class ConditionStatus(str, Enum):
    """The tri-state status of a condition."""

    TRUE = "True"
    FALSE = "False"
    UNKNOWN = "Unknown"

    def __str__(self) -> str:
        return self.value


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _plain(value: Any) -> str:
    """Return the string value of an enum member or of a plain string."""
    return value.value if isinstance(value, Enum) else str(value)


@dataclass
class Condition:
    """One observation of an object's state."""

    type: str
    status: ConditionStatus
    reason: str = ""
    message: str = ""
    last_transition_time: datetime = field(default_factory=_now)
    observed_generation: int = 0

    def __post_init__(self) -> None:
        self.type = _plain(self.type)
        self.reason = _plain(self.reason)
        self.status = ConditionStatus(self.status)

    def to_dict(self) -> dict[str, Any]:
        """Return the condition in its serialized form."""
        data: dict[str, Any] = {
            "type": self.type,
            "status": self.status.value,
        }
        if self.observed_generation:
            data["observedGeneration"] = self.observed_generation
        data["lastTransitionTime"] = format_timestamp(self.last_transition_time)
        data["reason"] = self.reason
        data["message"] = self.message
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Condition:
        """Build a condition from its serialized form."""
        if not isinstance(data, Mapping):
            raise TypeError(f"condition must be a mapping, not {type(data).__name__}")
        if "type" not in data or "status" not in data:
            raise ValueError("condition requires both 'type' and 'status'")
        timestamp = data.get("lastTransitionTime")
        return cls(
            type=str(data["type"]),
            status=ConditionStatus(data["status"]),
            reason=str(data.get("reason") or ""),
            message=str(data.get("message") or ""),
            last_transition_time=parse_timestamp(timestamp) if timestamp else _now(),
            observed_generation=int(data.get("observedGeneration") or 0),
        )


def find_condition(
    conditions: Sequence[Condition], condition_type: ConditionType | str
) -> Condition | None:
    """Return the condition of the given type, or None if there is none."""
    wanted = _plain(condition_type)
    return next((c for c in conditions if c.type == wanted), None)


def is_condition_true(
    conditions: Sequence[Condition], condition_type: ConditionType | str
) -> bool:
    """Tell whether the condition of the given type exists and is True."""
    condition = find_condition(conditions, condition_type)
    return condition is not None and condition.status is ConditionStatus.TRUE


def set_condition(
    conditions: MutableSequence[Condition],
    condition_type: ConditionType | str,
    status: ConditionStatus | str,
    reason: ConditionReason | str,
    message: str = "",
) -> Condition:
    """Add or update the condition of the given type in place.

    The transition time only moves when the status actually changes.
    """
    new_status = ConditionStatus(status)
    existing = find_condition(conditions, condition_type)
    if existing is None:
        condition = Condition(
            type=_plain(condition_type),
            status=new_status,
            reason=_plain(reason),
            message=message,
        )
        conditions.append(condition)
        return condition

    if existing.status is not new_status:
        existing.status = new_status
        existing.last_transition_time = _now()
    existing.reason = _plain(reason)
    existing.message = message
    return existing