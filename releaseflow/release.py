"""The Release resource and the state machine of its phases."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, ClassVar

from releaseflow.conditions import (
    Condition,
    ConditionReason,
    ConditionStatus,
    ConditionType,
    find_condition,
    is_condition_true,
    set_condition,
)
from releaseflow.meta import ObjectMeta, format_timestamp, parse_timestamp
from releaseflow.resources import _mapping, _Resource, _string


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _bool(data: Mapping[str, Any], key: str) -> bool:
    value = data.get(key)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise TypeError(f"field {key!r} must be a boolean, not {type(value).__name__}")
    return value


def _time(data: Mapping[str, Any], key: str) -> datetime | None:
    value = data.get(key)
    return parse_timestamp(value) if value else None


_READERS = {"str": _string, "bool": _bool, "time": _time}


def _write(kind: str, value: Any) -> Any:
    return format_timestamp(value) if kind == "time" else value


class _OptionalFields:
    """Serialization of records whose fields are all left out when empty.

    ``_FIELDS`` lists (attribute, key, kind) with kind one of str, bool, time.
    """

    _FIELDS: ClassVar[tuple[tuple[str, str, str], ...]] = ()

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        for attr, key, kind in self._FIELDS:
            value = getattr(self, attr)
            if value:
                data[key] = _write(kind, value)
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None):
        info = _mapping(data, cls.__name__)
        return cls(**{attr: _READERS[kind](info, key) for attr, key, kind in cls._FIELDS})


@dataclass
class ReleaseSpec:
    """Desired state of a Release."""

    snapshot: str = ""
    release_plan: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"snapshot": self.snapshot, "releasePlan": self.release_plan}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> ReleaseSpec:
        spec = _mapping(data, "spec")
        return cls(snapshot=_string(spec, "snapshot"), release_plan=_string(spec, "releasePlan"))


@dataclass
class AttributionInfo(_OptionalFields):
    """Who the release is attributed to."""

    _FIELDS: ClassVar[tuple[tuple[str, str, str], ...]] = (
        ("author", "author", "str"),
        ("standing_authorization", "standingAuthorization", "bool"),
    )

    author: str = ""
    standing_authorization: bool = False


@dataclass
class DeploymentInfo(_OptionalFields):
    """Observed state of the deployment."""

    _FIELDS: ClassVar[tuple[tuple[str, str, str], ...]] = (
        ("completion_time", "completionTime", "time"),
        ("environment", "environment", "str"),
        ("snapshot_environment_binding", "snapshotEnvironmentBinding", "str"),
        ("start_time", "startTime", "time"),
    )

    completion_time: datetime | None = None
    environment: str = ""
    snapshot_environment_binding: str = ""
    start_time: datetime | None = None


@dataclass
class PostActionsExecutionInfo(_OptionalFields):
    """Observed state of the post-actions execution."""

    _FIELDS: ClassVar[tuple[tuple[str, str, str], ...]] = (
        ("completion_time", "completionTime", "time"),
        ("start_time", "startTime", "time"),
    )

    completion_time: datetime | None = None
    start_time: datetime | None = None


@dataclass
class ProcessingInfo(_OptionalFields):
    """Observed state of the release processing."""

    _FIELDS: ClassVar[tuple[tuple[str, str, str], ...]] = (
        ("completion_time", "completionTime", "time"),
        ("pipeline_run", "pipelineRun", "str"),
        ("release_strategy", "releaseStrategy", "str"),
        ("start_time", "startTime", "time"),
    )

    completion_time: datetime | None = None
    pipeline_run: str = ""
    release_strategy: str = ""
    start_time: datetime | None = None


@dataclass
class ValidationInfo(_OptionalFields):
    """Observed state of the release validation."""

    _FIELDS: ClassVar[tuple[tuple[str, str, str], ...]] = (
        ("failed_post_validation", "failedPostValidation", "bool"),
        ("time", "time", "time"),
    )

    failed_post_validation: bool = False
    time: datetime | None = None


_STATUS_PARTS = (
    ("attribution", "attribution", AttributionInfo),
    ("deployment", "deployment", DeploymentInfo),
    ("post_actions_execution", "postActionsExecution", PostActionsExecutionInfo),
    ("processing", "processing", ProcessingInfo),
    ("validation", "validation", ValidationInfo),
)

_STATUS_SCALARS = (
    ("target", "target", "str"),
    ("automated", "automated", "bool"),
    ("completion_time", "completionTime", "time"),
    ("start_time", "startTime", "time"),
)


@dataclass
class ReleaseStatus:
    """Observed state of a Release."""

    attribution: AttributionInfo = field(default_factory=AttributionInfo)
    conditions: list[Condition] = field(default_factory=list)
    deployment: DeploymentInfo = field(default_factory=DeploymentInfo)
    post_actions_execution: PostActionsExecutionInfo = field(
        default_factory=PostActionsExecutionInfo
    )
    processing: ProcessingInfo = field(default_factory=ProcessingInfo)
    validation: ValidationInfo = field(default_factory=ValidationInfo)
    target: str = ""
    automated: bool = False
    completion_time: datetime | None = None
    start_time: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"attribution": self.attribution.to_dict()}
        data["conditions"] = [c.to_dict() for c in self.conditions]
        for attr, key, _ in _STATUS_PARTS[1:]:
            data[key] = getattr(self, attr).to_dict()
        for attr, key, kind in _STATUS_SCALARS:
            value = getattr(self, attr)
            if value:
                data[key] = _write(kind, value)
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> ReleaseStatus:
        status = _mapping(data, "status")
        conditions = status.get("conditions") or []
        if not isinstance(conditions, list):
            raise TypeError("'conditions' must be a list")
        values: dict[str, Any] = {
            attr: part.from_dict(status.get(key)) for attr, key, part in _STATUS_PARTS
        }
        values.update(
            {attr: _READERS[kind](status, key) for attr, key, kind in _STATUS_SCALARS}
        )
        return cls(conditions=[Condition.from_dict(c) for c in conditions], **values)


@dataclass
class Release(_Resource):
    """A request to release a snapshot through a release plan."""

    KIND: ClassVar[str] = "Release"
    SPEC: ClassVar[type] = ReleaseSpec

    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    spec: ReleaseSpec = field(default_factory=ReleaseSpec)
    status: ReleaseStatus = field(default_factory=ReleaseStatus)
    api_version: str = ""
    kind: str = ""

    def _status_dict(self) -> dict[str, Any]:
        return self.status.to_dict()

    @classmethod
    def _extra_fields(cls, root: Mapping[str, Any]) -> dict[str, Any]:
        return {"status": ReleaseStatus.from_dict(root.get("status"))}

    def to_dict(self) -> dict[str, Any]:
        """Return the resource in serialized form."""
        return self._serialize()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Release:
        """Build the resource from its serialized form."""
        return cls._deserialize(data)

    # Queries

    def has_deployment_finished(self) -> bool:
        """Tell whether the deployment has finished, whatever the result."""
        return self.has_phase_finished(ConditionType.DEPLOYED)

    def has_every_post_action_execution_finished(self) -> bool:
        """Tell whether the post-actions execution has finished, whatever the result."""
        return self.has_phase_finished(ConditionType.POST_ACTIONS_EXECUTED)

    def has_processing_finished(self) -> bool:
        """Tell whether the processing has finished, whatever the result."""
        return self.has_phase_finished(ConditionType.PROCESSED)

    def has_release_finished(self) -> bool:
        """Tell whether the release has finished, whatever the result."""
        return self.has_phase_finished(ConditionType.RELEASED)

    def is_attributed(self) -> bool:
        return self.status.attribution.author != ""

    def is_automated(self) -> bool:
        return self.status.automated

    def is_deployed(self) -> bool:
        return is_condition_true(self.status.conditions, ConditionType.DEPLOYED)

    def is_deploying(self) -> bool:
        return self.is_phase_progressing(ConditionType.DEPLOYED)

    def is_every_post_action_executed(self) -> bool:
        return is_condition_true(self.status.conditions, ConditionType.POST_ACTIONS_EXECUTED)

    def is_each_post_action_executing(self) -> bool:
        return self.is_phase_progressing(ConditionType.POST_ACTIONS_EXECUTED)

    def is_processed(self) -> bool:
        return is_condition_true(self.status.conditions, ConditionType.PROCESSED)

    def is_processing(self) -> bool:
        return self.is_phase_progressing(ConditionType.PROCESSED)

    def is_released(self) -> bool:
        return is_condition_true(self.status.conditions, ConditionType.RELEASED)

    def is_releasing(self) -> bool:
        return self.is_phase_progressing(ConditionType.RELEASED)

    def is_valid(self) -> bool:
        return is_condition_true(self.status.conditions, ConditionType.VALIDATED)

    # Phase transitions

    def _phase_record(self, condition_type: ConditionType) -> Any:
        """Return the status part that holds the start and completion times of a phase."""
        return {
            ConditionType.DEPLOYED: self.status.deployment,
            ConditionType.POST_ACTIONS_EXECUTED: self.status.post_actions_execution,
            ConditionType.PROCESSED: self.status.processing,
            ConditionType.RELEASED: self.status,
        }[condition_type]

    def _set(
        self,
        condition_type: ConditionType,
        status: ConditionStatus,
        reason: ConditionReason,
        message: str | None,
    ) -> None:
        extra = () if message is None else (message,)
        set_condition(self.status.conditions, condition_type, status, reason, *extra)

    def _begin(self, condition_type: ConditionType, message: str) -> None:
        if self.has_phase_finished(condition_type):
            return
        if not self.is_phase_progressing(condition_type):
            self._phase_record(condition_type).start_time = _now()
        self._set(condition_type, ConditionStatus.FALSE, ConditionReason.PROGRESSING, message)

    def _conclude(self, condition_type: ConditionType, message: str | None = None) -> None:
        """Finish a phase: successfully without a message, as failed with one."""
        if not self.is_phase_progressing(condition_type) or self.has_phase_finished(
            condition_type
        ):
            return
        self._phase_record(condition_type).completion_time = _now()
        if message is None:
            self._set(condition_type, ConditionStatus.TRUE, ConditionReason.SUCCEEDED, None)
        else:
            self._set(condition_type, ConditionStatus.FALSE, ConditionReason.FAILED, message)

    def mark_deployed(self) -> None:
        self._conclude(ConditionType.DEPLOYED)

    def mark_deploying(self, message: str) -> None:
        self._begin(ConditionType.DEPLOYED, message)

    def mark_deployment_failed(self, message: str) -> None:
        self._conclude(ConditionType.DEPLOYED, message)

    def mark_processed(self) -> None:
        self._conclude(ConditionType.PROCESSED)

    def mark_processing(self, message: str) -> None:
        self._begin(ConditionType.PROCESSED, message)

    def mark_processing_failed(self, message: str) -> None:
        self._conclude(ConditionType.PROCESSED, message)

    def mark_post_actions_executed(self) -> None:
        self._conclude(ConditionType.POST_ACTIONS_EXECUTED)

    def mark_post_actions_executing(self, message: str) -> None:
        self._begin(ConditionType.POST_ACTIONS_EXECUTED, message)

    def mark_post_actions_execution_failed(self, message: str) -> None:
        self._conclude(ConditionType.POST_ACTIONS_EXECUTED, message)

    def mark_released(self) -> None:
        self._conclude(ConditionType.RELEASED)

    def mark_releasing(self, message: str) -> None:
        self._begin(ConditionType.RELEASED, message)

    def mark_release_failed(self, message: str) -> None:
        self._conclude(ConditionType.RELEASED, message)

    # Validation

    def mark_validated(self) -> None:
        if self.is_valid():
            return
        self.status.validation.time = _now()
        self._set(ConditionType.VALIDATED, ConditionStatus.TRUE, ConditionReason.SUCCEEDED, None)

    def mark_validation_failed(self, message: str) -> None:
        if self.is_valid():
            self.status.validation.failed_post_validation = True
        self.status.validation.time = _now()
        self._set(ConditionType.VALIDATED, ConditionStatus.FALSE, ConditionReason.FAILED, message)

    def set_automated(self) -> None:
        self.status.automated = True

    # Phase helpers

    def phase_reason(self, condition_type: ConditionType | str) -> str:
        """Return the reason of the given condition, or an empty string if it is missing."""
        condition = find_condition(self.status.conditions, condition_type)
        return condition.reason if condition is not None else ""

    def has_phase_finished(self, condition_type: ConditionType | str) -> bool:
        """Tell whether a phase has finished, successfully or not."""
        condition = find_condition(self.status.conditions, condition_type)
        if condition is None:
            return False
        if condition.status is ConditionStatus.TRUE:
            return True
        return (
            condition.status is ConditionStatus.FALSE
            and condition.reason != ConditionReason.PROGRESSING.value
        )

    def is_phase_progressing(self, condition_type: ConditionType | str) -> bool:
        """Tell whether a phase is in progress."""
        condition = find_condition(self.status.conditions, condition_type)
        if condition is None or condition.status is ConditionStatus.TRUE:
            return False
        return (
            condition.status is ConditionStatus.FALSE
            and condition.reason == ConditionReason.PROGRESSING.value
        )